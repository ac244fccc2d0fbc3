"""API test fixtures — isolated app per test on a tmp storage root."""

import pytest
from httpx import ASGITransport, AsyncClient

from hclrender.main import create_app


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as ac:
        yield ac
