"""Root conftest — shared test configuration and fixtures.

Invariants:
    - Tests never read a real config.hcl or HCLRENDER_* values from the shell
    - Every storage root is a fresh tmp_path
"""

import os

import pytest

# Must run before hclrender.main builds its module-level app
os.environ["HCLRENDER_CONFIG"] = os.path.join(os.path.dirname(__file__), "missing-config.hcl")
for _name in list(os.environ):
    if _name.startswith("HCLRENDER_") and _name != "HCLRENDER_CONFIG":
        del os.environ[_name]

from hclrender.config import Settings  # noqa: E402
from hclrender.core.evaluation_context import EvaluationContext  # noqa: E402
from hclrender.services.function_registry import build_function_registry  # noqa: E402


@pytest.fixture
def storage(tmp_path):
    """Empty storage root."""
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def settings(storage):
    return Settings(storage=storage)


@pytest.fixture
def registry(settings):
    reg = build_function_registry(settings)
    yield reg
    reg.close()


@pytest.fixture
def context(registry):
    """Evaluation context with functions but no variables."""
    return EvaluationContext(functions=registry)
