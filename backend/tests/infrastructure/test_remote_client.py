"""Remote Client — error mapping over httpx.

Tests cover:
    - 2xx bodies returned as text
    - non-2xx, transport errors, bad URLs, non-ASCII headers, bad UTF-8 and bad JSON
      raise RemoteCallError
    - injected clients are not closed by the wrapper
"""

import httpx
import pytest

from hclrender.infrastructure.remote_client import RemoteCallError, RemoteClient


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_request_text_returns_body():
    remote = RemoteClient(client=_client(lambda request: httpx.Response(200, text="fine")))
    assert remote.request_text("GET", "http://svc/") == "fine"


def test_status_error_names_status():
    remote = RemoteClient(client=_client(lambda request: httpx.Response(404)))
    with pytest.raises(RemoteCallError, match="404"):
        remote.request_text("GET", "http://svc/missing")


def test_transport_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    remote = RemoteClient(timeout_seconds=0.1, client=_client(handler))
    with pytest.raises(RemoteCallError):
        remote.request_text("GET", "http://svc/")


def test_unsendable_requests_raise_remote_call_error():
    remote = RemoteClient(client=_client(lambda request: httpx.Response(200)))
    with pytest.raises(RemoteCallError):
        remote.request_text("GET", "http://[::1")
    with pytest.raises(RemoteCallError):
        remote.request_text("GET", "http://svc/", headers={"X-Name": "café"})


def test_get_json_rejects_invalid_json():
    remote = RemoteClient(client=_client(lambda request: httpx.Response(200, text="{")))
    with pytest.raises(RemoteCallError, match="json"):
        remote.get_json("http://svc/")


def test_injected_client_stays_open():
    client = _client(lambda request: httpx.Response(200))
    RemoteClient(client=client).close()
    assert not client.is_closed
    client.close()
