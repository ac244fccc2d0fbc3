"""Remote Handlers — http::* and secret::kv over httpx.MockTransport.

Tests cover:
    - request method, body, headers and content type reach the server
    - non-2xx and transport failures are network errors
    - secret::kv URL, token header, whole secret vs single key
    - missing key / missing backend configuration are errors
    - malformed URLs and non-ASCII headers are errors, not crashes
"""

import json

import httpx
import pytest

from hclrender.config import Settings
from hclrender.core.domain_types import FunctionErrorKind
from hclrender.core.function_types import FunctionError
from hclrender.services.function_registry import build_function_registry


class Recorder:
    """MockTransport handler that remembers requests and replays a response."""

    def __init__(self, status_code=200, body=b"ok", exc=None):
        self.status_code = status_code
        self.body = body
        self.exc = exc
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status_code, content=self.body)


@pytest.fixture
def remote(storage):
    """Factory: registry wired to a Recorder transport."""
    created = []

    def _build(recorder, **overrides):
        settings = Settings(
            storage=storage,
            vault_url=overrides.get("vault_url", "http://vault:8200/"),
            vault_token=overrides.get("vault_token", "s.token"),
        )
        client = httpx.Client(transport=httpx.MockTransport(recorder))
        registry = build_function_registry(settings, http_client=client)
        created.append(client)
        return registry

    yield _build
    for client in created:
        client.close()


def _network_error(result) -> bool:
    return isinstance(result, FunctionError) and result.kind == FunctionErrorKind.NETWORK


def test_http_get_returns_body_and_sends_headers(remote):
    recorder = Recorder(body="héllo".encode())
    registry = remote(recorder)
    result = registry.call("http::get", ["http://svc/x", {"X-Count": 3}])
    assert result == "héllo"
    request = recorder.requests[0]
    assert request.method == "GET"
    assert request.headers["X-Count"] == "3"


def test_http_post_and_put_send_body(remote):
    recorder = Recorder()
    registry = remote(recorder)
    assert registry.call("http::post", ["http://svc/p", "payload"]) == "ok"
    assert registry.call("http::put", ["http://svc/p", "other"]) == "ok"
    assert [r.method for r in recorder.requests] == ["POST", "PUT"]
    assert recorder.requests[0].content == b"payload"


def test_http_post_json_encodes_body(remote):
    recorder = Recorder()
    registry = remote(recorder)
    registry.call("http::post_json", ["http://svc/j", {"a": [1, 2]}])
    request = recorder.requests[0]
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {"a": [1, 2]}


def test_non_2xx_is_network_error(remote):
    registry = remote(Recorder(status_code=503))
    result = registry.call("http::get", ["http://svc/down"])
    assert _network_error(result)
    assert "503" in result.message


def test_transport_failure_is_network_error(remote):
    registry = remote(Recorder(exc=httpx.ConnectError("refused")))
    assert _network_error(registry.call("http::get", ["http://svc/"]))


def test_non_utf8_body_is_network_error(remote):
    registry = remote(Recorder(body=b"\xff"))
    assert _network_error(registry.call("http::get", ["http://svc/"]))


def test_headers_must_be_an_object(remote):
    registry = remote(Recorder())
    result = registry.call("http::get", ["http://svc/", "nope"])
    assert result == FunctionError("headers must be an object")


def test_non_ascii_header_is_rejected_before_sending(remote):
    recorder = Recorder()
    registry = remote(recorder)
    result = registry.call("http::get", ["http://svc/", {"X-Name": "café"}])
    assert result == FunctionError("header 'X-Name' must be ASCII")
    assert recorder.requests == []


def test_malformed_url_is_network_error(remote):
    recorder = Recorder()
    registry = remote(recorder)
    assert _network_error(registry.call("http::get", ["http://[::1"]))
    assert recorder.requests == []


def test_secret_kv_reads_whole_secret_and_key(remote):
    reply = json.dumps({"data": {"data": {"user": "admin", "port": 5432}}}).encode()
    recorder = Recorder(body=reply)
    registry = remote(recorder)
    assert registry.call("secret::kv", ["db/creds"]) == {"user": "admin", "port": 5432}
    assert registry.call("secret::kv", ["db/creds", "user"]) == "admin"
    request = recorder.requests[0]
    assert str(request.url) == "http://vault:8200/v1/kv/data/db/creds"
    assert request.headers["X-Vault-Token"] == "s.token"


def test_secret_kv_missing_key_is_error(remote):
    reply = json.dumps({"data": {"data": {"user": "admin"}}}).encode()
    registry = remote(Recorder(body=reply))
    result = registry.call("secret::kv", ["db/creds", "password"])
    assert isinstance(result, FunctionError)
    assert "password" in result.message


def test_secret_kv_needs_backend_configuration(remote):
    recorder = Recorder()
    registry = remote(recorder, vault_url=None)
    assert _network_error(registry.call("secret::kv", ["db/creds"]))
    assert recorder.requests == []


def test_secret_kv_malformed_reply(remote):
    registry = remote(Recorder(body=b'{"data": []}'))
    assert _network_error(registry.call("secret::kv", ["x"]))
