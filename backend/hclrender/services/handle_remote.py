"""Remote Handlers — http::get/post/post_json/put and secret::kv.

Invariants:
    - An optional trailing argument is a header map (object); values are stringified
    - Header names and values must be ASCII
    - Any failure (transport, non-2xx, non-UTF-8 body) is a `network` FunctionError
    - secret::kv(path, key?) reads <vault_url>/v1/kv/data/<path> with X-Vault-Token
      and returns data.data, or data.data[key]; a missing key is an error
    - Secret backend URL/token come from the constructor, never from ambient state

Design Decisions:
    - Backend settings injected at registry construction (ADR: no hidden
      config re-reads inside a function)
    - Handlers share one RemoteClient per registry, i.e. per request
"""

import json

from hclrender.core.domain_types import FunctionErrorKind, Value
from hclrender.core.function_types import FunctionError, FunctionResult
from hclrender.core.values import stringify, to_value
from hclrender.infrastructure.remote_client import RemoteCallError, RemoteClient

_NETWORK = FunctionErrorKind.NETWORK


def parse_headers(extra: list[Value]) -> dict[str, str] | FunctionError:
    """Validate the optional trailing header map."""
    if not extra:
        return {}
    if len(extra) > 1:
        return FunctionError("too many arguments: expected at most one header map")
    headers = extra[0]
    if headers is None:
        return {}
    if not isinstance(headers, dict):
        return FunctionError("headers must be an object")
    parsed = {name: stringify(value) for name, value in headers.items()}
    for name, value in parsed.items():
        if not (name.isascii() and value.isascii()):
            return FunctionError(f"header '{name}' must be ASCII")
    return parsed


class RemoteHandlers:
    """Network-backed functions for one evaluation."""

    def __init__(
        self,
        client: RemoteClient,
        vault_url: str | None = None,
        vault_token: str | None = None,
    ):
        self.client = client
        self.vault_url = vault_url.rstrip("/") if vault_url else None
        self.vault_token = vault_token

    def _send(
        self, method: str, url: str, body: str | None,
        extra: list[Value], content_type: str | None = None,
    ) -> FunctionResult:
        headers = parse_headers(extra)
        if isinstance(headers, FunctionError):
            return headers
        if content_type is not None:
            headers = {"Content-Type": content_type, **headers}
        try:
            return self.client.request_text(method, url, content=body, headers=headers)
        except RemoteCallError as e:
            return FunctionError(str(e), _NETWORK)

    def http_get(self, args: list[Value]) -> FunctionResult:
        url, *extra = args
        return self._send("GET", url, None, extra)

    def http_post(self, args: list[Value]) -> FunctionResult:
        url, body, *extra = args
        return self._send("POST", url, body, extra)

    def http_post_json(self, args: list[Value]) -> FunctionResult:
        url, payload, *extra = args
        try:
            body = json.dumps(payload, separators=(",", ":"), allow_nan=False)
        except ValueError as e:
            return FunctionError(f"cannot encode JSON body: {e}", FunctionErrorKind.ENCODING)
        return self._send("POST", url, body, extra, content_type="application/json")

    def http_put(self, args: list[Value]) -> FunctionResult:
        url, body, *extra = args
        return self._send("PUT", url, body, extra)

    def secret_kv(self, args: list[Value]) -> FunctionResult:
        """Fetch a KV v2 secret, whole or a single key."""
        path, *rest = args
        if len(rest) > 1:
            return FunctionError("too many arguments, expected at most 2")
        key = rest[0] if rest else None
        if key is not None and not isinstance(key, str):
            return FunctionError("secret key must be a string")
        if not self.vault_url or not self.vault_token:
            return FunctionError("secret backend is not configured", _NETWORK)

        try:
            reply = self.client.get_json(
                f"{self.vault_url}/v1/kv/data/{path}",
                headers={"X-Vault-Token": self.vault_token},
            )
        except RemoteCallError as e:
            return FunctionError(str(e), _NETWORK)

        data = reply.get("data") if isinstance(reply, dict) else None
        secret = data.get("data") if isinstance(data, dict) else None
        if not isinstance(secret, dict):
            return FunctionError(f"malformed secret reply for '{path}'", _NETWORK)
        if key is None:
            return to_value(secret)
        if key not in secret:
            return FunctionError(f"key '{key}' not found in secret '{path}'")
        return to_value(secret[key])
