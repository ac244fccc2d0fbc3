"""Encoding Handlers — base64, url, json and yaml encode/decode.

Invariants:
    - Every decoder fails with an `encoding` FunctionError on malformed input
      or invalid UTF-8 after decoding; nothing is partially decoded
    - Decoded JSON/YAML is converted into the value model (to_value)
    - jsonencode is compact and rejects NaN/Infinity; yamlencode keeps key order

Design Decisions:
    - PyYAML safe_load/safe_dump: no arbitrary object construction from documents
    - urlencode escapes everything outside RFC 3986 unreserved characters
"""

import base64
import binascii
import json
from urllib.parse import quote, unquote

import yaml

from hclrender.core.domain_types import FunctionErrorKind, Value
from hclrender.core.function_types import FunctionError, FunctionResult
from hclrender.core.values import is_number, normalize_number, to_value

_ENCODING = FunctionErrorKind.ENCODING


def _encodable(value: Value) -> object:
    if isinstance(value, list):
        return [_encodable(v) for v in value]
    if isinstance(value, dict):
        return {k: _encodable(v) for k, v in value.items()}
    if is_number(value):
        return normalize_number(value)
    return value


def base64encode(args: list[Value]) -> FunctionResult:
    return base64.b64encode(args[0].encode("utf-8")).decode("ascii")


def base64decode(args: list[Value]) -> FunctionResult:
    try:
        raw = base64.b64decode(args[0], validate=True)
    except (binascii.Error, ValueError) as e:
        return FunctionError(f"invalid base64: {e}", _ENCODING)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        return FunctionError(f"invalid UTF-8 in decoded base64: {e}", _ENCODING)


def urlencode(args: list[Value]) -> FunctionResult:
    return quote(args[0], safe="")


def urldecode(args: list[Value]) -> FunctionResult:
    try:
        return unquote(args[0], errors="strict")
    except UnicodeDecodeError as e:
        return FunctionError(f"URL decoding error: {e}", _ENCODING)


def jsonencode(args: list[Value]) -> FunctionResult:
    try:
        return json.dumps(
            _encodable(args[0]), separators=(",", ":"),
            ensure_ascii=False, allow_nan=False,
        )
    except ValueError as e:
        return FunctionError(f"JSON encoding error: {e}", _ENCODING)


def jsondecode(args: list[Value]) -> FunctionResult:
    try:
        return to_value(json.loads(args[0]))
    except ValueError as e:
        return FunctionError(f"JSON decoding error: {e}", _ENCODING)


def yamlencode(args: list[Value]) -> FunctionResult:
    return yaml.safe_dump(
        _encodable(args[0]), sort_keys=False, allow_unicode=True,
        default_flow_style=False,
    )


def yamldecode(args: list[Value]) -> FunctionResult:
    try:
        return to_value(yaml.safe_load(args[0]))
    except (yaml.YAMLError, TypeError) as e:
        return FunctionError(f"YAML decoding error: {e}", _ENCODING)
