"""Error Hierarchy — codes, statuses and response bodies.

Tests cover:
    - HTTP status per error class
    - text and JSON envelopes
    - from_function_error picks the class by kind and names the function
"""

import pytest

from hclrender.core.domain_types import FunctionErrorKind
from hclrender.core.errors import (
    DocumentNotFoundError, EncodingError, FunctionArgumentError, FunctionIOError,
    NetworkError, UnsupportedFormatError, VariableConflictError, from_function_error,
)


def test_unsupported_format_is_bad_request():
    error = UnsupportedFormatError("xml")
    assert error.http_status == 400
    assert error.code == "UNSUPPORTED_FORMAT"
    assert error.message.startswith("Language not found")


def test_text_body_format():
    error = DocumentNotFoundError("a/b")
    assert error.to_text() == "(message)\nDocument 'a/b' not found\n\n(error)\n404\n"


def test_json_body_carries_code_and_context():
    body = VariableConflictError("var", ["a"]).to_response()
    assert body["code"] == 500
    assert body["error_code"] == "VARIABLE_CONFLICT"
    assert body["context"]["block"] == "var"
    assert body["context"]["keys"] == ["a"]


@pytest.mark.parametrize("kind,cls", [
    (FunctionErrorKind.ARGUMENT, FunctionArgumentError),
    (FunctionErrorKind.IO, FunctionIOError),
    (FunctionErrorKind.NETWORK, NetworkError),
    (FunctionErrorKind.ENCODING, EncodingError),
])
def test_from_function_error_maps_kind(kind, cls):
    error = from_function_error("fs::read", "boom", kind)
    assert isinstance(error, cls)
    assert error.message == "fs::read(): boom"
    assert error.context.function_name == "fs::read"
