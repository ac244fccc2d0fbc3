"""Error Hierarchy — typed, categorized exceptions for all render failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Request errors (400/404) are the caller's fault; document and function
      errors are 500-level and reported precisely (which function, block, keys)
    - to_response() produces the JSON envelope; to_text() the plain-text body
    - ConfigurationError never reaches a request: it is fatal at startup

Design Decisions:
    - Single hierarchy with RenderError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Function failures are data (FunctionError) until the evaluator boundary, where
      from_function_error() lifts them into the matching exception class
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone

from hclrender.core.domain_types import FunctionErrorKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DOCUMENT = "document"
    CONFLICT = "conflict"
    FUNCTION = "function"
    EXTERNAL_API = "external_api"
    PROJECTION = "projection"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    document_path: str | None = None
    function_name: str | None = None
    block: str | None = None
    keys: list[str] | None = None
    debug_info: dict[str, Any] | None = None


class RenderError(Exception):
    """Base exception for all hclrender errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to the JSON `{code, error}` envelope."""
        return {
            "code": self.http_status,
            "error": self.message,
            "error_code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
            "context": {
                "document_path": self.context.document_path,
                "function_name": self.context.function_name,
                "block": self.context.block,
                "keys": self.context.keys,
            },
        }

    def to_text(self) -> str:
        """Convert to the two-part plain-text body."""
        return f"(message)\n{self.message}\n\n(error)\n{self.http_status}\n"


# ─── Request Errors (400/404) ───────────────────────────────────

class UnsupportedFormatError(RenderError):
    """No usable output format from `lang` or document metadata."""
    def __init__(self, selector: str | None, context: ErrorContext | None = None):
        message = (
            f"Language not found: '{selector}'" if selector
            else "Language not found"
        )
        super().__init__(
            message, "UNSUPPORTED_FORMAT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.selector = selector


class DocumentNotFoundError(RenderError):
    """Requested document does not exist under the storage root."""
    def __init__(self, path: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.document_path = path
        super().__init__(
            f"Document '{path}' not found",
            "DOCUMENT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.path = path


class MissingMetadataError(RenderError):
    """Document has no top-level `meta` block."""
    def __init__(self, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.block = "meta"
        super().__init__(
            "Missing meta object",
            "MISSING_METADATA", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )


# ─── Document Errors (500-level) ────────────────────────────────

class DocumentParseError(RenderError):
    """Document source is not valid HCL."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid document: {message}",
            "DOCUMENT_PARSE_ERROR", ErrorCategory.DOCUMENT,
            ErrorSeverity.ERROR, context, 500,
        )


class DocumentEvaluationError(RenderError):
    """An expression could not be evaluated (unknown variable, bad operand...)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "DOCUMENT_EVALUATION_ERROR", ErrorCategory.DOCUMENT,
            ErrorSeverity.ERROR, context, 500,
        )


class InvalidMetadataError(RenderError):
    """A `meta` field has the wrong type."""
    def __init__(self, field_name: str, expected: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.block = "meta"
        ctx.keys = [field_name]
        super().__init__(
            f"meta.{field_name} must be a {expected}",
            "INVALID_METADATA", ErrorCategory.DOCUMENT,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.field_name = field_name


class VariableConflictError(RenderError):
    """A variable block tried to override const values or earlier variables."""
    def __init__(
        self, block: str, keys: list[str], against_const: bool = True,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.block = block
        ctx.keys = list(keys)
        joined = ", ".join(keys)
        message = (
            f"Cannot override const values in '{block}' block for keys: {joined}"
            if against_const
            else f"Conflicting variables in '{block}' block for keys: {joined}"
        )
        super().__init__(
            message, "VARIABLE_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.block = block
        self.keys = list(keys)


class ProjectionError(RenderError):
    """Resolved value tree cannot be represented in the target format."""
    def __init__(self, message: str, output_format: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot render {output_format}: {message}",
            "PROJECTION_ERROR", ErrorCategory.PROJECTION,
            ErrorSeverity.ERROR, context, 500,
        )
        self.output_format = output_format


# ─── Function Errors (500-level) ────────────────────────────────

class FunctionCallError(RenderError):
    """Base for failures reported by a built-in function."""
    CODE = "FUNCTION_ERROR"
    CATEGORY = ErrorCategory.FUNCTION

    def __init__(self, function_name: str, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.function_name = function_name
        super().__init__(
            f"{function_name}(): {message}",
            self.CODE, self.CATEGORY, ErrorSeverity.ERROR, ctx, 500,
        )
        self.function_name = function_name


class FunctionArgumentError(FunctionCallError):
    """Wrong arity/type or semantically invalid input."""
    CODE = "FUNCTION_ARGUMENT_ERROR"


class FunctionIOError(FunctionCallError):
    """File not found or unreadable."""
    CODE = "FUNCTION_IO_ERROR"


class NetworkError(FunctionCallError):
    """Remote call failed (transport failure or non-2xx status)."""
    CODE = "NETWORK_ERROR"
    CATEGORY = ErrorCategory.EXTERNAL_API


class EncodingError(FunctionCallError):
    """Invalid base64/UTF-8/JSON/YAML during decode."""
    CODE = "ENCODING_ERROR"


_FUNCTION_ERRORS: dict[FunctionErrorKind, type[FunctionCallError]] = {
    FunctionErrorKind.ARGUMENT: FunctionArgumentError,
    FunctionErrorKind.IO: FunctionIOError,
    FunctionErrorKind.NETWORK: NetworkError,
    FunctionErrorKind.ENCODING: EncodingError,
}


def from_function_error(
    function_name: str, message: str, kind: FunctionErrorKind,
) -> FunctionCallError:
    """Lift a FunctionError value into the matching exception."""
    return _FUNCTION_ERRORS[kind](function_name, message)


# ─── Startup Errors ─────────────────────────────────────────────

class ConfigurationError(RenderError):
    """Process configuration unreadable or invalid. Fatal at startup."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, context, 500,
        )
