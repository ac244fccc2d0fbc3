"""Error Handlers — global exception handlers for the render API.

Invariants:
    - RenderError → its own HTTP status, body in the configured error format
    - RequestValidationError → 400 with field-level details
    - Exception (catch-all) → 500, never leaks internal details
    - error_format "text": "(message)\\n<msg>\\n\\n(error)\\n<status>\\n"
      error_format "json": {"code": <status>, "error": <msg>, ...}

Design Decisions:
    - Three-layer handler: domain (RenderError), validation (Pydantic), catch-all
    - Settings read from app.state so tests can build apps with their own settings
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from hclrender.core.errors import ErrorSeverity, RenderError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_render_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def text_error_body(message: str, status_code: int) -> str:
    return f"(message)\n{message}\n\n(error)\n{status_code}\n"


def _wants_json(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return settings is not None and settings.error_format == "json"


def _register_render_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RenderError)
    async def render_error_handler(request: Request, exc: RenderError) -> Response:
        """Handle all hclrender domain/infrastructure errors."""
        log = logger.warning if exc.http_status < 500 else logger.error
        log(
            f"RenderError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "document_path": exc.context.document_path,
                "function_name": exc.context.function_name,
                "block": exc.context.block,
            },
        )
        if _wants_json(request):
            return JSONResponse(status_code=exc.http_status, content=exc.to_response())
        return PlainTextResponse(exc.to_text(), status_code=exc.http_status)


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ) -> Response:
        """Handle Pydantic validation errors on query/path parameters."""
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        if _wants_json(request):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=_build_validation_error_response(exc),
            )
        return PlainTextResponse(
            text_error_body("Invalid request data", status.HTTP_400_BAD_REQUEST),
            status_code=status.HTTP_400_BAD_REQUEST,
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> Response:
        """Catch-all: never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
        if _wants_json(request):
            return JSONResponse(
                status_code=code,
                content={
                    "code": code,
                    "error": INTERNAL_ERROR_MESSAGE,
                    "error_code": "INTERNAL_ERROR",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            )
        return PlainTextResponse(
            text_error_body(INTERNAL_ERROR_MESSAGE, code), status_code=code,
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "code": status.HTTP_400_BAD_REQUEST,
        "error": "Invalid request data",
        "error_code": "VALIDATION_ERROR",
        "category": "validation",
        "severity": ErrorSeverity.ERROR.value,
        "details": [
            {
                "field": ".".join(str(loc) for loc in e["loc"]),
                "message": e["msg"],
                "type": e["type"],
            }
            for e in exc.errors()
        ],
    }
