"""Render Routes — GET /{path} and GET /get/{path} return a rendered attachment.

Invariants:
    - `lang` query (toml|json|yml|yaml, case-insensitive) overrides the meta hint
    - Success: 200, Content-Type per format, Content-Disposition attachment
    - Content-Disposition is always latin-1 encodable: non-ASCII names go in filename*
    - The pipeline is blocking: it always runs in the threadpool
    - /get/{path} is registered before the root catch-all

Design Decisions:
    - Thin route: everything below the HTTP edge lives in render_document
"""

from urllib.parse import quote

from fastapi import APIRouter, Request, Response
from fastapi.concurrency import run_in_threadpool

from hclrender.services.render_document import render_document

router = APIRouter(tags=["render"])


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback name and an RFC 5987 UTF-8 name."""
    fallback = "".join(
        ch if ch.isascii() and ch.isprintable() else "_" for ch in filename
    ).replace("\\", "\\\\").replace('"', '\\"')
    encoded = quote(filename, safe="")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


async def _render_response(request: Request, path: str, lang: str | None) -> Response:
    settings = request.app.state.settings
    http_client = getattr(request.app.state, "http_client", None)
    rendered = await run_in_threadpool(
        render_document, settings, path, lang, http_client,
    )
    return Response(
        content=rendered.body,
        media_type=rendered.media_type,
        headers={
            "Content-Disposition": content_disposition(rendered.filename),
        },
    )


@router.get("/get/{path:path}")
async def render_prefixed(request: Request, path: str, lang: str | None = None) -> Response:
    """Render a stored document (explicit /get prefix)."""
    return await _render_response(request, path, lang)


@router.get("/{path:path}")
async def render_path(request: Request, path: str, lang: str | None = None) -> Response:
    """Render a stored document."""
    return await _render_response(request, path, lang)
