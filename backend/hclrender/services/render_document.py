"""Render Document — orchestrates load → resolve → evaluate → project for one request.

Pipeline:
    1. load_document: storage-relative path, falling back to <path>/index.hcl
    2. structural parse → resolve_variables (var/local) → resolve_metadata (meta)
    3. output format: `lang` query beats the meta hint; unknown → 400 before evaluation
    4. fresh EvaluationContext: ambient + var/local + meta/services + function registry
    5. evaluate → strip reserved blocks → project

Invariants:
    - A path resolving outside the storage root is reported as not found
    - A fresh context and registry per call; the registry's HTTP client is
      closed when the call ends, success or failure
    - Every RenderError leaving this module names the document path

Design Decisions:
    - Synchronous on purpose: the route runs it in the threadpool, and remote
      functions block inside evaluation anyway (ADR: impureim sandwich, pure core)
    - Format resolved before evaluation so a bad selector never triggers
      remote calls or file reads
"""

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

import httpx

from hclrender.config import Settings
from hclrender.core.domain_types import OutputFormat, Value
from hclrender.core.errors import (
    DocumentNotFoundError,
    DocumentParseError,
    RenderError,
    UnsupportedFormatError,
)
from hclrender.core.evaluation_context import EvaluationContext, ambient_bindings
from hclrender.core.project_output import project, strip_reserved
from hclrender.core.resolve_metadata import DocumentMetadata, resolve_metadata
from hclrender.core.resolve_variables import resolve_variables
from hclrender.infrastructure.hcl_engine import evaluate_document, parse_document
from hclrender.services.function_registry import build_function_registry

logger = logging.getLogger(__name__)

INDEX_FILE = "index.hcl"
DEFAULT_BASE_NAME = "index"


@dataclass(frozen=True)
class LoadedDocument:
    """Source text and structural parse of the file that will be rendered."""
    path: Path
    text: str
    structure: dict[str, Value]


@dataclass(frozen=True)
class RenderedDocument:
    """Projected document ready to be sent as an attachment."""
    body: str
    filename: str
    output_format: OutputFormat

    @property
    def media_type(self) -> str:
        return self.output_format.media_type


# ─── Loading ────────────────────────────────────────────────────

def resolve_in_storage(storage_root: Path, request_path: str) -> Path:
    """Join request_path onto the storage root, rejecting escapes."""
    root = storage_root.resolve()
    target = (root / request_path.lstrip("/")).resolve()
    if target != root and root not in target.parents:
        raise DocumentNotFoundError(request_path)
    return target


def _read_and_parse(path: Path) -> LoadedDocument:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DocumentParseError(f"{path.name} is not valid UTF-8") from e
    return LoadedDocument(path, text, parse_document(text))


def load_document(storage_root: Path, request_path: str) -> LoadedDocument:
    """Load the requested document, or <path>/index.hcl when that fails."""
    target = resolve_in_storage(storage_root, request_path)
    direct_error: RenderError | None = None
    if target.is_file():
        try:
            return _read_and_parse(target)
        except DocumentParseError as e:
            direct_error = e
        except OSError as e:
            logger.warning(f"Cannot read {target}: {e}")

    index = target / INDEX_FILE
    if index.is_file():
        try:
            return _read_and_parse(index)
        except OSError as e:
            logger.warning(f"Cannot read {index}: {e}")
    if direct_error is not None:
        raise direct_error
    raise DocumentNotFoundError(request_path)


# ─── Naming and Format ──────────────────────────────────────────

def default_base_name(request_path: str) -> str:
    """Last path segment without its extension; "index" for the root."""
    segment = PurePosixPath(request_path.strip("/")).name
    if not segment:
        return DEFAULT_BASE_NAME
    stem = segment.rpartition(".")[0] if "." in segment else segment
    return stem or DEFAULT_BASE_NAME


def choose_format(lang: str | None, metadata: DocumentMetadata) -> OutputFormat:
    """`lang` wins over the meta hint; neither resolvable → UnsupportedFormatError."""
    selector = lang if lang is not None else metadata.export
    output_format = OutputFormat.parse(selector)
    if output_format is None:
        raise UnsupportedFormatError(selector)
    return output_format


# ─── Pipeline ───────────────────────────────────────────────────

def render_document(
    settings: Settings,
    request_path: str,
    lang: str | None = None,
    http_client: httpx.Client | None = None,
) -> RenderedDocument:
    """Render one stored document. Raises RenderError subclasses on failure."""
    try:
        return _render(settings, request_path, lang, http_client)
    except RenderError as e:
        if e.context.document_path is None:
            e.context.document_path = request_path
        raise


def _render(
    settings: Settings,
    request_path: str,
    lang: str | None,
    http_client: httpx.Client | None,
) -> RenderedDocument:
    storage_root = Path(settings.storage)
    document = load_document(storage_root, request_path)
    variables = resolve_variables(document.structure)
    metadata = resolve_metadata(document.structure)
    output_format = choose_format(lang, metadata)

    registry = build_function_registry(settings, http_client, storage_root)
    try:
        context = EvaluationContext(functions=registry)
        context.declare_vars(ambient_bindings())
        context.declare_vars(variables.as_bindings())
        context.declare_vars(metadata.as_bindings())
        resolved = evaluate_document(document.text, context)
    finally:
        registry.close()

    body = project(strip_reserved(resolved), output_format)
    filename = f"{metadata.file or default_base_name(request_path)}.{output_format.value}"
    logger.info(
        f"Rendered {request_path or '/'} as {output_format.value}",
        extra={"document_path": str(document.path), "output_format": output_format.value},
    )
    return RenderedDocument(body=body, filename=filename, output_format=output_format)
