"""Metadata Resolver — output naming, format hint and per-kind bindings from `meta`.

Invariants:
    - A document without a `meta` block fails with MissingMetadataError (404)
    - meta.file containing "." splits on the LAST dot: base name + explicit extension
    - Without an extension in meta.file, meta.export is the format hint
    - kind == "docker" binds `services` = ordered keys of the top-level services block
    - meta keys are exposed only as the nested `meta` object, never flattened

Design Decisions:
    - Nested-only exposure avoids meta keys shadowing var/local/services
      (ADR: one re-exposure policy, no silent dual support)
    - Typed fields validated here (InvalidMetadataError) rather than ignored,
      so a typo in meta.file surfaces instead of defaulting the filename
"""

from dataclasses import dataclass, field

from hclrender.core.domain_types import DocumentKind, META_BLOCK, Value
from hclrender.core.errors import InvalidMetadataError, MissingMetadataError
from hclrender.core.resolve_variables import read_block


@dataclass
class DocumentMetadata:
    """Output hints and side-channel bindings derived from `meta`."""
    file: str | None = None
    export: str | None = None
    kind: str | None = None
    fields: dict[str, Value] = field(default_factory=dict)
    service_names: list[str] | None = None

    def as_bindings(self) -> dict[str, Value]:
        bindings: dict[str, Value] = {"meta": self.fields}
        if self.service_names is not None:
            bindings["services"] = list(self.service_names)
        return bindings


def _optional_str(meta: dict[str, Value], key: str) -> str | None:
    value = meta.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidMetadataError(key, "string")
    return value


def split_file_name(file: str | None, export: str | None) -> tuple[str | None, str | None]:
    """Split meta.file into (base name, format hint)."""
    if file is None:
        return None, export
    name, dot, extension = file.rpartition(".")
    if dot:
        return name, extension
    return file, export


def _service_names(document: dict[str, Value]) -> list[str]:
    services = document.get("services")
    if isinstance(services, dict):
        return list(services.keys())
    return []


def resolve_metadata(document: dict[str, Value]) -> DocumentMetadata:
    """Extract DocumentMetadata from a structurally parsed document."""
    meta = read_block(document, META_BLOCK)
    if meta is None:
        raise MissingMetadataError()

    kind = _optional_str(meta, "kind")
    file, export = split_file_name(
        _optional_str(meta, "file"), _optional_str(meta, "export"),
    )

    service_names = None
    if kind == DocumentKind.DOCKER.value:
        service_names = _service_names(document)

    return DocumentMetadata(
        file=file, export=export, kind=kind,
        fields=dict(meta), service_names=service_names,
    )
