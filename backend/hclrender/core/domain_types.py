"""Domain Types — enums and aliases that replace bare strings across the codebase.

Invariants:
    - Value is the only data currency between parsing, functions and projection
    - OutputFormat.parse never raises: unknown selectors map to None
    - RESERVED_KEYS is the single source for keys stripped before projection

Design Decisions:
    - str Enums: serialize to JSON and compare to raw strings without converters
    - Value as a type alias over builtins (not a wrapper class): the evaluator,
      json, yaml and tomli_w all speak plain Python containers already
"""

from enum import Enum
from typing import Union


# ─── Value Model ─────────────────────────────────────────────────

Value = Union[None, bool, int, float, str, list["Value"], dict[str, "Value"]]


# ─── Reserved Blocks ─────────────────────────────────────────────

META_BLOCK = "meta"
LOCALS_BLOCK = "locals"
CONST_BLOCK = "const"
VAR_BLOCK = "var"
LET_BLOCK = "let"
VARS_BLOCK = "vars"

RESERVED_KEYS = (
    LOCALS_BLOCK, META_BLOCK, CONST_BLOCK, LET_BLOCK, VAR_BLOCK, VARS_BLOCK,
)


# ─── Enums ───────────────────────────────────────────────────────

class OutputFormat(str, Enum):
    """Projection targets. Value is the file extension used in downloads."""
    TOML = "toml"
    JSON = "json"
    YAML = "yml"

    @classmethod
    def parse(cls, selector: str | None) -> "OutputFormat | None":
        """Case-insensitive lookup of a `lang` / `export` selector."""
        if not selector:
            return None
        return _FORMAT_ALIASES.get(selector.strip().lower())

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_FORMAT_ALIASES = {
    "toml": OutputFormat.TOML,
    "json": OutputFormat.JSON,
    "yml": OutputFormat.YAML,
    "yaml": OutputFormat.YAML,
}

_MEDIA_TYPES = {
    OutputFormat.TOML: "application/toml",
    OutputFormat.JSON: "application/json",
    OutputFormat.YAML: "application/yaml",
}


class ParamType(str, Enum):
    """Declared parameter constraint of a built-in function."""
    ANY = "any"
    STRING = "string"
    NUMBER = "number"
    BOOL = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    COLLECTION = "collection"  # array or object


class FunctionErrorKind(str, Enum):
    """Failure classes a function implementation can report."""
    ARGUMENT = "argument"
    IO = "io"
    NETWORK = "network"
    ENCODING = "encoding"


class DocumentKind(str, Enum):
    """meta.kind values with side-effect bindings."""
    DOCKER = "docker"
