"""Projector — renders a resolved value tree as JSON, YAML or TOML text.

Invariants:
    - Input must already have reserved keys stripped (strip_reserved)
    - Integral numbers are emitted as integers in every format, others as floats
    - Object key order is preserved (TOML still places sub-tables after scalars)
    - Null: JSON null, YAML null, TOML the literal string "null"
    - JSON cannot represent NaN/Infinity: ProjectionError, never a zero fallback
    - TOML needs an object root and 64-bit integers, otherwise ProjectionError

Design Decisions:
    - One recursive normalizer per format instead of serializer hooks: the
      type-fidelity rules stay visible in one place
    - yaml.safe_dump with sort_keys=False: block style, insertion order kept
    - tomli_w for TOML output, tomllib-compatible by construction
"""

import json
import math

import tomli_w
import yaml

from hclrender.core.domain_types import OutputFormat, RESERVED_KEYS, Value
from hclrender.core.errors import ProjectionError
from hclrender.core.values import is_number, normalize_number

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def strip_reserved(value: Value) -> Value:
    """Drop top-level reserved blocks (meta, locals, const, let, var, vars)."""
    if not isinstance(value, dict):
        return value
    return {k: v for k, v in value.items() if k not in RESERVED_KEYS}


# ─── JSON ────────────────────────────────────────────────────────

def _json_node(value: Value) -> object:
    if isinstance(value, list):
        return [_json_node(v) for v in value]
    if isinstance(value, dict):
        return {k: _json_node(v) for k, v in value.items()}
    if is_number(value):
        if isinstance(value, float) and not math.isfinite(value):
            raise ProjectionError(f"number {value} is not representable", "json")
        return normalize_number(value)
    return value


def to_json(value: Value) -> str:
    return json.dumps(_json_node(value), indent=2, ensure_ascii=False, allow_nan=False)


# ─── YAML ────────────────────────────────────────────────────────

def _yaml_node(value: Value) -> object:
    if isinstance(value, list):
        return [_yaml_node(v) for v in value]
    if isinstance(value, dict):
        return {k: _yaml_node(v) for k, v in value.items()}
    if is_number(value):
        return normalize_number(value)
    return value


def to_yaml(value: Value) -> str:
    return yaml.safe_dump(
        _yaml_node(value), sort_keys=False, allow_unicode=True,
        default_flow_style=False,
    )


# ─── TOML ────────────────────────────────────────────────────────

def _toml_node(value: Value) -> object:
    if value is None:
        return "null"  # TOML has no native null
    if isinstance(value, list):
        return [_toml_node(v) for v in value]
    if isinstance(value, dict):
        return {k: _toml_node(v) for k, v in value.items()}
    if is_number(value):
        number = normalize_number(value)
        if isinstance(number, int) and not _INT64_MIN <= number <= _INT64_MAX:
            raise ProjectionError(f"integer {number} exceeds 64 bits", "toml")
        return number
    return value


def to_toml(value: Value) -> str:
    if not isinstance(value, dict):
        raise ProjectionError("document root must be an object", "toml")
    return tomli_w.dumps(_toml_node(value))


_PROJECTORS = {
    OutputFormat.JSON: to_json,
    OutputFormat.YAML: to_yaml,
    OutputFormat.TOML: to_toml,
}


def project(value: Value, output_format: OutputFormat) -> str:
    """Render an already-stripped value tree in the requested format."""
    return _PROJECTORS[output_format](value)
