"""Value Model — structural helpers over the generic document value tree.

Invariants:
    - All functions are PURE: no IO, no side effects, inputs never mutated
    - bool is never treated as a number (Python's bool-is-int is masked everywhere)
    - normalize_number returns int for integral floats within signed 64-bit range
    - values_equal is type-strict: 1 == 1.0 but 1 != true and "1" != 1

Design Decisions:
    - Plain builtins over wrapper classes: json/yaml/tomli_w consume them directly
    - stringify is the single text conversion used by format/join/tostring, so
      every function renders values identically
"""

import datetime
import json
import math

from hclrender.core.domain_types import ParamType, Value

_INT64_LIMIT = 2 ** 63


def is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def type_name(value: Value) -> str:
    """Name of the value's variant as exposed by type_of()."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    raise TypeError(f"not a document value: {type(value).__name__}")


def normalize_number(number: int | float) -> int | float:
    """Collapse integral floats to int, keep everything else as-is."""
    if isinstance(number, float) and math.isfinite(number) and number.is_integer():
        if abs(number) < _INT64_LIMIT:
            return int(number)
    return number


def is_integral(value: Value) -> bool:
    return is_number(value) and isinstance(normalize_number(value), int)


def stringify(value: Value) -> str:
    """Render a value as text: strings unquoted, containers as compact JSON."""
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return _format_number(value)
    return json.dumps(
        _jsonable(value), separators=(",", ":"), ensure_ascii=False,
    )


def _format_number(number: int | float) -> str:
    number = normalize_number(number)
    if isinstance(number, int):
        return str(number)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    return repr(number)


def _jsonable(value: Value) -> object:
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if is_number(value):
        return normalize_number(value)
    return value


def values_equal(left: Value, right: Value) -> bool:
    """Type-strict structural equality."""
    if type_name(left) != type_name(right):
        return False
    if isinstance(left, list):
        return len(left) == len(right) and all(
            values_equal(a, b) for a, b in zip(left, right)
        )
    if isinstance(left, dict):
        return left.keys() == right.keys() and all(
            values_equal(v, right[k]) for k, v in left.items()
        )
    return left == right


def identity_key(value: Value) -> tuple[str, str]:
    """Hashable key for de-duplication; equal values share a key.

    Object keys are sorted so key order does not split equal objects.
    """
    if isinstance(value, (list, dict)):
        return type_name(value), json.dumps(
            _jsonable(value), separators=(",", ":"), ensure_ascii=False, sort_keys=True,
        )
    return type_name(value), stringify(value)


def to_value(data: object) -> Value:
    """Convert decoded JSON/YAML data into the value model.

    Dates and datetimes (YAML timestamps) become ISO-8601 strings; keys are
    stringified. Anything else outside the model raises TypeError.
    """
    if data is None or isinstance(data, (bool, str)):
        return data
    if is_number(data):
        return normalize_number(data)
    if isinstance(data, (datetime.date, datetime.datetime)):
        return data.isoformat()
    if isinstance(data, (list, tuple)):
        return [to_value(item) for item in data]
    if isinstance(data, dict):
        return {stringify(to_value(k)): to_value(v) for k, v in data.items()}
    raise TypeError(f"unsupported value of type {type(data).__name__}")


def matches_param_type(value: Value, param_type: ParamType) -> bool:
    """Check a call argument against its declared parameter type."""
    if param_type == ParamType.ANY:
        return True
    if param_type == ParamType.COLLECTION:
        return isinstance(value, (list, dict))
    return type_name(value) == _PARAM_TYPE_NAMES[param_type]


_PARAM_TYPE_NAMES = {
    ParamType.STRING: "string",
    ParamType.NUMBER: "number",
    ParamType.BOOL: "boolean",
    ParamType.ARRAY: "array",
    ParamType.OBJECT: "object",
}
