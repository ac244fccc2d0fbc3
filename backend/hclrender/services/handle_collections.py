"""Collection Handlers — length, compact, unique, contains, keys, values, merge, flatten, reverse, range.

Invariants:
    - Every handler receives arguments already checked against its declared
      signature (FunctionRegistry.call) and never mutates them
    - Return a Value on success, FunctionError on invalid input; never raise
    - range is half-open [start, end); merge lets later arguments win
    - unique/toset keep the first occurrence, compared type-strictly

Design Decisions:
    - compact accepts arrays AND objects (declared COLLECTION) so the function
      works on the type it is declared for
    - sum/max/min live in handle_numeric.py; type utilities that build
      collections (tovec, toset) live here
"""

from hclrender.core.domain_types import Value
from hclrender.core.function_types import FunctionError, FunctionResult
from hclrender.core.values import identity_key, is_integral, type_name, values_equal


def length(args: list[Value]) -> FunctionResult:
    """Number of items of an array/object or characters of a string."""
    value = args[0]
    if isinstance(value, (list, dict, str)):
        return len(value)
    return FunctionError(
        f"requires array, string or object argument, got {type_name(value)}",
    )


def compact(args: list[Value]) -> FunctionResult:
    """Drop null items (arrays) or null-valued keys (objects)."""
    value = args[0]
    if isinstance(value, dict):
        return {k: v for k, v in value.items() if v is not None}
    return [v for v in value if v is not None]


def unique(args: list[Value]) -> FunctionResult:
    """Remove duplicates, keeping first occurrences in order."""
    seen: set[tuple[str, str]] = set()
    result = []
    for item in args[0]:
        key = identity_key(item)
        if key not in seen:
            seen.add(key)
            result.append(item)
    return result


def contains(args: list[Value]) -> FunctionResult:
    """Array membership or substring test."""
    haystack, needle = args
    if isinstance(haystack, list):
        return any(values_equal(item, needle) for item in haystack)
    if isinstance(haystack, str):
        if not isinstance(needle, str):
            return FunctionError("second argument must be string for string contains")
        return needle in haystack
    return FunctionError(
        f"requires array or string as first argument, got {type_name(haystack)}",
    )


def keys(args: list[Value]) -> FunctionResult:
    return list(args[0].keys())


def values(args: list[Value]) -> FunctionResult:
    return list(args[0].values())


def merge(args: list[Value]) -> FunctionResult:
    """Shallow merge of objects; later keys overwrite earlier ones."""
    result: dict[str, Value] = {}
    for obj in args:
        result.update(obj)
    return result


def _flatten_into(items: list[Value], out: list[Value]) -> None:
    for item in items:
        if isinstance(item, list):
            _flatten_into(item, out)
        else:
            out.append(item)


def flatten(args: list[Value]) -> FunctionResult:
    """Recursively flatten nested arrays; other leaves pass through."""
    result: list[Value] = []
    _flatten_into(args[0], result)
    return result


def reverse(args: list[Value]) -> FunctionResult:
    value = args[0]
    if isinstance(value, list):
        return list(reversed(value))
    if isinstance(value, str):
        return value[::-1]
    return FunctionError(f"requires array or string argument, got {type_name(value)}")


def range_(args: list[Value]) -> FunctionResult:
    """Integers in [start, end)."""
    start, end = args
    if not (is_integral(start) and is_integral(end)):
        return FunctionError("start and end must be whole numbers")
    return list(range(int(start), int(end)))


def type_of(args: list[Value]) -> FunctionResult:
    return type_name(args[0])


def tovec(args: list[Value]) -> FunctionResult:
    """Collect the arguments into an array."""
    return list(args)
