"""Numeric Handlers — abs, ceil, floor, parseint, tonumber, sum, max, min.

Invariants:
    - Results are normalized: integral values come back as int
    - sum/max/min only look at numeric items (others are skipped)
    - max/min of an array without numbers is an error; sum of none is 0
    - parseint accepts [+-]?digits within signed 64-bit range, nothing else
"""

import math
import re

from hclrender.core.domain_types import Value
from hclrender.core.function_types import FunctionError, FunctionResult
from hclrender.core.values import is_number, normalize_number, stringify

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


def abs_(args: list[Value]) -> FunctionResult:
    return normalize_number(abs(args[0]))


def ceil(args: list[Value]) -> FunctionResult:
    number = args[0]
    if not math.isfinite(number):
        return number
    return math.ceil(number)


def floor(args: list[Value]) -> FunctionResult:
    number = args[0]
    if not math.isfinite(number):
        return number
    return math.floor(number)


def parseint(args: list[Value]) -> FunctionResult:
    text = args[0]
    if not _INTEGER_PATTERN.fullmatch(text):
        return FunctionError(f"failed to parse integer: '{text}'")
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return FunctionError(f"integer out of range: '{text}'")
    return number


def tonumber(args: list[Value]) -> FunctionResult:
    """Parse the value's text form as a finite number."""
    value = args[0]
    if is_number(value):
        return normalize_number(value)
    text = stringify(value)
    try:
        number = float(text)
    except ValueError:
        return FunctionError(f"failed to convert to number: '{text}'")
    if not math.isfinite(number):
        return FunctionError(f"failed to convert to number: '{text}'")
    return normalize_number(number)


def _numbers(items: list[Value]) -> list[int | float]:
    return [item for item in items if is_number(item)]


def sum_(args: list[Value]) -> FunctionResult:
    try:
        total = math.fsum(_numbers(args[0]))
    except (OverflowError, ValueError):
        return FunctionError("sum overflows")
    if not math.isfinite(total):
        return FunctionError("sum overflows")
    return normalize_number(total)


def max_(args: list[Value]) -> FunctionResult:
    numbers = _numbers(args[0])
    if not numbers:
        return FunctionError("requires non-empty array of numbers")
    return normalize_number(max(numbers))


def min_(args: list[Value]) -> FunctionResult:
    numbers = _numbers(args[0])
    if not numbers:
        return FunctionError("requires non-empty array of numbers")
    return normalize_number(min(numbers))
