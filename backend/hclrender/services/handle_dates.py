"""Date Handlers — timestamp, timeadd, formatdate, parseduration.

Invariants:
    - Timestamps are Unix seconds (integers), all formatting happens in UTC
    - Durations are sequences of <integer><unit>, units s, m, h, d
    - A unit without digits, an unknown unit, or trailing digits without a
      unit is an error; the empty string is a zero duration
"""

import math
import time
from datetime import datetime, timezone

from hclrender.core.domain_types import Value
from hclrender.core.function_types import FunctionError, FunctionResult

_DIGITS = "0123456789"
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


def parse_duration(text: str) -> int | str:
    """Total seconds of a duration string, or an error message."""
    total = 0
    digits = ""
    for char in text:
        if char in _DIGITS:
            digits += char
            continue
        if not digits:
            return "invalid duration number"
        if char not in _UNIT_SECONDS:
            return f"invalid duration unit: {char}"
        total += int(digits) * _UNIT_SECONDS[char]
        digits = ""
    if digits:
        return "duration string ended unexpectedly"
    return total


def _whole_seconds(value: Value) -> int | None:
    if not math.isfinite(value):
        return None
    return math.trunc(value)


def timestamp(args: list[Value]) -> FunctionResult:
    return int(time.time())


def timeadd(args: list[Value]) -> FunctionResult:
    seconds = _whole_seconds(args[0])
    if seconds is None:
        return FunctionError("timestamp must be finite")
    duration = parse_duration(args[1])
    if isinstance(duration, str):
        return FunctionError(f"invalid duration: {duration}")
    return seconds + duration


def parseduration(args: list[Value]) -> FunctionResult:
    duration = parse_duration(args[0])
    if isinstance(duration, str):
        return FunctionError(f"invalid duration: {duration}")
    return duration


def formatdate(args: list[Value]) -> FunctionResult:
    layout, ts = args
    seconds = _whole_seconds(ts)
    if seconds is None:
        return FunctionError("timestamp must be finite")
    try:
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        return FunctionError(f"timestamp out of range: {e}")
    return moment.strftime(layout)
