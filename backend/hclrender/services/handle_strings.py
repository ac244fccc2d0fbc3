"""String Handlers — case, trimming, split/join, format, concat, tostring.

Invariants:
    - Arguments arrive type-checked; handlers only reject semantic errors
    - format: %s stringify, %d truncate toward zero, %f number, %% literal
      (consumes no argument); unknown specifier, trailing %, non-numeric
      numeric argument, or missing argument is an error
    - Substituted text is never re-scanned for specifiers

Design Decisions:
    - Single left-to-right scan for format: output can safely contain "%"
    - stringify from core.values: join/format/tostring render values identically
"""

import math

from hclrender.core.domain_types import Value
from hclrender.core.function_types import FunctionError, FunctionResult
from hclrender.core.values import is_number, normalize_number, stringify


def upper(args: list[Value]) -> FunctionResult:
    return args[0].upper()


def lower(args: list[Value]) -> FunctionResult:
    return args[0].lower()


def trim(args: list[Value]) -> FunctionResult:
    """Strip any character of the cutset from both ends."""
    text, cutset = args
    return text.strip(cutset) if cutset else text


def trimspace(args: list[Value]) -> FunctionResult:
    return args[0].strip()


def trimprefix(args: list[Value]) -> FunctionResult:
    return args[0].removeprefix(args[1])


def trimsuffix(args: list[Value]) -> FunctionResult:
    return args[0].removesuffix(args[1])


def split(args: list[Value]) -> FunctionResult:
    text, separator = args
    if separator == "":
        return list(text)
    return text.split(separator)


def join(args: list[Value]) -> FunctionResult:
    items, separator = args
    return separator.join(stringify(item) for item in items)


def concat(args: list[Value]) -> FunctionResult:
    return "".join(args)


def tostring(args: list[Value]) -> FunctionResult:
    return stringify(args[0])


def _format_integer(value: Value) -> str | None:
    if not is_number(value) or not math.isfinite(value):
        return None
    return str(math.trunc(value))


def _format_float(value: Value) -> str | None:
    if not is_number(value):
        return None
    return stringify(normalize_number(value))


_NUMERIC_SPECIFIERS = {"d": _format_integer, "f": _format_float}


def format_(args: list[Value]) -> FunctionResult:
    """printf-style formatting with %s, %d, %f and %%."""
    template, *values = args
    if not isinstance(template, str):
        return FunctionError("first argument must be a format string")

    out: list[str] = []
    arg_index = 0
    position = 0
    while True:
        start = template.find("%", position)
        if start == -1:
            out.append(template[position:])
            break
        out.append(template[position:start])
        if start + 1 >= len(template):
            return FunctionError("invalid format string: % at end of string")
        specifier = template[start + 1]
        position = start + 2

        if specifier == "%":
            out.append("%")
            continue
        if specifier != "s" and specifier not in _NUMERIC_SPECIFIERS:
            return FunctionError(f"unknown format specifier %{specifier}")
        if arg_index >= len(values):
            return FunctionError("not enough arguments for format string")

        value = values[arg_index]
        arg_index += 1
        if specifier == "s":
            out.append(stringify(value))
            continue
        rendered = _NUMERIC_SPECIFIERS[specifier](value)
        if rendered is None:
            return FunctionError(f"expected number for %{specifier} format")
        out.append(rendered)

    return "".join(out)
