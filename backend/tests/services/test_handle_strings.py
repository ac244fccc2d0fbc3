"""String Handlers — format, split/join, trimming, case.

Tests cover:
    - format: %s %d %f %%, truncation toward zero, no re-scan of output
    - format errors: trailing %, unknown specifier, missing or non-numeric argument
    - split/join/concat/trim family
"""

import pytest

from hclrender.core.function_types import FunctionError


def test_format_truncates_for_d(registry):
    assert registry.call("format", ["%s-%d", "x", 3.9]) == "x-3"
    assert registry.call("format", ["%d", -3.9]) == "-3"


def test_format_percent_literal_consumes_nothing(registry):
    assert registry.call("format", ["100%% of %s", "it"]) == "100% of it"


def test_format_does_not_rescan_substitutions(registry):
    assert registry.call("format", ["%s", "%d"]) == "%d"


def test_format_f_keeps_number(registry):
    assert registry.call("format", ["%f|%f", 1.5, 2.0]) == "1.5|2"


def test_format_stringifies_values(registry):
    assert registry.call("format", ["%s %s %s", None, True, [1]]) == "null true [1]"


@pytest.mark.parametrize("args", [
    ["50%"],
    ["%x", 1],
    ["%s"],
    ["%d", "a"],
    ["%f", None],
])
def test_format_errors(registry, args):
    assert isinstance(registry.call("format", args), FunctionError)


def test_split(registry):
    assert registry.call("split", ["a,b,,c", ","]) == ["a", "b", "", "c"]
    assert registry.call("split", ["abc", ""]) == ["a", "b", "c"]


def test_join_stringifies_items(registry):
    assert registry.call("join", [[1, "a", True, 2.0], "-"]) == "1-a-true-2"


def test_concat_requires_strings(registry):
    assert registry.call("concat", ["a", "b", "c"]) == "abc"
    assert isinstance(registry.call("concat", ["a", 1]), FunctionError)


def test_trim_family(registry):
    assert registry.call("trim", ["xxhixy", "xy"]) == "hi"
    assert registry.call("str::trimspace", ["  hi \n"]) == "hi"
    assert registry.call("trimprefix", ["prefix-name", "prefix-"]) == "name"
    assert registry.call("str::trimsuffix", ["name.txt", ".txt"]) == "name"


def test_case(registry):
    assert registry.call("upper", ["abc"]) == "ABC"
    assert registry.call("str::lower", ["ABC"]) == "abc"


def test_tostring(registry):
    assert registry.call("string", [3.0]) == "3"
    assert registry.call("tostring", [{"a": None}]) == '{"a":null}'
