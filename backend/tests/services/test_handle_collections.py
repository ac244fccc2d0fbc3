"""Collection Handlers — called through the registry.

Tests cover:
    - range half-open, integral bounds only
    - merge later-wins, compact on arrays and objects
    - unique/toset first occurrence, type-strict
    - contains, flatten, length, reverse, keys/values, type_of, tovec
"""

import pytest

from hclrender.core.function_types import FunctionError


def test_range_is_half_open(registry):
    assert registry.call("range", [0, 5]) == [0, 1, 2, 3, 4]
    assert registry.call("range", [3, 3]) == []
    assert registry.call("range", [2.0, 4]) == [2, 3]


def test_range_requires_whole_numbers(registry):
    assert isinstance(registry.call("range", [0.5, 3]), FunctionError)


def test_merge_later_keys_win(registry):
    result = registry.call("merge", [{"a": 1, "b": 2}, {"b": 3, "c": 4}])
    assert result == {"a": 1, "b": 3, "c": 4}
    assert list(result) == ["a", "b", "c"]
    assert registry.call("merge", []) == {}


def test_merge_rejects_non_objects(registry):
    assert isinstance(registry.call("merge", [{"a": 1}, [1]]), FunctionError)


def test_compact_arrays_and_objects(registry):
    assert registry.call("compact", [[1, None, "", None]]) == [1, ""]
    assert registry.call("compact", [{"a": None, "b": 0}]) == {"b": 0}


def test_unique_is_type_strict_and_keeps_first(registry):
    assert registry.call("toset", [[1, "1", 1.0, True, 1]]) == [1, "1", True]


def test_unique_treats_reordered_objects_as_equal(registry):
    items = [{"a": 1, "b": 2}, {"b": 2, "a": 1}, {"a": 2}]
    assert registry.call("unique", [items]) == [{"a": 1, "b": 2}, {"a": 2}]


@pytest.mark.parametrize("haystack,needle,expected", [
    ([1, 2], 2.0, True),
    ([1], True, False),
    (["a"], "a", True),
    ("hello", "ell", True),
    ("hello", "xyz", False),
])
def test_contains(registry, haystack, needle, expected):
    assert registry.call("contains", [haystack, needle]) is expected


def test_contains_rejects_other_haystacks(registry):
    assert isinstance(registry.call("contains", [3, 1]), FunctionError)
    assert isinstance(registry.call("contains", ["abc", 1]), FunctionError)


def test_flatten_is_recursive(registry):
    assert registry.call("flatten", [[1, [2, [3, {"a": [4]}]], []]]) == [1, 2, 3, {"a": [4]}]


def test_length_counts_characters_items_and_keys(registry):
    assert registry.call("length", ["héllo"]) == 5
    assert registry.call("length", [[1, 2]]) == 2
    assert registry.call("length", [{"a": 1}]) == 1
    assert isinstance(registry.call("length", [3]), FunctionError)


def test_reverse_arrays_and_strings(registry):
    assert registry.call("reverse", [[1, 2, 3]]) == [3, 2, 1]
    assert registry.call("reverse", ["abc"]) == "cba"
    assert isinstance(registry.call("reverse", [{}]), FunctionError)


def test_keys_and_values_keep_order(registry):
    obj = {"b": 1, "a": 2}
    assert registry.call("map::keys", [obj]) == ["b", "a"]
    assert registry.call("values", [obj]) == [1, 2]


def test_type_of(registry):
    assert [registry.call("type_of", [v]) for v in (None, True, 1, "s", [], {})] == [
        "null", "boolean", "number", "string", "array", "object",
    ]


def test_tovec_collects_arguments(registry):
    assert registry.call("tuple", [1, "a", None]) == [1, "a", None]
    assert registry.call("list", []) == []
