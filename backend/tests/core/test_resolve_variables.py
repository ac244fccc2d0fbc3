"""Reserved-Block Resolver — const/var/let/vars merge and conflict rules.

Tests cover:
    - const seeds var; var and let may not override const
    - vars is strictly additive (no const, no earlier key)
    - locals bound separately, both bindings always present
    - repeated blocks (list of bodies) merge in order
    - non-object reserved blocks are document errors
"""

import pytest

from hclrender.core.errors import DocumentParseError, VariableConflictError
from hclrender.core.resolve_variables import read_block, resolve_variables


def test_empty_document_binds_empty_maps():
    bindings = resolve_variables({})
    assert bindings.as_bindings() == {"var": {}, "local": {}}


def test_var_cannot_override_const():
    with pytest.raises(VariableConflictError) as exc_info:
        resolve_variables({"const": {"a": 1}, "var": {"a": 2}})
    assert exc_info.value.block == "var"
    assert exc_info.value.keys == ["a"]
    assert "Cannot override const values in 'var' block" in exc_info.value.message


def test_let_cannot_override_const():
    with pytest.raises(VariableConflictError) as exc_info:
        resolve_variables({"const": {"a": 1, "b": 1}, "let": {"b": 2}})
    assert exc_info.value.block == "let"
    assert exc_info.value.keys == ["b"]


def test_vars_adds_to_const():
    bindings = resolve_variables({"const": {"a": 1}, "vars": {"b": 2}})
    assert bindings.var == {"a": 1, "b": 2}


def test_let_overrides_var():
    bindings = resolve_variables({"var": {"a": 1}, "let": {"a": 2, "c": 3}})
    assert bindings.var == {"a": 2, "c": 3}


def test_vars_cannot_redefine_earlier_variables():
    with pytest.raises(VariableConflictError) as exc_info:
        resolve_variables({"var": {"a": 1}, "vars": {"a": 2}})
    assert exc_info.value.block == "vars"
    assert "Conflicting variables" in exc_info.value.message


def test_locals_are_not_merged_into_var():
    bindings = resolve_variables({"locals": {"x": 1}, "var": {"y": 2}})
    assert bindings.local == {"x": 1}
    assert bindings.var == {"y": 2}


def test_repeated_blocks_merge_in_order():
    document = {"var": [{"a": 1, "b": 1}, {"b": 2}]}
    assert read_block(document, "var") == {"a": 1, "b": 2}


def test_non_object_block_is_document_error():
    with pytest.raises(DocumentParseError):
        resolve_variables({"var": "oops"})
