"""Projector — JSON/YAML/TOML rendering with type fidelity.

Tests cover:
    - reserved keys stripped before projection
    - integral floats emitted as integers, key order preserved
    - null: JSON/YAML null, TOML "null"
    - JSON rejects NaN/Infinity instead of substituting zero
    - TOML needs an object root and 64-bit integers
"""

import json
import tomllib

import pytest
import yaml

from hclrender.core.domain_types import OutputFormat
from hclrender.core.errors import ProjectionError
from hclrender.core.project_output import project, strip_reserved, to_json, to_toml, to_yaml


def test_strip_reserved_drops_only_reserved_top_level_keys():
    tree = {"meta": {}, "var": {}, "locals": {}, "app": {"var": 1}}
    assert strip_reserved(tree) == {"app": {"var": 1}}


def test_json_preserves_order_and_integers():
    text = to_json({"z": 2.0, "a": [1.5, 3], "m": None})
    assert text.startswith('{\n  "z": 2,')
    assert list(json.loads(text)) == ["z", "a", "m"]
    assert json.loads(text) == {"z": 2, "a": [1.5, 3], "m": None}


def test_json_keeps_unicode():
    assert '"é"' in to_json({"k": "é"})


@pytest.mark.parametrize("number", [float("nan"), float("inf")])
def test_json_rejects_non_finite_numbers(number):
    with pytest.raises(ProjectionError) as exc_info:
        to_json({"x": number})
    assert exc_info.value.output_format == "json"


def test_yaml_block_style_in_insertion_order():
    text = to_yaml({"b": 1.0, "a": None, "list": [1, 2]})
    assert text == "b: 1\na: null\nlist:\n- 1\n- 2\n"


def test_toml_null_becomes_string():
    text = to_toml({"a": None, "n": 3.0})
    assert tomllib.loads(text) == {"a": "null", "n": 3}


def test_toml_requires_object_root():
    with pytest.raises(ProjectionError):
        to_toml([1, 2])


def test_toml_rejects_integers_beyond_64_bits():
    with pytest.raises(ProjectionError):
        to_toml({"big": 2 ** 64})


def test_project_dispatches_by_format():
    value = {"a": 1}
    assert json.loads(project(value, OutputFormat.JSON)) == value
    assert yaml.safe_load(project(value, OutputFormat.YAML)) == value
    assert tomllib.loads(project(value, OutputFormat.TOML)) == value
