"""Function Types — names and call-signature checks.

Tests cover:
    - FunctionName parses and renders the ns::name syntax
    - check_call: exact arity, variadic minimum, per-argument types
"""

from hclrender.core.domain_types import ParamType
from hclrender.core.function_types import FunctionDefinition, FunctionName


def _noop(args):
    return None


def test_function_name_round_trips_namespace():
    name = FunctionName.parse("fs::hash::md5")
    assert name.name == "md5"
    assert name.namespace == ("fs", "hash")
    assert str(name) == "fs::hash::md5"
    assert str(FunctionName("upper")) == "upper"


def test_check_call_accepts_correct_types():
    definition = FunctionDefinition(_noop, (ParamType.STRING, ParamType.NUMBER))
    assert definition.check_call(["a", 1]) is None


def test_check_call_reports_wrong_arity():
    definition = FunctionDefinition(_noop, (ParamType.STRING,))
    error = definition.check_call([])
    assert error.message == "expected 1 argument, got 0"
    assert definition.check_call(["a", "b"]).message == "expected 1 argument, got 2"


def test_check_call_reports_wrong_type():
    definition = FunctionDefinition(_noop, (ParamType.STRING, ParamType.NUMBER))
    error = definition.check_call(["a", "b"])
    assert error.message == "argument 2 must be number, got string"


def test_variadic_requires_fixed_prefix_and_checks_rest():
    definition = FunctionDefinition(
        _noop, (ParamType.STRING,), variadic=ParamType.OBJECT,
    )
    assert definition.check_call(["a"]) is None
    assert definition.check_call(["a", {}, {}]) is None
    assert definition.check_call([]).message == "expected at least 1 argument, got 0"
    assert definition.check_call(["a", {}, 3]).message == "argument 3 must be object, got number"
