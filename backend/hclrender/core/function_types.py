"""Function Types — immutable descriptors for the built-in function library.

Invariants:
    - FunctionDefinition is frozen: built once during registry init, never mutated
    - FunctionName renders as `ns::name` (HCL namespaced call syntax)
    - Implementations return a Value or a FunctionError; they never raise for
      bad input (errors are data until the evaluator boundary)
    - check_call validates arity first, then each argument's declared type

Design Decisions:
    - Frozen dataclasses over dicts: signatures are part of the contract and
      must not drift at runtime (ADR: registry is read-only after init)
    - FunctionError carries a kind so the evaluator can raise the precise
      exception class (argument / io / network / encoding)
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from hclrender.core.domain_types import FunctionErrorKind, ParamType, Value
from hclrender.core.values import matches_param_type, type_name


@dataclass(frozen=True)
class FunctionError:
    """Failure returned by a function implementation."""
    message: str
    kind: FunctionErrorKind = FunctionErrorKind.ARGUMENT


FunctionResult = Value | FunctionError
Implementation = Callable[[list[Value]], FunctionResult]


@dataclass(frozen=True)
class FunctionName:
    """Namespaced function identifier, e.g. FunctionName("md5", ("fs", "hash"))."""
    name: str
    namespace: tuple[str, ...] = ()

    @classmethod
    def parse(cls, qualified: str) -> "FunctionName":
        *namespace, name = qualified.split("::")
        return cls(name, tuple(namespace))

    def __str__(self) -> str:
        return "::".join((*self.namespace, self.name))


@dataclass(frozen=True)
class FunctionDefinition:
    """Call signature + implementation of one built-in."""
    implementation: Implementation
    params: tuple[ParamType, ...] = ()
    variadic: ParamType | None = None

    def check_call(self, args: Sequence[Value]) -> FunctionError | None:
        """Validate arity and argument types. Returns error or None."""
        fixed = len(self.params)
        if self.variadic is None and len(args) != fixed:
            return FunctionError(
                f"expected {fixed} argument{'s' if fixed != 1 else ''}, got {len(args)}",
            )
        if len(args) < fixed:
            return FunctionError(
                f"expected at least {fixed} argument{'s' if fixed != 1 else ''}, "
                f"got {len(args)}",
            )
        for index, arg in enumerate(args):
            expected = self.params[index] if index < fixed else self.variadic
            if not matches_param_type(arg, expected):
                return FunctionError(
                    f"argument {index + 1} must be {expected.value}, "
                    f"got {type_name(arg)}",
                )
        return None