"""Evaluation Context — variables and functions visible to one document evaluation.

Invariants:
    - One context per document evaluation; never shared across requests
    - declare_var overwrites silently (reserved-block conflicts are checked
      upstream by resolve_variables, not here)
    - functions is any FunctionLookup; core never imports the service registry

Design Decisions:
    - Protocol for function lookup: keeps core free of services/ imports
      (ADR: core never imports the imperative shell)
    - Explicit object passed through the call chain instead of shared
      interior-mutable state
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from hclrender import __version__
from hclrender.core.domain_types import Value
from hclrender.core.function_types import FunctionResult


class FunctionLookup(Protocol):
    """What the evaluator needs from a function registry."""

    def __contains__(self, name: str) -> bool: ...

    def call(self, name: str, args: Sequence[Value]) -> FunctionResult: ...


@dataclass
class EvaluationContext:
    """Bound variables + declared functions for a single evaluation pass."""

    functions: FunctionLookup
    variables: dict[str, Value] = field(default_factory=dict)

    def declare_var(self, name: str, value: Value) -> None:
        self.variables[name] = value

    def declare_vars(self, bindings: dict[str, Value]) -> None:
        for name, value in bindings.items():
            self.declare_var(name, value)

    def lookup(self, name: str) -> tuple[bool, Value]:
        """Return (found, value) so a bound null is distinguishable from missing."""
        if name in self.variables:
            return True, self.variables[name]
        return False, None


def ambient_bindings() -> dict[str, Value]:
    """Type placeholders and engine info bound into every document."""
    return {
        "boolean": True,
        "number": 0,
        "string": "",
        "null": None,
        "object": {},
        "array": [],
        "engine": {"syntax": "v1", "version": __version__},
    }
