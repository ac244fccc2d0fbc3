"""Reserved-Block Resolver — merges const/var/let/vars into one `var` binding.

Invariants:
    - Reads the structural (un-evaluated) parse only
    - const entries seed the merge and can never be overridden
    - var then let merge in that order; later silently overwrites non-const keys
    - vars is strictly additive: colliding with const OR anything merged so far fails
    - locals is bound unmerged as `local`
    - Conflicts are hard failures naming the block and every offending key

Design Decisions:
    - Pure function returning a dataclass: testable without an evaluator (ADR: Functional Core)
    - Raises VariableConflictError instead of returning error dicts: a conflict
      aborts the whole document, there is no partial render to continue with
    - Repeated unlabeled blocks (a list of bodies) merge in document order
"""

from dataclasses import dataclass, field

from hclrender.core.domain_types import (
    CONST_BLOCK, LET_BLOCK, LOCALS_BLOCK, VAR_BLOCK, VARS_BLOCK, Value,
)
from hclrender.core.errors import DocumentParseError, ErrorContext, VariableConflictError


@dataclass
class VariableBindings:
    """Result of reserved-block resolution."""
    var: dict[str, Value] = field(default_factory=dict)
    local: dict[str, Value] = field(default_factory=dict)

    def as_bindings(self) -> dict[str, Value]:
        return {"var": self.var, "local": self.local}


def read_block(document: dict[str, Value], name: str) -> dict[str, Value] | None:
    """Return a top-level block as a map, merging repeated bodies in order."""
    if name not in document:
        return None
    block = document[name]
    if isinstance(block, dict):
        return block
    if isinstance(block, list) and all(isinstance(b, dict) for b in block):
        merged: dict[str, Value] = {}
        for body in block:
            merged.update(body)
        return merged
    raise DocumentParseError(
        f"'{name}' must be a block", ErrorContext(block=name),
    )


def _conflicting_keys(block: dict[str, Value], existing: dict[str, Value] | None) -> list[str]:
    if not existing:
        return []
    return [key for key in block if key in existing]


def _check_const(block_name: str, block: dict[str, Value], const: dict[str, Value] | None) -> None:
    conflicts = _conflicting_keys(block, const)
    if conflicts:
        raise VariableConflictError(block_name, conflicts, against_const=True)


def resolve_variables(document: dict[str, Value]) -> VariableBindings:
    """Merge reserved variable blocks of a structurally parsed document."""
    const = read_block(document, CONST_BLOCK)
    combined: dict[str, Value] = dict(const or {})

    for name in (VAR_BLOCK, LET_BLOCK):
        block = read_block(document, name)
        if block is None:
            continue
        _check_const(name, block, const)
        combined.update(block)

    vars_block = read_block(document, VARS_BLOCK)
    if vars_block is not None:
        _check_const(VARS_BLOCK, vars_block, const)
        conflicts = _conflicting_keys(vars_block, combined)
        if conflicts:
            raise VariableConflictError(VARS_BLOCK, conflicts, against_const=False)
        combined.update(vars_block)

    locals_block = read_block(document, LOCALS_BLOCK)
    return VariableBindings(var=combined, local=dict(locals_block or {}))
