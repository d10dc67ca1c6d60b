"""Final checks after unification, and compaction of the solved types."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from tyunify.types import SubsRepr, Type, TypeBuilder, TypeTag, type_repr
from tyunify.unify import Constraint, TcError, TcErrorKind, solve_constraints
from tyunify.util import give_up


@dataclass
class TypeInfo:
    """Types of a checked program: one type reference per parse node."""

    types: list[Type]
    inds: list[int]
    node_types: list[int]

    @property
    def type_amt(self) -> int:
        """The number of type nodes stored."""
        return len(self.types)


@dataclass
class TcResult:
    """The outcome of type checking.

    Without errors, ``types`` holds the compacted types. With errors, it holds
    the builder's state as it was when checking stopped.
    """

    types: TypeInfo
    errors: list[TcError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if no errors were found."""
        return not self.errors


def check_ambiguities(builder: TypeBuilder, parse_node_amount: int) -> list[TcError]:
    """Report parse nodes whose types still hold free variables or OR types."""
    types = builder.types
    substitutions = builder.substitutions
    visited: set[int] = set()
    errors: list[TcError] = []
    for node_ind in range(parse_node_amount):
        root = substitutions[node_ind]
        stack = [root]
        while stack:
            ref = stack.pop()
            if ref in visited:
                continue
            t = types[ref]
            if t.tag == TypeTag.OR:
                errors.append(TcError(TcErrorKind.AMBIGUOUS, pos=node_ind, index=ref))
            if t.tag == TypeTag.VAR:
                target = substitutions[t.type_var]
                if t.type_var < parse_node_amount and target != root:
                    # reported at the node the variable belongs to
                    continue
                if target == ref:
                    errors.append(
                        TcError(TcErrorKind.AMBIGUOUS, pos=node_ind, index=ref)
                    )
                else:
                    stack.append(target)
            visited.add(ref)
            stack.extend(builder.sub_refs(t))
    return errors


def copy_type(old: TypeBuilder, new: TypeBuilder, root: int) -> int:
    """Copy the type at ``root`` from ``old`` into ``new``, resolving variables.

    Returns the reference of the copy in ``new``.
    """
    stack: list[tuple[int, bool]] = [(root, True)]
    results: list[int] = []
    while stack:
        ref, first_pass = stack.pop()
        t = old.types[ref]

        if t.tag == TypeTag.VAR:
            target = old.substitutions[t.type_var]
            if target == ref:
                give_up(f"Tried to copy unsubstituted type variable {t.type_var}")
            stack.append((target, first_pass))
            continue

        repr_ = type_repr(t.tag)
        if repr_ is SubsRepr.NONE:
            results.append(new.mk_primitive_type(t.tag))
        elif repr_ is SubsRepr.ONE:
            if first_pass:
                stack.append((ref, False))
                stack.append((t.sub_a, True))
            else:
                sub_a = results.pop()
                results.append(new.mk_type_inline(t.tag, sub_a, 0))
        elif repr_ is SubsRepr.TWO:
            if first_pass:
                stack.append((ref, False))
                stack.append((t.sub_a, True))
                stack.append((t.sub_b, True))
            else:
                sub_a = results.pop()
                sub_b = results.pop()
                results.append(new.mk_type_inline(t.tag, sub_a, sub_b))
        else:
            if first_pass:
                stack.append((ref, False))
                subs = old.inds[t.start : t.start + t.amt]
                stack.extend((sub, True) for sub in reversed(subs))
            else:
                split = len(results) - t.amt
                subs = results[split:]
                del results[split:]
                results.append(new.mk_type(t.tag, subs))
    return results.pop()


def cleanup_types(builder: TypeBuilder, parse_node_amount: int) -> TypeInfo:
    """Copy only the types reachable from the parse nodes into a fresh store."""
    fresh = TypeBuilder()
    node_types = [
        copy_type(builder, fresh, builder.substitutions[i])
        for i in range(parse_node_amount)
    ]
    return TypeInfo(types=fresh.types, inds=fresh.inds, node_types=node_types)


def typecheck_constraints(
    builder: TypeBuilder,
    constraints: Iterable[Constraint],
    parse_node_amount: int,
) -> TcResult:
    """Solve ``constraints`` and check the result for ambiguities.

    ``builder`` must already hold one type variable per parse node, as made by
    ``annotate_nodes``.
    """
    errors = solve_constraints(builder, constraints)
    if not errors:
        errors = check_ambiguities(builder, parse_node_amount)
    if not errors:
        return TcResult(types=cleanup_types(builder, parse_node_amount))
    return TcResult(
        types=TypeInfo(
            types=builder.types,
            inds=builder.inds,
            node_types=builder.substitutions,
        ),
        errors=errors,
    )


__all__ = [
    "TcResult",
    "TypeInfo",
    "check_ambiguities",
    "cleanup_types",
    "copy_type",
    "typecheck_constraints",
]