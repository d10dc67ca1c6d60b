"""Constraint solving by unification over a TypeBuilder."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from tyunify.types import SubsRepr, Type, TypeBuilder, TypeTag, type_repr
from tyunify.util import give_up


@dataclass(frozen=True)
class Constraint:
    """The requirement that the types at ``a`` and ``b`` are equal."""

    a: int
    b: int
    provenance: int = 0

    def swapped(self) -> Constraint:
        """Return the same constraint with its sides exchanged."""
        return Constraint(self.b, self.a, self.provenance)


class TcErrorKind(Enum):
    """The kinds of error the type checker reports."""

    CONFLICT = "conflict"
    AMBIGUOUS = "ambiguous"
    INFINITE = "infinite"


@dataclass(frozen=True)
class TcError:
    """A type checking error.

    ``expected`` and ``got`` are set for conflicts; ``index`` for infinite
    and ambiguous types.
    """

    kind: TcErrorKind
    pos: int = 0
    expected: int | None = None
    got: int | None = None
    index: int | None = None


@dataclass(frozen=True)
class ResolvedType:
    """The end of a substitution chain.

    ``last_typevar`` is the last type variable passed on the way, or None if
    the start was not a type variable.
    """

    target: int
    last_typevar: int | None


@dataclass(frozen=True)
class _ResolvedConstraint:
    original: Constraint
    target_a: int
    target_b: int
    last_var_a: int | None
    last_var_b: int | None


def annotate_nodes(builder: TypeBuilder, node_amount: int) -> list[int]:
    """Give each of ``node_amount`` parse nodes a fresh type variable.

    Type variable ``i`` belongs to parse node ``i``; the substitution of each
    variable starts out pointing at its own node. Returns the substitutions.
    """
    first = len(builder.types)
    refs = [builder.mk_type_var(i) for i in range(node_amount)]
    assert refs == list(range(first, first + node_amount))
    builder.substitutions[:] = refs
    return builder.substitutions


def _substitute_layer(builder: TypeBuilder, var: int) -> tuple[int, bool]:
    ref = builder.substitutions[var]
    t = builder.types[ref]
    return ref, t.tag != TypeTag.VAR or t.type_var != var


def resolve_type(builder: TypeBuilder, root: int) -> ResolvedType:
    """Follow the substitution chain from ``root`` to its end.

    Every variable on the way is redirected to the last variable of the
    chain, so that later lookups are shorter.
    """
    types = builder.types
    substitutions = builder.substitutions
    target = root
    last_var_ref: int | None = None
    while True:
        t = types[target]
        if t.tag != TypeTag.VAR:
            break
        last_var_ref = target
        target, had_sub = _substitute_layer(builder, t.type_var)
        if not had_sub:
            break

    if last_var_ref is None:
        return ResolvedType(target, None)

    last_typevar = types[last_var_ref].type_var
    ref = root
    while ref != last_var_ref:
        var = types[ref].type_var
        ref = substitutions[var]
        substitutions[var] = last_var_ref
    return ResolvedType(target, last_typevar)


def _resolve_constraint(builder: TypeBuilder, c: Constraint) -> _ResolvedConstraint:
    a = resolve_type(builder, c.a)
    b = resolve_type(builder, c.b)
    return _ResolvedConstraint(c, a.target, b.target, a.last_typevar, b.last_typevar)


def _conflict(c: _ResolvedConstraint) -> TcError:
    return TcError(
        TcErrorKind.CONFLICT,
        pos=c.original.provenance,
        expected=c.target_a,
        got=c.target_b,
    )


def _update_typevar(builder: TypeBuilder, var: int | None, ref: int) -> None:
    if var is not None:
        builder.substitutions[var] = ref


def _unify_typevar(
    builder: TypeBuilder, errors: list[TcError], var: int, b_ref: int, b: Type
) -> None:
    if b.tag == TypeTag.VAR and b.type_var == var:
        return
    if builder.contains_specific_typevar(b_ref, var):
        errors.append(TcError(TcErrorKind.INFINITE, index=b_ref))
        return
    builder.substitutions[var] = b_ref


def _or_subs(builder: TypeBuilder, t: Type) -> list[int]:
    return builder.inds[t.start : t.start + t.amt]


def _ensure_subtype(
    builder: TypeBuilder, errors: list[TcError], c: _ResolvedConstraint
) -> None:
    a = builder.types[c.target_a]
    b = builder.types[c.target_b]
    if c.last_var_a is None and c.last_var_b is None:
        give_up(
            "Tried to unify OR types, but didn't have "
            "a type variable to notify of the result!\n"
            "This might be fine, but I haven't yet proven "
            "that the case is valid."
        )

    a_subs = _or_subs(builder, a)
    if b.tag == TypeTag.OR:
        b_subs = set(_or_subs(builder, b))
        intersection = [ref for ref in a_subs if ref in b_subs]
        if not intersection:
            errors.append(_conflict(c))
            return
        narrowed = builder.mk_type(TypeTag.OR, intersection)
        _update_typevar(builder, c.last_var_a, narrowed)
        _update_typevar(builder, c.last_var_b, narrowed)
    elif c.target_b in a_subs:
        _update_typevar(builder, c.last_var_a, c.target_b)
    else:
        errors.append(_conflict(c))


def solve_constraints(
    builder: TypeBuilder, constraints: Iterable[Constraint]
) -> list[TcError]:
    """Solve ``constraints`` in order, recording substitutions in ``builder``.

    Returns the errors found; an empty list means every constraint held.
    """
    stack = list(constraints)
    stack.reverse()
    errors: list[TcError] = []
    while stack:
        c = _resolve_constraint(builder, stack.pop())
        a = builder.types[c.target_a]
        b = builder.types[c.target_b]

        if a.tag > b.tag:
            stack.append(c.original.swapped())
            continue
        if a.tag == TypeTag.OR:
            _ensure_subtype(builder, errors, c)
            continue
        if a.tag == TypeTag.VAR:
            _unify_typevar(builder, errors, a.type_var, c.target_b, b)
            continue
        if a.tag != b.tag:
            errors.append(_conflict(c))
            continue

        provenance = c.original.provenance
        repr_ = type_repr(a.tag)
        if repr_ is SubsRepr.TWO:
            stack.append(Constraint(a.sub_b, b.sub_b, provenance))
            stack.append(Constraint(a.sub_a, b.sub_a, provenance))
        elif repr_ is SubsRepr.ONE:
            stack.append(Constraint(a.sub_a, b.sub_a, provenance))
        elif repr_ is SubsRepr.EXTERNAL:
            if a.amt != b.amt:
                errors.append(_conflict(c))
                continue
            stack.extend(
                Constraint(x, y, provenance)
                for x, y in zip(_or_subs(builder, a), _or_subs(builder, b))
            )
    return errors


__all__ = [
    "Constraint",
    "ResolvedType",
    "TcError",
    "TcErrorKind",
    "annotate_nodes",
    "resolve_type",
    "solve_constraints",
]