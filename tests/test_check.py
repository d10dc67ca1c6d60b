import pytest

from tyunify.check import (
    TcResult,
    TypeInfo,
    check_ambiguities,
    cleanup_types,
    copy_type,
    typecheck_constraints,
)
from tyunify.printing import format_type
from tyunify.types import TypeBuilder, TypeTag
from tyunify.unify import Constraint, TcErrorKind, annotate_nodes
from tyunify.util import CompilerBug


def _annotated(n):
    builder = TypeBuilder()
    refs = list(annotate_nodes(builder, n))
    return builder, refs


def _render(info: TypeInfo, node: int) -> str:
    return format_type(info.types, info.inds, info.node_types[node])


def test_simple_assignment_checks():
    builder, refs = _annotated(2)
    i32 = builder.mk_primitive_type(TypeTag.I32)
    result = typecheck_constraints(
        builder, [Constraint(refs[0], i32, 0), Constraint(refs[1], refs[0], 1)], 2
    )
    assert isinstance(result, TcResult)
    assert result.ok
    assert _render(result.types, 0) == "I32"
    assert _render(result.types, 1) == "I32"
    assert result.types.node_types[0] == result.types.node_types[1]


def test_conflict_reported():
    builder, refs = _annotated(1)
    i32 = builder.mk_primitive_type(TypeTag.I32)
    boolean = builder.mk_primitive_type(TypeTag.BOOL)
    result = typecheck_constraints(
        builder, [Constraint(refs[0], i32, 0), Constraint(refs[0], boolean, 7)], 1
    )
    assert not result.ok
    assert len(result.errors) == 1
    err = result.errors[0]
    assert err.kind is TcErrorKind.CONFLICT
    assert err.pos == 7
    assert (err.expected, err.got) == (i32, boolean)


def test_unconstrained_node_is_ambiguous():
    builder, refs = _annotated(1)
    result = typecheck_constraints(builder, [], 1)
    assert [e.kind for e in result.errors] == [TcErrorKind.AMBIGUOUS]
    assert result.errors[0].pos == 0
    assert result.errors[0].index == refs[0]


def test_or_type_left_open_is_ambiguous():
    builder, refs = _annotated(1)
    i32 = builder.mk_primitive_type(TypeTag.I32)
    i64 = builder.mk_primitive_type(TypeTag.I64)
    any_int = builder.mk_type(TypeTag.OR, [i32, i64])
    result = typecheck_constraints(builder, [Constraint(refs[0], any_int, 0)], 1)
    assert [e.kind for e in result.errors] == [TcErrorKind.AMBIGUOUS]
    assert result.errors[0].index == any_int


def test_or_type_narrowed_by_constraint():
    builder, refs = _annotated(1)
    i32 = builder.mk_primitive_type(TypeTag.I32)
    i64 = builder.mk_primitive_type(TypeTag.I64)
    any_int = builder.mk_type(TypeTag.OR, [i32, i64])
    result = typecheck_constraints(
        builder, [Constraint(refs[0], any_int, 0), Constraint(refs[0], i32, 0)], 1
    )
    assert result.ok
    assert _render(result.types, 0) == "I32"


def test_infinite_type_reported():
    builder, refs = _annotated(1)
    lst = builder.mk_type_inline(TypeTag.LIST, refs[0], 0)
    result = typecheck_constraints(builder, [Constraint(refs[0], lst, 0)], 1)
    assert [e.kind for e in result.errors] == [TcErrorKind.INFINITE]
    assert result.errors[0].index == lst
    assert result.types.node_types is builder.substitutions


def test_check_ambiguities_clean_after_resolution():
    builder, refs = _annotated(2)
    boolean = builder.mk_primitive_type(TypeTag.BOOL)
    builder.substitutions[0] = boolean
    builder.substitutions[1] = refs[0]
    assert check_ambiguities(builder, 2) == []


def test_copy_type_function():
    old = TypeBuilder()
    i32 = old.mk_primitive_type(TypeTag.I32)
    boolean = old.mk_primitive_type(TypeTag.BOOL)
    fn = old.mk_type(TypeTag.FN, [i32, boolean])
    new = TypeBuilder()
    copied = copy_type(old, new, fn)
    assert format_type(new.types, new.inds, copied) == format_type(
        old.types, old.inds, fn
    )
    assert format_type(new.types, new.inds, copied) == "(Fn I32 -> Bool)"


def test_copy_type_tuple_of_function():
    old = TypeBuilder()
    i32 = old.mk_primitive_type(TypeTag.I32)
    boolean = old.mk_primitive_type(TypeTag.BOOL)
    fn = old.mk_type(TypeTag.FN, [i32])
    tup = old.mk_type_inline(TypeTag.TUP, fn, boolean)
    lst = old.mk_type_inline(TypeTag.LIST, tup, 0)
    new = TypeBuilder()
    copied = copy_type(old, new, lst)
    assert format_type(new.types, new.inds, copied) == format_type(
        old.types, old.inds, lst
    )


def test_copy_type_follows_substitutions():
    old, refs = _annotated(1)
    u8 = old.mk_primitive_type(TypeTag.U8)
    lst = old.mk_type_inline(TypeTag.LIST, refs[0], 0)
    old.substitutions[0] = u8
    new = TypeBuilder()
    copied = copy_type(old, new, lst)
    assert format_type(new.types, new.inds, copied) == "[U8]"
    assert all(t.tag != TypeTag.VAR for t in new.types)


def test_copy_type_unsubstituted_variable_raises():
    old, refs = _annotated(1)
    with pytest.raises(CompilerBug):
        copy_type(old, TypeBuilder(), refs[0])


def test_cleanup_drops_unused_types():
    builder, refs = _annotated(1)
    i32 = builder.mk_primitive_type(TypeTag.I32)
    builder.mk_primitive_type(TypeTag.I64)
    builder.mk_primitive_type(TypeTag.BOOL)
    builder.substitutions[0] = i32
    info = cleanup_types(builder, 1)
    assert info.type_amt == 1
    assert _render(info, 0) == "I32"
    assert len(info.node_types) == 1