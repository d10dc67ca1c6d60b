"""Type representation and a hash-consing type builder."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum


class TypeTag(IntEnum):
    """Type heads, ordered so that constraints are easy to check."""

    VAR = 0
    OR = 1
    UNIT = 2
    I8 = 3
    U8 = 4
    I16 = 5
    U16 = 6
    I32 = 7
    U32 = 8
    I64 = 9
    U64 = 10
    FN = 11
    BOOL = 12
    TUP = 13
    LIST = 14
    CALL = 15


class SubsRepr(Enum):
    """How a type node stores its sub-types."""

    NONE = "none"
    ONE = "one"
    TWO = "two"
    EXTERNAL = "external"


_REPRS: dict[TypeTag, SubsRepr] = {
    TypeTag.VAR: SubsRepr.NONE,
    TypeTag.UNIT: SubsRepr.NONE,
    TypeTag.I8: SubsRepr.NONE,
    TypeTag.U8: SubsRepr.NONE,
    TypeTag.I16: SubsRepr.NONE,
    TypeTag.U16: SubsRepr.NONE,
    TypeTag.I32: SubsRepr.NONE,
    TypeTag.U32: SubsRepr.NONE,
    TypeTag.I64: SubsRepr.NONE,
    TypeTag.U64: SubsRepr.NONE,
    TypeTag.BOOL: SubsRepr.NONE,
    TypeTag.LIST: SubsRepr.ONE,
    TypeTag.CALL: SubsRepr.TWO,
    TypeTag.TUP: SubsRepr.TWO,
    TypeTag.OR: SubsRepr.EXTERNAL,
    TypeTag.FN: SubsRepr.EXTERNAL,
}


def type_repr(tag: TypeTag | int) -> SubsRepr:
    """Return how types with head ``tag`` store their sub-types."""
    return _REPRS[TypeTag(tag)]


@dataclass(frozen=True)
class Type:
    """A type node.

    ``a`` and ``b`` mean, depending on the tag's representation: the type
    variable (VAR), the single sub-type (ONE), the two sub-types (TWO), or
    the start and amount of the sub-types in the index array (EXTERNAL).
    """

    tag: TypeTag
    a: int = 0
    b: int = 0

    @property
    def type_var(self) -> int:
        return self.a

    @property
    def sub_a(self) -> int:
        return self.a

    @property
    def sub_b(self) -> int:
        return self.b

    @property
    def start(self) -> int:
        return self.a

    @property
    def amt(self) -> int:
        return self.b


def inline_types_eq(a: Type, b: Type) -> bool:
    """Compare two type nodes field by field, without following references."""
    return a.tag == b.tag and a.a == b.a and a.b == b.b


class TypeBuilder:
    """Stores types, deduplicating every non-variable type it builds."""

    def __init__(self, types: Iterable[Type] = (), inds: Iterable[int] = ()) -> None:
        self.types: list[Type] = []
        self.inds: list[int] = list(inds)
        self.substitutions: list[int] = []
        self._index: dict[tuple, int] = {}
        for t in types:
            self.types.append(t)
            if t.tag != TypeTag.VAR:
                self._index.setdefault(self._key_of(t), len(self.types) - 1)

    @property
    def node_types(self) -> list[int]:
        """The same list as ``substitutions``, seen as one type per parse node."""
        return self.substitutions

    @node_types.setter
    def node_types(self, value: list[int]) -> None:
        self.substitutions = value

    def _key_of(self, t: Type) -> tuple:
        repr_ = type_repr(t.tag)
        if repr_ is SubsRepr.NONE:
            return (t.tag,)
        if repr_ is SubsRepr.ONE:
            return (t.tag, t.a)
        if repr_ is SubsRepr.TWO:
            return (t.tag, t.a, t.b)
        return (t.tag, tuple(self.inds[t.start : t.start + t.amt]))

    def _intern(self, key: tuple, make: Type) -> int:
        found = self._index.get(key)
        if found is not None:
            return found
        self.types.append(make)
        ref = len(self.types) - 1
        self._index[key] = ref
        return ref

    def mk_primitive_type(self, tag: TypeTag | int) -> int:
        """Return the reference of the primitive type ``tag``."""
        tag = TypeTag(tag)
        if type_repr(tag) is not SubsRepr.NONE:
            raise ValueError(f"{tag.name} is not a primitive type")
        return self._intern((tag,), Type(tag, 0, 0))

    def mk_type_inline(self, tag: TypeTag | int, sub_a: int, sub_b: int) -> int:
        """Return the reference of a one- or two-sub-type node."""
        tag = TypeTag(tag)
        repr_ = type_repr(tag)
        if repr_ is SubsRepr.ONE:
            key: tuple = (tag, sub_a)
        elif repr_ is SubsRepr.TWO:
            key = (tag, sub_a, sub_b)
        else:
            raise ValueError(f"{tag.name} does not store its sub-types inline")
        return self._intern(key, Type(tag, sub_a, sub_b))

    def mk_type(self, tag: TypeTag | int, subs: Iterable[int]) -> int:
        """Return the reference of a node whose sub-types live in ``inds``."""
        tag = TypeTag(tag)
        if type_repr(tag) is not SubsRepr.EXTERNAL:
            raise ValueError(f"{tag.name} does not store its sub-types externally")
        subs = tuple(subs)
        key = (tag, subs)
        found = self._index.get(key)
        if found is not None:
            return found
        self.inds.extend(subs)
        self.types.append(Type(tag, len(self.inds) - len(subs), len(subs)))
        ref = len(self.types) - 1
        self._index[key] = ref
        return ref

    def mk_type_var(self, value: int) -> int:
        """Add a new type variable node; variables are never deduplicated."""
        self.types.append(Type(TypeTag.VAR, value, 0))
        return len(self.types) - 1

    def sub_refs(self, t: Type) -> list[int]:
        """Sub-type references of ``t`` in the order they go onto a work stack.

        Popping from a stack extended with the result visits the first of a
        pair first, and external sub-types from last to first.
        """
        repr_ = type_repr(t.tag)
        if repr_ is SubsRepr.NONE:
            return []
        if repr_ is SubsRepr.TWO:
            return [t.b, t.a]
        if repr_ is SubsRepr.ONE:
            return [t.a]
        return self.inds[t.start : t.start + t.amt]

    def _contains_var_by(self, root: int, step) -> bool:
        stack = [root]
        while stack:
            node = self.types[stack.pop()]
            if node.tag == TypeTag.VAR:
                exit_early, following = step(node.type_var)
                if exit_early:
                    return True
                if following is not None:
                    stack.append(following)
            stack.extend(self.sub_refs(node))
        return False

    def contains_specific_typevar(self, root: int, var: int) -> bool:
        """Return True if ``var`` occurs in ``root``, following substitutions."""

        def step(a: int) -> tuple[bool, int | None]:
            if a == var:
                return True, None
            ref = self.substitutions[a]
            t = self.types[ref]
            substituted = t.tag != TypeTag.VAR or t.type_var != a
            return False, ref if substituted else None

        return self._contains_var_by(root, step)

    def contains_unsubstituted_typevar(self, root: int, parse_node_amount: int) -> bool:
        """Return True if ``root`` reaches a type variable with no substitution."""

        def step(a: int) -> tuple[bool, int | None]:
            ref = self.substitutions[a]
            t = self.types[ref]
            is_node_var = a < parse_node_amount
            if t.tag == TypeTag.VAR and (a == t.type_var or not is_node_var or a == root):
                return True, None
            return False, ref

        return self._contains_var_by(root, step)


def _as_sequence(values: Iterable[int]) -> Sequence[int]:
    return values if isinstance(values, Sequence) else list(values)


__all__ = [
    "SubsRepr",
    "Type",
    "TypeBuilder",
    "TypeTag",
    "inline_types_eq",
    "type_repr",
]