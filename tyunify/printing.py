"""Rendering types as text."""

from __future__ import annotations

import io
from collections.abc import Iterator, Sequence
from typing import TextIO

from tyunify.types import SubsRepr, Type, TypeTag, type_repr

_HEADS: dict[TypeTag, str] = {
    TypeTag.OR: "OR",
    TypeTag.UNIT: "()",
    TypeTag.I8: "I8",
    TypeTag.U8: "U8",
    TypeTag.I16: "I16",
    TypeTag.U16: "U16",
    TypeTag.I32: "I32",
    TypeTag.U32: "U32",
    TypeTag.I64: "I64",
    TypeTag.U64: "U64",
    TypeTag.VAR: "TypeVar",
    TypeTag.BOOL: "Bool",
    TypeTag.FN: "Fn",
    TypeTag.TUP: "Tuple",
    TypeTag.LIST: "List",
    TypeTag.CALL: "Call",
}


def head_placeholder(tag: TypeTag | int) -> str:
    """Describe a type head, with placeholders where it has parameters."""
    tag = TypeTag(tag)
    if tag == TypeTag.TUP:
        return "(a1, a2)"
    return _HEADS[tag]


def _expand(node: Type, inds: Sequence[int]) -> tuple[str, list[str | int]]:
    tag = node.tag
    if tag == TypeTag.VAR:
        return f"(TypeVar {node.type_var})", []
    if tag == TypeTag.OR:
        subs = list(inds[node.start : node.start + node.amt])
        rest: list[str | int] = [subs[0]] if subs else []
        for sub in subs[1:]:
            rest.extend((" or ", sub))
        rest.append(")")
        return "(", rest
    if tag == TypeTag.FN:
        subs = list(inds[node.start : node.start + node.amt])
        rest = []
        for param in subs[:-1]:
            rest.extend((param, " -> "))
        rest.extend((subs[-1], ")"))
        return "(Fn ", rest
    if tag == TypeTag.TUP:
        return "(", [node.sub_a, ", ", node.sub_b, ")"]
    if tag == TypeTag.LIST:
        return "[", [node.sub_a, "]"]
    if type_repr(tag) is not SubsRepr.NONE:
        raise ValueError(f"cannot print a {tag.name} type")
    return _HEADS[tag], []


def _pieces(types: Sequence[Type], inds: Sequence[int], root: int) -> Iterator[str]:
    stack: list[str | int] = [root]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            yield item
            continue
        head, rest = _expand(types[item], inds)
        yield head
        stack.extend(reversed(rest))


def write_type(stream: TextIO, types: Sequence[Type], inds: Sequence[int], root: int) -> None:
    """Write the type at ``root`` to ``stream``."""
    for piece in _pieces(types, inds, root):
        stream.write(piece)


def format_type(types: Sequence[Type], inds: Sequence[int], root: int) -> str:
    """Return the type at ``root`` as text."""
    out = io.StringIO()
    write_type(out, types, inds, root)
    return out.getvalue()


__all__ = ["format_type", "head_placeholder", "write_type"]