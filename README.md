# tyunify

tyunify is the type-inference core of a small statically typed functional
language. You give it type constraints, and it solves them by unification. It
then checks the solution for ambiguous types and compacts the types that are
left.

## Modules

### `tyunify.types`

- `TypeTag` lists the type heads: `VAR`, `OR`, `UNIT`, `I8` … `U64`, `FN`,
  `BOOL`, `TUP`, `LIST`, `CALL`.
- `SubsRepr` and `type_repr(tag)` say how each head stores its sub-types:
  - `NONE` for no sub-types,
  - `ONE` for one inline sub-type,
  - `TWO` for two inline sub-types,
  - `EXTERNAL` for a run of entries in the builder's `inds` list.
- `Type` is a frozen node with the fields `tag`, `a` and `b`. The properties
  `type_var`, `sub_a`, `sub_b`, `start` and `amt` read those fields.
  `inline_types_eq(a, b)` compares two nodes field by field.
- `TypeBuilder` is a store that deduplicates types, so structurally equal
  non-variable types share one reference. Its members:
  - `mk_primitive_type(tag)`, `mk_type_inline(tag, sub_a, sub_b)` and
    `mk_type(tag, subs)` build types. Each raises `ValueError` when the tag has
    the wrong representation.
  - `mk_type_var(value)` always adds a new variable.
  - `sub_refs(t)` returns a node's sub-type references.
  - `contains_specific_typevar(root, var)` and
    `contains_unsubstituted_typevar(root, parse_node_amount)` search a type,
    following substitutions.
  - `substitutions` (also available as `node_types`) maps each type variable to
    a type reference.

### `tyunify.printing`

- `format_type(types, inds, root)` returns the type as text, for example
  `(Fn I32 -> Bool)`, `[U8]`, `(I8, I8)`, `(I8 or I16)` or `(TypeVar 3)`.
- `write_type(stream, types, inds, root)` writes the same text to a stream.
- `head_placeholder(tag)` names a type head. For tuples it gives `(a1, a2)`.

### `tyunify.unify`

- `annotate_nodes(builder, node_amount)` gives each parse node `i` a fresh type
  variable `i`. Each variable starts out substituted by itself.
- `Constraint(a, b, provenance)` requires the types at `a` and `b` to be equal.
  `swapped()` exchanges the two sides.
- `resolve_type(builder, root)` follows a substitution chain to its end and
  returns a `ResolvedType`. It also shortens the chain along the way.
- `solve_constraints(builder, constraints)` unifies the constraints in order
  and returns a list of `TcError`. Each error has a `TcErrorKind`: `CONFLICT`
  (with `expected` and `got`) or `INFINITE` (with `index`).
- `OR` types are narrowed to the alternatives that both sides share.

### `tyunify.check`

- `check_ambiguities(builder, parse_node_amount)` reports an `AMBIGUOUS` error
  for each parse node whose type still reaches a free variable or an `OR` type.
- `copy_type(old, new, root)` copies a type into another builder and resolves
  its variables on the way.
- `cleanup_types(builder, parse_node_amount)` copies only the types reachable
  from the parse nodes into a fresh store. It returns a `TypeInfo` with
  `types`, `inds`, `node_types` and `type_amt`.
- `typecheck_constraints(builder, constraints, parse_node_amount)` runs the
  whole pipeline and returns a `TcResult`:
  - `ok` is true when `errors` is empty.
  - On success, `types` holds the compacted types.
  - On failure, `types` holds the builder's state as it was when checking
    stopped.

### `tyunify.util`

This module holds small helpers:

- `multiset_eq`
- `find_range`
- `prefix`
- `count_char_occurrences`
- `join_paths`
- `get_cache_dir(program_name)`: creates and remembers
  `$XDG_CACHE_DIR/<name>` or `~/.cache/<name>`.
- `read_entire_file`: reads a UTF-8 file.
- `give_up(message)`: raises `CompilerBug`.

`CompilerBug` is also raised by the solver when two `OR` types meet with no
type variable to record the result. `copy_type` raises it when asked to copy a
type variable that has no substitution.

## Install

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
from tyunify.types import TypeBuilder, TypeTag
from tyunify.unify import Constraint, annotate_nodes
from tyunify.check import typecheck_constraints
from tyunify.printing import format_type

builder = TypeBuilder()
annotate_nodes(builder, 2)  # one type variable per parse node

i32 = builder.mk_primitive_type(TypeTag.I32)
fn = builder.mk_type(TypeTag.FN, [i32, i32])
node0, node1 = builder.substitutions[0], builder.substitutions[1]

constraints = [
    Constraint(node0, fn, provenance=0),
    Constraint(node1, i32, provenance=1),
]
result = typecheck_constraints(builder, constraints, 2)
assert result.ok
info = result.types
print(format_type(info.types, info.inds, info.node_types[0]))  # (Fn I32 -> I32)
```

## What this package does not do

tyunify works only on type references and constraints that you build
yourself. It has:

- no tokenizer or parser,
- no walk over syntax trees that would generate constraints from a program,
- no name resolution,
- no code generation,
- no command-line program.