"""
Type graph node definitions.

These nodes describe the shape of JSON data after inference and unification:
primitives, arrays, maps, classes with ordered properties, and unions. Classes
and unions are named types; nodes compare by identity so a graph may contain
cycles through class properties.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, TypeVar

from .errors import PipelineInvariantViolation
from .type_attributes import EMPTY_TYPE_ATTRIBUTES, TypeAttributes, combine_type_attributes

R = TypeVar("R")


class TypeKind(str, Enum):
    """Kind of a type-graph node."""

    ANY = "any"  # Unresolved shape
    NULL = "null"  # Only ever seen as null
    BOOL = "bool"
    INTEGER = "integer"
    DOUBLE = "double"
    STRING = "string"
    ARRAY = "array"  # list[T]
    MAP = "map"  # dict[str, T]
    CLASS = "class"  # Record with ordered properties
    UNION = "union"  # One of several member types


PRIMITIVE_KINDS = frozenset(
    {
        TypeKind.ANY,
        TypeKind.NULL,
        TypeKind.BOOL,
        TypeKind.INTEGER,
        TypeKind.DOUBLE,
        TypeKind.STRING,
    }
)


@dataclass(eq=False)
class Type:
    """Base class for all type-graph nodes."""

    attributes: TypeAttributes = field(default_factory=lambda: EMPTY_TYPE_ATTRIBUTES, kw_only=True)

    kind: ClassVar[TypeKind]

    def add_attributes(self, attributes: TypeAttributes) -> None:
        """Fold another attribute bag into this node's bag."""
        self.attributes = combine_type_attributes([self.attributes, attributes])


@dataclass(eq=False)
class PrimitiveType(Type):
    """any, null, bool, integer, double or string."""

    primitive_kind: TypeKind = TypeKind.ANY

    def __post_init__(self) -> None:
        if self.primitive_kind not in PRIMITIVE_KINDS:
            raise ValueError(f"{self.primitive_kind.value} is not a primitive kind")

    @property
    def kind(self) -> TypeKind:  # type: ignore[override]
        return self.primitive_kind


@dataclass(eq=False)
class ArrayType(Type):
    items: Type = field(default_factory=lambda: PrimitiveType(TypeKind.ANY))

    kind: ClassVar[TypeKind] = TypeKind.ARRAY


@dataclass(eq=False)
class MapType(Type):
    values: Type = field(default_factory=lambda: PrimitiveType(TypeKind.ANY))

    kind: ClassVar[TypeKind] = TypeKind.MAP


@dataclass(eq=False)
class ClassType(Type):
    """A record type. Property order is the JSON key order."""

    name: str = ""
    properties: dict[str, Type] = field(default_factory=dict)

    kind: ClassVar[TypeKind] = TypeKind.CLASS


@dataclass(eq=False)
class UnionType(Type):
    """A value of exactly one of the member types.

    Members keep first-appearance order; at most one member may be null.
    """

    name: str = ""
    members: tuple[Type, ...] = ()

    kind: ClassVar[TypeKind] = TypeKind.UNION


NamedType = ClassType | UnionType


def any_type() -> PrimitiveType:
    return PrimitiveType(TypeKind.ANY)


def null_type() -> PrimitiveType:
    return PrimitiveType(TypeKind.NULL)


def bool_type() -> PrimitiveType:
    return PrimitiveType(TypeKind.BOOL)


def integer_type() -> PrimitiveType:
    return PrimitiveType(TypeKind.INTEGER)


def double_type() -> PrimitiveType:
    return PrimitiveType(TypeKind.DOUBLE)


def string_type() -> PrimitiveType:
    return PrimitiveType(TypeKind.STRING)


def match_type(
    t: Type,
    *,
    any_type: Callable[[PrimitiveType], R],
    null_type: Callable[[PrimitiveType], R],
    bool_type: Callable[[PrimitiveType], R],
    integer_type: Callable[[PrimitiveType], R],
    double_type: Callable[[PrimitiveType], R],
    string_type: Callable[[PrimitiveType], R],
    array_type: Callable[[ArrayType], R],
    class_type: Callable[[ClassType], R],
    map_type: Callable[[MapType], R],
    union_type: Callable[[UnionType], R],
) -> R:
    """Dispatch on the kind of ``t``.

    Every kind needs a handler, so adding a kind breaks every call site
    until it is handled there too.
    """
    handlers: dict[TypeKind, Callable[..., R]] = {
        TypeKind.ANY: any_type,
        TypeKind.NULL: null_type,
        TypeKind.BOOL: bool_type,
        TypeKind.INTEGER: integer_type,
        TypeKind.DOUBLE: double_type,
        TypeKind.STRING: string_type,
        TypeKind.ARRAY: array_type,
        TypeKind.CLASS: class_type,
        TypeKind.MAP: map_type,
        TypeKind.UNION: union_type,
    }
    return handlers[t.kind](t)


def remove_null_from_union(union: UnionType) -> tuple[bool, tuple[Type, ...]]:
    """Split a union into (has_null, non-null members in member order)."""
    nulls = [m for m in union.members if m.kind == TypeKind.NULL]
    if len(nulls) > 1:
        raise PipelineInvariantViolation(f"Union {union.name!r} has {len(nulls)} null members")
    non_nulls = tuple(m for m in union.members if m.kind != TypeKind.NULL)
    return bool(nulls), non_nulls


def check_union(union: UnionType) -> tuple[bool, tuple[Type, ...]]:
    """Like remove_null_from_union, but also rejects shapes no backend can render."""
    has_null, non_nulls = remove_null_from_union(union)
    if not non_nulls:
        raise PipelineInvariantViolation(f"Union {union.name!r} has no non-null members")
    if len(non_nulls) == 1 and not has_null:
        raise PipelineInvariantViolation(f"Union {union.name!r} has a single member and no null")
    kinds: set[TypeKind] = set()
    for member in non_nulls:
        if member.kind in (TypeKind.ANY, TypeKind.UNION):
            raise PipelineInvariantViolation(
                f"Union {union.name!r} has a member of kind {member.kind.value}"
            )
        if member.kind in kinds:
            raise PipelineInvariantViolation(
                f"Union {union.name!r} has more than one {member.kind.value} member"
            )
        kinds.add(member.kind)
    return has_null, non_nulls


def nullable_from_union(union: UnionType) -> Type | None:
    """Return T for a union of exactly {T, null}, otherwise None."""
    has_null, non_nulls = check_union(union)
    if has_null and len(non_nulls) == 1:
        return non_nulls[0]
    return None


def is_named_type(t: Type) -> bool:
    """Classes and unions that need their own declaration."""
    if isinstance(t, ClassType):
        return True
    if isinstance(t, UnionType):
        return nullable_from_union(t) is None
    return False


def children(t: Type) -> tuple[Type, ...]:
    return match_type(
        t,
        any_type=lambda _: (),
        null_type=lambda _: (),
        bool_type=lambda _: (),
        integer_type=lambda _: (),
        double_type=lambda _: (),
        string_type=lambda _: (),
        array_type=lambda a: (a.items,),
        class_type=lambda c: tuple(c.properties.values()),
        map_type=lambda m: (m.values,),
        union_type=lambda u: u.members,
    )


def named_types_in_dependency_order(roots: Iterable[Type]) -> list[NamedType]:
    """Collect named types reachable from ``roots``, each after the named types it references.

    The walk is depth-first in root order, then property and member order, so
    the result only depends on the graph. Cycles are broken where a named type
    is first revisited.
    """
    ordered: list[NamedType] = []
    seen: set[int] = set()

    def visit(t: Type) -> None:
        if id(t) in seen:
            return
        seen.add(id(t))
        for child in children(t):
            visit(child)
        if is_named_type(t):
            ordered.append(t)  # type: ignore[arg-type]

    for root in roots:
        visit(root)
    return ordered


def iterate_types(roots: Iterable[Type]) -> Iterator[Type]:
    """Yield every node reachable from ``roots`` once, in depth-first pre-order."""
    seen: set[int] = set()
    stack = list(reversed(list(roots)))
    while stack:
        t = stack.pop()
        if id(t) in seen:
            continue
        seen.add(id(t))
        yield t
        stack.extend(reversed(children(t)))
