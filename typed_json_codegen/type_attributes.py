"""
Type attributes: combinable metadata attached to type-graph nodes.

A bag of attributes maps an attribute kind to a value. Bags are keyed by the
kind's name so that two kind objects with the same name address the same slot,
which keeps attributes reachable when nodes are rebuilt elsewhere. The combine
function of every kind lives in a side registry keyed by that same name.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any, Generic, TypeVar

from .errors import UnmergeableAttributeCollision

T = TypeVar("T")

# Kind name -> combine function (None for kinds that must never be merged)
_COMBINERS: dict[str, Callable[[Any, Any], Any] | None] = {}


class TypeAttributes(Mapping[str, Any]):
    """Immutable mapping from attribute kind name to value."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Any] | None = None):
        self._entries: dict[str, Any] = dict(entries) if entries else {}

    def __getitem__(self, key: str | TypeAttributeKind[Any]) -> Any:
        return self._entries[_kind_name(key)]

    def __contains__(self, key: object) -> bool:
        if isinstance(key, TypeAttributeKind):
            key = key.name
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TypeAttributes({self._entries!r})"

    def _with(self, name: str, value: Any) -> TypeAttributes:
        entries = dict(self._entries)
        entries[name] = value
        return TypeAttributes(entries)

    def _without(self, name: str) -> TypeAttributes:
        if name not in self._entries:
            return self
        entries = dict(self._entries)
        del entries[name]
        return TypeAttributes(entries)


EMPTY_TYPE_ATTRIBUTES = TypeAttributes()


def _kind_name(key: str | TypeAttributeKind[Any]) -> str:
    return key.name if isinstance(key, TypeAttributeKind) else key


def _combine(name: str, a: Any, b: Any) -> Any:
    combiner = _COMBINERS.get(name)
    if combiner is None:
        raise UnmergeableAttributeCollision(f"Cannot combine type attribute {name}")
    return combiner(a, b)


class TypeAttributeKind(Generic[T]):
    """A typed metadata channel identified by its name.

    Args:
        name: Identity of the kind. Kinds with equal names are interchangeable.
        combine: Merge policy for two values of this kind. Without one, any
            merge raises UnmergeableAttributeCollision.

    Raises:
        ValueError: If a kind with this name was already created with a
            different combine function.
    """

    def __init__(self, name: str, combine: Callable[[T, T], T] | None = None):
        if name in _COMBINERS and _COMBINERS[name] is not combine:
            raise ValueError(
                f"Type attribute kind {name!r} already exists with a different combine function"
            )
        _COMBINERS[name] = combine
        self.name = name

    def combine(self, a: T, b: T) -> T:
        return _combine(self.name, a, b)

    def make_attributes(self, value: T) -> TypeAttributes:
        return TypeAttributes({self.name: value})

    def try_get_in_attributes(self, attributes: TypeAttributes) -> T | None:
        return attributes.get(self.name)

    def set_in_attributes(self, attributes: TypeAttributes, value: T) -> TypeAttributes:
        return attributes._with(self.name, value)

    def modify_in_attributes(
        self,
        attributes: TypeAttributes,
        modify: Callable[[T | None], T | None],
    ) -> TypeAttributes:
        """Replace this kind's slot with ``modify(current)``; ``None`` removes the slot."""
        modified = modify(self.try_get_in_attributes(attributes))
        if modified is None:
            return attributes._without(self.name)
        return self.set_in_attributes(attributes, modified)

    def set_default_in_attributes(
        self, attributes: TypeAttributes, make_default: Callable[[], T]
    ) -> TypeAttributes:
        if self.try_get_in_attributes(attributes) is not None:
            return attributes
        return self.modify_in_attributes(attributes, lambda _: make_default())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeAttributeKind):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"TypeAttributeKind({self.name!r})"


def combine_type_attributes(attribute_bags: Sequence[TypeAttributes]) -> TypeAttributes:
    """Merge bags left to right, combining values of kinds present in several bags."""
    if not attribute_bags:
        return EMPTY_TYPE_ATTRIBUTES
    first = attribute_bags[0]
    if len(attribute_bags) == 1:
        return first

    merged = dict(first.items())
    for bag in attribute_bags[1:]:
        for name, value in bag.items():
            if name in merged:
                merged[name] = _combine(name, merged[name], value)
            else:
                merged[name] = value
    return TypeAttributes(merged)


def _set_union(a: frozenset[str], b: frozenset[str]) -> frozenset[str]:
    return a | b


def _merge_property_descriptions(
    a: Mapping[str, frozenset[str]],
    b: Mapping[str, frozenset[str]],
) -> dict[str, frozenset[str]]:
    merged = dict(a)
    for name, descriptions in b.items():
        merged[name] = merged[name] | descriptions if name in merged else descriptions
    return merged


description_type_attribute_kind: TypeAttributeKind[frozenset[str]] = TypeAttributeKind(
    "description",
    _set_union,
)
property_descriptions_type_attribute_kind: TypeAttributeKind[
    dict[str, frozenset[str]]
] = TypeAttributeKind(
    "propertyDescriptions",
    _merge_property_descriptions,
)


def description_lines(attributes: TypeAttributes) -> list[str]:
    """Lines of the description attribute, in a stable order."""
    return _lines(description_type_attribute_kind.try_get_in_attributes(attributes))


def property_description_lines(attributes: TypeAttributes, json_name: str) -> list[str]:
    """Lines describing property ``json_name`` of a class with these attributes."""
    descriptions = property_descriptions_type_attribute_kind.try_get_in_attributes(attributes) or {}
    return _lines(descriptions.get(json_name))


def _lines(descriptions: frozenset[str] | None) -> list[str]:
    if not descriptions:
        return []
    return [
        line.rstrip()
        for description in sorted(descriptions)
        for line in description.splitlines()
    ]
