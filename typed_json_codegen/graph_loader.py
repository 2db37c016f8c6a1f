"""
Loader for type-graph description documents.

A description is a JSON object with two members:

- ``topLevels``: binding name -> type expression, in output order
- ``types`` (optional): type name -> type expression, for named types that are
  referenced from several places or from themselves

A type expression is one of:

- a primitive name: ``any``, ``null``, ``bool``, ``integer``, ``double``, ``string``
- the name of an entry of ``types``
- an object with a ``kind`` member:
    - ``{"kind": "array", "items": <expr>}``
    - ``{"kind": "map", "values": <expr>}``
    - ``{"kind": "class", "properties": {<key>: <expr or property>}}``
    - ``{"kind": "union", "members": [<expr>, ...]}``
    - ``{"kind": <primitive name>}``

Any of these objects may carry a ``description`` (a string or a list of
strings); classes and unions may carry a ``name``. A property is either a
type expression or ``{"type": <expr>, "description": ...}``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .errors import GraphFormatError
from .type_attributes import (
    description_type_attribute_kind,
    property_descriptions_type_attribute_kind,
)
from .type_graph import (
    PRIMITIVE_KINDS,
    ArrayType,
    ClassType,
    MapType,
    PrimitiveType,
    Type,
    TypeKind,
    UnionType,
)

logger = logging.getLogger(__name__)

_PRIMITIVE_NAMES = {kind.value: kind for kind in PRIMITIVE_KINDS}

_KIND_MEMBERS = {
    TypeKind.ARRAY: {"kind", "description", "items"},
    TypeKind.MAP: {"kind", "description", "values"},
    TypeKind.CLASS: {"kind", "description", "name", "properties"},
    TypeKind.UNION: {"kind", "description", "name", "members"},
}


def _descriptions(value: Any, where: str) -> frozenset[str]:
    if isinstance(value, str):
        return frozenset([value])
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return frozenset(value)
    raise GraphFormatError(f"{where}: description must be a string or a list of strings")


def _kind_of(expr: dict, where: str) -> TypeKind:
    kind = expr.get("kind")
    try:
        return TypeKind(kind)
    except ValueError:
        raise GraphFormatError(f"{where}: unknown kind {kind!r}") from None


class _GraphBuilder:
    """Turns one description document into type-graph nodes."""

    def __init__(self, definitions: dict[str, Any]):
        self.definitions = definitions
        self.named: dict[str, Type] = {}

    def declare(self) -> None:
        """Create a node per ``types`` entry so references can resolve before bodies do."""
        for name, expr in self.definitions.items():
            where = f"types.{name}"
            if name in _PRIMITIVE_NAMES:
                raise GraphFormatError(f"{where}: {name!r} is a primitive type name")
            if isinstance(expr, str):
                continue
            if not isinstance(expr, dict):
                raise GraphFormatError(f"{where}: expected a type expression object")
            self.named[name] = self._empty_node(expr, name, where)

        # Entries that only rename another type share that type's node
        for name, expr in self.definitions.items():
            if isinstance(expr, str):
                self.named[name] = self._resolve_alias(name, [])

    def define(self) -> None:
        for name, expr in self.definitions.items():
            if isinstance(expr, dict):
                self._fill(self.named[name], expr, name, f"types.{name}")

    def build(self, expr: Any, name_hint: str, where: str) -> Type:
        """Node for an expression that is not a ``types`` entry itself."""
        if isinstance(expr, str):
            return self._reference(expr, where)
        if not isinstance(expr, dict):
            raise GraphFormatError(f"{where}: expected a type name or a type expression object")
        node = self._empty_node(expr, name_hint, where)
        self._fill(node, expr, name_hint, where)
        return node

    def _reference(self, name: str, where: str) -> Type:
        if name in _PRIMITIVE_NAMES:
            return PrimitiveType(_PRIMITIVE_NAMES[name])
        if name not in self.named:
            raise GraphFormatError(f"{where}: reference to undefined type {name!r}")
        return self.named[name]

    def _resolve_alias(self, name: str, chain: list[str]) -> Type:
        if name in chain:
            raise GraphFormatError(f"types.{name}: circular alias through {' -> '.join(chain)}")
        target = self.definitions[name]
        if not isinstance(target, str):
            return self.named[name]
        if target in _PRIMITIVE_NAMES:
            return PrimitiveType(_PRIMITIVE_NAMES[target])
        if target not in self.definitions:
            raise GraphFormatError(f"types.{name}: reference to undefined type {target!r}")
        return self._resolve_alias(target, [*chain, name])

    def _empty_node(self, expr: dict, name_hint: str, where: str) -> Type:
        kind = _kind_of(expr, where)
        allowed = _KIND_MEMBERS.get(kind, {"kind", "description"})
        unknown = sorted(k for k in expr if k not in allowed)
        if unknown:
            raise GraphFormatError(
                f"{where}: unexpected member(s) {', '.join(unknown)} for kind {kind.value}"
            )

        if kind == TypeKind.ARRAY:
            return ArrayType()
        if kind == TypeKind.MAP:
            return MapType()
        if kind == TypeKind.CLASS:
            return ClassType(name=self._name(expr, name_hint, where))
        if kind == TypeKind.UNION:
            return UnionType(name=self._name(expr, name_hint, where))
        return PrimitiveType(kind)

    def _name(self, expr: dict, name_hint: str, where: str) -> str:
        name = expr.get("name", name_hint)
        if not isinstance(name, str):
            raise GraphFormatError(f"{where}: name must be a string")
        return name

    def _fill(self, node: Type, expr: dict, name_hint: str, where: str) -> None:
        if "description" in expr:
            descriptions = _descriptions(expr["description"], where)
            node.add_attributes(description_type_attribute_kind.make_attributes(descriptions))

        if isinstance(node, ArrayType):
            if "items" not in expr:
                raise GraphFormatError(f"{where}: array needs items")
            node.items = self.build(expr["items"], f"{name_hint}_element", f"{where}.items")
        elif isinstance(node, MapType):
            if "values" not in expr:
                raise GraphFormatError(f"{where}: map needs values")
            node.values = self.build(expr["values"], f"{name_hint}_value", f"{where}.values")
        elif isinstance(node, ClassType):
            self._fill_class(node, expr.get("properties", {}), where)
        elif isinstance(node, UnionType):
            members = expr.get("members")
            if not isinstance(members, list):
                raise GraphFormatError(f"{where}: union needs a list of members")
            node.members = tuple(
                self.build(m, name_hint, f"{where}.members[{i}]") for i, m in enumerate(members)
            )

    def _fill_class(self, node: ClassType, properties: Any, where: str) -> None:
        if not isinstance(properties, dict):
            raise GraphFormatError(f"{where}: properties must be an object")
        descriptions: dict[str, frozenset[str]] = {}
        for key, prop in properties.items():
            prop_where = f"{where}.properties.{key}"
            if isinstance(prop, dict) and "type" in prop:
                unknown = sorted(k for k in prop if k not in ("type", "description"))
                if unknown:
                    raise GraphFormatError(
                        f"{prop_where}: unexpected member(s) {', '.join(unknown)}"
                    )
                if "description" in prop:
                    descriptions[key] = _descriptions(prop["description"], prop_where)
                prop = prop["type"]
            node.properties[key] = self.build(prop, key, prop_where)
        if descriptions:
            attributes = property_descriptions_type_attribute_kind.make_attributes(descriptions)
            node.add_attributes(attributes)


def load_type_graph(document: Any) -> dict[str, Type]:
    """Build the top levels described by ``document``.

    Returns:
        Binding name -> root type, in document order

    Raises:
        GraphFormatError: If the document does not follow the description format
    """
    if not isinstance(document, dict):
        raise GraphFormatError("A graph description must be a JSON object")
    unknown = sorted(k for k in document if k not in ("topLevels", "types"))
    if unknown:
        raise GraphFormatError(f"Unexpected member(s) {', '.join(unknown)} in graph description")
    top_levels = document.get("topLevels")
    if not isinstance(top_levels, dict) or not top_levels:
        raise GraphFormatError("topLevels must be a non-empty object")
    definitions = document.get("types", {})
    if not isinstance(definitions, dict):
        raise GraphFormatError("types must be an object")

    builder = _GraphBuilder(definitions)
    builder.declare()
    builder.define()
    result = {
        binding: builder.build(expr, binding, f"topLevels.{binding}")
        for binding, expr in top_levels.items()
    }
    logger.debug("Loaded %d top levels and %d named definitions", len(result), len(definitions))
    return result


def load_type_graph_file(path: str | Path) -> dict[str, Type]:
    """Read a graph description from a JSON file and build its top levels."""
    with open(path, encoding="utf-8") as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise GraphFormatError(f"{path}: invalid JSON: {e}") from e
    return load_type_graph(document)
