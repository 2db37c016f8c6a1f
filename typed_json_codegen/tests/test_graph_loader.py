import json
from pathlib import Path

import pytest

from typed_json_codegen.errors import GraphFormatError
from typed_json_codegen.graph_loader import load_type_graph, load_type_graph_file
from typed_json_codegen.type_attributes import (
    description_type_attribute_kind,
    property_descriptions_type_attribute_kind,
)
from typed_json_codegen.type_graph import ArrayType, ClassType, MapType, TypeKind, UnionType

GRAPHS_PATH = Path(__file__).parent / "test_data" / "graphs"


def test_load_welcome(load_graph):
    top_levels = load_graph("welcome")

    assert list(top_levels) == ["Welcome"]
    welcome = top_levels["Welcome"]
    assert isinstance(welcome, ClassType)
    assert welcome.name == "Welcome"
    assert list(welcome.properties) == ["greeting", "count", "value", "extra"]
    assert [t.kind for t in welcome.properties.values()] == [
        TypeKind.STRING,
        TypeKind.INTEGER,
        TypeKind.UNION,
        TypeKind.ANY,
    ]
    value = welcome.properties["value"]
    assert isinstance(value, UnionType)
    assert value.name == "Value"
    assert [t.kind for t in value.members] == [TypeKind.INTEGER, TypeKind.STRING, TypeKind.ARRAY, TypeKind.NULL]


def test_descriptions_become_attributes(load_graph):
    welcome = load_graph("welcome")["Welcome"]

    assert description_type_attribute_kind.try_get_in_attributes(welcome.attributes) == frozenset({"A greeting"})
    assert property_descriptions_type_attribute_kind.try_get_in_attributes(welcome.attributes) == {
        "count": frozenset({"How many times"}),
    }


def test_references_share_nodes(load_graph):
    catalog = load_graph("catalog")["catalog"]
    items = catalog.properties["items"]
    featured = catalog.properties["featured"]

    assert isinstance(items, MapType)
    assert isinstance(featured, ArrayType)
    assert items.values is featured.items
    assert items.values.properties["related"].items is items.values


def test_inline_names_default_to_their_position():
    top_levels = load_type_graph(
        {"topLevels": {"order": {"kind": "class", "properties": {"ship_to": {"kind": "class", "properties": {}}}}}}
    )

    order = top_levels["order"]
    assert order.name == "order"
    assert order.properties["ship_to"].name == "ship_to"


def test_aliases_between_types():
    top_levels = load_type_graph(
        {
            "topLevels": {"a": "First"},
            "types": {"First": "Second", "Second": {"kind": "class", "name": "second", "properties": {}}},
        }
    )

    assert top_levels["a"].name == "second"


def test_load_from_file():
    top_levels = load_type_graph_file(GRAPHS_PATH / "welcome.json")

    assert list(top_levels) == ["Welcome"]


def test_invalid_json_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(GraphFormatError, match="invalid JSON"):
        load_type_graph_file(path)


@pytest.mark.parametrize(
    "document, message",
    [
        ([], "must be a JSON object"),
        ({}, "topLevels must be a non-empty object"),
        ({"topLevels": {}}, "topLevels must be a non-empty object"),
        ({"topLevels": {"a": "string"}, "extra": 1}, "Unexpected member"),
        ({"topLevels": {"a": "string"}, "types": []}, "types must be an object"),
        ({"topLevels": {"a": "Missing"}}, "undefined type 'Missing'"),
        ({"topLevels": {"a": {"kind": "tuple"}}}, "unknown kind 'tuple'"),
        ({"topLevels": {"a": {"kind": "array"}}}, "array needs items"),
        ({"topLevels": {"a": {"kind": "map"}}}, "map needs values"),
        ({"topLevels": {"a": {"kind": "union", "members": "string"}}}, "list of members"),
        ({"topLevels": {"a": {"kind": "class", "properties": []}}}, "properties must be an object"),
        ({"topLevels": {"a": {"kind": "class", "items": "string"}}}, "unexpected member"),
        ({"topLevels": {"a": {"kind": "string", "description": 3}}}, "description must be"),
        ({"topLevels": {"a": 3}}, "expected a type name"),
        ({"topLevels": {"a": "string"}, "types": {"string": {"kind": "class"}}}, "primitive type name"),
        ({"topLevels": {"a": "A"}, "types": {"A": "B", "B": "A"}}, "circular alias"),
        ({"topLevels": {"a": "A"}, "types": {"A": "Nowhere"}}, "undefined type 'Nowhere'"),
        ({"topLevels": {"a": "A"}, "types": {"A": 5}}, "expected a type expression object"),
        (
            {"topLevels": {"a": {"kind": "class", "properties": {"p": {"type": "string", "default": 1}}}}},
            "unexpected member",
        ),
    ],
)
def test_malformed_documents(document, message):
    with pytest.raises(GraphFormatError, match=message):
        load_type_graph(document)


def test_documents_are_plain_json(tmp_path, load_graph):
    path = tmp_path / "copy.json"
    with open(GRAPHS_PATH / "catalog.json") as f:
        document = json.load(f)
    path.write_text(json.dumps(document))

    assert list(load_type_graph_file(path)) == list(load_graph("catalog"))
