import pytest

from typed_json_codegen.driver import generate
from typed_json_codegen.errors import PipelineInvariantViolation
from typed_json_codegen.type_graph import (
    ArrayType,
    ClassType,
    MapType,
    PrimitiveType,
    TypeKind,
    UnionType,
    any_type,
    bool_type,
    check_union,
    double_type,
    integer_type,
    is_named_type,
    iterate_types,
    match_type,
    named_types_in_dependency_order,
    null_type,
    nullable_from_union,
    remove_null_from_union,
    string_type,
)


def _kind_name(t):
    return match_type(
        t,
        any_type=lambda _: "any",
        null_type=lambda _: "null",
        bool_type=lambda _: "bool",
        integer_type=lambda _: "integer",
        double_type=lambda _: "double",
        string_type=lambda _: "string",
        array_type=lambda a: f"array of {_kind_name(a.items)}",
        class_type=lambda c: f"class {c.name}",
        map_type=lambda m: f"map of {_kind_name(m.values)}",
        union_type=lambda u: f"union {u.name}",
    )


def test_match_type_dispatches_on_every_kind():
    assert _kind_name(any_type()) == "any"
    assert _kind_name(null_type()) == "null"
    assert _kind_name(bool_type()) == "bool"
    assert _kind_name(integer_type()) == "integer"
    assert _kind_name(double_type()) == "double"
    assert _kind_name(string_type()) == "string"
    assert _kind_name(ArrayType(items=MapType(values=string_type()))) == "array of map of string"
    assert _kind_name(ClassType(name="c")) == "class c"
    assert _kind_name(UnionType(name="u", members=(integer_type(), null_type()))) == "union u"


def test_match_type_requires_every_handler():
    with pytest.raises(TypeError):
        match_type(string_type(), string_type=lambda _: "string")


def test_primitive_type_rejects_composite_kinds():
    with pytest.raises(ValueError):
        PrimitiveType(TypeKind.ARRAY)


def test_remove_null_from_union_keeps_member_order():
    union = UnionType(name="u", members=(string_type(), null_type(), integer_type()))

    has_null, non_nulls = remove_null_from_union(union)

    assert has_null
    assert [t.kind for t in non_nulls] == [TypeKind.STRING, TypeKind.INTEGER]


def test_nullable_from_union():
    inner = string_type()

    assert nullable_from_union(UnionType(name="u", members=(null_type(), inner))) is inner
    assert nullable_from_union(UnionType(name="u", members=(integer_type(), inner))) is None
    assert nullable_from_union(UnionType(name="u", members=(integer_type(), inner, null_type()))) is None


@pytest.mark.parametrize(
    "members, message",
    [
        ((null_type(), null_type(), string_type()), "2 null members"),
        ((null_type(),), "no non-null members"),
        ((), "no non-null members"),
        ((string_type(),), "single member"),
        ((any_type(), string_type()), "kind any"),
        ((UnionType(name="inner", members=(string_type(), null_type())), integer_type()), "kind union"),
        ((string_type(), string_type()), "more than one string"),
        ((ClassType(name="a"), ClassType(name="b")), "more than one class"),
    ],
)
def test_ill_formed_unions(members, message):
    with pytest.raises(PipelineInvariantViolation, match=message):
        check_union(UnionType(name="bad", members=members))


def test_ill_formed_union_fails_rendering():
    holder = ClassType(name="holder", properties={"x": UnionType(name="x", members=(string_type(),))})

    for language in ("cpp", "python"):
        with pytest.raises(PipelineInvariantViolation):
            generate({"holder": holder}, language)


def test_is_named_type():
    assert is_named_type(ClassType(name="c"))
    assert is_named_type(UnionType(name="u", members=(integer_type(), string_type())))
    assert not is_named_type(UnionType(name="u", members=(integer_type(), null_type())))
    assert not is_named_type(ArrayType(items=ClassType(name="c")))


def test_dependency_order_puts_references_first():
    leaf = ClassType(name="leaf", properties={"x": integer_type()})
    union = UnionType(name="either", members=(leaf, string_type()))
    middle = ClassType(name="middle", properties={"either": union, "leaves": MapType(values=leaf)})
    root = ClassType(name="root", properties={"middle": ArrayType(items=middle), "leaf": leaf})

    ordered = named_types_in_dependency_order([root])

    assert [t.name for t in ordered] == ["leaf", "either", "middle", "root"]


def test_dependency_order_follows_roots_and_breaks_cycles():
    node = ClassType(name="node")
    node.properties["next"] = UnionType(name="next", members=(node, null_type()))
    other = ClassType(name="other", properties={"node": node})

    ordered = named_types_in_dependency_order([other, node])

    assert [t.name for t in ordered] == ["node", "other"]


def test_iterate_types_visits_each_node_once():
    shared = string_type()
    root = ClassType(name="root", properties={"a": shared, "b": ArrayType(items=shared)})

    visited = list(iterate_types([root, root]))

    assert len(visited) == 3
    assert visited[0] is root


def test_types_compare_by_identity():
    assert string_type() != string_type()
    assert ClassType(name="same") != ClassType(name="same")
