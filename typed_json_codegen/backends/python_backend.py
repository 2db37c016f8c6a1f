"""
Python backend: dataclasses plus decode_*/encode_* conversion functions.

The generated module has no dependencies outside the standard library. A
union of several types becomes a frozen tagged class holding the ordinal of
the alternative (``which``) and its ``value``; ``{T, null}`` becomes
``T | None``. Decoding reads the output of ``json.loads``; encoding produces
values ``json.dumps`` accepts.
"""

from __future__ import annotations

import keyword
from typing import TYPE_CHECKING

from ..naming import Name, Namespace
from ..source import (
    ANY_TYPE_ISSUE_ANNOTATION,
    NULL_TYPE_ISSUE_ANNOTATION,
    Sourcelike,
    maybe_annotated,
)
from ..type_attributes import description_lines, property_description_lines
from ..type_graph import (
    ArrayType,
    ClassType,
    MapType,
    NamedType,
    Type,
    TypeKind,
    UnionType,
    check_union,
    is_named_type,
    match_type,
    nullable_from_union,
)
from ..utils import pascal_case, snake_case, string_escape
from .base import TargetBackend

if TYPE_CHECKING:
    from ..driver import RenderContext

# Names the generated module imports or defines besides its own types
RESERVED_MODULE_NAMES = [
    "annotations",
    "dataclass",
    "partial",
    "Any",
    "DecodeError",
    "bool",
    "int",
    "float",
    "str",
    "list",
    "dict",
    "isinstance",
]

# Same priority as the C++ backend: the first test that holds picks the alternative
UNION_PREDICATES: list[tuple[TypeKind, str]] = [
    (TypeKind.BOOL, "isinstance(obj, bool)"),
    (TypeKind.INTEGER, "isinstance(obj, int) and not isinstance(obj, bool)"),
    (TypeKind.DOUBLE, "isinstance(obj, (int, float)) and not isinstance(obj, bool)"),
    (TypeKind.STRING, "isinstance(obj, str)"),
    (TypeKind.CLASS, "isinstance(obj, dict)"),
    (TypeKind.MAP, "isinstance(obj, dict)"),
    (TypeKind.ARRAY, "isinstance(obj, list)"),
]

_PRIMITIVE_DECODERS = {
    TypeKind.ANY: "_identity",
    TypeKind.NULL: "_identity",
    TypeKind.BOOL: "_from_bool",
    TypeKind.INTEGER: "_from_int",
    TypeKind.DOUBLE: "_from_float",
    TypeKind.STRING: "_from_str",
}


def _is_permissive(t: Type) -> bool:
    """Whether a property of type ``t`` may be missing from its object."""
    if t.kind in (TypeKind.ANY, TypeKind.NULL):
        return True
    if isinstance(t, UnionType):
        has_null, _ = check_union(t)
        return has_null
    return False


class PythonBackend(TargetBackend):
    """Renders a single Python module."""

    language = "python"
    file_extension = "py"

    # Naming

    def forbidden_names_for_global_namespace(self) -> list[str]:
        return keyword.kwlist + RESERVED_MODULE_NAMES

    def forbidden_for_properties(
        self,
        class_type: ClassType,
        class_name: Name,
        global_namespace: Namespace,
    ) -> tuple[list[str | Name], list[Namespace]]:
        return list(keyword.kwlist), []

    def top_level_name_style(self, raw_name: str) -> str:
        return pascal_case(raw_name)

    def named_type_name_style(self, raw_name: str) -> str:
        return pascal_case(raw_name)

    def property_name_style(self, raw_name: str) -> str:
        return snake_case(raw_name)

    def named_type_for_top_level(self, t: Type) -> NamedType | None:
        if is_named_type(t):
            return t  # type: ignore[return-value]
        return None

    # Types

    def python_type(self, ctx: RenderContext, t: Type, with_issues: bool = True) -> Sourcelike:
        def union_type(u: UnionType) -> Sourcelike:
            nullable = nullable_from_union(u)
            if nullable is not None:
                return [self.python_type(ctx, nullable, with_issues), " | None"]
            has_null, _ = check_union(u)
            return [ctx.name_for_named_type(u), " | None" if has_null else ""]

        return match_type(
            t,
            any_type=lambda _: maybe_annotated(with_issues, ANY_TYPE_ISSUE_ANNOTATION, "Any"),
            null_type=lambda _: maybe_annotated(with_issues, NULL_TYPE_ISSUE_ANNOTATION, "Any"),
            bool_type=lambda _: "bool",
            integer_type=lambda _: "int",
            double_type=lambda _: "float",
            string_type=lambda _: "str",
            array_type=lambda a: ["list[", self.python_type(ctx, a.items, with_issues), "]"],
            class_type=lambda c: ctx.name_for_named_type(c),
            map_type=lambda m: ["dict[str, ", self.python_type(ctx, m.values, with_issues), "]"],
            union_type=union_type,
        )

    # Conversion expressions

    def _decode_call(self, ctx: RenderContext, t: Type) -> tuple[Sourcelike, Sourcelike | None]:
        """(function, leading argument) of the call that decodes a value into ``t``."""
        if t.kind in _PRIMITIVE_DECODERS:
            return _PRIMITIVE_DECODERS[t.kind], None
        if isinstance(t, ArrayType):
            return "_from_list", self._decoder(ctx, t.items)
        if isinstance(t, MapType):
            return "_from_dict", self._decoder(ctx, t.values)
        if isinstance(t, ClassType):
            return ["decode_", ctx.name_for_named_type(t)], None
        assert isinstance(t, UnionType)
        nullable = nullable_from_union(t)
        if nullable is not None:
            return "_from_optional", self._decoder(ctx, nullable)
        has_null, _ = check_union(t)
        decode = ["decode_", ctx.name_for_named_type(t)]
        return ("_from_optional", decode) if has_null else (decode, None)

    def _encode_call(
        self, ctx: RenderContext, t: Type
    ) -> tuple[Sourcelike, Sourcelike | None] | None:
        """Like _decode_call for encoding; None where the value is already JSON."""
        if t.kind in _PRIMITIVE_DECODERS:
            return None
        if isinstance(t, ArrayType):
            return "_to_list", self._encoder(ctx, t.items)
        if isinstance(t, MapType):
            return "_to_dict", self._encoder(ctx, t.values)
        if isinstance(t, ClassType):
            return ["encode_", ctx.name_for_named_type(t)], None
        assert isinstance(t, UnionType)
        nullable = nullable_from_union(t)
        if nullable is not None:
            return "_to_optional", self._encoder(ctx, nullable)
        has_null, _ = check_union(t)
        encode = ["encode_", ctx.name_for_named_type(t)]
        return ("_to_optional", encode) if has_null else (encode, None)

    def _decoder(self, ctx: RenderContext, t: Type) -> Sourcelike:
        function, argument = self._decode_call(ctx, t)
        if argument is None:
            return function
        return ["partial(", function, ", ", argument, ")"]

    def _encoder(self, ctx: RenderContext, t: Type) -> Sourcelike:
        call = self._encode_call(ctx, t)
        if call is None:
            return "_identity"
        function, argument = call
        if argument is None:
            return function
        return ["partial(", function, ", ", argument, ")"]

    def _decode(self, ctx: RenderContext, t: Type, value: Sourcelike) -> Sourcelike:
        function, argument = self._decode_call(ctx, t)
        if argument is None:
            return [function, "(", value, ")"]
        return [function, "(", argument, ", ", value, ")"]

    def _encode(self, ctx: RenderContext, t: Type, value: Sourcelike) -> Sourcelike:
        call = self._encode_call(ctx, t)
        if call is None:
            return value
        function, argument = call
        if argument is None:
            return [function, "(", value, ")"]
        return [function, "(", argument, ", ", value, ")"]

    # Declarations

    def _emit_docstring(self, ctx: RenderContext, lines: list[str]) -> None:
        if not lines:
            return
        escaped = [string_escape(line) for line in lines]
        if len(escaped) == 1:
            ctx.writer.emit_line('"""', escaped[0], '"""')
            return
        ctx.writer.emit_line('"""', escaped[0])
        for line in escaped[1:]:
            ctx.writer.emit_line(line)
        ctx.writer.emit_line('"""')

    def _emit_def_separator(self, ctx: RenderContext) -> None:
        ctx.writer.emit_newline()
        ctx.writer.emit_newline()

    def emit_preamble(self, ctx: RenderContext) -> None:
        top_level_names = [
            ctx.writer.sourcelike_to_string(ctx.top_level_name(b)) for b in ctx.top_levels
        ]
        ctx.writer.emit_multiline(
            self.prefix_template.render(
                add_generation_comment=self.config.add_generation_comment,
                top_level_names=top_level_names,
            )
        )

    def emit_class(self, ctx: RenderContext, class_type: ClassType, class_name: Name) -> None:
        self._emit_def_separator(ctx)
        ctx.writer.emit_line("@dataclass")
        ctx.writer.emit_line("class ", class_name, ":")
        with ctx.writer.indent():
            docstring = description_lines(class_type.attributes)
            properties = ctx.for_each_property(class_type)
            self._emit_docstring(ctx, docstring)
            if docstring and properties:
                ctx.writer.emit_newline()
            for name, json_name, t in properties:
                for line in property_description_lines(class_type.attributes, json_name):
                    ctx.writer.emit_line("#", " " + line if line else "")
                ctx.writer.emit_line(name, ": ", self.python_type(ctx, t))
            if not docstring and not properties:
                ctx.writer.emit_line("pass")

    def emit_union(self, ctx: RenderContext, union_type: UnionType, union_name: Name) -> None:
        _, non_nulls = check_union(union_type)
        self._emit_def_separator(ctx)
        ctx.writer.emit_line("@dataclass(frozen=True)")
        ctx.writer.emit_line("class ", union_name, ":")
        with ctx.writer.indent():
            docstring = description_lines(union_type.attributes)
            if docstring:
                self._emit_docstring(ctx, docstring)
                ctx.writer.emit_newline()
            positions = ", ".join(f"{i} = {t.kind.value}" for i, t in enumerate(non_nulls))
            ctx.writer.emit_line("# Position of the alternative held in value: ", positions)
            ctx.writer.emit_line("which: int")
            members = [self.python_type(ctx, t) for t in non_nulls]
            value_type: list[Sourcelike] = []
            for member in members:
                if value_type:
                    value_type.append(" | ")
                value_type.append(member)
            ctx.writer.emit_line("value: ", value_type)

    def emit_top_level_alias(self, ctx: RenderContext, t: Type, name: Name) -> None:
        self._emit_def_separator(ctx)
        ctx.writer.emit_line(name, " = ", self.python_type(ctx, t))

    # Serialization

    def emit_serializers(self, ctx: RenderContext) -> None:
        self._emit_def_separator(ctx)
        ctx.writer.emit_multiline(self.helpers_template.render())
        for c in ctx.classes:
            self._emit_class_functions(ctx, c)
        for u in ctx.unions:
            self._emit_union_functions(ctx, u)
        for binding in ctx.aliased_top_levels:
            self._emit_alias_functions(ctx, ctx.top_levels[binding], ctx.top_level_name(binding))

    def _emit_class_functions(self, ctx: RenderContext, c: ClassType) -> None:
        writer = ctx.writer
        class_name = ctx.name_for_named_type(c)
        properties = ctx.for_each_property(c)

        self._emit_def_separator(ctx)
        writer.emit_line("def decode_", class_name, "(obj: Any) -> ", class_name, ":")
        with writer.indent():
            writer.emit_line('_expect(isinstance(obj, dict), "an object", obj)')
            if not properties:
                writer.emit_line("return ", class_name, "()")
            else:
                writer.emit_line("return ", class_name, "(")
                with writer.indent():
                    for name, json_name, t in properties:
                        getter = "_get_permissive" if _is_permissive(t) else "_get_strict"
                        read = [getter, '(obj, "', string_escape(json_name), '")']
                        writer.emit_line(name, "=", self._decode(ctx, t, read), ",")
                writer.emit_line(")")

        self._emit_def_separator(ctx)
        writer.emit_line("def encode_", class_name, "(x: ", class_name, ") -> dict[str, Any]:")
        with writer.indent():
            if not properties:
                writer.emit_line("return {}")
                return
            writer.emit_line("return {")
            with writer.indent():
                for name, json_name, t in properties:
                    value = self._encode(ctx, t, ["x.", name])
                    writer.emit_line('"', string_escape(json_name), '": ', value, ",")
            writer.emit_line("}")

    def _emit_union_functions(self, ctx: RenderContext, u: UnionType) -> None:
        writer = ctx.writer
        union_name = ctx.name_for_named_type(u)
        _, non_nulls = check_union(u)

        self._emit_def_separator(ctx)
        writer.emit_line("def decode_", union_name, "(obj: Any) -> ", union_name, ":")
        with writer.indent():
            for kind, predicate in UNION_PREDICATES:
                which = next((i for i, t in enumerate(non_nulls) if t.kind == kind), None)
                if which is None:
                    continue
                writer.emit_line("if ", predicate, ":")
                with writer.indent():
                    value = self._decode(ctx, non_nulls[which], "obj")
                    writer.emit_line("return ", union_name, "(", str(which), ", ", value, ")")
            writer.emit_line('raise DecodeError("no known alternative matched")')

        self._emit_def_separator(ctx)
        writer.emit_line("def encode_", union_name, "(x: ", union_name, ") -> Any:")
        with writer.indent():
            for which, t in enumerate(non_nulls):
                writer.emit_line("if x.which == ", str(which), ":")
                with writer.indent():
                    writer.emit_line("return ", self._encode(ctx, t, "x.value"))

    def _emit_alias_functions(self, ctx: RenderContext, t: Type, name: Name) -> None:
        writer = ctx.writer

        self._emit_def_separator(ctx)
        writer.emit_line("def decode_", name, "(obj: Any) -> ", name, ":")
        with writer.indent():
            writer.emit_line("return ", self._decode(ctx, t, "obj"))

        self._emit_def_separator(ctx)
        writer.emit_line("def encode_", name, "(x: ", name, ") -> Any:")
        with writer.indent():
            writer.emit_line("return ", self._encode(ctx, t, "x"))
