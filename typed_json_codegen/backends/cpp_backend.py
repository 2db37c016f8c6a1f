"""
C++ backend: structs plus nlohmann/json conversion functions.

Nullable values use boost::optional and unions of several types use
boost::variant. Declarations live in the configured namespace; the
``from_json``/``to_json`` functions live in ``namespace nlohmann`` and refer
back to the declarations by their qualified names.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

from ..naming import Name, Namespace
from ..source import (
    ANY_TYPE_ISSUE_ANNOTATION,
    NULL_TYPE_ISSUE_ANNOTATION,
    Sourcelike,
    SourceWriter,
    maybe_annotated,
)
from ..type_attributes import description_lines, property_description_lines
from ..type_graph import (
    ClassType,
    NamedType,
    Type,
    TypeKind,
    UnionType,
    check_union,
    is_named_type,
    match_type,
    nullable_from_union,
)
from ..utils import camel_case, pascal_case, string_escape
from .base import TargetBackend

if TYPE_CHECKING:
    from ..driver import RenderContext

CPP_KEYWORDS = [
    "alignas",
    "alignof",
    "and",
    "and_eq",
    "asm",
    "atomic_cancel",
    "atomic_commit",
    "atomic_noexcept",
    "auto",
    "bitand",
    "bitor",
    "bool",
    "break",
    "case",
    "catch",
    "char",
    "char16_t",
    "char32_t",
    "class",
    "compl",
    "concept",
    "const",
    "constexpr",
    "const_cast",
    "continue",
    "co_await",
    "co_return",
    "co_yield",
    "decltype",
    "default",
    "delete",
    "do",
    "double",
    "dynamic_cast",
    "else",
    "enum",
    "explicit",
    "export",
    "extern",
    "false",
    "float",
    "for",
    "friend",
    "goto",
    "if",
    "import",
    "inline",
    "int",
    "long",
    "module",
    "mutable",
    "namespace",
    "new",
    "noexcept",
    "not",
    "not_eq",
    "nullptr",
    "operator",
    "or",
    "or_eq",
    "private",
    "protected",
    "public",
    "register",
    "reinterpret_cast",
    "requires",
    "return",
    "short",
    "signed",
    "sizeof",
    "static",
    "static_assert",
    "static_cast",
    "struct",
    "switch",
    "synchronized",
    "template",
    "this",
    "thread_local",
    "throw",
    "true",
    "try",
    "typedef",
    "typeid",
    "typename",
    "union",
    "unsigned",
    "using",
    "virtual",
    "void",
    "volatile",
    "wchar_t",
    "while",
    "xor",
    "xor_eq",
    "override",
    "final",
    "transaction_safe",
    "transaction_safe_dynamic",
]

# Identifiers the generated header defines itself
RESERVED_HELPER_NAMES = ["json", "get_untyped", "get_optional"]

# Order in which a union's alternatives are tried when decoding. The first
# predicate that holds for the JSON value selects the alternative.
UNION_PREDICATES: list[tuple[TypeKind, str]] = [
    (TypeKind.BOOL, "is_boolean"),
    (TypeKind.INTEGER, "is_number_integer"),
    (TypeKind.DOUBLE, "is_number"),
    (TypeKind.STRING, "is_string"),
    (TypeKind.CLASS, "is_object"),
    (TypeKind.MAP, "is_object"),
    (TypeKind.ARRAY, "is_array"),
]

NO_ALTERNATIVE_MESSAGE = "no known alternative matched"


def _join(parts: Sequence[Sourcelike], separator: str) -> list[Sourcelike]:
    joined: list[Sourcelike] = []
    for part in parts:
        if joined:
            joined.append(separator)
        joined.append(part)
    return joined


def _comment(text: str) -> Sourcelike:
    """One line of description as a C++ comment."""
    if not text:
        return "//"
    # A line comment ending in a backslash (or its trigraph) swallows the next line
    if text.endswith("\\") or text.endswith("??/"):
        return ["/* ", text.replace("*/", "* /"), " */"]
    return ["// ", text]


@contextmanager
def _block(writer: SourceWriter, line: Sourcelike, with_semicolon: bool = False) -> Iterator[None]:
    writer.emit_line(line, " {")
    with writer.indent():
        yield
    writer.emit_line("};" if with_semicolon else "}")


class CppBackend(TargetBackend):
    """Renders a single C++ header."""

    language = "cpp"
    file_extension = "hpp"

    def _setup_templates(self) -> None:
        super()._setup_templates()
        self.optional_serializer_template = self.jinja_env.get_template(
            "optional_serializer.hpp.jinja2"
        )

    # Naming

    def forbidden_names_for_global_namespace(self) -> list[str]:
        return CPP_KEYWORDS + RESERVED_HELPER_NAMES

    def forbidden_for_properties(
        self,
        class_type: ClassType,
        class_name: Name,
        global_namespace: Namespace,
    ) -> tuple[list[str | Name], list[Namespace]]:
        # Fields share one pool with every type and top-level name
        return [], [global_namespace]

    def top_level_name_style(self, raw_name: str) -> str:
        return pascal_case(raw_name)

    def named_type_name_style(self, raw_name: str) -> str:
        return pascal_case(raw_name)

    def property_name_style(self, raw_name: str) -> str:
        return camel_case(raw_name)

    def named_type_for_top_level(self, t: Type) -> NamedType | None:
        if is_named_type(t):
            return t  # type: ignore[return-value]
        return None

    # Types

    def _our_qualifier(self, in_json_namespace: bool) -> Sourcelike:
        return [self.config.namespace, "::"] if in_json_namespace else []

    def _json_qualifier(self, in_json_namespace: bool) -> Sourcelike:
        return [] if in_json_namespace else ["nlohmann::"]

    def cpp_type(
        self,
        ctx: RenderContext,
        t: Type,
        in_json_namespace: bool,
        with_issues: bool,
    ) -> Sourcelike:
        """The C++ spelling of ``t``.

        Args:
            ctx: Current render
            t: Type to spell
            in_json_namespace: Spell it for use inside ``namespace nlohmann``,
                where generated types need their namespace qualifier
            with_issues: Annotate any and null types so they show up as diagnostics
        """

        def union_type(u: UnionType) -> Sourcelike:
            nullable = nullable_from_union(u)
            if nullable is None:
                return [self._our_qualifier(in_json_namespace), ctx.name_for_named_type(u)]
            inner = self.cpp_type(ctx, nullable, in_json_namespace, with_issues)
            return ["boost::optional<", inner, ">"]

        return match_type(
            t,
            any_type=lambda _: maybe_annotated(
                with_issues,
                ANY_TYPE_ISSUE_ANNOTATION,
                [self._json_qualifier(in_json_namespace), "json"],
            ),
            null_type=lambda _: maybe_annotated(
                with_issues,
                NULL_TYPE_ISSUE_ANNOTATION,
                [self._json_qualifier(in_json_namespace), "json"],
            ),
            bool_type=lambda _: "bool",
            integer_type=lambda _: "int64_t",
            double_type=lambda _: "double",
            string_type=lambda _: "std::string",
            array_type=lambda a: [
                "std::vector<",
                self.cpp_type(ctx, a.items, in_json_namespace, with_issues),
                ">",
            ],
            class_type=lambda c: [
                "struct ",
                self._our_qualifier(in_json_namespace),
                ctx.name_for_named_type(c),
            ],
            map_type=lambda m: [
                "std::map<std::string, ",
                self.cpp_type(ctx, m.values, in_json_namespace, with_issues),
                ">",
            ],
            union_type=union_type,
        )

    def _cpp_type_in_optional(
        self,
        ctx: RenderContext,
        non_nulls: Sequence[Type],
        in_json_namespace: bool,
        with_issues: bool,
    ) -> Sourcelike:
        if len(non_nulls) == 1:
            return self.cpp_type(ctx, non_nulls[0], in_json_namespace, with_issues)
        members = [self.cpp_type(ctx, t, in_json_namespace, with_issues) for t in non_nulls]
        return ["boost::variant<", _join(members, ", "), ">"]

    def _variant_type(
        self,
        ctx: RenderContext,
        u: UnionType,
        in_json_namespace: bool,
    ) -> Sourcelike:
        has_null, non_nulls = check_union(u)
        variant = self._cpp_type_in_optional(ctx, non_nulls, in_json_namespace, True)
        if not has_null:
            return variant
        return ["boost::optional<", variant, ">"]

    # Declarations

    def _emit_description(self, ctx: RenderContext, lines: list[str]) -> None:
        for line in lines:
            ctx.writer.emit_line(_comment(line))

    def emit_preamble(self, ctx: RenderContext) -> None:
        top_level_names = [
            ctx.writer.sourcelike_to_string(ctx.top_level_name(b)) for b in ctx.top_levels
        ]
        ctx.writer.emit_multiline(
            self.prefix_template.render(
                add_generation_comment=self.config.add_generation_comment,
                namespace=self.config.namespace,
                top_level_names=top_level_names,
                have_unions=ctx.have_unions,
                have_named_unions=ctx.have_named_unions,
            )
        )
        ctx.writer.emit_newline()
        ctx.writer.emit_line("namespace ", self.config.namespace, " {")
        ctx.writer.emit_line("using nlohmann::json;")

    def emit_class(self, ctx: RenderContext, class_type: ClassType, class_name: Name) -> None:
        ctx.writer.emit_newline()
        self._emit_description(ctx, description_lines(class_type.attributes))
        with _block(ctx.writer, ["struct ", class_name], with_semicolon=True):
            for name, json_name, t in ctx.for_each_property(class_type):
                lines = property_description_lines(class_type.attributes, json_name)
                self._emit_description(ctx, lines)
                ctx.writer.emit_line(self.cpp_type(ctx, t, False, True), " ", name, ";")

    def emit_union(self, ctx: RenderContext, union_type: UnionType, union_name: Name) -> None:
        ctx.writer.emit_newline()
        self._emit_description(ctx, description_lines(union_type.attributes))
        variant = self._variant_type(ctx, union_type, False)
        ctx.writer.emit_line("typedef ", variant, " ", union_name, ";")

    def emit_top_level_alias(self, ctx: RenderContext, t: Type, name: Name) -> None:
        ctx.writer.emit_newline()
        ctx.writer.emit_line("typedef ", self.cpp_type(ctx, t, False, True), " ", name, ";")

    # Serialization

    def _unique_variants(self, ctx: RenderContext) -> list[tuple[Sourcelike, tuple[Type, ...]]]:
        """(variant type, alternatives) per distinct variant, in first-use order."""
        variants: dict[str, tuple[Sourcelike, tuple[Type, ...]]] = {}
        for u in ctx.unions:
            _, non_nulls = check_union(u)
            variant = self._cpp_type_in_optional(ctx, non_nulls, True, False)
            variants.setdefault(ctx.writer.sourcelike_to_string(variant), (variant, non_nulls))
        return list(variants.values())

    def emit_serializers(self, ctx: RenderContext) -> None:
        writer = ctx.writer
        writer.emit_newline()
        writer.emit_multiline(self.helpers_template.render(have_unions=ctx.have_unions))
        writer.emit_line("} // namespace ", self.config.namespace)
        writer.emit_newline()
        writer.emit_line("namespace nlohmann {")
        if ctx.have_unions:
            writer.emit_newline()
            writer.emit_multiline(self.optional_serializer_template.render())

        variants = self._unique_variants(ctx)
        self._emit_forward_declarations(ctx, variants)
        for c in ctx.classes:
            writer.emit_newline()
            self._emit_class_functions(ctx, c)
        for variant, alternatives in variants:
            writer.emit_newline()
            self._emit_variant_functions(ctx, variant, alternatives)
        writer.emit_line("} // namespace nlohmann")

    def _emit_forward_declarations(
        self,
        ctx: RenderContext,
        variants: list[tuple[Sourcelike, tuple[Type, ...]]],
    ) -> None:
        parameter_types = [self.cpp_type(ctx, c, True, False) for c in ctx.classes]
        parameter_types += [variant for variant, _ in variants]
        if not parameter_types:
            return
        ctx.writer.emit_newline()
        for parameter_type in parameter_types:
            ctx.writer.emit_line(
                "inline void from_json(const json & _j, ", parameter_type, " & _x);"
            )
            ctx.writer.emit_line("inline void to_json(json & _j, const ", parameter_type, " & _x);")

    def _emit_class_functions(self, ctx: RenderContext, c: ClassType) -> None:
        writer = ctx.writer
        our_qualifier = self._our_qualifier(True)
        class_type = self.cpp_type(ctx, c, True, False)
        properties = ctx.for_each_property(c)

        with _block(writer, ["inline void from_json(const json & _j, ", class_type, " & _x)"]):
            for name, json_name, t in properties:
                key = string_escape(json_name)
                if isinstance(t, UnionType):
                    has_null, non_nulls = check_union(t)
                    if has_null:
                        writer.emit_line(
                            "_x.",
                            name,
                            " = ",
                            our_qualifier,
                            "get_optional<",
                            self._cpp_type_in_optional(ctx, non_nulls, True, False),
                            '>(_j, "',
                            key,
                            '");',
                        )
                        continue
                if t.kind in (TypeKind.ANY, TypeKind.NULL):
                    writer.emit_line(
                        "_x.", name, " = ", our_qualifier, 'get_untyped(_j, "', key, '");'
                    )
                    continue
                property_type = self.cpp_type(ctx, t, True, False)
                writer.emit_line("_x.", name, ' = _j.at("', key, '").get<', property_type, ">();")

        writer.emit_newline()
        with _block(writer, ["inline void to_json(json & _j, const ", class_type, " & _x)"]):
            if not properties:
                writer.emit_line("_j = json::object();")
                return
            pairs = [
                ['{"', string_escape(json_name), '", _x.', name, "}"]
                for name, json_name, _ in properties
            ]
            writer.emit_line("_j = json{", _join(pairs, ", "), "};")

    def _emit_variant_functions(
        self,
        ctx: RenderContext,
        variant: Sourcelike,
        alternatives: tuple[Type, ...],
    ) -> None:
        writer = ctx.writer

        with _block(writer, ["inline void from_json(const json & _j, ", variant, " & _x)"]):
            keyword = "if"
            for kind, predicate in UNION_PREDICATES:
                t = next((t for t in alternatives if t.kind == kind), None)
                if t is None:
                    continue
                writer.emit_line(keyword, " (_j.", predicate, "())")
                with writer.indent():
                    writer.emit_line("_x = _j.get<", self.cpp_type(ctx, t, True, False), ">();")
                keyword = "else if"
            writer.emit_line(f'else throw std::runtime_error("{NO_ALTERNATIVE_MESSAGE}");')

        writer.emit_newline()
        with _block(writer, ["inline void to_json(json & _j, const ", variant, " & _x)"]):
            with _block(writer, "switch (_x.which())"):
                for i, t in enumerate(alternatives):
                    writer.emit_line("case ", str(i), ":")
                    with writer.indent():
                        alternative = self.cpp_type(ctx, t, True, False)
                        writer.emit_line("_j = boost::get<", alternative, ">(_x);")
                        writer.emit_line("break;")
