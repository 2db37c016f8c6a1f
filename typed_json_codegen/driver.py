"""
Rendering driver.

Builds the per-render context (dependency order and names) and invokes the
backend callbacks in their fixed sequence:

1. Preamble
2. Named classes and unions, interleaved so nothing is referenced before it is declared
3. Top-level aliases
4. Serialization code
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from .backends import get_backend
from .backends.base import TargetBackend
from .config import CodeGeneratorConfig
from .naming import Name, Namespace, assign_names
from .source import Diagnostic, SourceWriter
from .type_graph import (
    ClassType,
    NamedType,
    Type,
    UnionType,
    iterate_types,
    named_types_in_dependency_order,
)

logger = logging.getLogger(__name__)


@dataclass
class RenderResult:
    """Generated source plus the issues found while generating it."""

    source: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)


class RenderContext:
    """Everything a backend needs to know during one render.

    Args:
        backend: Supplies the naming rules
        top_levels: Binding name -> root type, in output order
    """

    def __init__(self, backend: TargetBackend, top_levels: Mapping[str, Type]):
        self.top_levels: dict[str, Type] = dict(top_levels)
        roots = list(self.top_levels.values())
        self.named_types: list[NamedType] = named_types_in_dependency_order(roots)
        self.classes = [t for t in self.named_types if isinstance(t, ClassType)]
        self.unions = [t for t in self.named_types if isinstance(t, UnionType)]
        self.have_named_unions = bool(self.unions)
        self.have_unions = any(isinstance(t, UnionType) for t in iterate_types(roots))

        self.global_namespace = Namespace("global", backend.forbidden_names_for_global_namespace())
        self._top_level_names: dict[str, Name] = {}
        self._named_type_names: dict[Type, Name] = {}
        # Top levels whose root is not a named type they could lend their name to
        self.aliased_top_levels: list[str] = []

        for binding, root in self.top_levels.items():
            name = self.global_namespace.add(binding, backend.top_level_name_style)
            self._top_level_names[binding] = name
            named = backend.named_type_for_top_level(root)
            if named is not None and named not in self._named_type_names:
                self._named_type_names[named] = name
            else:
                self.aliased_top_levels.append(binding)

        for t in self.named_types:
            if t not in self._named_type_names:
                name = self.global_namespace.add(t.name, backend.named_type_name_style)
                self._named_type_names[t] = name

        property_namespaces: list[Namespace] = []
        self._properties: dict[ClassType, list[tuple[Name, str, Type]]] = {}
        for c in self.classes:
            forbidden, forbidden_namespaces = backend.forbidden_for_properties(
                c,
                self.name_for_named_type(c),
                self.global_namespace,
            )
            namespace = Namespace(
                f"{c.name}.properties",
                forbidden_words=[f for f in forbidden if isinstance(f, str)],
                forbidden_names=[f for f in forbidden if isinstance(f, Name)],
                forbidden_namespaces=forbidden_namespaces,
            )
            self._properties[c] = [
                (namespace.add(json_name, backend.property_name_style), json_name, t)
                for json_name, t in c.properties.items()
            ]
            property_namespaces.append(namespace)

        self.writer = SourceWriter(assign_names([self.global_namespace, *property_namespaces]))

    def name_for_named_type(self, t: NamedType) -> Name:
        return self._named_type_names[t]

    def top_level_name(self, binding: str) -> Name:
        return self._top_level_names[binding]

    def for_each_property(self, c: ClassType) -> list[tuple[Name, str, Type]]:
        """(field name, JSON key, property type) for every property, in declared order."""
        return self._properties[c]


def render(backend: TargetBackend, top_levels: Mapping[str, Type]) -> RenderResult:
    """Render declarations and serialization code for ``top_levels``.

    Raises:
        PipelineInvariantViolation: If the graph has a shape the backend cannot render
    """
    ctx = RenderContext(backend, top_levels)
    logger.debug(
        "Rendering %d classes, %d unions and %d aliases with the %s backend",
        len(ctx.classes),
        len(ctx.unions),
        len(ctx.aliased_top_levels),
        backend.language,
    )

    backend.emit_preamble(ctx)
    for t in ctx.named_types:
        if isinstance(t, ClassType):
            backend.emit_class(ctx, t, ctx.name_for_named_type(t))
        else:
            backend.emit_union(ctx, t, ctx.name_for_named_type(t))
    for binding in ctx.aliased_top_levels:
        backend.emit_top_level_alias(ctx, ctx.top_levels[binding], ctx.top_level_name(binding))
    backend.emit_serializers(ctx)

    result = RenderResult(ctx.writer.finish(), list(ctx.writer.diagnostics))
    logger.debug(
        "Rendered %d lines with %d diagnostics",
        result.source.count("\n"),
        len(result.diagnostics),
    )
    return result


def generate(
    top_levels: Mapping[str, Type],
    language: str = "cpp",
    config: CodeGeneratorConfig | None = None,
) -> RenderResult:
    """Validate ``config``, pick the backend for ``language`` and render."""
    if config is None:
        config = CodeGeneratorConfig()
    config.validate()
    return render(get_backend(language, config), top_levels)
