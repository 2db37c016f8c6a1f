"""
Interface every target-language backend implements.

A backend supplies naming rules and emission callbacks; it does not decide
the order of emission. ``driver.render`` calls the callbacks in a fixed
sequence: the preamble, every named class and union in dependency order,
the top-level aliases, then the serialization code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

import jinja2

from ..config import CodeGeneratorConfig
from ..naming import Name, Namespace
from ..type_graph import ClassType, NamedType, Type, UnionType

if TYPE_CHECKING:
    from ..driver import RenderContext


class TargetBackend(ABC):
    """Abstract interface for code generation backends."""

    # Short language identifier used on the command line
    language: str = ""

    # File extension of the generated source
    file_extension: str = ""

    def __init__(self, config: CodeGeneratorConfig):
        """
        Initialize the backend.

        Args:
            config: Code generation configuration
        """
        self.config = config
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up the Jinja2 environment for this language's fixed text blocks."""
        template_dir = Path(__file__).parent.parent / "templates" / self.language
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.file_extension}.jinja2")
        self.helpers_template = self.jinja_env.get_template(f"helpers.{self.file_extension}.jinja2")

    @abstractmethod
    def forbidden_names_for_global_namespace(self) -> list[str]:
        """Reserved words no top-level or named-type identifier may take."""

    @abstractmethod
    def forbidden_for_properties(
        self,
        class_type: ClassType,
        class_name: Name,
        global_namespace: Namespace,
    ) -> tuple[list[str | Name], list[Namespace]]:
        """What the property names of ``class_type`` must not collide with.

        ``global_namespace`` holds the top-level and named-type names.

        Returns:
            (forbidden words and names, forbidden namespaces)
        """

    @abstractmethod
    def top_level_name_style(self, raw_name: str) -> str:
        """Turn a top-level binding name into a legal identifier."""

    @abstractmethod
    def named_type_name_style(self, raw_name: str) -> str:
        """Turn a class or union name hint into a legal identifier."""

    @abstractmethod
    def property_name_style(self, raw_name: str) -> str:
        """Turn a JSON key into a legal field identifier."""

    @abstractmethod
    def named_type_for_top_level(self, t: Type) -> NamedType | None:
        """The named type a top-level binding can reuse instead of declaring an alias."""

    @abstractmethod
    def emit_preamble(self, ctx: RenderContext) -> None:
        """Emit everything that precedes the declarations."""

    @abstractmethod
    def emit_class(self, ctx: RenderContext, class_type: ClassType, class_name: Name) -> None:
        """Emit the record declaration of one class."""

    @abstractmethod
    def emit_union(self, ctx: RenderContext, union_type: UnionType, union_name: Name) -> None:
        """Emit the declaration of one named union."""

    @abstractmethod
    def emit_top_level_alias(self, ctx: RenderContext, t: Type, name: Name) -> None:
        """Emit an alias binding a top-level name to its root type."""

    @abstractmethod
    def emit_serializers(self, ctx: RenderContext) -> None:
        """Emit the JSON conversion code for every class and union."""
