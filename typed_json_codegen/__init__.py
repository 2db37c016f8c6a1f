"""Typed JSON code generator

Renders native type declarations and JSON conversion code from a type graph
describing JSON data. Ships a C++ backend (structs, nlohmann/json, boost
optional/variant) and a Python backend (dataclasses and decode/encode functions).
"""

__version__ = "1.0.0"

from .backends import CppBackend, PythonBackend, TargetBackend, get_backend
from .config import CodeGeneratorConfig
from .driver import RenderContext, RenderResult, generate, render
from .errors import (
    CodegenError,
    ConfigurationError,
    GraphFormatError,
    PipelineInvariantViolation,
    UnmergeableAttributeCollision,
)
from .graph_loader import load_type_graph, load_type_graph_file
from .type_attributes import (
    EMPTY_TYPE_ATTRIBUTES,
    TypeAttributeKind,
    TypeAttributes,
    combine_type_attributes,
    description_type_attribute_kind,
    property_descriptions_type_attribute_kind,
)

__all__ = [
    "generate",
    "render",
    "RenderContext",
    "RenderResult",
    "CodeGeneratorConfig",
    "TargetBackend",
    "CppBackend",
    "PythonBackend",
    "get_backend",
    "load_type_graph",
    "load_type_graph_file",
    "TypeAttributeKind",
    "TypeAttributes",
    "EMPTY_TYPE_ATTRIBUTES",
    "combine_type_attributes",
    "description_type_attribute_kind",
    "property_descriptions_type_attribute_kind",
    "CodegenError",
    "ConfigurationError",
    "GraphFormatError",
    "PipelineInvariantViolation",
    "UnmergeableAttributeCollision",
]
