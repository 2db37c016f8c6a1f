"""
Exceptions raised while loading a type graph or rendering code from it.

Every error raised here is fatal for the current invocation: rendering
never produces partial output.
"""

from __future__ import annotations


class CodegenError(Exception):
    """Base class for all generator-time errors."""

    pass


class ConfigurationError(CodegenError):
    """Raised when a backend option is malformed.

    This can happen when:
    - The configuration contains a key no backend understands
    - A value has the wrong type
    - The namespace is not a valid identifier path
    """

    pass


class GraphFormatError(CodegenError):
    """Raised when a graph description document cannot be turned into a type graph."""

    pass


class PipelineInvariantViolation(CodegenError):
    """Raised when a backend meets a graph shape the graph builder must never produce.

    Examples are a union with a single non-null member and no null member,
    or a union holding two null members. These are bugs in whatever built
    the graph, not problems with the data it was built from.
    """

    pass


class UnmergeableAttributeCollision(CodegenError):
    """Raised when two values of an attribute kind without a combine function meet."""

    pass
