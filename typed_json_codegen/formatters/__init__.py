"""
Post-processing formatters for generated code.
"""

from __future__ import annotations

from .black_formatter import format_with_black

__all__ = [
    "format_with_black",
]
