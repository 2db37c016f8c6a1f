"""
Code generation backends.

Contains language-specific code generators.
"""

from __future__ import annotations

from ..config import CodeGeneratorConfig
from ..errors import ConfigurationError
from .base import TargetBackend
from .cpp_backend import CppBackend
from .python_backend import PythonBackend

BACKENDS: dict[str, type[TargetBackend]] = {
    CppBackend.language: CppBackend,
    PythonBackend.language: PythonBackend,
}


def get_backend(language: str, config: CodeGeneratorConfig) -> TargetBackend:
    """Instantiate the backend registered for ``language``."""
    if language not in BACKENDS:
        choices = ", ".join(BACKENDS)
        raise ConfigurationError(f"Unsupported language: {language}. Choose from: {choices}")
    return BACKENDS[language](config)


__all__ = [
    "BACKENDS",
    "TargetBackend",
    "CppBackend",
    "PythonBackend",
    "get_backend",
]
