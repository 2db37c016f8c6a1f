"""
Configuration for the code generator backends.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields

from .errors import ConfigurationError

_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass
class CodeGeneratorConfig:
    """Options shared by the backends.

    Backends read the options that apply to them and ignore the rest.
    """

    # C++: namespace wrapping every declaration, also the qualifier for
    # references from the nlohmann namespace. May be nested ("a::b").
    namespace: str = "quicktype"

    # Add the "how to use this file" comment at the top of the output
    add_generation_comment: bool = True

    def validate(self) -> None:
        """Raise ConfigurationError if an option is malformed."""
        # Imported here: the C++ backend imports this module for its options
        from .backends.cpp_backend import CPP_KEYWORDS

        if not isinstance(self.namespace, str):
            raise ConfigurationError(
                f"namespace must be a string, got {type(self.namespace).__name__}"
            )
        for part in self.namespace.split("::"):
            if not _IDENTIFIER.fullmatch(part):
                raise ConfigurationError(
                    f"namespace {self.namespace!r} is not a valid identifier path"
                )
            if part in CPP_KEYWORDS:
                raise ConfigurationError(
                    f"namespace {self.namespace!r} uses the reserved word {part!r}"
                )
        if not isinstance(self.add_generation_comment, bool):
            raise ConfigurationError("add_generation_comment must be a boolean")

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a validated config from a dictionary."""
        if not isinstance(d, dict):
            raise ConfigurationError(f"Configuration must be a JSON object, got {type(d).__name__}")
        known = {f.name for f in fields(CodeGeneratorConfig)}
        unknown = sorted(k for k in d if k not in known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration option(s): {', '.join(unknown)}")
        config = CodeGeneratorConfig(**d)
        config.validate()
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "namespace": self.namespace,
            "add_generation_comment": self.add_generation_comment,
        }
