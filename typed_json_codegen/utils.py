"""
Utility functions for identifier styling and string-literal escaping.
"""

import re

from .errors import PipelineInvariantViolation

# Regex pattern to split text into words, handling camelCase and acronym boundaries
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")

# Anything that cannot appear in an identifier separates words
_ILLEGAL_CHARACTERS = re.compile(r"[^A-Za-z0-9]+")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, treating every non-alphanumeric character as a separator."""
    return _WORD_PATTERN.findall(_ILLEGAL_CHARACTERS.sub(" ", text))


def _words_for_identifier(text: str) -> list[str]:
    """Words of ``text``, guaranteed non-empty and starting with a letter."""
    words = _split_into_words(text)
    if not words:
        return ["empty"]
    if words[0][0].isdigit():
        return ["the", *words]
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def pascal_case(text: str) -> str:
    """Convert arbitrary text to a PascalCase identifier.

    Examples:
        "first_name" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "HTTPServer" -> "HttpServer"
        "3d model" -> "The3DModel"
        "" -> "Empty"
    """
    return "".join(_capitalize(word) for word in _words_for_identifier(text))


def camel_case(text: str) -> str:
    """Convert arbitrary text to a camelCase identifier ("first_name" -> "firstName")."""
    first, *rest = _words_for_identifier(text)
    return first.lower() + "".join(_capitalize(word) for word in rest)


def snake_case(text: str) -> str:
    """Convert arbitrary text to a snake_case identifier ("firstName" -> "first_name")."""
    return "_".join(word.lower() for word in _words_for_identifier(text))


_NAMED_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def string_escape(text: str) -> str:
    """Escape ``text`` for use between double quotes in generated source.

    The output is valid in both C++ and Python string literals and decodes back
    to exactly ``text``: control characters become three-digit octal escapes
    and non-ASCII code points become \\u or \\U escapes. Lone surrogates, which
    ``json.loads`` lets through, have no such spelling and are rejected.
    """
    parts = []
    for ch in text:
        code = ord(ch)
        if ch in _NAMED_ESCAPES:
            parts.append(_NAMED_ESCAPES[ch])
        elif code < 0x20 or code == 0x7F:
            parts.append(f"\\{code:03o}")
        elif code < 0x7F:
            parts.append(ch)
        elif 0xD800 <= code <= 0xDFFF:
            raise PipelineInvariantViolation(
                f"Lone surrogate U+{code:04X} in {text!r} has no literal spelling"
            )
        elif code <= 0xFFFF:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(f"\\U{code:08x}")
    return "".join(parts)
