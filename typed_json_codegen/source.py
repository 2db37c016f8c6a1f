"""
Indentation-aware source composition.

Backends describe output as "sourcelikes": strings, Name tokens, annotated
fragments, or (nested) lists of those. The SourceWriter flattens them into
lines, rendering each Name through the assignment made by the naming pass
and recording a Diagnostic for every annotated fragment it writes.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Union

from .naming import Name


@dataclass(frozen=True)
class IssueAnnotation:
    """Marks generated code that the user should review."""

    kind: str
    message: str


ANY_TYPE_ISSUE_ANNOTATION = IssueAnnotation(
    "any",
    "The type of this value cannot be determined because the input has no data about it.",
)
NULL_TYPE_ISSUE_ANNOTATION = IssueAnnotation(
    "null",
    "The only value for this in the input is null, which means you probably need a more "
    "complete input sample.",
)


@dataclass(frozen=True)
class Annotated:
    annotation: IssueAnnotation
    source: Sourcelike


Sourcelike = Union[str, Name, Annotated, Sequence["Sourcelike"]]


def maybe_annotated(
    is_annotated: bool, annotation: IssueAnnotation, source: Sourcelike
) -> Sourcelike:
    if not is_annotated:
        return source
    return Annotated(annotation, source)


@dataclass(frozen=True)
class Diagnostic:
    """An issue annotation as it ended up in the output."""

    annotation: IssueAnnotation
    line: int  # 1-based line of the generated source
    text: str  # The annotated fragment as rendered

    def __str__(self) -> str:
        return f"line {self.line}: {self.text}: {self.annotation.message}"


class SourceWriter:
    """Accumulates generated lines for one render."""

    INDENT = "    "  # 4 spaces

    def __init__(self, names: Mapping[Name, str]):
        self._names = names
        self._lines: list[str] = []
        self._level = 0
        self.diagnostics: list[Diagnostic] = []

    def emit_line(self, *parts: Sourcelike) -> None:
        text = self._render(parts, len(self._lines) + 1)
        self._lines.append(self.INDENT * self._level + text if text else "")

    def emit_newline(self) -> None:
        self._lines.append("")

    def emit_multiline(self, text: str) -> None:
        """Emit a block of text line by line at the current indentation."""
        for line in text.rstrip("\n").split("\n"):
            self.emit_line(line)

    @contextmanager
    def indent(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    def sourcelike_to_string(self, source: Sourcelike) -> str:
        """Render ``source`` without writing it or recording diagnostics."""
        return self._render(source, None)

    def finish(self) -> str:
        return "\n".join(self._lines) + "\n"

    def _render(self, source: Sourcelike, line: int | None) -> str:
        if isinstance(source, str):
            return source
        if isinstance(source, Name):
            return self._names[source]
        if isinstance(source, Annotated):
            text = self._render(source.source, line)
            if line is not None:
                self.diagnostics.append(Diagnostic(source.annotation, line, text))
            return text
        return "".join(self._render(part, line) for part in source)
