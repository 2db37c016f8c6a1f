"""
Name allocation for generated identifiers.

Backends never invent final identifiers. They ask a Namespace for a Name,
supplying a proposal and a styling function, and render the token verbatim.
``assign_names`` later turns every token into a unique, styled string that
avoids the forbidden words and names of its namespace.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

logger = logging.getLogger(__name__)

Namer = Callable[[str], str]


class Name:
    """Opaque token standing for an identifier that is not chosen yet."""

    __slots__ = ("proposal", "namer")

    def __init__(self, proposal: str, namer: Namer):
        self.proposal = proposal
        self.namer = namer

    def __repr__(self) -> str:
        return f"Name({self.proposal!r})"


class Namespace:
    """A scope in which every Name must resolve to a distinct string.

    Args:
        label: Used in log messages only
        forbidden_words: Strings no name in this scope may take (reserved words)
        forbidden_names: Names from other scopes whose final strings are off limits
        forbidden_namespaces: Scopes whose every name and forbidden word is off limits
    """

    def __init__(
        self,
        label: str,
        forbidden_words: Iterable[str] = (),
        forbidden_names: Iterable[Name] = (),
        forbidden_namespaces: Iterable[Namespace] = (),
    ):
        self.label = label
        self.forbidden_words = frozenset(forbidden_words)
        self.forbidden_names = tuple(forbidden_names)
        self.forbidden_namespaces = tuple(forbidden_namespaces)
        self.members: list[Name] = []

    def add(self, proposal: str, namer: Namer) -> Name:
        name = Name(proposal, namer)
        self.members.append(name)
        return name

    def __repr__(self) -> str:
        return f"Namespace({self.label!r}, {len(self.members)} names)"


def assign_names(namespaces: Iterable[Namespace]) -> dict[Name, str]:
    """Resolve every Name of ``namespaces`` to its final string.

    Namespaces are resolved in the order given and names in the order they
    were added, so a namespace must come after every namespace it forbids.
    A styled proposal that is taken gets the smallest numeric suffix that is free.
    """
    assigned: dict[Name, str] = {}
    taken: dict[int, set[str]] = {}

    for namespace in namespaces:
        blocked = set(namespace.forbidden_words)
        for name in namespace.forbidden_names:
            if name not in assigned:
                raise ValueError(
                    f"{name!r} is forbidden in {namespace!r} but has not been assigned yet"
                )
            blocked.add(assigned[name])
        for other in namespace.forbidden_namespaces:
            if id(other) not in taken:
                raise ValueError(
                    f"{other!r} is forbidden in {namespace!r} but has not been assigned yet"
                )
            blocked |= taken[id(other)]
            blocked |= other.forbidden_words

        own = taken.setdefault(id(namespace), set())
        for name in namespace.members:
            styled = name.namer(name.proposal)
            candidate = styled
            suffix = 1
            while candidate in blocked or candidate in own:
                candidate = f"{styled}{suffix}"
                suffix += 1
            if candidate != styled:
                logger.debug("Renamed %r to %r in %s", styled, candidate, namespace.label)
            own.add(candidate)
            assigned[name] = candidate

    return assigned
