"""Subscription patterns.

A pattern selects which configuration names a change handler cares about. It
is only used for matching and is never stored as configuration data.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Pattern:
    """Exact-name or prefix matcher.

    Examples
    --------
    >>> prefix("db.").matches("db.host"), exact("db").matches("db.host")
    (True, False)
    >>> prefix("").matches("anything")
    True
    """

    name: str
    is_prefix: bool = False

    def matches(self, candidate: str) -> bool:
        if self.is_prefix:
            return candidate.startswith(self.name)
        return candidate == self.name

    def __str__(self) -> str:
        return f"prefix({self.name!r})" if self.is_prefix else f"exact({self.name!r})"


def exact(name: str) -> Pattern:
    """Match only the binding named *name*."""

    return Pattern(name, False)


def prefix(name: str) -> Pattern:
    """Match every binding whose name starts with *name*."""

    return Pattern(name, True)
