"""Difference between two published snapshots.

Purpose
-------
Describe what a reload changed so subscribers can be notified about exactly
the names that were added, modified, or removed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from ..domain.values import Value, values_equal


@dataclass(frozen=True)
class Diff:
    """Result of comparing an old snapshot with a new one.

    Attributes
    ----------
    new:
        ``(name, value)`` for every name present only in the new snapshot.
    changed_or_gone:
        ``(name, value)`` for every old name whose value changed, or
        ``(name, None)`` when the name disappeared.
    """

    new: tuple[tuple[str, Value], ...] = field(default_factory=tuple)
    changed_or_gone: tuple[tuple[str, Value | None], ...] = field(default_factory=tuple)

    def __bool__(self) -> bool:
        return bool(self.new or self.changed_or_gone)

    def names(self) -> list[str]:
        """Return every affected name, sorted."""

        return sorted([name for name, _ in self.new] + [name for name, _ in self.changed_or_gone])


def compute_diff(old: Mapping[str, Value], new: Mapping[str, Value]) -> Diff:
    """Compare *old* with *new* using type-strict value equality.

    Examples
    --------
    >>> d = compute_diff({"a": 1, "b": 2}, {"a": 1, "b": 3, "c": 4})
    >>> d.new, d.changed_or_gone
    ((('c', 4),), (('b', 3),))
    >>> compute_diff({"a": 1}, {}).changed_or_gone
    (('a', None),)
    >>> bool(compute_diff({"a": 1}, {"a": True}))
    True
    """

    changed_or_gone: list[tuple[str, Value | None]] = []
    for name, value in old.items():
        if name not in new:
            changed_or_gone.append((name, None))
        elif not values_equal(value, new[name]):
            changed_or_gone.append((name, new[name]))
    added = [(name, value) for name, value in new.items() if name not in old]
    return Diff(new=tuple(added), changed_or_gone=tuple(changed_or_gone))
