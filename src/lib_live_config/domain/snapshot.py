"""Immutable flat configuration snapshot.

Purpose
-------
Anchor the value object that a live configuration handle publishes after every
successful load. A snapshot maps dotted names to values and never changes once
constructed; reloading produces a brand-new snapshot that replaces the old one
in a single reference swap.

Contents
--------
* :class:`Snapshot` – ``Mapping`` implementation with display helpers.
* :data:`EMPTY_SNAPSHOT` – canonical empty instance.

System Role
-----------
Produced by :func:`lib_live_config.application.flatten.flatten` output and
held by :class:`lib_live_config.application.live.Config`. Readers may keep a
reference to an old snapshot safely; it will never be mutated underneath them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator

from .values import Value, thaw_value


@dataclass(frozen=True, slots=True)
class Snapshot(Mapping[str, Value]):
    """Read-only mapping from dotted names to values.

    Why
    ----
    Lookups from the foreground must never observe a half-built mapping. An
    immutable value object that is published whole guarantees that.

    What
    ----
    Wraps the supplied mapping in ``MappingProxyType`` and implements the
    :class:`Mapping` protocol. Keys are flat dotted names such as
    ``"db.host"``; there is no nesting.

    Examples
    --------
    >>> snap = Snapshot({"db.host": "localhost", "db.ports": (5432, 5433)})
    >>> snap["db.host"]
    'localhost'
    >>> snap.as_dict()["db.ports"]
    [5432, 5433]
    >>> snap.with_prefix("db.")
    ['db.host', 'db.ports']
    """

    _data: Mapping[str, Value]

    def __post_init__(self) -> None:
        object.__setattr__(self, "_data", MappingProxyType(dict(self._data)))

    def __getitem__(self, key: str) -> Value:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Snapshot({dict(self._data)!r})"

    def with_prefix(self, prefix: str) -> list[str]:
        """Return the sorted names that start with *prefix*."""

        return sorted(name for name in self._data if name.startswith(prefix))

    def as_dict(self) -> dict[str, Any]:
        """Return a mutable copy with list values rendered as Python lists.

        Why
        ----
        Snapshots store lists as tuples to stay immutable; serialisers and
        callers that want to tweak a copy expect plain lists.
        """

        return {name: thaw_value(value) for name, value in self._data.items()}

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise the snapshot to JSON with keys sorted for stable output.

        Examples
        --------
        >>> Snapshot({"b": 1, "a": [True]}).to_json()
        '{"a":[true],"b":1}'
        """

        import json

        return json.dumps(self.as_dict(), indent=indent, separators=(",", ":"), ensure_ascii=False, sort_keys=True)


#: Shared empty snapshot. Safe to re-use because :class:`Snapshot` is immutable.
EMPTY_SNAPSHOT = Snapshot(MappingProxyType({}))
