"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts the loader and scheduler depend on so they can
run against the default adapters, in-memory fakes, or anything else that
quacks the same way.

Contents
--------
* :class:`DirectiveParser` – turns source text into directives.
* :class:`SourceReader` – reads source bytes and cheap file metadata.

The process environment is not a port of its own: any ``Mapping[str, str]``
(``os.environ`` by default) is accepted wherever interpolation needs it.

System Role
-----------
These protocols enforce Dependency Inversion. Each default adapter implements
one protocol and the composition root wires them together.
"""

from __future__ import annotations

from typing import Protocol, Tuple, runtime_checkable

from ..domain.values import Directive


@runtime_checkable
class DirectiveParser(Protocol):
    """Parse the text of one source into an ordered directive sequence.

    Implementations raise :class:`~lib_live_config.domain.errors.ParseError`
    with a position when the text is malformed.
    """

    def parse(self, text: str, *, path: str = "") -> Tuple[Directive, ...]:
        """Return the directives contained in *text* (read from *path*)."""


@runtime_checkable
class SourceReader(Protocol):
    """Access the filesystem (or a stand-in) on behalf of the loader.

    Both methods raise :class:`OSError` when *path* cannot be accessed.
    """

    def read(self, path: str) -> bytes:
        """Return the raw bytes stored at *path*."""

    def stat(self, path: str) -> Tuple[int, float]:
        """Return ``(size, mtime)`` for *path*."""
