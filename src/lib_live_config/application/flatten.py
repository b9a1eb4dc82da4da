"""Flattening of directive trees into one dotted namespace.

Purpose
-------
Turn the per-source directive sequences produced by the loader into a single
mapping from dotted names to values. Free of I/O so it can be exercised with
hand-built directive trees.

Contents
    - ``flatten``: public entry point driven by a simple loop over roots.
    - ``_Flattener``: walks directives while threading the accumulating
      mapping and the current prefix.

Rules
-----
* Roots are processed in the order given, directives top to bottom.
* A binding is stored under ``prefix + name``; a later binding of the same
  full name overwrites the earlier one.
* String bindings are interpolated against the mapping as accumulated so far,
  so only names bound *earlier* can be referenced.
* A group extends the prefix with ``name + "."`` for its body. The mapping is
  threaded through, not scoped.
* ``import "p"`` splices the directives loaded for ``required("p")`` at the
  current prefix; an import that was never loaded is a no-op.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ..domain.values import Bind, Directive, Group, Import, SourceRef, Value, freeze_value, required
from .interpolate import interpolate


def flatten(
    roots: Iterable[SourceRef],
    loaded: Mapping[SourceRef, Sequence[Directive]],
    *,
    environ: Mapping[str, str],
) -> dict[str, Value]:
    """Flatten *roots* (looked up in *loaded*) into a dotted-name mapping.

    Raises
    ------
    InterpolationError
        A string binding references a name that is neither bound earlier nor
        present in *environ*, or references a non-textual value.

    Examples
    --------
    >>> a = required("a.cfg")
    >>> loaded = {a: (Bind("x", 1), Group("g", (Bind("y", "$(x)!"), Group("h", (Bind("z", True),)))))}
    >>> flatten([a], loaded, environ={})
    {'x': 1, 'g.y': '1!', 'g.h.z': True}
    """

    walker = _Flattener(loaded, environ)
    for root in roots:
        directives = loaded.get(root)
        if directives is None:
            continue
        walker.walk(directives, "", root)
    return walker.result


class _Flattener:
    """Depth-first walk over directives with a shared accumulator."""

    def __init__(self, loaded: Mapping[SourceRef, Sequence[Directive]], environ: Mapping[str, str]) -> None:
        self._loaded = loaded
        self._environ = environ
        self._expanding: list[SourceRef] = []
        self.result: dict[str, Value] = {}

    def walk(self, directives: Sequence[Directive], prefix: str, source: SourceRef) -> None:
        self._expanding.append(source)
        try:
            for directive in directives:
                self._directive(directive, prefix)
        finally:
            self._expanding.pop()

    def _directive(self, directive: Directive, prefix: str) -> None:
        if isinstance(directive, Bind):
            self._bind(prefix + directive.name, directive.value)
        elif isinstance(directive, Group):
            nested = f"{prefix}{directive.name}."
            for child in directive.body:
                self._directive(child, nested)
        elif isinstance(directive, Import):
            self._import(directive.path, prefix)

    def _bind(self, name: str, value: Value) -> None:
        if isinstance(value, str):
            value = interpolate(value, self.result, environ=self._environ)
        self.result[name] = freeze_value(value)

    def _import(self, path: str, prefix: str) -> None:
        ref = required(path)
        directives = self._loaded.get(ref)
        # Mutually importing files would otherwise recurse forever.
        if directives is None or ref in self._expanding:
            return
        self.walk(directives, prefix, ref)
