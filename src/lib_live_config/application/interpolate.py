"""String interpolation of ``$(name)`` references.

Purpose
-------
Rewrite string values that reference other configuration names or OS
environment variables. Used by the flattener for string bindings and by the
loader for source paths (against an empty mapping, so only the environment
resolves).

Contents
    - ``interpolate``: public entry point with a no-``$`` fast path.
    - ``split_segments``: tokenises text into literal and reference segments.
    - ``_render``: resolves one reference.
"""

from __future__ import annotations

from typing import Iterator, Mapping

from ..domain.errors import InterpolationError
from ..domain.values import Value


def interpolate(text: str, env: Mapping[str, Value], *, environ: Mapping[str, str]) -> str:
    """Return *text* with every ``$(name)`` replaced and ``$$`` collapsed.

    Resolution order for a reference: *env* first (strings verbatim, integers
    in base 10, anything else is a type error), then *environ*. A name found in
    neither raises :class:`InterpolationError`.

    Examples
    --------
    >>> interpolate("$(host):$(port)", {"host": "db", "port": 5432}, environ={})
    'db:5432'
    >>> interpolate("cost: $$5", {}, environ={})
    'cost: $5'
    >>> interpolate("$(HOME)/app", {}, environ={"HOME": "/home/demo"})
    '/home/demo/app'
    """

    if "$" not in text:
        return text
    parts: list[str] = []
    for literal, reference in split_segments(text):
        if reference is None:
            parts.append(literal)
        else:
            parts.append(_render(reference, env, environ))
    return "".join(parts)


def split_segments(text: str) -> Iterator[tuple[str, str | None]]:
    """Yield ``(literal, None)`` and ``("", name)`` segments of *text*.

    Examples
    --------
    >>> list(split_segments("a$$b$(c)"))
    [('a', None), ('$', None), ('b', None), ('', 'c')]
    """

    index = 0
    length = len(text)
    while index < length:
        dollar = text.find("$", index)
        if dollar < 0:
            yield text[index:], None
            return
        if dollar > index:
            yield text[index:dollar], None
        marker = text[dollar + 1 : dollar + 2]
        if marker == "$":
            yield "$", None
            index = dollar + 2
        elif marker == "(":
            close = text.find(")", dollar + 2)
            if close < 0:
                raise InterpolationError(f"unterminated reference at offset {dollar} in {text!r}")
            name = text[dollar + 2 : close]
            if not name:
                raise InterpolationError(f"empty reference at offset {dollar} in {text!r}")
            yield "", name
            index = close + 1
        else:
            raise InterpolationError(f"expected '$$' or '$(name)' at offset {dollar} in {text!r}")


def _render(name: str, env: Mapping[str, Value], environ: Mapping[str, str]) -> str:
    if name in env:
        value = env[name]
        if isinstance(value, str):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        raise InterpolationError(f"type error: {name!r} holds a {type(value).__name__}, expected a string or integer")
    found = environ.get(name)
    if found is None:
        raise InterpolationError(f"no such variable {name!r}")
    return found
