"""Directive AST, source references, and value helpers.

Purpose
-------
Define the immutable data the parser produces and the loader, flattener, and
diff engine consume. Nothing here performs I/O.

Contents
--------
* :data:`Value` – the union of storable configuration values.
* :class:`SourceRef` plus :func:`required` / :func:`optional` – a path tagged
  with whether its absence is fatal.
* :class:`Bind`, :class:`Group`, :class:`Import` – the directive variants.
* :func:`values_equal` – type-strict structural equality used for diffing.
* :func:`is_valid_name` – the naming rule shared by every parser.
* :func:`imports_of` – every import path found anywhere in a directive tree.
* :func:`freeze_value` / :func:`thaw_value` – convert between parser-facing
  lists and the tuples stored in snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Union, cast

Value = Union[bool, int, str, tuple["Value", ...]]
"""A configuration value: boolean, integer, string, or a tuple of values."""


@dataclass(frozen=True, slots=True)
class SourceRef:
    """A source path tagged as required or optional.

    Two references to the same path with different flags are distinct keys in
    every loaded-set mapping.
    """

    path: str
    required: bool = True

    def __str__(self) -> str:
        kind = "required" if self.required else "optional"
        return f"{self.path} ({kind})"


def required(path: str) -> SourceRef:
    """Return a reference whose failure to load aborts the whole load."""

    return SourceRef(path, True)


def optional(path: str) -> SourceRef:
    """Return a reference that contributes nothing when it cannot be read."""

    return SourceRef(path, False)


@dataclass(frozen=True, slots=True)
class Bind:
    """``name = value``."""

    name: str
    value: Value


@dataclass(frozen=True, slots=True)
class Group:
    """``name { ... }`` – prefixes every name bound inside *body*."""

    name: str
    body: tuple["Directive", ...] = ()


@dataclass(frozen=True, slots=True)
class Import:
    """``import "path"`` – splices another source at the current prefix."""

    path: str


Directive = Union[Bind, Group, Import]


def is_name_start(char: str) -> bool:
    return char.isalpha()


def is_name_char(char: str) -> bool:
    return bool(char) and (char.isalnum() or char in "-_")


def is_valid_name(name: str) -> bool:
    """Return whether *name* is a letter followed by letters, digits, ``-`` or ``_``.

    Examples
    --------
    >>> is_valid_name("your-int-33"), is_valid_name("33"), is_valid_name("a.b")
    (True, False, False)
    """

    return bool(name) and is_name_start(name[0]) and all(is_name_char(char) for char in name[1:])


def values_equal(left: Value | None, right: Value | None) -> bool:
    """Compare two values structurally without Python's ``True == 1`` coercion.

    Examples
    --------
    >>> values_equal(1, 1), values_equal(1, True), values_equal((1, "a"), (1, "a"))
    (True, False, True)
    >>> values_equal(None, None), values_equal(None, 0)
    (True, False)
    """

    if type(left) is not type(right):
        return False
    if isinstance(left, tuple):
        other = cast(tuple, right)
        return len(left) == len(other) and all(values_equal(a, b) for a, b in zip(left, other))
    return left == right


def imports_of(directives: Sequence[Directive]) -> Iterator[str]:
    """Yield import paths in document order, descending into groups.

    Group prefixes are not applied here; they only take effect when the
    imported directives are flattened.

    Examples
    --------
    >>> list(imports_of([Import("a"), Group("g", (Import("b"),)), Bind("x", 1)]))
    ['a', 'b']
    """

    for directive in directives:
        if isinstance(directive, Import):
            yield directive.path
        elif isinstance(directive, Group):
            yield from imports_of(directive.body)


def freeze_value(value: object) -> Value:
    """Turn nested lists into tuples so stored values are immutable."""

    if isinstance(value, (list, tuple)):
        return tuple(freeze_value(item) for item in value)
    return value  # type: ignore[return-value]


def thaw_value(value: Value) -> object:
    """Turn stored tuples back into lists for JSON rendering.

    Examples
    --------
    >>> thaw_value((1, ("a", True)))
    [1, ['a', True]]
    """

    if isinstance(value, tuple):
        return [thaw_value(item) for item in value]
    return value
