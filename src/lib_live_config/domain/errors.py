"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the application layer,
and consuming applications. The hierarchy lives in the domain layer so outer
layers may depend on it without creating cycles.

Contents
--------
* :class:`ConfigError` – umbrella base class for all library failures.
* :class:`LoadError` – anything that aborts a ``load`` or ``reload``.
* :class:`SourceNotFound` – a required source could not be read.
* :class:`ParseError` – a source was read but is malformed.
* :class:`InterpolationError` – a ``$(name)`` reference could not be resolved.
* :class:`ConfigKeyError` – raised by ``require`` when a name is absent or
  cannot be converted.
* :class:`ConfigUsageError` – invalid arguments supplied by the caller.

System Role
-----------
Loaders raise :class:`LoadError` subclasses and the live handle propagates them
unmodified. Callers catch :class:`ConfigError` to handle every library failure
uniformly.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``lib_live_config``.

    Why
    ----
    Provide a single catch-all type for consumers that do not need fine-grained
    handling.
    """


class LoadError(ConfigError):
    """Raised when a load or reload cycle cannot produce a new snapshot.

    Why
    ----
    The scheduler and manual ``reload`` callers need one type to catch for
    "the configuration on disk is currently unusable".
    """


class SourceNotFound(LoadError):
    """Represents a required source that is missing or unreadable.

    Optional sources never raise this; the loader treats them as empty.
    """

    def __init__(self, path: str, reason: str | None = None) -> None:
        self.path = path
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Configuration source not found: {path}{detail}")


class ParseError(LoadError):
    """Raised when a source was read but does not describe valid directives.

    Why
    ----
    Distinguish malformed content from missing files. A parse error is fatal
    even for optional sources.

    Attributes
    ----------
    path:
        Source path the error belongs to (empty when unknown).
    line / column:
        One-based position of the offending character, when known.
    message:
        Human readable description without the location prefix.
    """

    def __init__(self, path: str, message: str, *, line: int | None = None, column: int | None = None) -> None:
        self.path = path
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._describe())

    def _describe(self) -> str:
        location = self.path or "<unknown>"
        if self.line is not None:
            location = f"{location}:{self.line}"
            if self.column is not None:
                location = f"{location}:{self.column}"
        return f"{location}: {self.message}"


class InterpolationError(LoadError):
    """Raised when ``$(name)`` substitution fails.

    Covers unresolved names, references to values that cannot be rendered as
    text, and malformed ``$`` sequences.
    """


class ConfigKeyError(ConfigError, KeyError):
    """Raised by ``require`` when *name* is absent or has the wrong type."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"no usable value for configuration key {self.name!r}"


class ConfigUsageError(ConfigError, ValueError):
    """Raised before any I/O when the caller passes invalid arguments."""
