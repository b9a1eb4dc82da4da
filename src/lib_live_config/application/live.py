"""Live configuration handle.

Purpose
-------
Hold the currently published :class:`Snapshot` behind a reference that is
swapped whole on reload, together with the roots it was loaded from and the
change subscriptions registered against it.

Contents
--------
* :class:`Config` – the handle returned by :func:`lib_live_config.load`.

Concurrency
-----------
Lookups read ``self._snapshot`` without locking; rebinding an attribute is a
single atomic store, so a reader sees either the old snapshot or the new one
and never a mix. Reloads are serialized by ``self._reload_lock`` so that two
reloads cannot interleave their diff computation and notification.
"""

from __future__ import annotations

import sys
import threading
from typing import IO, Any, Mapping, Sequence, TypeVar, overload

from ..domain.convert import convert
from ..domain.errors import ConfigError, ConfigKeyError
from ..domain.patterns import Pattern
from ..domain.snapshot import EMPTY_SNAPSHOT, Snapshot
from ..domain.values import SourceRef, Value
from ..observability import log_error, log_info
from .diff import Diff, compute_diff
from .flatten import flatten
from .loader import LoadedSources, load_all
from .notify import ChangeHandler, ErrorHandler, SubscriptionRegistry
from .ports import DirectiveParser, SourceReader

T = TypeVar("T")


class Config:
    """A live, reloadable view over a set of configuration sources.

    Why
    ----
    Long running processes want to pick up edits to their configuration files
    without restarting, and individual subsystems want to hear about the
    settings they own.

    What
    ----
    Loads *roots* through the injected reader and parser, flattens them into a
    :class:`Snapshot`, and exposes typed lookups, manual reloads, and change
    subscriptions. Instances are independent; :func:`lib_live_config.empty`
    returns a fresh one each call.

    Parameters
    ----------
    roots:
        Root references, processed in order.
    reader / parser / environ:
        Capabilities used to read, parse, and interpolate sources.
    on_error:
        Receives exceptions raised by change handlers. When ``None`` they are
        written to standard error.
    """

    def __init__(
        self,
        roots: Sequence[SourceRef],
        *,
        reader: SourceReader,
        parser: DirectiveParser,
        environ: Mapping[str, str],
        on_error: ErrorHandler | None = None,
    ) -> None:
        self._roots = tuple(roots)
        self._reader = reader
        self._parser = parser
        self._environ = environ
        self._on_error = on_error
        self._snapshot: Snapshot = EMPTY_SNAPSHOT
        self._sources = LoadedSources()
        self._subscriptions = SubscriptionRegistry()
        self._reload_lock = threading.RLock()

    @property
    def roots(self) -> tuple[SourceRef, ...]:
        return self._roots

    @property
    def sources(self) -> LoadedSources:
        """Every reference visited by the last successful load."""

        return self._sources

    @property
    def reader(self) -> SourceReader:
        return self._reader

    @property
    def on_error(self) -> ErrorHandler | None:
        return self._on_error

    def snapshot(self) -> Snapshot:
        """Return the currently published snapshot."""

        return self._snapshot

    def load_initial(self) -> None:
        """Perform the first load and publish it without notifying anyone.

        Raises
        ------
        LoadError
            Any required source failed; the handle stays empty.
        """

        with self._reload_lock:
            sources, snapshot = self._compute()
            self._sources = sources
            self._snapshot = snapshot
        log_info(
            "configuration_loaded",
            roots=[str(root) for root in self._roots],
            sources=len(sources.directives),
            keys=len(snapshot),
        )

    def reload(self) -> Diff:
        """Re-read every root, publish the result, and notify subscribers.

        On failure the published snapshot is left untouched and the
        :class:`~lib_live_config.domain.errors.LoadError` propagates.

        Returns
        -------
        Diff
            What changed relative to the previously published snapshot.
        """

        with self._reload_lock:
            try:
                sources, snapshot = self._compute()
            except ConfigError as exc:
                log_error("reload_failed", roots=[str(root) for root in self._roots], error=str(exc))
                raise
            previous = self._snapshot
            self._sources = sources
            self._snapshot = snapshot
            diff = compute_diff(previous, snapshot)
            calls = self._subscriptions.dispatch(previous, snapshot, diff, on_error=self._on_error)
        log_info(
            "configuration_reloaded",
            sources=len(sources.directives),
            keys=len(snapshot),
            changed=diff.names(),
            notifications=calls,
        )
        return diff

    def subscribe(self, pattern: Pattern, handler: ChangeHandler) -> None:
        """Call *handler* whenever a reload changes a name matching *pattern*."""

        self._subscriptions.subscribe(pattern, handler)

    @overload
    def lookup(self, name: str) -> Value | None: ...

    @overload
    def lookup(self, name: str, as_type: type[T]) -> T | None: ...

    def lookup(self, name: str, as_type: Any = None) -> Any:
        """Return the value bound to *name* converted to *as_type*, else ``None``.

        ``None`` means either that *name* is unbound or that its value cannot
        be presented as *as_type*.
        """

        return convert(self._snapshot.get(name), as_type)

    def require(self, name: str, as_type: Any = None) -> Any:
        """Like :meth:`lookup` but raise :class:`ConfigKeyError` instead of returning ``None``."""

        value = self.lookup(name, as_type)
        if value is None:
            raise ConfigKeyError(name)
        return value

    def lookup_default(self, default: T, name: str, as_type: Any = None) -> T:
        """Like :meth:`lookup` but return *default* instead of ``None``.

        When *as_type* is omitted the type of *default* is requested.
        """

        if as_type is None and default is not None:
            as_type = type(default)
        value = self.lookup(name, as_type)
        return default if value is None else value

    def display(self, stream: IO[str] | None = None) -> None:
        """Print the current snapshot, one ``name = value`` per line."""

        out = stream if stream is not None else sys.stdout
        snapshot = self._snapshot
        for name in sorted(snapshot):
            out.write(f"{name} = {snapshot[name]!r}\n")

    def _compute(self) -> tuple[LoadedSources, Snapshot]:
        sources = load_all(self._roots, reader=self._reader, parser=self._parser, environ=self._environ)
        flat = flatten(self._roots, sources.directives, environ=self._environ)
        return sources, Snapshot(flat)

    def __repr__(self) -> str:
        roots = ", ".join(str(root) for root in self._roots)
        return f"Config(roots=[{roots}], keys={len(self._snapshot)})"
