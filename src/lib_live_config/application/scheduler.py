"""Background polling and automatic reload.

Purpose
-------
Watch every file that contributed to a :class:`Config` and reload it when one
of them changes. A file counts as changed when its size or modification time
differs from the previous check.

Contents
--------
* :class:`AutoReloadOptions` – polling interval and reload error handler.
* :class:`ReloadHandle` – cancellation token for the background thread.
* :func:`fingerprint` – ``{path: (size, mtime) | None}`` over a file set.
* :func:`start_polling` – spawns the poller thread for an already loaded
  handle.

System Role
-----------
Wired up by :func:`lib_live_config.core.auto_reload`. The thread keeps a
reference to the handle for its own lifetime; the host owns the returned
:class:`ReloadHandle` and is expected to cancel it on shutdown.
"""

from __future__ import annotations

import contextvars
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from ..domain.errors import ConfigError
from ..observability import log_debug, log_error, log_info
from .live import Config
from .notify import ErrorHandler
from .ports import SourceReader

Fingerprint = dict[str, Optional[tuple[int, float]]]


@dataclass(frozen=True)
class AutoReloadOptions:
    """Directions for when to reload and how to handle reload failures.

    Attributes
    ----------
    interval:
        Seconds between metadata checks. Must be at least one.
    on_error:
        Receives exceptions from failed reloads and from change handlers. It
        must not raise. When ``None``, a failed reload is logged as
        ``reload_failed`` and ``reload_error_ignored`` and the poller waits for
        the next change; the published snapshot stays as it was.
    """

    interval: float = 1
    on_error: ErrorHandler | None = None


class ReloadHandle:
    """Cancellation token for a running reload poller.

    Usable as a context manager; leaving the block cancels the poller and
    waits for it to finish.
    """

    def __init__(self, thread: threading.Thread, stop: threading.Event) -> None:
        self._thread = thread
        self._stop = stop

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    def cancel(self) -> None:
        """Ask the poller to stop; an in-flight reload is allowed to finish."""

        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    def __enter__(self) -> ReloadHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()
        self.join()


def fingerprint(reader: SourceReader, paths: Iterable[str]) -> Fingerprint:
    """Return size and mtime per path, ``None`` for paths that cannot be stat'ed.

    Examples
    --------
    >>> class Reader:
    ...     def read(self, path): raise OSError(path)
    ...     def stat(self, path):
    ...         if path == "gone.cfg":
    ...             raise FileNotFoundError(path)
    ...         return (12, 100.0)
    >>> fingerprint(Reader(), ["a.cfg", "gone.cfg"])
    {'a.cfg': (12, 100.0), 'gone.cfg': None}
    """

    result: Fingerprint = {}
    for path in paths:
        try:
            result[path] = reader.stat(path)
        except OSError:
            result[path] = None
    return result


def start_polling(config: Config, options: AutoReloadOptions) -> ReloadHandle:
    """Start a daemon thread that reloads *config* whenever its files change."""

    stop = threading.Event()
    poller = _Poller(config, options, stop)
    context = contextvars.copy_context()
    thread = threading.Thread(
        target=context.run,
        args=(poller.run,),
        name="lib_live_config-reloader",
        daemon=True,
    )
    thread.start()
    return ReloadHandle(thread, stop)


class _Poller:
    def __init__(self, config: Config, options: AutoReloadOptions, stop: threading.Event) -> None:
        self._config = config
        self._interval = max(options.interval, 1)
        self._on_error = options.on_error
        self._stop = stop
        self._previous = self._current()

    def _current(self) -> Fingerprint:
        return fingerprint(self._config.reader, self._config.sources.resolved_paths())

    def run(self) -> None:
        log_info("scheduler_started", interval=self._interval, roots=[str(root) for root in self._config.roots])
        while not self._stop.wait(self._interval):
            self.tick()
        log_info("scheduler_stopped", roots=[str(root) for root in self._config.roots])

    def tick(self) -> bool:
        """Check the watched files once and reload if any of them changed.

        After a successful reload the fingerprint is retaken over the new
        source set, so added or dropped imports do not count as a change on
        the next tick. After a failed reload the source set is unchanged and
        the fingerprint just observed is kept.

        Returns
        -------
        bool
            Whether a reload was attempted.
        """

        current = self._current()
        if current == self._previous:
            log_debug("reload_skipped", files=len(current))
            return False
        self._previous = current
        if self._reload():
            self._previous = self._current()
        return True

    def _reload(self) -> bool:
        roots = [str(root) for root in self._config.roots]
        try:
            self._config.reload()
        except Exception as exc:  # noqa: BLE001
            if not isinstance(exc, ConfigError):
                log_error("reload_failed", roots=roots, error=repr(exc))
            if self._on_error is None:
                log_debug("reload_error_ignored", roots=roots, error=repr(exc))
                return False
            try:
                self._on_error(exc)
            except Exception as sink_exc:  # noqa: BLE001
                log_error("error_handler_failed", error=repr(sink_exc))
            return False
        return True
