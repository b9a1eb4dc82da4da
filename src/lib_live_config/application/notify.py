"""Subscription registry and change notification.

Purpose
-------
Let interested parties react to specific configuration changes after a reload
without polling. Handlers are registered against a :class:`Pattern` and are
invoked with ``(name, new_value_or_None)``.

Contents
--------
* :data:`ChangeHandler` / :data:`ErrorHandler` – callable signatures.
* :class:`SubscriptionRegistry` – insert-only pattern → handlers multimap with
  exception-isolated dispatch.
* :func:`report_to_stderr` – fallback sink when no error handler is set.

System Role
-----------
Owned by :class:`lib_live_config.application.live.Config`. The foreground may
subscribe while the background scheduler dispatches; both sides go through the
registry lock, and dispatch iterates over a copy taken under it.
"""

from __future__ import annotations

import sys
import threading
from typing import Callable, Mapping

from ..domain.patterns import Pattern
from ..domain.values import Value, values_equal
from ..observability import log_debug, log_error
from .diff import Diff

ChangeHandler = Callable[[str, "Value | None"], None]
ErrorHandler = Callable[[BaseException], None]


class SubscriptionRegistry:
    """Pattern-keyed handler lists, appended to and never pruned."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[Pattern, list[ChangeHandler]] = {}

    def subscribe(self, pattern: Pattern, handler: ChangeHandler) -> None:
        """Append *handler* to the list for *pattern*, creating it if needed.

        Handlers for one pattern fire in the order they were subscribed;
        subscribing the same callable twice makes it fire twice.
        """

        with self._lock:
            self._handlers.setdefault(pattern, []).append(handler)
        log_debug("change_handler_subscribed", pattern=str(pattern))

    def patterns(self) -> dict[Pattern, tuple[ChangeHandler, ...]]:
        """Return a point-in-time copy of the registry."""

        with self._lock:
            return {pattern: tuple(handlers) for pattern, handlers in self._handlers.items()}

    def __len__(self) -> int:
        with self._lock:
            return sum(len(handlers) for handlers in self._handlers.values())

    def dispatch(
        self,
        old: Mapping[str, Value],
        new: Mapping[str, Value],
        diff: Diff,
        *,
        on_error: ErrorHandler | None = None,
    ) -> int:
        """Invoke matching handlers for a reload from *old* to *new*.

        Exact patterns fire once when their name's value differs between the
        two snapshots. Prefix patterns fire once per matching entry of
        ``diff.new`` and then once per matching entry of
        ``diff.changed_or_gone``.

        Returns
        -------
        int
            Number of handler invocations attempted.
        """

        calls = 0
        for pattern, handlers in self.patterns().items():
            for name, value in _matching_changes(pattern, old, new, diff):
                for handler in handlers:
                    calls += 1
                    _invoke(handler, pattern, name, value, on_error)
        return calls


def _matching_changes(
    pattern: Pattern,
    old: Mapping[str, Value],
    new: Mapping[str, Value],
    diff: Diff,
) -> list[tuple[str, Value | None]]:
    if not pattern.is_prefix:
        before = old.get(pattern.name)
        after = new.get(pattern.name)
        if values_equal(before, after):
            return []
        return [(pattern.name, after)]
    changes: list[tuple[str, Value | None]] = [(name, value) for name, value in diff.new if pattern.matches(name)]
    changes.extend((name, value) for name, value in diff.changed_or_gone if pattern.matches(name))
    return changes


def _invoke(
    handler: ChangeHandler,
    pattern: Pattern,
    name: str,
    value: Value | None,
    on_error: ErrorHandler | None,
) -> None:
    try:
        handler(name, value)
    except Exception as exc:  # noqa: BLE001 - handlers must not break the reload
        log_error("change_handler_failed", pattern=str(pattern), name=name, error=repr(exc))
        if on_error is not None:
            try:
                on_error(exc)
                return
            except Exception as sink_exc:  # noqa: BLE001 - fall back to stderr
                log_error("error_handler_failed", pattern=str(pattern), name=name, error=repr(sink_exc))
        report_to_stderr(pattern, name, exc)


def report_to_stderr(pattern: Pattern, name: str, exc: BaseException) -> None:
    """Write a one-line description of a failed handler to standard error."""

    sys.stderr.write(f"*** a change handler raised an exception for ({pattern}, {name!r}): {exc!r}\n")
