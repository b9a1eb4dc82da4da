"""Environment variable adapter.

Purpose
-------
Give interpolation read access to the process environment. The adapter is a
live ``Mapping`` view: every lookup consults the underlying environment, so a
reload picks up variables changed since the previous load.

Key behaviours
--------------
* Only lookups are supported; the configuration never writes variables.
* Lookups are case sensitive, matching the configuration namespace.
* Misses are logged at debug level to make unresolved ``$(NAME)`` references
  easier to diagnose.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Iterator

from ...observability import log_debug


class DefaultEnvironment(Mapping[str, str]):
    """Read-only view over environment variables.

    Examples
    --------
    >>> env = DefaultEnvironment(environ={"HOME": "/home/demo"})
    >>> env.get("HOME"), env.get("MISSING")
    ('/home/demo', None)
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        """

        self._environ = environ if environ is not None else os.environ

    def __getitem__(self, name: str) -> str:
        try:
            return self._environ[name]
        except KeyError:
            log_debug("env_variable_missing", source="env", path=None, name=name)
            raise

    def __iter__(self) -> Iterator[str]:
        return iter(self._environ)

    def __len__(self) -> int:
        return len(self._environ)
