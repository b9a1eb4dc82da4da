"""Composition root for ``lib_live_config``.

Purpose
-------
Provide the entry points that wire the default adapters (filesystem reader,
suffix-selected parsers, process environment) into a live
:class:`~lib_live_config.application.live.Config` handle, optionally with a
background reload poller.

Contents
--------
* :data:`_PARSERS` – mapping of file suffixes to structured parsers; anything
  else is parsed with the native directive grammar.
* :class:`SuffixParser` – the default :class:`DirectiveParser`.
* :func:`load` – load roots into a new handle.
* :func:`reload` – reload a handle and notify its subscribers.
* :func:`auto_reload` – load roots and start polling them for changes.
* :func:`empty` – a fresh handle with no sources.

System Role
-----------
This is the canonical location for changing default adapters or parser
selection. Everything below it talks to adapters only through ports.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Union

from .adapters.env.default import DefaultEnvironment
from .adapters.filesystem.default import FileSystemReader
from .adapters.parser.directives import DirectiveFileParser
from .adapters.parser.structured import JSONParser, TOMLParser, YAMLParser
from .application.diff import Diff
from .application.live import Config
from .application.notify import ErrorHandler
from .application.ports import DirectiveParser, SourceReader
from .application.scheduler import AutoReloadOptions, ReloadHandle, start_polling
from .domain.errors import ConfigUsageError
from .domain.values import Directive, SourceRef, required

# Structured parsers keyed by suffix. Sources with any other suffix use the
# native directive grammar.
_PARSERS: dict[str, DirectiveParser] = {
    ".toml": TOMLParser(),
    ".json": JSONParser(),
    ".yaml": YAMLParser(),
    ".yml": YAMLParser(),
}

RootLike = Union[SourceRef, str]


class SuffixParser:
    """Choose a parser from the source path's suffix.

    Examples
    --------
    >>> SuffixParser().parse('{"a": 1}', path="x.json")
    (Bind(name='a', value=1),)
    >>> SuffixParser().parse('a = 1', path="x.cfg")
    (Bind(name='a', value=1),)
    """

    def __init__(self, fallback: DirectiveParser | None = None) -> None:
        self._fallback = fallback or DirectiveFileParser()

    def parse(self, text: str, *, path: str = "") -> tuple[Directive, ...]:
        parser = _PARSERS.get(Path(path).suffix.lower(), self._fallback)
        return tuple(parser.parse(text, path=path))


def load(
    roots: Iterable[RootLike],
    *,
    reader: SourceReader | None = None,
    parser: DirectiveParser | None = None,
    environ: Mapping[str, str] | None = None,
    on_error: ErrorHandler | None = None,
) -> Config:
    """Load *roots* (and everything they import) into a new :class:`Config`.

    Plain strings are treated as required sources. Paths may contain
    ``$(NAME)`` references to environment variables, e.g.
    ``"$(HOME)/.myapp.cfg"``.

    Raises
    ------
    SourceNotFound / ParseError / InterpolationError
        The load failed; no handle is returned.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = Path(tmp.name) / "app.cfg"
    >>> _ = target.write_text('db { host = "localhost"\\n port = 5432 }', encoding="utf-8")
    >>> cfg = load([str(target)])
    >>> cfg.lookup("db.host"), cfg.require("db.port", int)
    ('localhost', 5432)
    >>> tmp.cleanup()
    """

    config = _build(roots, reader=reader, parser=parser, environ=environ, on_error=on_error)
    config.load_initial()
    return config


def reload(config: Config) -> Diff:
    """Reload *config* from its roots; see :meth:`Config.reload`."""

    return config.reload()


def auto_reload(
    options: AutoReloadOptions,
    roots: Iterable[RootLike],
    *,
    reader: SourceReader | None = None,
    parser: DirectiveParser | None = None,
    environ: Mapping[str, str] | None = None,
) -> tuple[Config, ReloadHandle]:
    """Load *roots* and start a background thread that reloads them on change.

    Every ``options.interval`` seconds the thread compares the size and
    modification time of every loaded source, imports included, and reloads
    when any of them changed. Failed reloads are handed to
    ``options.on_error``, which also receives change handler exceptions.

    Raises
    ------
    ConfigUsageError
        ``options.interval`` is below one second or *roots* is empty. Raised
        before any file is touched.
    LoadError
        The initial load failed; no thread is started.
    """

    root_list = _normalize_roots(roots)
    if options.interval < 1:
        raise ConfigUsageError(f"auto_reload interval must be at least 1 second, got {options.interval!r}")
    if not root_list:
        raise ConfigUsageError("auto_reload needs at least one source to load")
    config = load(root_list, reader=reader, parser=parser, environ=environ, on_error=options.on_error)
    return config, start_polling(config, options)


def empty() -> Config:
    """Return a new, independent handle with no sources and no bindings."""

    return _build((), reader=None, parser=None, environ=None, on_error=None)


def _build(
    roots: Iterable[RootLike],
    *,
    reader: SourceReader | None,
    parser: DirectiveParser | None,
    environ: Mapping[str, str] | None,
    on_error: ErrorHandler | None,
) -> Config:
    return Config(
        _normalize_roots(roots),
        reader=reader or FileSystemReader(),
        parser=parser or SuffixParser(),
        environ=DefaultEnvironment(environ=environ),
        on_error=on_error,
    )


def _normalize_roots(roots: Iterable[RootLike]) -> list[SourceRef]:
    """Return *roots* as :class:`SourceRef` objects, strings becoming required.

    Examples
    --------
    >>> _normalize_roots(["a.cfg", SourceRef("b.cfg", False)])
    [SourceRef(path='a.cfg', required=True), SourceRef(path='b.cfg', required=False)]
    """

    return [required(root) if isinstance(root, str) else root for root in roots]


__all__ = [
    "AutoReloadOptions",
    "Config",
    "ReloadHandle",
    "SuffixParser",
    "auto_reload",
    "empty",
    "load",
    "reload",
]
