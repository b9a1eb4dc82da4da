"""Transitive, cycle-safe source loading.

Purpose
-------
Resolve a list of root references into parsed directive sequences, following
``import`` directives until every reachable source has been read once.

Contents
--------
* :class:`LoadedSources` – result of one load cycle.
* :func:`load_all` – work-list driven loader.
* :func:`_load_one` – reads and parses a single reference, applying the
  required/optional policy.

System Role
-----------
Called by :class:`lib_live_config.application.live.Config` on initial load and
on every reload. Its output feeds :func:`lib_live_config.application.flatten.flatten`
and tells the scheduler which files to poll.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..domain.errors import ParseError, SourceNotFound
from ..domain.values import Directive, SourceRef, imports_of, required
from ..observability import log_debug, log_error, make_event
from .interpolate import interpolate
from .ports import DirectiveParser, SourceReader


@dataclass(frozen=True)
class LoadedSources:
    """Directives and resolved paths for every reference visited in one cycle.

    Attributes
    ----------
    directives:
        Insertion-ordered mapping from reference to its directives. Optional
        sources that could not be read map to an empty tuple.
    paths:
        Mapping from reference to the filesystem path it resolved to after
        environment interpolation.
    """

    directives: Mapping[SourceRef, tuple[Directive, ...]] = field(default_factory=dict)
    paths: Mapping[SourceRef, str] = field(default_factory=dict)

    def resolved_paths(self) -> list[str]:
        """Return the distinct resolved paths in load order."""

        return list(dict.fromkeys(self.paths.values()))


def load_all(
    roots: Iterable[SourceRef],
    *,
    reader: SourceReader,
    parser: DirectiveParser,
    environ: Mapping[str, str],
) -> LoadedSources:
    """Load *roots* and everything they import, each reference exactly once.

    Why
    ----
    Imports may form cycles or diamonds; an explicit work-list with a visited
    mapping keeps the traversal finite and its memory independent of import
    depth.

    What
    ----
    Processes references first-in first-out. Every ``import "p"`` discovered
    anywhere in a source, group bodies included, enqueues ``required("p")``
    unless that reference was already visited.

    Raises
    ------
    SourceNotFound
        A required reference could not be read.
    ParseError
        Any reference (required or optional) was read but is malformed.
    InterpolationError
        A path contains an unresolvable ``$(NAME)``.

    Examples
    --------
    >>> class Reader:
    ...     files = {"a.cfg": b'import "b.cfg"', "b.cfg": b'import "a.cfg"'}
    ...     def read(self, path): return self.files[path]
    ...     def stat(self, path): return (0, 0.0)
    >>> from lib_live_config.adapters.parser.directives import DirectiveFileParser
    >>> loaded = load_all([required("a.cfg")], reader=Reader(), parser=DirectiveFileParser(), environ={})
    >>> [ref.path for ref in loaded.directives]
    ['a.cfg', 'b.cfg']
    """

    directives: dict[SourceRef, tuple[Directive, ...]] = {}
    paths: dict[SourceRef, str] = {}
    pending: deque[SourceRef] = deque(roots)
    while pending:
        ref = pending.popleft()
        if ref in directives:
            continue
        path = interpolate(ref.path, {}, environ=environ)
        parsed = _load_one(ref, path, reader=reader, parser=parser)
        directives[ref] = parsed
        paths[ref] = path
        for imported in imports_of(parsed):
            candidate = required(imported)
            if candidate not in directives:
                pending.append(candidate)
    return LoadedSources(directives=directives, paths=paths)


def _load_one(ref: SourceRef, path: str, *, reader: SourceReader, parser: DirectiveParser) -> tuple[Directive, ...]:
    """Read and parse one reference, honouring its required/optional flag."""

    try:
        payload = reader.read(path)
    except OSError as exc:
        if ref.required:
            log_error("source_missing", **make_event(str(ref), path, {"error": str(exc)}))
            raise SourceNotFound(path, exc.strerror or str(exc)) from exc
        log_debug("source_missing", **make_event(str(ref), path, {"optional": True}))
        return ()
    log_debug("source_read", **make_event(str(ref), path, {"size": len(payload)}))
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        log_error("source_invalid", **make_event(str(ref), path, {"error": str(exc)}))
        raise ParseError(path, f"source is not valid UTF-8: {exc}") from exc
    try:
        parsed = tuple(parser.parse(text, path=path))
    except ParseError as exc:
        log_error("source_invalid", **make_event(str(ref), path, {"error": str(exc)}))
        raise
    log_debug("source_parsed", **make_event(str(ref), path, {"directives": len(parsed)}))
    return parsed
