"""Live, reloadable, hierarchical configuration.

Load configuration sources into a flat dotted namespace, look values up with
type conversion, reload on demand or automatically when files change, and
subscribe to changes of individual names or whole prefixes.
"""

from __future__ import annotations

from .application.diff import Diff
from .application.live import Config
from .application.scheduler import AutoReloadOptions, ReloadHandle
from .core import SuffixParser, auto_reload, empty, load, reload
from .domain.convert import convert
from .domain.errors import (
    ConfigError,
    ConfigKeyError,
    ConfigUsageError,
    InterpolationError,
    LoadError,
    ParseError,
    SourceNotFound,
)
from .domain.patterns import Pattern, exact, prefix
from .domain.snapshot import Snapshot
from .domain.values import Bind, Group, Import, SourceRef, optional, required
from .observability import bind_trace_id, get_logger

__all__ = [
    "AutoReloadOptions",
    "Bind",
    "Config",
    "ConfigError",
    "ConfigKeyError",
    "ConfigUsageError",
    "Diff",
    "Group",
    "Import",
    "InterpolationError",
    "LoadError",
    "ParseError",
    "Pattern",
    "ReloadHandle",
    "Snapshot",
    "SourceNotFound",
    "SourceRef",
    "SuffixParser",
    "auto_reload",
    "bind_trace_id",
    "convert",
    "empty",
    "exact",
    "get_logger",
    "load",
    "optional",
    "prefix",
    "reload",
    "required",
]
