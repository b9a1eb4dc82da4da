"""Structured document parsers (TOML, JSON, YAML).

Purpose
-------
Let TOML/JSON/YAML files take part in a load alongside native directive files.
Each parser decodes the document with the usual library and translates the
resulting mapping into directives: tables become groups, scalars and arrays
become bindings, and a top-level ``import`` key (a string or a list of strings)
becomes import directives.

Contents
--------
* :class:`BaseStructuredParser` – shared translation and validation helpers.
* :class:`TOMLParser` – ``tomllib`` (``tomli`` before Python 3.11).
* :class:`JSONParser` – standard library ``json``.
* :class:`YAMLParser` – PyYAML, only available when the ``yaml`` extra is
  installed.

System Role
-----------
Selected by file suffix in :mod:`lib_live_config.core`. Values the flat
namespace cannot hold (floats, nulls, dates) are rejected with
:class:`ParseError` rather than silently coerced.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

from ...domain.errors import ParseError
from ...domain.values import Bind, Directive, Group, Import, Value, is_valid_name
from ...observability import log_debug, log_error

try:
    import yaml  # type: ignore[import-untyped]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]

IMPORT_KEY = "import"


class BaseStructuredParser:
    """Common utilities shared by the structured parsers."""

    format_name = "structured"

    def _translate(self, data: object, *, path: str) -> tuple[Directive, ...]:
        """Validate the decoded document and translate it into directives.

        Examples
        --------
        >>> BaseStructuredParser()._translate({"import": "x.cfg", "db": {"port": 5432}}, path="demo")
        (Import(path='x.cfg'), Group(name='db', body=(Bind(name='port', value=5432),)))
        >>> BaseStructuredParser()._translate([1], path="demo")
        Traceback (most recent call last):
        ...
        lib_live_config.domain.errors.ParseError: demo: document did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise ParseError(path, "document did not produce a mapping")
        directives = self._mapping(data, path=path, top_level=True, trail=())
        log_debug("source_translated", source=self.format_name, path=path, directives=len(directives))
        return directives

    def _mapping(
        self,
        data: Mapping[Any, Any],
        *,
        path: str,
        top_level: bool,
        trail: tuple[str, ...],
    ) -> tuple[Directive, ...]:
        directives: list[Directive] = []
        for key, value in data.items():
            if top_level and key == IMPORT_KEY:
                directives.extend(Import(item) for item in _import_paths(value, path))
                continue
            if not isinstance(key, str) or not is_valid_name(key) or key == IMPORT_KEY:
                raise ParseError(path, f"invalid name {'.'.join([*trail, str(key)])!r}")
            if isinstance(value, Mapping):
                body = self._mapping(value, path=path, top_level=False, trail=(*trail, key))
                directives.append(Group(key, body))
            else:
                directives.append(Bind(key, _value(value, path=path, dotted=".".join([*trail, key]))))
        return tuple(directives)


def _import_paths(value: object, path: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return list(value)
    raise ParseError(path, "'import' must be a string or a list of strings")


def _value(value: object, *, path: str, dotted: str) -> Value:
    """Check that *value* fits the value model and freeze lists into tuples."""

    if isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, list):
        return tuple(_value(item, path=path, dotted=dotted) for item in value)
    raise ParseError(path, f"unsupported value of type {type(value).__name__} for {dotted!r}")


class TOMLParser(BaseStructuredParser):
    """Translate TOML documents."""

    format_name = "toml"

    def parse(self, text: str, *, path: str = "") -> tuple[Directive, ...]:
        """Return directives for the TOML document *text*.

        Examples
        --------
        >>> TOMLParser().parse('[service]\\ntimeout = 15\\n')
        (Group(name='service', body=(Bind(name='timeout', value=15),)),)
        """

        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            log_error("source_invalid", source="toml", path=path, error=str(exc))
            raise ParseError(path, f"invalid TOML: {exc}") from exc
        return self._translate(data, path=path)


class JSONParser(BaseStructuredParser):
    """Translate JSON documents."""

    format_name = "json"

    def parse(self, text: str, *, path: str = "") -> tuple[Directive, ...]:
        """Return directives for the JSON document *text*.

        Examples
        --------
        >>> JSONParser().parse('{"enabled": true, "hosts": ["a", "b"]}')
        (Bind(name='enabled', value=True), Bind(name='hosts', value=('a', 'b')))
        """

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            log_error("source_invalid", source="json", path=path, error=str(exc))
            raise ParseError(path, f"invalid JSON: {exc.msg}", line=exc.lineno, column=exc.colno) from exc
        return self._translate(data, path=path)


class YAMLParser(BaseStructuredParser):
    """Translate YAML documents when PyYAML is available."""

    format_name = "yaml"

    def parse(self, text: str, *, path: str = "") -> tuple[Directive, ...]:
        """Return directives for the YAML document *text*; an empty document is empty.

        Raises
        ------
        ParseError
            When PyYAML is not installed or the document is malformed.
        """

        if yaml is None:
            raise ParseError(path, "PyYAML is required for YAML configuration support")
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            log_error("source_invalid", source="yaml", path=path, error=str(exc))
            raise ParseError(path, f"invalid YAML: {exc}") from exc
        if data is None:
            data = {}
        return self._translate(data, path=path)
