"""Adapter contract tests for the default ports implementation.

Purpose
-------
Verify the default adapters continue to satisfy the application-layer ports
defined in ``src/lib_live_config/application/ports.py`` so that dependency
inversion remains enforceable through automated tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_live_config.adapters.filesystem.default import FileSystemReader
from lib_live_config.adapters.parser import structured as structured_module
from lib_live_config.adapters.parser.directives import DirectiveFileParser
from lib_live_config.adapters.parser.structured import JSONParser, TOMLParser, YAMLParser
from lib_live_config.application import ports
from lib_live_config.core import SuffixParser
from lib_live_config.domain.values import Bind, Group

SAMPLES = {
    DirectiveFileParser: "service { value = 1 }",
    TOMLParser: "[service]\nvalue = 1\n",
    JSONParser: '{"service": {"value": 1}}',
    YAMLParser: "service:\n  value: 1\n",
}

parsers = [DirectiveFileParser, TOMLParser, JSONParser, SuffixParser]
if structured_module.yaml is not None:
    parsers.append(YAMLParser)


@pytest.mark.parametrize("parser_cls", parsers)
def test_parser_contract(parser_cls) -> None:
    """Every parser satisfies DirectiveParser and yields the same directives for equivalent input."""

    parser = parser_cls()
    assert isinstance(parser, ports.DirectiveParser)
    text = SAMPLES.get(parser_cls, SAMPLES[DirectiveFileParser])
    assert parser.parse(text, path="contract") == (Group("service", (Bind("value", 1),)),)


def test_filesystem_reader_contract(tmp_path: Path) -> None:
    """FileSystemReader satisfies SourceReader and reports size and mtime."""

    reader = FileSystemReader()
    assert isinstance(reader, ports.SourceReader)

    target = tmp_path / "app.cfg"
    target.write_bytes(b"a = 1\n")
    assert reader.read(str(target)) == b"a = 1\n"
    size, mtime = reader.stat(str(target))
    assert size == 6
    assert mtime == target.stat().st_mtime


def test_filesystem_reader_raises_os_error_for_missing_files(tmp_path: Path) -> None:
    reader = FileSystemReader()
    with pytest.raises(OSError):
        reader.read(str(tmp_path / "missing.cfg"))
    with pytest.raises(OSError):
        reader.stat(str(tmp_path / "missing.cfg"))


def test_filesystem_reader_rejects_directories(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        FileSystemReader().read(str(tmp_path))


def test_memory_reader_fixture_satisfies_the_port(memory_reader) -> None:
    assert isinstance(memory_reader, ports.SourceReader)
