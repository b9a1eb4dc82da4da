"""Shared fixtures: an in-memory source reader and on-disk source writers."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from lib_live_config.core import SuffixParser


class MemoryReader:
    """In-memory stand-in for the filesystem that records every read."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = {}
        self.mtimes: dict[str, float] = {}
        self.reads: list[str] = []
        for path, text in (files or {}).items():
            self.write(path, text)

    def write(self, path: str, text: str) -> None:
        self.files[path] = text
        self.mtimes[path] = self.mtimes.get(path, 0.0) + 1.0

    def remove(self, path: str) -> None:
        self.files.pop(path, None)
        self.mtimes.pop(path, None)

    def read(self, path: str) -> bytes:
        self.reads.append(path)
        try:
            return self.files[path].encode("utf-8")
        except KeyError:
            raise FileNotFoundError(2, "No such file or directory", path) from None

    def stat(self, path: str) -> tuple[int, float]:
        if path not in self.files:
            raise FileNotFoundError(2, "No such file or directory", path)
        return len(self.files[path].encode("utf-8")), self.mtimes[path]


@pytest.fixture()
def memory_reader() -> MemoryReader:
    """Return an empty in-memory reader; tests populate it with ``write``."""

    return MemoryReader()


@pytest.fixture()
def parser() -> SuffixParser:
    return SuffixParser()


@pytest.fixture()
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write ``content`` to ``tmp_path / name`` and return the path."""

    def _write(name: str, content: str) -> Path:
        target = tmp_path / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    return _write
