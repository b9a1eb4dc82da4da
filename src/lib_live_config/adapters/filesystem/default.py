"""Filesystem adapter.

Purpose
-------
Implement the :class:`lib_live_config.application.ports.SourceReader` protocol
on top of :mod:`pathlib`. The loader reads whole files; the reload poller only
asks for size and modification time.
"""

from __future__ import annotations

from pathlib import Path

from ...observability import log_debug


class FileSystemReader:
    """Read configuration sources from the local filesystem."""

    def read(self, path: str) -> bytes:
        """Return the contents of *path*.

        Raises
        ------
        OSError
            When the file is missing, is a directory, or cannot be opened.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b"key = 1")
        >>> tmp.close()
        >>> FileSystemReader().read(tmp.name)
        b'key = 1'
        >>> Path(tmp.name).unlink()
        """

        payload = Path(path).read_bytes()
        log_debug("config_file_read", source="file", path=path, size=len(payload))
        return payload

    def stat(self, path: str) -> tuple[int, float]:
        """Return ``(size, mtime)`` for *path*, raising :class:`OSError` when absent."""

        info = Path(path).stat()
        return info.st_size, info.st_mtime
