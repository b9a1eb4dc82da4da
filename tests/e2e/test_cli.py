"""End-to-end CLI coverage for the commands exposed by lib-live-config.

These tests drive ``read``, ``get`` and ``info`` against real files so the
command line stays in step with what :func:`lib_live_config.load` produces.
"""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

import lib_cli_exit_tools

from lib_live_config import ConfigKeyError, SourceNotFound, cli


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def test_cli_read_prints_flattened_json(write_source) -> None:
    """`cli read` emits every binding under its dotted name."""

    base = write_source("base.cfg", 'db { host = "localhost"\n port = 5432 }\nflags = [on, off]')
    result = _runner().invoke(cli.cli, ["read", str(base), "--indent", "2"])
    assert result.exit_code == 0
    assert json.loads(result.output) == {"db.host": "localhost", "db.port": 5432, "flags": [True, False]}


def test_cli_read_applies_optional_sources_last(write_source, tmp_path: Path) -> None:
    base = write_source("base.cfg", "port = 1")
    local = write_source("local.cfg", "port = 2")
    result = _runner().invoke(
        cli.cli,
        ["read", str(base), "--optional", str(local), "--optional", str(tmp_path / "absent.cfg")],
    )
    assert result.exit_code == 0
    assert json.loads(result.output) == {"port": 2}


def test_cli_read_missing_required_source_fails(tmp_path: Path) -> None:
    result = _runner().invoke(cli.cli, ["read", str(tmp_path / "absent.cfg")])
    assert result.exit_code != 0
    assert isinstance(result.exception, SourceNotFound)


def test_cli_get_prints_single_value(write_source) -> None:
    source = write_source("app.toml", '[service]\nname = "api"\nport = 8080\n')
    result = _runner().invoke(cli.cli, ["get", "service.name", str(source)])
    assert result.exit_code == 0
    assert result.output.strip() == '"api"'

    converted = _runner().invoke(cli.cli, ["get", "service.port", str(source), "--as", "float"])
    assert converted.exit_code == 0
    assert converted.output.strip() == "8080.0"


def test_cli_get_missing_key_fails(write_source) -> None:
    source = write_source("app.cfg", 'name = "api"')
    result = _runner().invoke(cli.cli, ["get", "port", str(source)])
    assert result.exit_code != 0
    assert isinstance(result.exception, ConfigKeyError)

    mistyped = _runner().invoke(cli.cli, ["get", "name", str(source), "--as", "int"])
    assert isinstance(mistyped.exception, ConfigKeyError)


def test_cli_info_handles_missing_metadata(monkeypatch) -> None:
    """`cli info` must degrade gracefully when package metadata is unavailable."""

    def _raise_pkg_not_found(*_args, **_kwargs):
        raise cli.metadata.PackageNotFoundError()

    monkeypatch.setattr(cli.metadata, "metadata", _raise_pkg_not_found)
    result = _runner().invoke(cli.cli, ["info"])
    assert result.exit_code == 0
    assert "metadata unavailable" in result.output


def test_cli_main_restores_traceback_flag(write_source) -> None:
    """`cli main` should restore lib_cli_exit_tools tracebacks after execution."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    source = write_source("app.cfg", "value = 1")
    exit_code = cli.main(["--traceback", "read", str(source)], restore_traceback=True)
    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous_traceback


def test_cli_main_reports_failures_with_nonzero_exit(tmp_path: Path) -> None:
    exit_code = cli.main(["read", str(tmp_path / "absent.cfg")])
    assert exit_code != 0
