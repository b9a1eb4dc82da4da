"""CLI adapter for ``lib_live_config`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators inspect what a set of configuration sources flattens to without
writing Python: dump the whole namespace or look up a single name with the
same conversion rules the library applies.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata.
* :func:`cli_read` – loads sources and prints the flattened snapshot as JSON.
* :func:`cli_get` – prints a single value, failing when it is absent.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
Outermost layer. It only calls :func:`lib_live_config.core.load` and the
handle's lookup methods.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import load
from .domain.values import SourceRef, optional, required, thaw_value

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

# Conversion targets offered by ``get --as``.
TYPE_CHOICES: Final[dict[str, object]] = {
    "any": None,
    "str": str,
    "int": int,
    "bool": bool,
    "float": float,
    "list": list,
}


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_live_config")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Live hierarchical configuration loader",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_live_config",
    message="lib_live_config version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command storing the traceback preference for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_live_config")
    except metadata.PackageNotFoundError:
        click.echo("lib_live_config (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_live_config')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


_optional_sources = click.option(
    "--optional",
    "optional_paths",
    multiple=True,
    help="Source that may be missing (repeatable, loaded after the required ones)",
)


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("paths", nargs=-1)
@_optional_sources
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_read(paths: Sequence[str], optional_paths: Sequence[str], indent: Optional[int]) -> None:
    """Load PATHS and print every flattened binding as a JSON object.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["read", "--optional", "does-not-exist.cfg"])
    >>> result.output.strip()
    '{}'
    """

    config = load(_roots(paths, optional_paths))
    click.echo(config.snapshot().to_json(indent=indent))


@cli.command("get", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("name")
@click.argument("paths", nargs=-1)
@_optional_sources
@click.option(
    "--as",
    "as_type",
    type=click.Choice(sorted(TYPE_CHOICES), case_sensitive=False),
    default="any",
    show_default=True,
    help="Convert the value before printing; a failed conversion counts as missing",
)
def cli_get(name: str, paths: Sequence[str], optional_paths: Sequence[str], as_type: str) -> None:
    """Load PATHS and print the value bound to NAME as JSON.

    Exits with an error naming the key when it is unbound or cannot be
    converted.
    """

    config = load(_roots(paths, optional_paths))
    value = config.require(name, TYPE_CHOICES[as_type.lower()])
    click.echo(json.dumps(thaw_value(value), ensure_ascii=False))


def _roots(paths: Sequence[str], optional_paths: Sequence[str]) -> list[SourceRef]:
    """Required sources first, then optional ones, each in command line order."""

    return [required(path) for path in paths] + [optional(path) for path in optional_paths]


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_live_config",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
