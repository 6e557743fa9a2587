"""CLI adapter for ``keycode_registry`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose the registry build as a command that needs no arguments: running
``keycode-registry`` resolves the layered settings, builds the registry, and
writes the output artifact. ``lib_cli_exit_tools`` centralises the exit code
strategy so failures print their message and exit non-zero.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command; builds the registry when no subcommand is given.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`main` – entry point used by ``console_scripts`` registration.
"""

from __future__ import annotations

import logging
import sys
from importlib import metadata
from pathlib import Path
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import build_registry
from .observability import get_logger
from .settings import resolve_settings

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000
_DISTRIBUTION: Final[str] = "keycode_registry"


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` when not installed."""

    try:
        return metadata.version(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "0.0.0"


class _EchoHandler(logging.Handler):
    """Echo records to stderr, appending their structured ``context``.

    The stream is looked up per record so the handler follows stream swaps
    made by ``click.testing.CliRunner``.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = f"{record.levelname} {record.getMessage()}"
            context = getattr(record, "context", None) or {}
            details = " ".join(f"{key}={value}" for key, value in context.items() if key != "run_id")
            click.echo(f"{message} {details}" if details else message, err=True)
        except Exception:  # noqa: BLE001 - logging must never raise
            self.handleError(record)


_HANDLER: Final[_EchoHandler] = _EchoHandler()


def _configure_logging(verbose: bool) -> None:
    """Route package events to stderr: warnings always, everything with ``--verbose``."""

    logger = get_logger()
    if _HANDLER not in logger.handlers:
        logger.addHandler(_HANDLER)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group(
    help="Build the canonical keycode registry from the firmware keycode files",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=True,
)
@click.version_option(
    version=_resolve_version(),
    prog_name=_DISTRIBUTION,
    message="keycode_registry version %(version)s",
)
@click.option(
    "--source-dir",
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True),
    default=None,
    help="Directory holding keycodes_<version>[_<category>].hjson files",
)
@click.option(
    "--overrides",
    "overrides_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Tab separated description override table",
)
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Existing curated registry (JSON or YAML)",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Where to write the descriptor JSON array",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every pipeline event to stderr")
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(
    ctx: click.Context,
    source_dir: Optional[Path],
    overrides_path: Optional[Path],
    registry_path: Optional[Path],
    output_path: Optional[Path],
    verbose: bool,
    traceback: bool,
) -> None:
    """Build the registry unless a subcommand was requested.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``; writes the output
        artifact.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback
    if ctx.invoked_subcommand is not None:
        return

    _configure_logging(verbose)
    settings = resolve_settings(
        overrides={
            "source_dir": source_dir,
            "overrides_path": overrides_path,
            "registry_path": registry_path,
            "output_path": output_path,
        }
    )
    report = build_registry(settings)
    click.echo(
        f"Wrote {len(report.descriptors)} keycodes to {report.output_path} "
        f"({len(report.diagnostics)} name mismatches)"
    )


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata(_DISTRIBUTION)
    except metadata.PackageNotFoundError:
        click.echo("keycode_registry (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', _DISTRIBUTION)}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.11')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name=_DISTRIBUTION,
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
