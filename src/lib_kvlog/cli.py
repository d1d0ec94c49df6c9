"""CLI adapter for ``lib_kvlog`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let shell scripts emit lines in the same ``key=value`` format as the services
they accompany, so a deploy script and the service it starts produce greppable
records with a shared namespace.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_log` / :func:`cli_success` / :func:`cli_error` – emit one line
  through :func:`lib_kvlog.new`.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. Lines go to the default sink selected by
``LIB_KVLOG_OUTPUT``; ``lib_cli_exit_tools`` centralises the exit code strategy
so sink or configuration failures behave consistently across shells and CI.
"""

from __future__ import annotations

import sys
from importlib import metadata
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .core import new
from .domain.logger import Logger

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` when not installed."""

    try:
        return metadata.version("lib_kvlog")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Emit single-line key=value log records",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_kvlog",
    message="lib_kvlog version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

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
        meta = metadata.metadata("lib_kvlog")
    except metadata.PackageNotFoundError:
        click.echo("lib_kvlog (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_kvlog')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")


def _line_options(command: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the arguments shared by every emitting command."""

    decorators = (
        click.argument("namespace"),
        click.argument("message", required=False, default=""),
        click.option(
            "--attr",
            "attrs",
            multiple=True,
            help="Attribute tokens such as 'app=web' (repeatable, appended in order)",
        ),
        click.option("--at", "at", default=None, help="Value of the single at= slot"),
        click.option("--step", "step", default=None, help="Value of the single step= slot"),
    )
    for decorator in reversed(decorators):
        command = decorator(command)
    return command


def _build_logger(namespace: str, attrs: Sequence[str], at: Optional[str], step: Optional[str]) -> Logger:
    logger = new(namespace)
    for attr in attrs:
        logger = logger.with_namespace(attr)
    if at is not None:
        logger = logger.at(at)
    if step is not None:
        logger = logger.step(step)
    return logger


@cli.command("log", context_settings=CLICK_CONTEXT_SETTINGS)
@_line_options
def cli_log(namespace: str, message: str, attrs: Sequence[str], at: Optional[str], step: Optional[str]) -> None:
    """Write NAMESPACE, the attributes and MESSAGE as one line.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["log", "ns=deploy", "phase=migrate", "--at", "db"])
    >>> result.output
    'ns=deploy at=db phase=migrate\\n'
    """

    _build_logger(namespace, attrs, at, step).log("%s", message)


@cli.command("success", context_settings=CLICK_CONTEXT_SETTINGS)
@_line_options
@click.option("--timed/--no-timed", default=False, help="Start the logger first so the line carries elapsed=")
def cli_success(
    namespace: str,
    message: str,
    attrs: Sequence[str],
    at: Optional[str],
    step: Optional[str],
    timed: bool,
) -> None:
    """Write a state=success line."""

    logger = _build_logger(namespace, attrs, at, step)
    if timed:
        logger = logger.start()
    logger.success("%s", message)


@cli.command("error", context_settings=CLICK_CONTEXT_SETTINGS)
@_line_options
def cli_error(namespace: str, message: str, attrs: Sequence[str], at: Optional[str], step: Optional[str]) -> None:
    """Write a state=error line carrying MESSAGE as the quoted error text."""

    _build_logger(namespace, attrs, at, step).error(message)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_kvlog",
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
