"""
SeAT Installer — CLI entrypoint.

Usage:
    seat --help
    seat install production
    seat diagnose
"""

from __future__ import annotations

import json
import os
import shlex
import sys
from pathlib import Path

import click

from seat_installer import __version__
from seat_installer.core.errors import InstallerError
from seat_installer.core.observability.logging_config import setup_logging
from seat_installer.ui.cli.common import locate, make_context, seat_path_option


class InstallerGroup(click.Group):
    """Root group: turns any ``InstallerError`` into a red line and exit 1."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except InstallerError as e:
            click.secho(f"❌ {e.message}", fg="red", err=True)
            if e.remediation:
                click.secho(f"   Try: {e.remediation}", fg="yellow", err=True)
            sys.exit(1)


@click.group(cls=InstallerGroup)
@click.version_option(version=__version__, prog_name="seat")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to the tool config (default: /etc/seat-tool.conf).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """SeAT Installer — install, update and diagnose SeAT."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("SEAT_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("SEAT_LOG_FILE"),
        log_file_level=os.environ.get("SEAT_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


# ── Installation helpers ────────────────────────────────────────


@cli.command()
@click.option("--script", is_flag=True, help="Print only the path (script friendly).")
@click.pass_context
def where(ctx: click.Context, script: bool) -> None:
    """Show where the SeAT directory is."""
    path = locate(ctx, None)
    if script:
        click.echo(path)
        return
    click.secho(f"✅ SeAT is at: {path}", fg="green")


@cli.command()
@click.pass_context
def cd(ctx: click.Context) -> None:
    """Print a cd line for the SeAT directory.

    Use as ``eval "$(seat cd)"``.
    """
    click.echo(f"cd {shlex.quote(locate(ctx, None))}")


@cli.command(context_settings={"ignore_unknown_options": True})
@seat_path_option
@click.argument("cmd", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def run(ctx: click.Context, seat_path: str | None, cmd: tuple[str, ...]) -> None:
    """Run an artisan command in the SeAT directory."""
    from seat_installer.core.services.executables import find_executable

    path = locate(ctx, seat_path)
    context = make_context(ctx)
    context.console.text(f"SeAT Path detected at: {path}")

    php = find_executable("php") or "php"
    artisan = Path(path) / "artisan"
    result = context.runner.execute(f"{php} {artisan} {shlex.join(cmd)}", prefix="")
    sys.exit(result.return_code if result.return_code is not None else 1)


@cli.command()
@seat_path_option
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def diagnose(ctx: click.Context, seat_path: str | None, as_json: bool) -> None:
    """Diagnose common problems with a SeAT installation."""
    from seat_installer.core.use_cases.diagnose import run_diagnostics

    path = locate(ctx, seat_path)
    result = run_diagnostics(make_context(ctx), path)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.ok:
        click.secho("✅ All diagnostic checks passed", fg="green", bold=True)
    else:
        failed = [c.name for c in result.checks if not c.ok]
        click.secho(f"❌ Failed checks: {', '.join(failed)}", fg="red", bold=True)

    if not result.ok:
        sys.exit(1)


# ── Register sub-command groups from ui/cli/ ────────────────────

from seat_installer.ui.cli.install import install
from seat_installer.ui.cli.update import update
from seat_installer.ui.cli.make import make

cli.add_command(install)
cli.add_command(update)
cli.add_command(make)


if __name__ == "__main__":
    cli()
