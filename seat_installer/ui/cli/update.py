"""
CLI commands for updating SeAT and this tool.
"""

from __future__ import annotations

import json
import sys

import click

from seat_installer.ui.cli.common import locate, make_context, seat_path_option, yes_option


@click.group()
def update() -> None:
    """Update — an installed SeAT, or this tool."""


@update.command("seat")
@seat_path_option
@click.option("--ignore-supervisor", is_flag=True, help="Do not restart the Supervisor workers.")
@click.option("--ignore-artisan", is_flag=True, help="Skip the artisan publish/migrate/seed commands.")
@click.option("--include-dev", is_flag=True, help="Install composer dev dependencies too.")
@yes_option
@click.pass_context
def update_seat_cmd(
    ctx: click.Context,
    seat_path: str | None,
    ignore_supervisor: bool,
    ignore_artisan: bool,
    include_dev: bool,
    assume_yes: bool,
) -> None:
    """Update the SeAT packages and run the upgrade commands."""
    from seat_installer.core.use_cases.update import update_seat

    path = locate(ctx, seat_path)
    completed = update_seat(
        make_context(ctx, assume_yes=assume_yes),
        path,
        ignore_supervisor=ignore_supervisor,
        ignore_artisan=ignore_artisan,
        include_dev=include_dev,
    )
    if not completed:
        sys.exit(1)


@update.command("self")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def update_self(as_json: bool) -> None:
    """Check whether a newer release of this tool is published."""
    from seat_installer.core.use_cases.update import check_self_update

    result = check_self_update()

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if result.error:
        click.secho(f"❌ Unable to check for updates: {result.error}", fg="red")
        sys.exit(1)

    click.echo(f"   Installed: {result.current}")
    click.echo(f"   Published: {result.latest or 'unknown'}")
    if result.update_available:
        click.secho(f"⚠️  Version {result.latest} is available.", fg="yellow")
        click.echo("   Upgrade with: pip install --upgrade seat-installer")
    else:
        click.secho("✅ You are running the latest version", fg="green")
