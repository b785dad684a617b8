"""
CLI commands for installing SeAT.

Thin wrappers over ``seat_installer.core.use_cases.install_*``.
"""

from __future__ import annotations

import sys

import click

from seat_installer.ui.cli.common import make_context, yes_option


@click.group()
def install() -> None:
    """Install — production or development instances of SeAT."""


@install.command()
@click.option(
    "--seat-destination",
    "-d",
    "destination",
    default="/var/www/seat",
    show_default=True,
    help="Directory to install SeAT into.",
)
@click.option(
    "--webserver",
    type=click.Choice(["apache", "nginx"], case_sensitive=False),
    default=None,
    help="Web server to configure (default: ask).",
)
@click.option("--stability", default="stable", show_default=True, help="Composer minimum stability.")
@yes_option
@click.pass_context
def production(
    ctx: click.Context,
    destination: str,
    webserver: str | None,
    stability: str,
    assume_yes: bool,
) -> None:
    """Install and configure SeAT with all of its services."""
    from seat_installer.core.services.webserver import WebServerKind
    from seat_installer.core.use_cases.install_production import install_production

    kind = WebServerKind(webserver.lower()) if webserver else None
    if not install_production(make_context(ctx, assume_yes=assume_yes), destination, kind, stability):
        sys.exit(1)


@install.command()
@click.option(
    "--seat-destination",
    "-d",
    "destination",
    default="seat-development",
    show_default=True,
    help="Directory to clone the development instance into.",
)
@yes_option
@click.pass_context
def development(ctx: click.Context, destination: str, assume_yes: bool) -> None:
    """Clone a development instance of SeAT."""
    from seat_installer.core.use_cases.install_development import install_development

    if not install_development(make_context(ctx, assume_yes=assume_yes), destination):
        sys.exit(1)
