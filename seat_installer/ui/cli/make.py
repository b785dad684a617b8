"""
CLI commands for scaffolding SeAT packages.
"""

from __future__ import annotations

import click

from seat_installer.ui.cli.common import make_context


@click.group()
def make() -> None:
    """Make — scaffolding for SeAT development."""


@make.command()
@click.option("--folder", "-f", default="my-package", show_default=True, help="Folder to create the package in.")
@click.pass_context
def package(ctx: click.Context, folder: str) -> None:
    """Create a new SeAT package from the example skeleton."""
    from seat_installer.core.use_cases.install_development import make_package

    make_package(make_context(ctx), folder)
