"""
Shared helpers for the CLI command modules.
"""

from __future__ import annotations

import click

from seat_installer.core.config.loader import load_tool_config
from seat_installer.core.models.config import ToolConfig
from seat_installer.core.services.installation import resolve_installation
from seat_installer.core.use_cases.context import InstallerContext
from seat_installer.ui.cli.console import ClickConsole

seat_path_option = click.option(
    "--seat-path",
    "-s",
    "seat_path",
    default=None,
    help="Path to the SeAT installation (default: auto-detect).",
)

yes_option = click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to confirmations.")


def tool_config(ctx: click.Context) -> ToolConfig:
    """Load the tool config once per invocation."""
    if "tool_config" not in ctx.obj:
        ctx.obj["tool_config"] = load_tool_config(ctx.obj.get("config_path"))
    return ctx.obj["tool_config"]


def make_context(ctx: click.Context, *, assume_yes: bool = False) -> InstallerContext:
    console = ClickConsole(assume_yes=assume_yes, quiet=ctx.obj.get("quiet", False))
    return InstallerContext(console=console, config=tool_config(ctx))


def locate(ctx: click.Context, seat_path: str | None) -> str:
    return resolve_installation(seat_path, tool_config(ctx))
