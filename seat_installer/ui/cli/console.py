"""
Click-backed console — renders service messages in the terminal.
"""

from __future__ import annotations

from collections.abc import Sequence

import click


class ClickConsole:
    """``Console`` implementation over click.echo / click.prompt.

    ``assume_yes`` answers every confirmation with its default-yes
    (used by ``--yes``); prompts that need a value still ask.
    """

    def __init__(self, *, assume_yes: bool = False, quiet: bool = False) -> None:
        self.assume_yes = assume_yes
        self.quiet = quiet

    # ── Output ──────────────────────────────────────────────────

    def title(self, message: str) -> None:
        click.echo()
        click.secho(f"🛠  {message}", fg="cyan", bold=True)
        click.secho("=" * (len(message) + 3), fg="cyan")
        click.echo()

    def text(self, message: str) -> None:
        if not self.quiet:
            click.echo(f" {message}")

    def note(self, message: str) -> None:
        click.secho(f" ℹ️  {message}", fg="yellow")

    def success(self, message: str) -> None:
        click.secho(f"✅ {message}", fg="green")

    def warning(self, message: str) -> None:
        click.secho(f"⚠️  {message}", fg="yellow")

    def error(self, message: str) -> None:
        click.secho(f"❌ {message}", fg="red", err=True)

    def listing(self, items: Sequence[str]) -> None:
        for item in items:
            click.echo(f"   • {item}")
        click.echo()

    def write(self, chunk: str) -> None:
        click.echo(chunk, nl=False)

    # ── Prompts ─────────────────────────────────────────────────

    def confirm(self, question: str, default: bool = True) -> bool:
        if self.assume_yes:
            return True
        return click.confirm(question, default=default)

    def ask(self, question: str, default: str | None = None) -> str:
        return click.prompt(question, default=default, type=str)

    def ask_hidden(self, question: str) -> str:
        return click.prompt(question, hide_input=True, default="", show_default=False, type=str)

    def choice(self, question: str, choices: Sequence[str], default: str) -> str:
        return click.prompt(
            question,
            type=click.Choice(list(choices), case_sensitive=False),
            default=default,
        )
