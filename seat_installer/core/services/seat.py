"""
SeAT application — download, configure and drive ``artisan``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.errors import ArtisanCommandError, ComposerInstallError
from seat_installer.core.models.config import DatabaseCredentials
from seat_installer.core.services.executables import find_executable

logger = logging.getLogger(__name__)

# Artisan commands that bring a fresh or updated database up to date.
SETUP_COMMANDS: tuple[str, ...] = (
    "vendor:publish --force --all",
    "migrate",
    r"db:seed --class=Seat\\Notifications\\database\\seeds\\ScheduleSeeder",
    r"db:seed --class=Seat\\Services\\database\\seeds\\NotificationTypesSeeder",
    r"db:seed --class=Seat\\Services\\database\\seeds\\ScheduleSeeder",
)

STABILITIES = ("stable", "RC", "beta", "alpha", "dev")


class Seat:
    """The target application at ``path``."""

    def __init__(self, console: Console, runner: CommandRunner, path: str) -> None:
        self.console = console
        self.runner = runner
        self.path = path.rstrip("/") + "/"

    @property
    def artisan(self) -> str:
        php = find_executable("php") or "php"
        return f"{php} {self.path}artisan"

    # ── Install / configure ─────────────────────────────────────

    def install(self, stability: str = "stable") -> None:
        self.console.text("Installing SeAT. Go grab a coffee, this may take some time!")
        composer = find_executable("composer") or "composer"
        command = (
            f"{composer} create-project eveseat/seat {self.path} "
            f"--stability {stability} --no-dev --no-ansi --no-progress"
        )
        result = self.runner.execute(command, prefix="")
        if result.failed:
            raise ComposerInstallError("SeAT download failed.", command=command, output=result.combined_output)
        self.console.success("SeAT Downloaded OK")

    def configure(self, credentials: DatabaseCredentials) -> None:
        self.write_database_credentials(credentials)
        self.run_setup_commands()
        self.update_sde()
        self.console.success("SeAT configuration complete")

    def write_database_credentials(self, credentials: DatabaseCredentials) -> None:
        """Set DB_DATABASE / DB_USERNAME / DB_PASSWORD in ``.env``."""
        env_file = Path(self.path) / ".env"
        content = env_file.read_text(encoding="utf-8")
        values = {
            "DB_DATABASE": credentials.database or "",
            "DB_USERNAME": credentials.username or "",
            "DB_PASSWORD": credentials.password or "",
        }
        env_file.write_text(set_env_values(content, values), encoding="utf-8")
        logger.debug("Wrote database credentials to %s", env_file)

    # ── Artisan ─────────────────────────────────────────────────

    def artisan_command(self, arguments: str, *, label: str = "SeAT Setup Command", error: str | None = None) -> None:
        command = f"{self.artisan} {arguments}"
        result = self.runner.execute(command, prefix=label)
        if result.failed:
            raise ArtisanCommandError(
                error or f"artisan {arguments} failed.",
                command=command,
                output=result.combined_output,
            )

    def run_setup_commands(self) -> None:
        for arguments in SETUP_COMMANDS:
            self.artisan_command(arguments, error="Setup failed.")

    def update_sde(self) -> None:
        self.artisan_command("eve:update:sde -n", label="", error="SDE Update failed.")

    def set_status(self, state: str) -> None:
        if state not in ("up", "down"):
            raise ArtisanCommandError(f"Invalid state: {state}")
        self.artisan_command(state, label="", error=f"Unable to change application state to {state}")

    def mark_up(self) -> None:
        self.set_status("up")

    def mark_down(self) -> None:
        self.set_status("down")

    def update_config_cache(self) -> None:
        self.artisan_command("config:clear", error="Unable to update the config cache")


def set_env_values(content: str, values: dict[str, str]) -> str:
    """Replace ``KEY=...`` lines in dotenv text, appending missing keys."""
    for key, value in values.items():
        pattern = re.compile(rf"^{re.escape(key)}=.*$", re.MULTILINE)
        line = f"{key}={value}"
        if pattern.search(content):
            content = pattern.sub(lambda _m: line, content)
        else:
            if content and not content.endswith("\n"):
                content += "\n"
            content += line + "\n"
    return content
