"""
Crontab — schedules the application's ``schedule:run`` every minute.
"""

from __future__ import annotations

import logging
import os
import tempfile

from seat_installer.adapters.shell.command import CommandRunner, is_crontab_listing
from seat_installer.core.console import Console
from seat_installer.core.errors import CrontabInstallationError
from seat_installer.core.services.executables import find_executable

logger = logging.getLogger(__name__)


def cron_entry(php: str, path: str) -> str:
    return f"* * * * * {php} {path.rstrip('/')}/artisan schedule:run>> /dev/null 2>&1"


class Crontab:

    def __init__(self, console: Console, runner: CommandRunner) -> None:
        self.console = console
        self.runner = runner

    def install(self, path: str, user: str) -> None:
        """Append the scheduler entry to ``user``'s crontab.

        Raises:
            CrontabInstallationError: writing or loading the crontab failed.
        """
        crontab = find_executable("crontab") or "crontab"
        php = find_executable("php") or "php"
        entry = cron_entry(php, path)

        fd, tmp = tempfile.mkstemp(prefix="cron")
        os.close(fd)

        commands = [
            f"{crontab} -u {user} -l > {tmp}",
            f'echo "{entry}" >> {tmp}',
            f"{crontab} -u {user} {tmp}",
        ]
        try:
            for command in commands:
                if self.runner.run_command(command):
                    continue
                # Listing exits non-zero when the user has no crontab yet.
                if is_crontab_listing(command):
                    logger.debug("No existing crontab for %s", user)
                    continue
                raise CrontabInstallationError("Crontab installation failed.", command=command)
        finally:
            os.unlink(tmp)

        self.console.success(f"Crontab entry installed for {user}")
