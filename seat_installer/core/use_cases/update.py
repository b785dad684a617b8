"""
Update use cases — update an installed SeAT, and check for a newer
release of this tool.
"""

from __future__ import annotations

import logging
import socket
from dataclasses import dataclass

from seat_installer import __version__
from seat_installer.core.errors import ExternalDownloadError
from seat_installer.core.services.requirements import version_at_least
from seat_installer.core.services.resources import fetch_text
from seat_installer.core.use_cases.context import InstallerContext

logger = logging.getLogger(__name__)

VERSION_URL = "https://raw.githubusercontent.com/eveseat/installer/master/dist/seat.phar.version"

_SUMMARY = [
    "Mark SeAT as offline.",
    "Ensure Composer is ready to use.",
    "Update the SeAT packages as well as dependencies.",
    "Run the SeAT asset publisher, database migrations and seeders.",
    "Restart the Supervisor workers.",
    "Mark SeAT as online.",
]


def update_seat(
    ctx: InstallerContext,
    path: str,
    *,
    ignore_supervisor: bool = False,
    ignore_artisan: bool = False,
    include_dev: bool = False,
) -> bool:
    """Update the installation at ``path``.

    Returns:
        False when the operator cancelled.
    """
    console = ctx.console
    console.title("SeAT Installation Updater")
    console.text(f"SeAT Path detected at: {path}")
    console.text(f"This command will update SeAT on this server with hostname: {socket.gethostname()}")
    console.text("The following is a short summary of actions that will be performed:")
    console.listing(_SUMMARY)
    if not console.confirm("Would like to continue with the update?"):
        console.text("Updater stopped via user cancel.")
        return False

    seat = ctx.seat(path)
    seat.mark_down()

    console.text("Checking Composer installation")
    composer = ctx.composer()
    composer.ensure()
    composer.update_packages(path, include_dev)

    if not ignore_artisan:
        seat.run_setup_commands()
        seat.update_config_cache()

    if not ignore_supervisor:
        ctx.supervisor().restart()

    seat.mark_up()
    console.success("SeAT Update Complete!")
    return True


@dataclass
class SelfUpdateResult:
    current: str
    latest: str | None = None
    error: str = ""

    @property
    def update_available(self) -> bool:
        return self.latest is not None and not version_at_least(self.current, self.latest)

    def to_dict(self) -> dict:
        return {
            "current": self.current,
            "latest": self.latest,
            "update_available": self.update_available,
            "error": self.error,
        }


def check_self_update(version_url: str = VERSION_URL) -> SelfUpdateResult:
    """Compare the running version with the published one.  Never raises."""
    result = SelfUpdateResult(current=__version__)
    try:
        result.latest = fetch_text(version_url, timeout=10).strip() or None
    except ExternalDownloadError as e:
        logger.debug("Version check failed: %s", e)
        result.error = e.message
    return result
