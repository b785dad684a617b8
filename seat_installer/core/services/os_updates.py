"""
OS updater — brings installed packages up to date before provisioning.
"""

from __future__ import annotations

from seat_installer.core.errors import OsUpdateError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.services.base import ProvisioningService


class OsUpdater(ProvisioningService):

    def update(self) -> None:
        """Run the platform's update command(s).

        Raises:
            OsUpdateError: the package manager failed.
        """
        commands = self.lookup(CapabilityKind.SERVICE_COMMAND, "os-update")
        env = {"DEBIAN_FRONTEND": "noninteractive"} if self.facts.is_deb_based else None

        for command in commands:
            self.console.text(f"Running OS update with: {command}")
            self.run_checked(
                command,
                label="OS Update",
                error=OsUpdateError,
                message="Failed to update the OS.",
                env=env,
            )
        self.console.success("Operating system updated")
