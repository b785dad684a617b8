"""
Package installer — installs OS packages through the platform's
package manager.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from seat_installer.core.errors import PackageInstallationError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.services.base import ProvisioningService
from seat_installer.core.services.capabilities import PHP_EXT_PREFIX, Found

logger = logging.getLogger(__name__)

_NONINTERACTIVE = {"DEBIAN_FRONTEND": "noninteractive"}


class PackageInstaller(ProvisioningService):
    """Install single packages, lists of packages or named package groups."""

    def install_package(self, package: str) -> None:
        """Install one package.

        Raises:
            PackageInstallationError: the package manager failed.
            UnsupportedPlatformError: no package manager for this platform.
        """
        template: str = self.lookup(CapabilityKind.PACKAGE_MANAGER, "install")
        command = template.replace(":package", package)
        env = _NONINTERACTIVE if self.facts.is_deb_based else None

        self.run_checked(
            command,
            label=f"Package Installation ({package})",
            error=PackageInstallationError,
            message=f"{package} installation failed.",
            env=env,
        )
        self.console.success(f"Package {package} installed OK")

    def install_packages(self, packages: Iterable[str]) -> None:
        for package in packages:
            self.install_package(package)

    def install_package_group(self, group: str) -> None:
        """Install every package of a named group (``mysql``, ``php``…)."""
        self.console.text(f"Installing packages for package group: '{group}'.")
        packages = self.lookup(CapabilityKind.PACKAGE_GROUP, group)
        self.install_packages(packages)

    def install_for_command(self, command: str) -> None:
        """Install whatever provides ``command``.

        Falls back to installing a package named after the command when
        the table has no mapping.
        """
        self.console.text(f"Attempting to install the package that provides '{command}'")

        match self.find(CapabilityKind.PACKAGE_NAME, command):
            case Found(package):
                self.console.text(f"Installing package '{package}' for the command")
                self.install_package(package)
            case _:
                self.console.text(
                    "Not sure which package has the command. Going to try just installing the command."
                )
                self.install_package(command)

    def install_for_php_extension(self, extension: str) -> None:
        """Install the package providing a PHP extension.

        Raises:
            UnknownCapabilityError: no package is known for the extension.
        """
        self.console.text(f"Attempting to install the package that provides PHP extension '{extension}'")
        package = self.lookup(CapabilityKind.PACKAGE_NAME, f"{PHP_EXT_PREFIX}{extension}")
        self.install_package(package)
