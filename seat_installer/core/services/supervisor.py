"""
Supervisor — keeps the target application's queue workers running.
"""

from __future__ import annotations

import logging
from pathlib import Path

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.errors import ServiceControlError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.services.base import ProvisioningService, generate_password
from seat_installer.core.services.capabilities import CapabilityTable
from seat_installer.core.services.executables import find_executable
from seat_installer.core.services.package_installer import PackageInstaller
from seat_installer.core.services.platform_facts import PlatformFacts
from seat_installer.core.services.resources import ResourceDownloader

logger = logging.getLogger(__name__)


class Supervisor(ProvisioningService):

    def __init__(
        self,
        console: Console,
        runner: CommandRunner,
        facts: PlatformFacts,
        table: CapabilityTable,
        *,
        installer: PackageInstaller,
        resources: ResourceDownloader,
    ) -> None:
        super().__init__(console, runner, facts, table)
        self.installer = installer
        self.resources = resources

    def install(self) -> None:
        self.installer.install_package_group("supervisor")

    def setup(self, path: str, user: str) -> None:
        """Write the worker program config, enable and restart supervisor."""
        self.write_config(path, user)
        self.enable()
        self.restart()

    def write_config(self, path: str, user: str) -> None:
        self.console.text("Writing the SeAT Supervisor configuration file")
        seat_dir = path.rstrip("/") + "/"
        ini = self.resources.download_resource("supervisor-seat.ini")
        ini = (
            ini.replace(":php", find_executable("php") or "php")
            .replace(":artisan", f"{seat_dir}artisan")
            .replace(":seatdirectory", seat_dir)
            .replace(":webuser", user)
        )
        target = Path(self.lookup(CapabilityKind.CONFIG_PATH, "supervisor-seat"))
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(ini, encoding="utf-8")
        except OSError as e:
            raise ServiceControlError(f"Cannot write {target}: {e}") from e

    def enable(self) -> None:
        self.run_all(
            self.lookup(CapabilityKind.SERVICE_COMMAND, "supervisor-enable"),
            label="Supervisor Setup",
            error=ServiceControlError,
            message="Unable to enable Supervisor",
        )

    def restart(self) -> None:
        self.run_all(
            self.lookup(CapabilityKind.SERVICE_COMMAND, "supervisor-restart"),
            label="Supervisor Setup",
            error=ServiceControlError,
            message="Unable to restart Supervisor",
        )

    def setup_integration(self, path: str) -> None:
        """Expose supervisord's HTTP interface to the application.

        Appends an ``inet_http_server`` block (with a fresh password) to
        supervisord.conf and the matching credentials to ``<path>/.env``.
        """
        self.console.text("Configuring the SeAT / Supervisor integration")
        password = generate_password()

        block = self.resources.download_resource("supervisor-inet-http-server.conf")
        env_values = self.resources.download_resource("seat-supervisor-env.conf")

        conf = Path(self.lookup(CapabilityKind.CONFIG_PATH, "supervisor-conf"))
        env_file = Path(path.rstrip("/")) / ".env"
        for target, addition in (
            (conf, block.replace(":password", password)),
            (env_file, env_values.replace(":password", password)),
        ):
            try:
                with target.open("a", encoding="utf-8") as f:
                    f.write(addition)
            except OSError as e:
                raise ServiceControlError(f"Cannot update {target}: {e}") from e
            logger.debug("Appended supervisor integration settings to %s", target)
