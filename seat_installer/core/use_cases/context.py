"""
Installer context — wires the collaborators every use case needs.

One context is built per CLI invocation.  Services are constructed on
demand from it, all sharing the same console, runner, platform facts
and capability table.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.models.config import ToolConfig
from seat_installer.core.services.capabilities import CapabilityTable
from seat_installer.core.services.composer import Composer
from seat_installer.core.services.crontab import Crontab
from seat_installer.core.services.mysql import MySql
from seat_installer.core.services.os_updates import OsUpdater
from seat_installer.core.services.package_installer import PackageInstaller
from seat_installer.core.services.platform_facts import PlatformFacts
from seat_installer.core.services.redis_service import Redis
from seat_installer.core.services.requirements import RequirementVerifier
from seat_installer.core.services.resources import ResourceDownloader
from seat_installer.core.services.seat import Seat
from seat_installer.core.services.supervisor import Supervisor
from seat_installer.core.services.webserver import WebServer, WebServerKind, make_webserver


@dataclass
class InstallerContext:
    console: Console
    config: ToolConfig = field(default_factory=ToolConfig)
    facts: PlatformFacts = field(default_factory=PlatformFacts)
    table: CapabilityTable = field(default_factory=CapabilityTable)
    runner: CommandRunner | None = None
    resources: ResourceDownloader | None = None

    def __post_init__(self) -> None:
        if self.runner is None:
            self.runner = CommandRunner(self.console, default_timeout=self.config.command_timeout)
        if self.resources is None:
            self.resources = ResourceDownloader(self.config.resource_url)

    @property
    def _core(self) -> tuple:
        return self.console, self.runner, self.facts, self.table

    # ── Service factories ───────────────────────────────────────

    def package_installer(self) -> PackageInstaller:
        return PackageInstaller(*self._core)

    def verifier(self) -> RequirementVerifier:
        return RequirementVerifier(self.console, self.facts, self.table, self.package_installer())

    def os_updater(self) -> OsUpdater:
        return OsUpdater(*self._core)

    def composer(self) -> Composer:
        return Composer(self.console, self.runner)

    def mysql(self) -> MySql:
        return MySql(*self._core, installer=self.package_installer(), resources=self.resources)

    def redis(self) -> Redis:
        return Redis(*self._core, installer=self.package_installer())

    def webserver(self, kind: WebServerKind) -> WebServer:
        return make_webserver(kind, *self._core, installer=self.package_installer(), resources=self.resources)

    def supervisor(self) -> Supervisor:
        return Supervisor(*self._core, installer=self.package_installer(), resources=self.resources)

    def crontab(self) -> Crontab:
        return Crontab(self.console, self.runner)

    def seat(self, path: str) -> Seat:
        return Seat(self.console, self.runner, path)
