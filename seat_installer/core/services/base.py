"""
Shared plumbing for the orchestrated installers.

Every installer is handed the same four collaborators at construction
and follows the same shape: look a capability up, run a command, turn
a failed result into its own named error.
"""

from __future__ import annotations

import logging
import secrets
import string
from collections.abc import Iterable
from typing import Any

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.errors import CommandExecutionError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.services.capabilities import CapabilityTable, LookupResult
from seat_installer.core.services.platform_facts import PlatformFacts

logger = logging.getLogger(__name__)


class ProvisioningService:
    """Base for installers that act on the host."""

    def __init__(
        self,
        console: Console,
        runner: CommandRunner,
        facts: PlatformFacts,
        table: CapabilityTable,
    ) -> None:
        self.console = console
        self.runner = runner
        self.facts = facts
        self.table = table

    def lookup(self, kind: CapabilityKind, name: str) -> Any:
        return self.table.lookup(self.facts.identity, kind, name)

    def find(self, kind: CapabilityKind, name: str) -> LookupResult:
        return self.table.find(self.facts.identity, kind, name)

    def run_checked(
        self,
        command: str,
        *,
        label: str,
        error: type[CommandExecutionError],
        message: str,
        env: dict[str, str] | None = None,
        announce: bool = True,
    ) -> str:
        """Run ``command`` with prefixed output; raise ``error`` on failure.

        Returns the combined output.
        """
        result = self.runner.execute(command, prefix=label, env=env, announce=announce)
        if result.failed:
            logger.debug("%s failed (rc=%s, timed_out=%s)", label, result.return_code, result.timed_out)
            raise error(
                message,
                command=command if announce else "",
                output=result.combined_output,
            )
        return result.combined_output

    def run_all(
        self,
        commands: Iterable[str],
        *,
        label: str,
        error: type[CommandExecutionError],
        message: str,
    ) -> None:
        for command in commands:
            self.run_checked(command, label=label, error=error, message=message)


def generate_password(length: int = 32) -> str:
    """Random alphanumeric password (safe inside SQL quotes and ini files)."""
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
