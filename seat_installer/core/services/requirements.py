"""
Requirement verifier — checks the host before anything is installed.

Every check in a pass runs, even after an earlier one fails, so the
operator sees the full list of problems at once.  A failed check may
offer a remediation (install the package that provides a missing
command or PHP extension).  A remediation never turns its check green:
the report is marked ``rerun_required`` and the operator re-runs.

State machine::

    NOT_CHECKED → CHECKING → SATISFIED | UNSATISFIED
                     ↑                        │
                     └──────── verify() ──────┘
"""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Callable, Iterable
from enum import Enum

from seat_installer.core.console import Console
from seat_installer.core.errors import InstallerError, UnsupportedSoftwareVersionError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.models.requirement import (
    CheckSpec,
    CommandPresentCheck,
    FilesystemAccessCheck,
    MinimumSoftwareVersionCheck,
    PhpExtensionCheck,
    PlatformSupportedCheck,
    RequirementCheck,
    RequirementReport,
)
from seat_installer.core.services.capabilities import CapabilityTable
from seat_installer.core.services.executables import has_executable
from seat_installer.core.services.package_installer import PackageInstaller
from seat_installer.core.services.platform_facts import PlatformFacts

logger = logging.getLogger(__name__)


class VerifierState(str, Enum):
    NOT_CHECKED = "not-checked"
    CHECKING = "checking"
    SATISFIED = "satisfied"
    UNSATISFIED = "unsatisfied"


# ── PHP / version detection ─────────────────────────────────────


def list_php_modules() -> set[str]:
    """Lower-cased names printed by ``php -m`` (empty if php is absent)."""
    try:
        r = subprocess.run(["php", "-m"], capture_output=True, text=True, timeout=30)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("php -m unavailable: %s", e)
        return set()
    if r.returncode != 0:
        return set()
    return {
        line.strip().lower()
        for line in r.stdout.splitlines()
        if line.strip() and not line.startswith("[")
    }


def detect_php_version() -> str | None:
    """The CLI PHP version (``7.1.33``), or None when php is missing."""
    try:
        r = subprocess.run(
            ["php", "-r", "echo PHP_VERSION;"],
            capture_output=True, text=True, timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("php version unavailable: %s", e)
        return None
    version = r.stdout.strip()
    return version if r.returncode == 0 and version else None


def _version_tuple(version: str) -> tuple[int, ...]:
    parts = []
    for piece in version.split("."):
        m = re.match(r"\d+", piece)
        if not m:
            break
        parts.append(int(m.group()))
    return tuple(parts)


def version_at_least(current: str, minimum: str) -> bool:
    """Dotted numeric comparison; missing components count as zero."""
    cur, req = _version_tuple(current), _version_tuple(minimum)
    width = max(len(cur), len(req))
    return cur + (0,) * (width - len(cur)) >= req + (0,) * (width - len(req))


def ensure_minimum_version(software: str, current: str | None, minimum: str) -> None:
    """Raise unless ``current`` is present and at least ``minimum``.

    Raises:
        UnsupportedSoftwareVersionError: missing, or too old.
    """
    if current is None:
        raise UnsupportedSoftwareVersionError(f"{software} not found")
    if not version_at_least(current, minimum):
        raise UnsupportedSoftwareVersionError(f"{software} {current} is older than the required {minimum}")


# ── Verifier ────────────────────────────────────────────────────


class RequirementVerifier:
    """Run ``CheckSpec``s and build a ``RequirementReport``.

    Args:
        console: Where failures are reported and consent is asked.
            ``None`` disables remediation prompts entirely.
        facts: Platform identity for the platform check.
        table: Capability table the platform must be registered in.
        installer: Performs remediations.
        php_modules: Provider of loaded PHP extension names
            (defaults to parsing ``php -m``).
        euid: Provider of the effective uid (defaults to ``os.geteuid``).
    """

    def __init__(
        self,
        console: Console | None,
        facts: PlatformFacts,
        table: CapabilityTable,
        installer: PackageInstaller | None,
        *,
        php_modules: Callable[[], set[str]] = list_php_modules,
        euid: Callable[[], int] = os.geteuid,
    ) -> None:
        self.console = console
        self.facts = facts
        self.table = table
        self.installer = installer
        self._php_modules = php_modules
        self._euid = euid
        self.state = VerifierState.NOT_CHECKED
        self.last_report: RequirementReport | None = None

    def verify(self, checks: Iterable[CheckSpec]) -> RequirementReport:
        self.state = VerifierState.CHECKING
        report = RequirementReport()
        loaded_extensions: set[str] | None = None

        try:
            for spec in checks:
                if isinstance(spec, PhpExtensionCheck) and loaded_extensions is None:
                    loaded_extensions = self._php_modules()
                outcome = self._evaluate(spec, loaded_extensions or set())
                logger.debug("Requirement %s → %s", outcome.name, "ok" if outcome.passed else "FAILED")

                if not outcome.passed and outcome.remediation is not None:
                    if self._remediate(spec, outcome):
                        report.rerun_required = True

                report.checks.append(outcome)
        except Exception:
            self.state = VerifierState.UNSATISFIED
            raise

        if report.rerun_required and self.console is not None:
            self.console.success(
                "Requirements check completed. You may need to rerun the script to continue."
            )

        self.state = VerifierState.SATISFIED if report.all_passed else VerifierState.UNSATISFIED
        self.last_report = report
        return report

    # ── Individual checks ───────────────────────────────────────

    def _evaluate(self, spec: CheckSpec, loaded_extensions: set[str]) -> RequirementCheck:
        match spec:
            case PlatformSupportedCheck():
                identity = self.facts.identity
                passed = self.table.supports(identity)
                if self.console is not None:
                    if passed:
                        self.console.text(f"Operating system detected as: {identity.label}")
                    else:
                        supported = ", ".join(p.label for p in self.table.supported_platforms())
                        self.console.note(f"Unable to determine a supported operating system. Supported: {supported}")
                return RequirementCheck(name=spec.name, passed=passed, detail=identity.label)

            case MinimumSoftwareVersionCheck(software=software, minimum=minimum, current=current):
                try:
                    ensure_minimum_version(software, current, minimum)
                except UnsupportedSoftwareVersionError as e:
                    return self._failed(spec.name, e.message)
                return RequirementCheck(name=spec.name, passed=True, detail=current)

            case FilesystemAccessCheck():
                if self._euid() != 0:
                    return self._failed(spec.name, "Not running as root")
                return RequirementCheck(name=spec.name, passed=True)

            case CommandPresentCheck(command=command):
                if has_executable(command):
                    return RequirementCheck(name=spec.name, passed=True)
                return self._failed(
                    spec.name,
                    f"Cant find executable for: {command}",
                    remediation=CapabilityKind.PACKAGE_NAME,
                )

            case PhpExtensionCheck(extension=extension):
                if extension.lower() in loaded_extensions:
                    return RequirementCheck(name=spec.name, passed=True)
                return self._failed(
                    spec.name,
                    f"PHP Extension {extension} not loaded",
                    remediation=CapabilityKind.PACKAGE_NAME,
                )

        raise TypeError(f"Unsupported check: {spec!r}")

    def _failed(
        self,
        name: str,
        detail: str,
        remediation: CapabilityKind | None = None,
    ) -> RequirementCheck:
        if self.console is not None:
            self.console.error(detail)
        return RequirementCheck(name=name, passed=False, detail=detail, remediation=remediation)

    # ── Remediation ─────────────────────────────────────────────

    def _remediate(self, spec: CheckSpec, outcome: RequirementCheck) -> bool:
        """Offer and run a remediation.  True when something was installed."""
        if self.console is None or self.installer is None:
            return False
        if not self.console.confirm("Would you like to try and install it?"):
            return False

        outcome.remediation_attempted = True
        try:
            match spec:
                case CommandPresentCheck(command=command):
                    self.installer.install_for_command(command)
                case PhpExtensionCheck(extension=extension):
                    self.installer.install_for_php_extension(extension)
                case _:
                    return False
        except InstallerError as e:
            logger.warning("Remediation for %s failed: %s", outcome.name, e)
            outcome.detail = f"{outcome.detail}; remediation failed: {e.message}"
            self.console.error(f"Could not fix '{outcome.name}': {e.message}")
            return False
        return True
