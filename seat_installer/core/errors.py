"""
Installer errors — the named failure conditions of a provisioning run.

Low-level failures (a command exiting non-zero, an HTTP error) are
converted into one of these at the boundary of each orchestrated
operation.  They propagate uncaught up to the CLI, which prints the
message (plus the remediation hint, when present) and exits 1.
"""

from __future__ import annotations


class InstallerError(Exception):
    """Base class for every fatal, user-reportable installer condition."""

    def __init__(self, message: str, *, remediation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.remediation = remediation


# ── Platform / capability resolution ────────────────────────────


class UnsupportedPlatformError(InstallerError):
    """The host (distribution, version) is not registered or unresolved."""


class UnknownCapabilityError(InstallerError):
    """The platform is known, but the requested capability is not mapped."""


class UnsupportedSoftwareVersionError(InstallerError):
    """A runtime dependency is older than the minimum supported version."""


# ── Command execution ───────────────────────────────────────────


class CommandExecutionError(InstallerError):
    """An external command failed.  Carries the command and its output."""

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        output: str = "",
        remediation: str | None = None,
    ) -> None:
        super().__init__(message, remediation=remediation)
        self.command = command
        self.output = output


class PackageInstallationError(CommandExecutionError):
    """A package (or package group) could not be installed."""


class ServiceControlError(CommandExecutionError):
    """A service could not be enabled or restarted."""


class CrontabInstallationError(CommandExecutionError):
    """The crontab entry could not be installed."""


class ArtisanCommandError(CommandExecutionError):
    """An artisan command in the target application failed."""


class ComposerInstallError(CommandExecutionError):
    """Composer could not be installed, updated or run."""


class OsUpdateError(CommandExecutionError):
    """The operating system package update failed."""


class DatabaseConfigurationError(CommandExecutionError):
    """The database server could not be secured or provisioned."""


# ── Target application / environment ────────────────────────────


class InstallationNotFoundError(InstallerError):
    """No target installation was detected at any candidate path."""


class TargetDirectoryError(InstallerError):
    """The install destination cannot be used (exists, not writable…)."""


class CredentialValidationError(InstallerError):
    """Database credentials were rejected.  Recoverable: re-prompt."""


class ExternalDownloadError(InstallerError):
    """An HTTP download (template, installer script, version file) failed."""


class InvalidResourceError(ExternalDownloadError):
    """A resource name that is not in the registered resource list."""


class ConfigError(InstallerError):
    """Raised when the tool configuration is invalid or unreadable."""
