"""
Domain models — Pydantic types for the installer.

All models are re-exported here for convenient access:

    from seat_installer.core.models import PlatformIdentity, CommandSpec, RequirementReport
"""

from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.models.command import (
    DEFAULT_TIMEOUT,
    CommandResult,
    CommandSpec,
    OutputPolicy,
)
from seat_installer.core.models.config import DatabaseCredentials, ToolConfig
from seat_installer.core.models.platform import Distribution, PlatformIdentity
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

__all__ = [
    # capability.py
    "CapabilityKind",
    # requirement.py
    "CheckSpec",
    "CommandPresentCheck",
    # command.py
    "CommandResult",
    "CommandSpec",
    "DEFAULT_TIMEOUT",
    # config.py
    "DatabaseCredentials",
    # platform.py
    "Distribution",
    "FilesystemAccessCheck",
    "MinimumSoftwareVersionCheck",
    "OutputPolicy",
    "PhpExtensionCheck",
    "PlatformIdentity",
    "PlatformSupportedCheck",
    "RequirementCheck",
    "RequirementReport",
    "ToolConfig",
]
