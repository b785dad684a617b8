"""
Requirement models — preconditions checked before installing.

``CheckSpec`` variants describe *what* to check; the verifier decides
*how*.  Every verification pass produces a fresh ``RequirementReport``
holding one ``RequirementCheck`` per input spec.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from seat_installer.core.models.capability import CapabilityKind


class PlatformSupportedCheck(BaseModel):
    """The detected OS is resolved and registered in the capability table."""

    kind: Literal["platform"] = "platform"

    @property
    def name(self) -> str:
        return "Supported operating system"


class MinimumSoftwareVersionCheck(BaseModel):
    """A piece of software is at least ``minimum`` (dotted numeric)."""

    kind: Literal["software-version"] = "software-version"
    software: str
    minimum: str
    current: str | None = None   # None → not found at all

    @property
    def name(self) -> str:
        return f"{self.software} >= {self.minimum}"


class FilesystemAccessCheck(BaseModel):
    """The effective user can write system locations (i.e. is root)."""

    kind: Literal["access"] = "access"

    @property
    def name(self) -> str:
        return "Root access"


class CommandPresentCheck(BaseModel):
    """An executable is on PATH."""

    kind: Literal["command"] = "command"
    command: str

    @property
    def name(self) -> str:
        return f"Command '{self.command}'"


class PhpExtensionCheck(BaseModel):
    """A PHP extension is loaded by the CLI interpreter."""

    kind: Literal["php-extension"] = "php-extension"
    extension: str

    @property
    def name(self) -> str:
        return f"PHP extension '{self.extension}'"


CheckSpec = Annotated[
    Union[
        PlatformSupportedCheck,
        MinimumSoftwareVersionCheck,
        FilesystemAccessCheck,
        CommandPresentCheck,
        PhpExtensionCheck,
    ],
    Field(discriminator="kind"),
]


class RequirementCheck(BaseModel):
    """Outcome of one check."""

    name: str
    passed: bool
    remediation: CapabilityKind | None = None
    detail: str = ""
    remediation_attempted: bool = False


class RequirementReport(BaseModel):
    """Aggregate of a verification pass.

    ``all_passed`` is the AND of every check.  ``rerun_required`` is set
    when a remediation installed something: the fix only counts after a
    fresh verification pass.
    """

    checks: list[RequirementCheck] = Field(default_factory=list)
    rerun_required: bool = False

    @property
    def all_passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed(self) -> list[RequirementCheck]:
        return [c for c in self.checks if not c.passed]

    def to_dict(self) -> dict:
        return {
            "all_passed": self.all_passed,
            "rerun_required": self.rerun_required,
            "checks": [c.model_dump(mode="json") for c in self.checks],
        }
