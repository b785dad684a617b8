"""
Platform model — which operating system this run is provisioning.

A ``PlatformIdentity`` is produced once per run by the platform facts
resolver and is the lookup key for every capability query.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Distribution(str, Enum):
    """Linux distributions the installer knows how to recognise."""

    UBUNTU = "ubuntu"
    CENTOS = "centos"
    DEBIAN = "debian"
    UNKNOWN = "unknown"


class PlatformIdentity(BaseModel):
    """Detected (distribution, version) pair.

    ``version`` is only meaningful together with ``distribution``.  An
    ``UNKNOWN`` distribution never carries a version, and a known
    distribution whose marker file matched no signature has
    ``version=None``.  Either way the identity is *unresolved* and every
    capability lookup against it fails explicitly.
    """

    model_config = ConfigDict(frozen=True)

    distribution: Distribution = Distribution.UNKNOWN
    version: str | None = None

    @classmethod
    def unknown(cls) -> PlatformIdentity:
        return cls(distribution=Distribution.UNKNOWN, version=None)

    @property
    def is_resolved(self) -> bool:
        """Both halves of the key are usable."""
        return self.distribution is not Distribution.UNKNOWN and self.version is not None

    @property
    def is_deb_based(self) -> bool:
        return self.distribution in (Distribution.UBUNTU, Distribution.DEBIAN)

    @property
    def key(self) -> tuple[str, str | None]:
        return self.distribution.value, self.version

    @property
    def label(self) -> str:
        if self.distribution is Distribution.UNKNOWN:
            return "unknown"
        return f"{self.distribution.value} {self.version or '(unrecognised version)'}"
