"""
Capability table — per-platform lookup of package names, service
commands, config paths, system users and sockets.

Two lookup styles over the same data:

    lookup(platform, kind, name)  → value, or raises
    find(platform, kind, name)    → Found(value) | Missing(reason, message)

A lookup never falls back to another version or distribution: the
table answers for the exact (distribution, version) pair or not at all.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from seat_installer.core.errors import UnknownCapabilityError, UnsupportedPlatformError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.models.platform import Distribution, PlatformIdentity
from seat_installer.core.services.capabilities.data import CAPABILITIES, PHP_EXT_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Found:
    value: Any


@dataclass(frozen=True)
class Missing:
    reason: Literal["unsupported-platform", "unknown-capability"]
    message: str


LookupResult = Found | Missing


# Rows every supported platform must carry.  The installers look up
# the non-unit rows directly; the service units are what the
# service-command rows are built from.
REQUIRED_CAPABILITIES: tuple[tuple[CapabilityKind, str], ...] = (
    (CapabilityKind.PACKAGE_MANAGER, "install"),
    (CapabilityKind.PACKAGE_NAME, "unzip"),
    (CapabilityKind.PACKAGE_NAME, "git"),
    (CapabilityKind.PACKAGE_NAME, f"{PHP_EXT_PREFIX}pdo_mysql"),
    (CapabilityKind.PACKAGE_NAME, f"{PHP_EXT_PREFIX}posix"),
    (CapabilityKind.PACKAGE_GROUP, "mysql"),
    (CapabilityKind.PACKAGE_GROUP, "php"),
    (CapabilityKind.PACKAGE_GROUP, "apache"),
    (CapabilityKind.PACKAGE_GROUP, "nginx"),
    (CapabilityKind.PACKAGE_GROUP, "redis"),
    (CapabilityKind.PACKAGE_GROUP, "supervisor"),
    (CapabilityKind.SERVICE_UNIT, "mysql"),
    (CapabilityKind.SERVICE_UNIT, "redis"),
    (CapabilityKind.SERVICE_UNIT, "nginx"),
    (CapabilityKind.SERVICE_UNIT, "php-fpm"),
    (CapabilityKind.SERVICE_UNIT, "supervisor"),
    (CapabilityKind.SERVICE_COMMAND, "os-update"),
    (CapabilityKind.SERVICE_COMMAND, "mysql"),
    (CapabilityKind.SERVICE_COMMAND, "redis"),
    (CapabilityKind.SERVICE_COMMAND, "nginx-restart"),
    (CapabilityKind.SERVICE_COMMAND, "apache-modules"),
    (CapabilityKind.SERVICE_COMMAND, "apache-restart"),
    (CapabilityKind.SERVICE_COMMAND, "supervisor-enable"),
    (CapabilityKind.SERVICE_COMMAND, "supervisor-restart"),
    (CapabilityKind.CONFIG_PATH, "nginx-server-block"),
    (CapabilityKind.CONFIG_PATH, "php-ini"),
    (CapabilityKind.CONFIG_PATH, "apache-vhost"),
    (CapabilityKind.CONFIG_PATH, "apache-document-root"),
    (CapabilityKind.CONFIG_PATH, "apache-conf"),
    (CapabilityKind.CONFIG_PATH, "apache-security-conf"),
    (CapabilityKind.CONFIG_PATH, "apache-default-site"),
    (CapabilityKind.CONFIG_PATH, "supervisor-seat"),
    (CapabilityKind.CONFIG_PATH, "supervisor-conf"),
    (CapabilityKind.SYSTEM_USER, "nginx"),
    (CapabilityKind.SYSTEM_USER, "apache"),
    (CapabilityKind.SOCKET_PATH, "php-fpm"),
)


class CapabilityTable:
    """Read-only view over the capability data.

    Args:
        data: Override mapping (tests).  Defaults to the built-in table.
    """

    def __init__(self, data: Mapping[str, Mapping[str, Mapping]] | None = None) -> None:
        self._data = CAPABILITIES if data is None else data

    def find(self, platform: PlatformIdentity, kind: CapabilityKind, name: str) -> LookupResult:
        """Non-raising lookup."""
        if not platform.is_resolved:
            return Missing(
                "unsupported-platform",
                f"Operating system could not be identified ({platform.label})",
            )

        dist, version = platform.key
        rows = self._data.get(dist, {}).get(version)
        if rows is None:
            return Missing(
                "unsupported-platform",
                f"Operating system {platform.label} is not supported",
            )

        by_kind = rows.get(kind, {})
        if name not in by_kind:
            return Missing(
                "unknown-capability",
                f"No {kind.value} '{name}' known for {platform.label}",
            )

        logger.debug("Capability %s/%s on %s → %r", kind.value, name, platform.label, by_kind[name])
        return Found(by_kind[name])

    def lookup(self, platform: PlatformIdentity, kind: CapabilityKind, name: str) -> Any:
        """Resolve a capability or raise.

        Raises:
            UnsupportedPlatformError: platform unresolved or not registered.
            UnknownCapabilityError: platform registered but row absent.
        """
        match self.find(platform, kind, name):
            case Found(value):
                return value
            case Missing("unsupported-platform", message):
                raise UnsupportedPlatformError(message)
            case Missing(_, message):
                raise UnknownCapabilityError(message)

    def supports(self, platform: PlatformIdentity) -> bool:
        if not platform.is_resolved:
            return False
        dist, version = platform.key
        return version in self._data.get(dist, {})

    def supported_platforms(self) -> list[PlatformIdentity]:
        return [
            PlatformIdentity(distribution=Distribution(dist), version=version)
            for dist, versions in self._data.items()
            for version in versions
        ]

    def missing_capabilities(
        self,
        platform: PlatformIdentity,
        required: tuple[tuple[CapabilityKind, str], ...] = REQUIRED_CAPABILITIES,
    ) -> list[tuple[CapabilityKind, str]]:
        """Required rows that ``platform`` does not define."""
        return [
            (kind, name) for kind, name in required
            if isinstance(self.find(platform, kind, name), Missing)
        ]
