"""
Platform facts — which distribution and version this host runs.

Detection reads the distribution release files under ``/etc``.  The
markers are checked in a fixed priority order and the first one that
exists decides the distribution.  Within that marker, the ordered
version signatures are tried as substrings and the first hit wins.

``detect()`` never raises: a missing or unreadable marker simply does
not match.  The result may be unresolved (unknown distribution, or a
known distribution at an unrecognised version); capability lookups
reject such identities explicitly.
"""

from __future__ import annotations

import logging
from pathlib import Path

from seat_installer.core.models.platform import Distribution, PlatformIdentity

logger = logging.getLogger(__name__)

# Priority order matters: Ubuntu ships /etc/debian_version too.
_RELEASE_MARKERS: tuple[tuple[Distribution, str], ...] = (
    (Distribution.UBUNTU, "lsb-release"),
    (Distribution.CENTOS, "centos-release"),
    (Distribution.DEBIAN, "debian_version"),
)

# distribution → ordered (version, signature substring) pairs
_VERSION_SIGNATURES: dict[Distribution, tuple[tuple[str, str], ...]] = {
    Distribution.UBUNTU: (
        ("16.04", "Ubuntu 16.04"),
        ("18.04", "Ubuntu 18.04"),
        ("20.04", "Ubuntu 20.04"),
    ),
    Distribution.CENTOS: (
        ("7", "CentOS Linux release 7"),
        ("6", "CentOS release 6."),
    ),
    Distribution.DEBIAN: (
        ("8", "8."),
        ("9", "9."),
    ),
}


def detect(base_path: str | Path = "/etc") -> PlatformIdentity:
    """Resolve the platform identity from release files under ``base_path``."""
    base = Path(base_path)
    present = [(dist, base / name) for dist, name in _RELEASE_MARKERS if (base / name).is_file()]

    if not present:
        logger.debug("No release marker under %s", base)
        return PlatformIdentity.unknown()

    distribution, marker = present[0]
    if len(present) > 1:
        others = ", ".join(f"{d.value} ({p.name})" for d, p in present[1:])
        logger.warning(
            "Multiple release markers found; using %s (%s), ignoring %s",
            distribution.value, marker.name, others,
        )

    version = _match_version(distribution, marker)
    identity = PlatformIdentity(distribution=distribution, version=version)
    logger.debug("Detected platform %s from %s", identity.label, marker)
    return identity


def _match_version(distribution: Distribution, marker: Path) -> str | None:
    try:
        content = marker.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read %s: %s", marker, e)
        return None

    for version, signature in _VERSION_SIGNATURES[distribution]:
        if signature in content:
            return version
    return None


class PlatformFacts:
    """Per-run platform identity, detected lazily and cached.

    Services take one of these instead of probing the host themselves.
    Pass ``identity`` to pin the platform (tests, ``--platform`` style
    overrides).
    """

    def __init__(
        self,
        base_path: str | Path = "/etc",
        *,
        identity: PlatformIdentity | None = None,
    ) -> None:
        self.base_path = Path(base_path)
        self._identity = identity

    @property
    def identity(self) -> PlatformIdentity:
        if self._identity is None:
            self._identity = detect(self.base_path)
        return self._identity

    @property
    def distribution(self) -> Distribution:
        return self.identity.distribution

    @property
    def version(self) -> str | None:
        return self.identity.version

    @property
    def is_deb_based(self) -> bool:
        return self.identity.is_deb_based

    def is_centos(self, version: str | None = None) -> bool:
        ident = self.identity
        if ident.distribution is not Distribution.CENTOS:
            return False
        return version is None or ident.version == version
