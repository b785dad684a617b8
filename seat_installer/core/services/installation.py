"""
Installation locator — finds an existing SeAT checkout on disk.

A directory counts as an installation when it has the ``app``,
``changelogs`` and ``database`` directories plus the ``artisan``,
``composer.json`` and ``server.php`` files.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from seat_installer.core.errors import InstallationNotFoundError
from seat_installer.core.models.config import ToolConfig

logger = logging.getLogger(__name__)

CANDIDATE_PATHS: tuple[str, ...] = (
    "/var/www/seat/",
    "/var/www/html/",
    "/var/seat/",
    "/usr/local/nginx/seat/",
    "/srv/http/seat/",
    "/srv/www/seat/",
    "/srv/seat/",
)

_SIGNATURE_DIRS = ("app", "changelogs", "database")
_SIGNATURE_FILES = ("artisan", "composer.json", "server.php")


def is_installation(path: str | Path) -> bool:
    root = Path(path)
    return (
        all((root / d).is_dir() for d in _SIGNATURE_DIRS)
        and all((root / f).is_file() for f in _SIGNATURE_FILES)
    )


def find_installation(
    config: ToolConfig | None = None,
    candidates: Sequence[str] = CANDIDATE_PATHS,
) -> str:
    """Locate the installation: configured SEAT_PATH first, then candidates.

    Raises:
        InstallationNotFoundError: nothing looked like an installation.
    """
    configured = config.seat_path if config else None
    if configured:
        if not Path(configured).exists():
            logger.warning("Configured SEAT_PATH %s does not exist", configured)
        elif is_installation(configured):
            return configured
        else:
            logger.warning("Configured SEAT_PATH %s does not look like a SeAT installation", configured)

    for candidate in candidates:
        if Path(candidate).exists() and is_installation(candidate):
            logger.debug("Found installation at %s", candidate)
            return candidate

    raise InstallationNotFoundError(
        "Unable to locate SeAT installation. You may have to specify it.",
        remediation="--seat-path /path/to/seat",
    )


def resolve_installation(explicit: str | None, config: ToolConfig | None = None) -> str:
    """Validate an explicit path, or fall back to auto-detection."""
    if explicit is None:
        return find_installation(config)
    if not is_installation(explicit):
        raise InstallationNotFoundError(f"SeAT could not be found at: {explicit}")
    return explicit
