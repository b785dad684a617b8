"""
Remote resources — config templates and scripts fetched over HTTP.

Templates (supervisor program block, nginx server block, MySQL secure
installation script…) are published next to the installer and fetched
by name.  Only registered names may be requested.
"""

from __future__ import annotations

import logging
import time
import urllib.error
import urllib.request

from seat_installer.core.errors import ExternalDownloadError, InvalidResourceError
from seat_installer.core.models.config import DEFAULT_RESOURCE_URL

logger = logging.getLogger(__name__)

_USER_AGENT = "seat-installer/1.0"
_TIMEOUT = 30

RESOURCES: frozenset[str] = frozenset({
    "mysql_secure_installation.ubuntu.bash",
    "mysql_secure_installation.centos.bash",
    "mysql_secure_installation.debian.bash",
    "supervisor-seat.ini",
    "supervisor-inet-http-server.conf",
    "seat-supervisor-env.conf",
    "apache-vhost-ubuntu.conf",
    "apache-vhost-centos.conf",
    "nginx-server-block-ubuntu.conf",
    "nginx-server-block-centos.conf",
})


def fetch(url: str, timeout: int = _TIMEOUT) -> bytes:
    """GET ``url`` and return the body.

    Raises:
        ExternalDownloadError: on any HTTP or connection failure.
    """
    logger.debug("GET %s", url)
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read()
    except urllib.error.HTTPError as e:
        raise ExternalDownloadError(f"Download of {url} failed: HTTP {e.code}") from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise ExternalDownloadError(f"Download of {url} failed: {e}") from e


def fetch_text(url: str, timeout: int = _TIMEOUT) -> str:
    return fetch(url, timeout).decode("utf-8", errors="replace")


def check_reachable(url: str, timeout: int = 10) -> dict:
    """Probe ``url`` without raising.

    Returns::

        {"reachable": True, "url": "https://...", "status": 200, "latency_ms": 42}
        or
        {"reachable": False, "url": "https://...", "error": "...", "latency_ms": 5000}
    """
    start = time.monotonic()
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return {
                "reachable": True,
                "url": url,
                "status": resp.getcode(),
                "latency_ms": int((time.monotonic() - start) * 1000),
            }
    except (urllib.error.URLError, TimeoutError, OSError) as exc:
        return {
            "reachable": False,
            "url": url,
            "error": str(exc)[:200],
            "latency_ms": int((time.monotonic() - start) * 1000),
        }


class ResourceDownloader:
    """Fetch registered resources from a base URL."""

    def __init__(self, base_url: str = DEFAULT_RESOURCE_URL) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"

    def download_resource(self, name: str) -> str:
        """Return the text of resource ``name``.

        Raises:
            InvalidResourceError: ``name`` is not a registered resource.
            ExternalDownloadError: the download failed.
        """
        if name not in RESOURCES:
            raise InvalidResourceError(f"The resource {name} is not valid")
        return fetch_text(self.base_url + name)
