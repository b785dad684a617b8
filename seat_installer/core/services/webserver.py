"""
Web servers — Apache and Nginx front ends for the target application.

The set of web servers is closed: ``make_webserver`` maps a
``WebServerKind`` to its provider.  Both providers share one surface:

    install()         install the package group
    harden()          strip defaults that leak information
    configure(path)   point the server at ``<path>/public`` and restart
    user()            system user the server runs as
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Protocol

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.errors import ServiceControlError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.services.base import ProvisioningService
from seat_installer.core.services.capabilities import CapabilityTable, Found
from seat_installer.core.services.package_installer import PackageInstaller
from seat_installer.core.services.platform_facts import PlatformFacts
from seat_installer.core.services.resources import ResourceDownloader

logger = logging.getLogger(__name__)


class WebServerKind(str, Enum):
    APACHE = "apache"
    NGINX = "nginx"


# Config files whose presence means a web server is already installed.
WEBSERVER_MARKERS: dict[WebServerKind, tuple[str, ...]] = {
    WebServerKind.APACHE: ("/etc/apache2/apache2.conf", "/etc/httpd/conf/httpd.conf"),
    WebServerKind.NGINX: ("/etc/nginx/nginx.conf",),
}


def detect_webserver(
    markers: dict[WebServerKind, tuple[str, ...]] = WEBSERVER_MARKERS,
) -> WebServerKind | None:
    """The first web server whose config file exists, if any."""
    for kind, files in markers.items():
        for candidate in files:
            if Path(candidate).exists():
                logger.debug("Found %s config at %s", kind.value, candidate)
                return kind
    return None


class WebServer(Protocol):
    kind: WebServerKind

    def install(self) -> None: ...

    def harden(self) -> None: ...

    def configure(self, path: str) -> None: ...

    def user(self) -> str: ...


# ── Shared ──────────────────────────────────────────────────────


class _WebServerBase(ProvisioningService):
    kind: WebServerKind

    def __init__(
        self,
        console: Console,
        runner: CommandRunner,
        facts: PlatformFacts,
        table: CapabilityTable,
        *,
        installer: PackageInstaller,
        resources: ResourceDownloader,
    ) -> None:
        super().__init__(console, runner, facts, table)
        self.installer = installer
        self.resources = resources

    def install(self) -> None:
        self.installer.install_package_group(self.kind.value)

    def user(self) -> str:
        return self.lookup(CapabilityKind.SYSTEM_USER, self.kind.value)

    def fix_permissions(self, path: str) -> None:
        self.console.text("Configuring permissions")
        user = self.user()
        root = path.rstrip("/")
        self.runner.run_command(f"chown -R {user}:{user} {root}")
        self.runner.run_command(f"chmod -R guo+w {root}/storage/")

    def run_service_commands(self, name: str) -> None:
        commands = self.lookup(CapabilityKind.SERVICE_COMMAND, name)
        self.run_all(
            commands,
            label=f"{self.kind.value.capitalize()} Service",
            error=ServiceControlError,
            message=f"{name} failed for {self.kind.value}",
        )

    def _config_path(self, name: str) -> Path:
        return Path(self.lookup(CapabilityKind.CONFIG_PATH, name))

    @staticmethod
    def _write(path: Path, content: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ServiceControlError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote %s (%d bytes)", path, len(content))

    @staticmethod
    def _replace_in_file(path: Path, replacements: dict[str, str]) -> bool:
        """Apply literal replacements; False when the file is absent."""
        if not path.is_file():
            return False
        content = path.read_text(encoding="utf-8")
        for old, new in replacements.items():
            content = content.replace(old, new)
        _WebServerBase._write(path, content)
        return True

    @staticmethod
    def _symlink(target: Path, link: Path) -> None:
        try:
            if link.is_symlink() or link.exists():
                link.unlink()
            link.parent.mkdir(parents=True, exist_ok=True)
            link.symlink_to(target)
        except OSError as e:
            raise ServiceControlError(f"Cannot link {link} → {target}: {e}") from e


# ── Apache ──────────────────────────────────────────────────────

_APACHE_VHOST = """\
<VirtualHost *:80>
    ServerAdmin webmaster@your.domain
    DocumentRoot "{document_root}"
    ServerName seat.local
    ServerAlias www.seat.local
    ErrorLog {log_dir}/seat-error.log
    CustomLog {log_dir}/seat-access.log combined
    <Directory "{document_root}">
        AllowOverride All
        Require all granted
    </Directory>
</VirtualHost>
"""


class Apache(_WebServerBase):
    kind = WebServerKind.APACHE

    def configure(self, path: str) -> None:
        self.console.text("Writing the Apache Virtual Host configuration")
        document_root = self._config_path("apache-document-root")
        log_dir = "${APACHE_LOG_DIR}" if self.facts.is_deb_based else "logs"
        vhost = self._config_path("apache-vhost")
        self._write(vhost, _APACHE_VHOST.format(document_root=document_root, log_dir=log_dir))

        self.console.text("Symlinking the public directory and the Vhost config")
        self._symlink(Path(path.rstrip("/")) / "public", document_root)
        match self.find(CapabilityKind.CONFIG_PATH, "apache-vhost-link"):
            case Found(link):
                self._symlink(vhost, Path(link))
            case _:
                pass

        self.fix_permissions(path)

        self.console.text("Enabling mod_rewrite")
        self.run_service_commands("apache-modules")
        self.console.text("Restarting Apache")
        self.run_service_commands("apache-restart")

    def harden(self) -> None:
        self.console.text("Hardening Apache")

        self.console.text("Removing default website")
        self._config_path("apache-default-site").unlink(missing_ok=True)

        self.console.text("Disabling directory indexing")
        if not self._replace_in_file(
            self._config_path("apache-conf"),
            {"Options Indexes FollowSymLinks": "Options FollowSymLinks"},
        ):
            self.console.warning("Apache main configuration not found; skipped")

        self.console.text("Removing server signature and tokens")
        if not self._replace_in_file(
            self._config_path("apache-security-conf"),
            {"ServerTokens OS": "ServerTokens Prod", "ServerSignature On": "ServerSignature Off"},
        ):
            self.console.warning("Apache security configuration not found; skipped")


# ── Nginx ───────────────────────────────────────────────────────


class Nginx(_WebServerBase):
    kind = WebServerKind.NGINX

    def configure(self, path: str) -> None:
        self.console.text("Writing the Nginx server block configuration")
        template = "nginx-server-block-ubuntu.conf" if self.facts.is_deb_based else "nginx-server-block-centos.conf"
        block = self.resources.download_resource(template)
        block = block.replace(":seatpath:", path.rstrip("/"))
        block = block.replace("#socket", self.lookup(CapabilityKind.SOCKET_PATH, "php-fpm"))
        self._write(self._config_path("nginx-server-block"), block)

        match self.find(CapabilityKind.CONFIG_PATH, "nginx-default-site"):
            case Found(default_site):
                self.console.text("Removing default nginx server block")
                Path(default_site).unlink(missing_ok=True)
            case _:
                pass

        if self.facts.is_centos():
            self.console.text("Configuring SELinux")
            self.runner.run_command(f"chcon -R --reference=/var/www {path}")
            self.runner.run_command("setsebool -P httpd_can_network_connect 1")
            self.runner.run_command("setsebool -P httpd_unified 1")

        self.fix_permissions(path)
        self.fix_cgi_path()

        self.console.text("Restarting Nginx")
        self.run_service_commands("nginx-restart")

    def fix_cgi_path(self) -> None:
        self.console.text("Configuring php-fpm cgi.fix_pathinfo")
        php_ini = self._config_path("php-ini")
        if not self._replace_in_file(php_ini, {";cgi.fix_pathinfo=1": "cgi.fix_pathinfo=0"}):
            self.console.warning(f"{php_ini} not found; cgi.fix_pathinfo left unchanged")

    def harden(self) -> None:
        self.console.text("Hardening Nginx")
        self._replace_in_file(Path("/etc/nginx/nginx.conf"), {"# server_tokens off;": "server_tokens off;"})


# ── Factory ─────────────────────────────────────────────────────


def make_webserver(
    kind: WebServerKind,
    console: Console,
    runner: CommandRunner,
    facts: PlatformFacts,
    table: CapabilityTable,
    *,
    installer: PackageInstaller,
    resources: ResourceDownloader,
) -> WebServer:
    match kind:
        case WebServerKind.APACHE:
            cls = Apache
        case WebServerKind.NGINX:
            cls = Nginx
        case _:
            raise ValueError(f"Unknown web server: {kind!r}")
    return cls(console, runner, facts, table, installer=installer, resources=resources)
