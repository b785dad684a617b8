"""
Capability data — every OS/version-specific fact the installers use.

Pure data.  One mapping, four levels:

    distribution → version → CapabilityKind → name → value

Rows shared by a distribution family are built once by the family
helpers below and merged per version.  The table is frozen into
read-only proxies at import time.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

from seat_installer.core.models.capability import CapabilityKind as K

Rows = dict[K, dict[str, Any]]

# PHP extension rows are looked up under this prefix so they cannot
# collide with command names ("pdo_mysql" is both).
PHP_EXT_PREFIX = "php-ext:"


# ── Init-system command builders ────────────────────────────────


_SYSTEMD = ("systemctl enable {unit}", "systemctl restart {unit}")
_SYSV = ("chkconfig {unit} on", "/etc/init.d/{unit} restart")


def _service_rows(units: dict[str, str], init: tuple[str, str]) -> Rows:
    """Unit names plus the enable/restart commands built from them.

    ``units`` must name mysql, redis, nginx, php-fpm and supervisor.
    """
    enable, restart = (template.format for template in init)

    def both(name: str) -> tuple[str, ...]:
        return (enable(unit=units[name]), restart(unit=units[name]))

    return {
        K.SERVICE_UNIT: dict(units),
        K.SERVICE_COMMAND: {
            "mysql": both("mysql"),
            "redis": both("redis"),
            "nginx-restart": (restart(unit=units["nginx"]), restart(unit=units["php-fpm"])),
            "supervisor-enable": (enable(unit=units["supervisor"]),),
            "supervisor-restart": (restart(unit=units["supervisor"]),),
        },
    }


def _merge(*parts: Rows) -> Rows:
    """Merge row sets kind by kind; later parts win per name."""
    merged: Rows = {}
    for part in parts:
        for kind, rows in part.items():
            merged.setdefault(kind, {}).update(rows)
    return merged


# ── Debian family (ubuntu, debian) ──────────────────────────────


def _deb_family(*, php: str, database: str, database_unit: str) -> Rows:
    rows: Rows = {
        K.PACKAGE_MANAGER: {
            "install": "apt-get install :package -y",
        },
        K.PACKAGE_NAME: {
            "unzip": "unzip",
            "git": "git",
            "pdo_mysql": f"php{php}-mysql",
            f"{PHP_EXT_PREFIX}pdo_mysql": f"php{php}-mysql",
            f"{PHP_EXT_PREFIX}posix": f"php{php}-common",
            f"{PHP_EXT_PREFIX}PDO": f"php{php}-common",
            f"{PHP_EXT_PREFIX}intl": f"php{php}-intl",
            f"{PHP_EXT_PREFIX}gd": f"php{php}-gd",
            f"{PHP_EXT_PREFIX}curl": f"php{php}-curl",
            f"{PHP_EXT_PREFIX}mbstring": f"php{php}-mbstring",
            f"{PHP_EXT_PREFIX}dom": f"php{php}-xml",
            f"{PHP_EXT_PREFIX}xml": f"php{php}-xml",
            f"{PHP_EXT_PREFIX}zip": f"php{php}-zip",
        },
        K.PACKAGE_GROUP: {
            "mysql": (database, "expect"),
            "php": (
                f"php{php}-cli", f"php{php}-intl", f"php{php}-mysql",
                f"php{php}-curl", f"php{php}-gd", f"php{php}-mbstring",
                f"php{php}-bz2", f"php{php}-xml", f"php{php}-zip",
            ),
            "apache": ("apache2", f"libapache2-mod-php{php}"),
            "nginx": ("nginx", f"php{php}-fpm"),
            "redis": ("redis-server",),
            "supervisor": ("supervisor",),
        },
        K.SERVICE_COMMAND: {
            "os-update": ("apt-get update && apt-get upgrade -y",),
            "apache-modules": ("a2enmod rewrite",),
            "apache-restart": ("apachectl restart",),
        },
        K.CONFIG_PATH: {
            "nginx-server-block": "/etc/nginx/sites-enabled/100-seat.conf",
            "nginx-default-site": "/etc/nginx/sites-enabled/default",
            "php-ini": f"/etc/php/{php}/fpm/php.ini",
            "apache-vhost": "/etc/apache2/sites-available/100-seat.local.conf",
            "apache-vhost-link": "/etc/apache2/sites-enabled/100-seat.local.conf",
            "apache-document-root": "/var/www/html/seat.local",
            "apache-conf": "/etc/apache2/apache2.conf",
            "apache-security-conf": "/etc/apache2/conf-enabled/security.conf",
            "apache-default-site": "/etc/apache2/sites-enabled/000-default.conf",
            "supervisor-seat": "/etc/supervisor/conf.d/seat.conf",
            "supervisor-conf": "/etc/supervisor/supervisord.conf",
        },
        K.SYSTEM_USER: {
            "nginx": "www-data",
            "apache": "www-data",
        },
        K.SOCKET_PATH: {
            "php-fpm": f"/var/run/php/php{php}-fpm.sock",
        },
    }
    rows = _merge(rows, _service_rows(
        {
            "mysql": database_unit,
            "redis": "redis-server.service",
            "nginx": "nginx.service",
            "php-fpm": f"php{php}-fpm.service",
            "supervisor": "supervisor.service",
        },
        _SYSTEMD,
    ))
    # mcrypt left core PHP in 7.2
    if php == "7.1":
        rows = _merge(rows, {
            K.PACKAGE_NAME: {f"{PHP_EXT_PREFIX}mcrypt": "php7.1-mcrypt"},
            K.PACKAGE_GROUP: {"php": (*rows[K.PACKAGE_GROUP]["php"], "php7.1-mcrypt")},
        })
    return rows


# ── RedHat family (centos) ──────────────────────────────────────


def _centos_family() -> Rows:
    return {
        K.PACKAGE_MANAGER: {
            "install": "yum install :package -y",
        },
        K.PACKAGE_NAME: {
            "unzip": "unzip",
            "git": "git",
            "pdo_mysql": "php-mysql",
            f"{PHP_EXT_PREFIX}pdo_mysql": "php-mysql",
            f"{PHP_EXT_PREFIX}posix": "php-posix",
            f"{PHP_EXT_PREFIX}PDO": "php-pdo",
            f"{PHP_EXT_PREFIX}intl": "php-intl",
            f"{PHP_EXT_PREFIX}gd": "php-gd",
            f"{PHP_EXT_PREFIX}curl": "php-common",
            f"{PHP_EXT_PREFIX}mbstring": "php-mbstring",
            f"{PHP_EXT_PREFIX}dom": "php-xml",
            f"{PHP_EXT_PREFIX}xml": "php-xml",
            f"{PHP_EXT_PREFIX}zip": "php-pecl-zip",
            f"{PHP_EXT_PREFIX}mcrypt": "php-mcrypt",
        },
        K.PACKAGE_GROUP: {
            "mysql": ("MariaDB-server", "expect"),
            "php": (
                "php-mysql", "php-cli", "php-mcrypt", "php-process",
                "php-mbstring", "php-intl", "php-dom", "php-gd",
            ),
            "apache": ("httpd", "php"),
            "nginx": ("nginx", "php-fpm"),
            "redis": ("redis",),
            "supervisor": ("supervisor",),
        },
        K.SERVICE_COMMAND: {
            "os-update": ("yum update -y",),
            "apache-modules": (),
            "apache-restart": ("apachectl restart",),
        },
        K.CONFIG_PATH: {
            "nginx-server-block": "/etc/nginx/nginx.conf",
            "php-ini": "/etc/php.ini",
            "apache-vhost": "/etc/httpd/conf.d/100-seat.local.conf",
            "apache-document-root": "/var/www/html/seat.local",
            "apache-conf": "/etc/httpd/conf/httpd.conf",
            "apache-security-conf": "/etc/httpd/conf/httpd.conf",
            "apache-default-site": "/etc/httpd/conf.d/welcome.conf",
            "supervisor-seat": "/etc/supervisord.d/seat.ini",
            "supervisor-conf": "/etc/supervisord.conf",
        },
        K.SYSTEM_USER: {
            "apache": "apache",
        },
        K.SOCKET_PATH: {
            "php-fpm": "/var/run/php-fpm/php-fpm.sock",
        },
    }


_CENTOS_7: Rows = {
    **_service_rows(
        {
            "mysql": "mariadb.service",
            "redis": "redis.service",
            "nginx": "nginx.service",
            "php-fpm": "php-fpm.service",
            "supervisor": "supervisord",
        },
        _SYSTEMD,
    ),
    K.SYSTEM_USER: {
        "nginx": "apache",
    },
}

_CENTOS_6: Rows = {
    K.PACKAGE_GROUP: {
        # gf-plus only for supervisor; enabling it globally drags in upgrades.
        "supervisor": ("supervisor --enablerepo=gf-plus",),
    },
    **_service_rows(
        {
            "mysql": "mysqld",
            "redis": "redis",
            "nginx": "nginx",
            "php-fpm": "php-fpm",
            "supervisor": "supervisord",
        },
        _SYSV,
    ),
    K.SYSTEM_USER: {
        "nginx": "nginx",
    },
}


# ── The table ───────────────────────────────────────────────────

_RAW: dict[str, dict[str, Rows]] = {
    "ubuntu": {
        "16.04": _deb_family(php="7.1", database="mysql-server", database_unit="mysql.service"),
        "18.04": _deb_family(php="7.1", database="mysql-server", database_unit="mysql.service"),
        "20.04": _deb_family(php="7.4", database="mysql-server", database_unit="mysql.service"),
    },
    "centos": {
        "7": _merge(_centos_family(), _CENTOS_7),
        "6": _merge(_centos_family(), _CENTOS_6),
    },
    "debian": {
        "8": _deb_family(php="7.1", database="mariadb-server", database_unit="mariadb.service"),
        "9": _deb_family(php="7.1", database="mariadb-server", database_unit="mariadb.service"),
    },
}


def _freeze(raw: dict[str, dict[str, Rows]]) -> MappingProxyType:
    return MappingProxyType({
        dist: MappingProxyType({
            version: MappingProxyType({
                kind: MappingProxyType(dict(rows)) for kind, rows in kinds.items()
            })
            for version, kinds in versions.items()
        })
        for dist, versions in raw.items()
    })


CAPABILITIES = _freeze(_RAW)
