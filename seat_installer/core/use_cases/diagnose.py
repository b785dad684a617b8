"""
Diagnose use case — health checks for an installed SeAT instance.

Each check reports to the console as it runs and is collected into a
``DiagnosticsResult``.  Nothing here changes the host: problems come
with a suggested fix command instead.
"""

from __future__ import annotations

import logging
import platform
import pwd
from dataclasses import dataclass, field
from pathlib import Path

from seat_installer.core.config.loader import parse_env_file
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.models.config import DatabaseCredentials
from seat_installer.core.models.requirement import MinimumSoftwareVersionCheck, PlatformSupportedCheck
from seat_installer.core.services import mysql, redis_service, resources
from seat_installer.core.services.capabilities import Found
from seat_installer.core.services.executables import find_executable
from seat_installer.core.services.requirements import RequirementVerifier, list_php_modules
from seat_installer.core.services.webserver import detect_webserver
from seat_installer.core.use_cases.context import InstallerContext
from seat_installer.core.use_cases.install_production import MINIMUM_PYTHON

logger = logging.getLogger(__name__)

PHP_EXTENSIONS = ("mcrypt", "intl", "gd", "PDO", "curl", "mbstring", "dom")

REQUIRED_ENV_KEYS = (
    "APP_KEY", "DB_CONNECTION", "DB_HOST", "DB_DATABASE",
    "CACHE_DRIVER", "QUEUE_DRIVER", "REDIS_HOST", "MAIL_DRIVER",
)

EVE_API_URL = "https://esi.evetech.net/latest/status/"

STORAGE_MODE = "755"


@dataclass
class DiagnosticCheck:
    name: str
    ok: bool
    detail: str = ""
    fix: str | None = None


@dataclass
class DiagnosticsResult:
    path: str | None = None
    checks: list[DiagnosticCheck] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(c.ok for c in self.checks)

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "path": self.path,
            "warnings": self.warnings,
            "checks": [
                {"name": c.name, "ok": c.ok, "detail": c.detail, "fix": c.fix}
                for c in self.checks
            ],
        }


def run_diagnostics(ctx: InstallerContext, path: str) -> DiagnosticsResult:
    """Diagnose the installation at ``path`` (already located)."""
    console = ctx.console
    result = DiagnosticsResult(path=path)

    console.text("Checking minimum software requirements")
    verifier = RequirementVerifier(console, ctx.facts, ctx.table, None)
    report = verifier.verify([
        PlatformSupportedCheck(),
        MinimumSoftwareVersionCheck(software="Python", minimum=MINIMUM_PYTHON, current=platform.python_version()),
    ])
    for check in report.checks:
        result.checks.append(DiagnosticCheck(check.name, check.passed, check.detail))
    if not report.all_passed:
        console.error("Sorry, this operating system or runtime is not supported.")
        return result

    console.text(f"SeAT Path detected at: {path}")
    env = parse_env_file(Path(path) / ".env")

    _check_php_extensions(ctx, result)
    _check_configuration(ctx, result, env)
    _check_permissions(ctx, result, path)
    _check_redis(ctx, result, env)
    _check_mysql(ctx, result, env)
    _check_network(ctx, result)
    return result


# ── Individual checks ───────────────────────────────────────────


def _check_php_extensions(ctx: InstallerContext, result: DiagnosticsResult) -> None:
    console = ctx.console
    console.text("Checking PHP extensions")
    loaded = list_php_modules()
    missing = [ext for ext in PHP_EXTENSIONS if ext.lower() not in loaded]
    for ext in missing:
        console.error(f"PHP Extension {ext} not loaded.")
    if not missing:
        console.success("PHP Extension check passed")
    result.checks.append(DiagnosticCheck(
        "PHP extensions", not missing, f"missing: {', '.join(missing)}" if missing else "",
    ))


def _check_configuration(ctx: InstallerContext, result: DiagnosticsResult, env: dict[str, str]) -> None:
    console = ctx.console
    console.text("Checking SeAT configuration file")
    unset = [key for key in REQUIRED_ENV_KEYS if not env.get(key)]
    for key in unset:
        console.error(f"The value for {key} must be set in the SeAT `.env` file.")

    if env.get("APP_DEBUG", "").lower() != "false":
        message = (
            "SeAT is in DEBUG mode. This is dangerous as errors can be very verbose "
            "and reveal sensitive information."
        )
        console.warning(message)
        result.warnings.append(message)

    if not unset:
        console.success("Configuration check passed")
    result.checks.append(DiagnosticCheck(
        "Configuration", not unset, f"unset: {', '.join(unset)}" if unset else "",
    ))


def _check_permissions(ctx: InstallerContext, result: DiagnosticsResult, path: str) -> None:
    console = ctx.console
    console.text("Checking filesystem permissions")

    kind = detect_webserver()
    if kind is None:
        _skip(ctx, result, "Unable to detect the webserver in use. Skipping permissions check.")
        return
    console.text(f"Detected webserver in use as: {kind.value}")

    match ctx.table.find(ctx.facts.identity, CapabilityKind.SYSTEM_USER, kind.value):
        case Found(user):
            pass
        case _:
            _skip(ctx, result, "Unable to determine webserver user for your OS. Skipping permissions check")
            return

    try:
        uid = pwd.getpwnam(user).pw_uid
    except KeyError:
        _skip(ctx, result, f"User {user} does not exist. Skipping permissions check")
        return
    console.text(f"User for webserver detected as: {user} (uid {uid})")

    storage = Path(path) / "storage"
    console.text(f"Checking path: {storage}")
    problems = check_ownership(storage, user, uid)
    for log_file in storage.rglob("*.log") if storage.is_dir() else ():
        problems += check_ownership(log_file, user, uid)

    for check in problems:
        console.error(check.detail)
        if check.fix:
            console.note(f"You can try and fix this with: {check.fix}")

    if not problems:
        console.success(f"Permission and ownership check for {storage} passed")
    result.checks.append(DiagnosticCheck(
        "Permissions", not problems,
        "; ".join(p.detail for p in problems),
        problems[0].fix if problems else None,
    ))


def check_ownership(target: Path, user: str, uid: int, mode: str = STORAGE_MODE) -> list[DiagnosticCheck]:
    """Ownership/mode problems for ``target`` (empty when fine)."""
    try:
        st = target.stat()
    except OSError as e:
        return [DiagnosticCheck(str(target), False, f"Cannot stat {target}: {e}")]

    problems: list[DiagnosticCheck] = []
    if st.st_uid != uid:
        chown = find_executable("chown") or "chown"
        problems.append(DiagnosticCheck(
            str(target), False,
            f"The directory {target} is not owned by {user}",
            f"{chown} -R {user}:{user} {target}",
        ))
    actual = format(st.st_mode & 0o777, "o")
    if target.is_dir() and actual != mode:
        chmod = find_executable("chmod") or "chmod"
        problems.append(DiagnosticCheck(
            str(target), False,
            f"{target} does not have the correct octal permissions ({actual}, expected {mode}).",
            f"{chmod} -R {mode} {target}",
        ))
    return problems


def _check_redis(ctx: InstallerContext, result: DiagnosticsResult, env: dict[str, str]) -> None:
    console = ctx.console
    console.text("Checking Redis status")
    host, port = env.get("REDIS_HOST"), env.get("REDIS_PORT")
    if not host or not port or not port.isdigit():
        console.warning("The SeAT configuration does not have valid Redis settings. Going to try with defaults.")
        host, port = "127.0.0.1", "6379"

    ok, detail = redis_service.smoke_test(host, int(port))
    if ok:
        console.success("Redis check passed")
    else:
        console.error(f"Redis check failed with: {detail}")
    result.checks.append(DiagnosticCheck("Redis", ok, detail))


def _check_mysql(ctx: InstallerContext, result: DiagnosticsResult, env: dict[str, str]) -> None:
    console = ctx.console
    console.text("Testing MySQL authentication and connectivity")
    credentials = DatabaseCredentials(
        username=env.get("DB_USERNAME"),
        password=env.get("DB_PASSWORD", ""),
        database=env.get("DB_DATABASE"),
    )
    if not credentials.is_complete:
        console.warning("SeAT configuration for the database appears incomplete. Going to try with some defaults.")
        credentials = credentials.model_copy(update={"username": "seat", "database": "seat"})

    host = env.get("DB_HOST") or "127.0.0.1"
    port = env.get("DB_PORT", "3306")
    ok, detail = mysql.check_credentials(credentials, host, int(port) if port.isdigit() else 3306)
    if ok:
        console.success("MySQL connectivity check passed")
    else:
        console.error(f"Unable to successfully connect and authenticate to the database: {detail}")
    result.checks.append(DiagnosticCheck("MySQL", ok, detail))


def _check_network(ctx: InstallerContext, result: DiagnosticsResult) -> None:
    console = ctx.console
    console.text("Checking connectivity to the EVE Online API server")
    probe = resources.check_reachable(EVE_API_URL)
    ok = probe["reachable"] and probe.get("status") == 200
    if ok:
        console.success("Connectivity check to EVE Online API server passed")
    else:
        console.error("Failed connectivity check to EVE Online API server")
    result.checks.append(DiagnosticCheck("EVE API", ok, probe.get("error", "")))


def _skip(ctx: InstallerContext, result: DiagnosticsResult, message: str) -> None:
    ctx.console.warning(message)
    result.warnings.append(message)
