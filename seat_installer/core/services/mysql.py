"""
MySQL / MariaDB — database server install, hardening and provisioning.

Generated credentials are persisted to ``/root/.seat-credentials``
(JSON, mode 0600) as soon as they exist, so an interrupted run never
loses the root password.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import mysql.connector
from pydantic import ValidationError

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.errors import ConfigError, CredentialValidationError, DatabaseConfigurationError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.models.config import DatabaseCredentials
from seat_installer.core.services.base import ProvisioningService, generate_password
from seat_installer.core.services.capabilities import CapabilityTable
from seat_installer.core.services.executables import has_executable
from seat_installer.core.services.package_installer import PackageInstaller
from seat_installer.core.services.platform_facts import PlatformFacts
from seat_installer.core.services.resources import ResourceDownloader

logger = logging.getLogger(__name__)

CREDENTIALS_FILE = Path("/root/.seat-credentials")

SEAT_DATABASE = "seat"
SEAT_USERNAME = "seat"


# ── Credential file I/O ─────────────────────────────────────────


def read_credentials(path: Path = CREDENTIALS_FILE) -> DatabaseCredentials | None:
    """Load saved credentials; None when the file does not exist.

    Raises:
        ConfigError: the file exists but is not valid credentials JSON.
    """
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return DatabaseCredentials.model_validate(data)
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        raise ConfigError(f"Cannot read credentials from {path}: {e}") from e


def save_credentials(credentials: DatabaseCredentials, path: Path = CREDENTIALS_FILE) -> None:
    """Write credentials as JSON, readable by the owner only."""
    payload = json.dumps(credentials.model_dump(), indent=2)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(payload)
    os.chmod(path, 0o600)
    logger.debug("Saved database credentials to %s", path)


def check_credentials(
    credentials: DatabaseCredentials,
    host: str = "127.0.0.1",
    port: int = 3306,
) -> tuple[bool, str]:
    """Try to connect with ``credentials``.  Never raises.

    Returns:
        (ok, error message or "")
    """
    try:
        conn = mysql.connector.connect(
            host=host,
            port=port,
            user=credentials.username,
            password=credentials.password or "",
            database=credentials.database,
            connection_timeout=10,
        )
    except mysql.connector.Error as e:
        logger.debug("MySQL connection as %s failed: %s", credentials.username, e)
        return False, str(e)
    conn.close()
    return True, ""


# ── Service ─────────────────────────────────────────────────────


class MySql(ProvisioningService):
    """Install and provision the database server.

    ``credentials`` holds whatever is known so far (read from the
    credentials file, typed by the operator, or generated here).
    """

    def __init__(
        self,
        console: Console,
        runner: CommandRunner,
        facts: PlatformFacts,
        table: CapabilityTable,
        *,
        installer: PackageInstaller,
        resources: ResourceDownloader,
        credentials_file: Path = CREDENTIALS_FILE,
    ) -> None:
        super().__init__(console, runner, facts, table)
        self.installer = installer
        self.resources = resources
        self.credentials_file = credentials_file
        self.credentials = DatabaseCredentials()

    def is_installed(self) -> bool:
        return has_executable("mysqld_safe")

    def install(self) -> None:
        self.installer.install_package_group("mysql")
        self.restart_and_enable()
        self.console.success("MySQL installation complete")

    def restart_and_enable(self) -> None:
        commands = self.lookup(CapabilityKind.SERVICE_COMMAND, "mysql")
        self.run_all(
            commands,
            label="MySQL Restart",
            error=DatabaseConfigurationError,
            message="Unable to restart MySQL",
        )

    def validate_credentials(self) -> None:
        """Raises CredentialValidationError when ``credentials`` cannot connect."""
        ok, error = check_credentials(self.credentials)
        if not ok:
            raise CredentialValidationError(f"Database connection error. {error}")

    def read_credentials(self) -> DatabaseCredentials | None:
        saved = read_credentials(self.credentials_file)
        if saved is not None:
            self.credentials = saved
        return saved

    def save_credentials(self) -> None:
        save_credentials(self.credentials, self.credentials_file)

    # ── Configure ───────────────────────────────────────────────

    def configure(self) -> DatabaseCredentials:
        """Secure the fresh server and create the application database.

        Raises:
            DatabaseConfigurationError: the script or SQL provisioning failed.
        """
        self.console.text("Securing MySQL installation")
        self._secure_installation()
        self.console.text("Creating Database and adding user for SeAT")
        self._create_user_and_database()
        return self.credentials

    def _secure_installation(self) -> None:
        self.credentials = self.credentials.model_copy(update={"root_password": generate_password()})
        self.save_credentials()

        distribution = self.facts.distribution.value
        script = self.resources.download_resource(f"mysql_secure_installation.{distribution}.bash")
        script = script.replace(":MYSQL_ROOT_PASS", self.credentials.root_password or "")

        self.run_checked(
            script,
            label="MySQL Secure Installation",
            error=DatabaseConfigurationError,
            message="MySQL configuration failed.",
            announce=False,
        )

    def _create_user_and_database(self) -> None:
        self.credentials = self.credentials.model_copy(update={
            "username": SEAT_USERNAME,
            "database": SEAT_DATABASE,
            "password": generate_password(),
        })
        self.save_credentials()

        creds = self.credentials
        try:
            conn = mysql.connector.connect(
                host="localhost",
                user="root",
                password=creds.root_password or "",
            )
        except mysql.connector.Error as e:
            raise DatabaseConfigurationError(f"Cannot log in as the MySQL root user: {e}") from e

        try:
            cursor = conn.cursor()
            cursor.execute(f"CREATE DATABASE IF NOT EXISTS `{creds.database}`")
            cursor.execute(
                "CREATE USER IF NOT EXISTS %s@'localhost' IDENTIFIED BY %s",
                (creds.username, creds.password),
            )
            cursor.execute(
                f"GRANT ALL ON `{creds.database}`.* TO %s@'localhost'",
                (creds.username,),
            )
            cursor.execute("FLUSH PRIVILEGES")
            cursor.close()
        except mysql.connector.Error as e:
            raise DatabaseConfigurationError(f"Database provisioning failed: {e}") from e
        finally:
            conn.close()
