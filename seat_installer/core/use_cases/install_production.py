"""
Production install use case — provision a host end to end.

Order matters: requirements first (nothing is changed on a host that
fails them), then OS update, PHP, composer (its installer runs under
php), database, cache, the application itself, workers, scheduler and
finally the web server.
"""

from __future__ import annotations

import logging
import platform
import socket
from pathlib import Path

from seat_installer.core.errors import CredentialValidationError, TargetDirectoryError
from seat_installer.core.models.config import DatabaseCredentials
from seat_installer.core.models.requirement import (
    CheckSpec,
    CommandPresentCheck,
    FilesystemAccessCheck,
    MinimumSoftwareVersionCheck,
    PlatformSupportedCheck,
)
from seat_installer.core.services.mysql import MySql
from seat_installer.core.services.webserver import WebServerKind
from seat_installer.core.use_cases.context import InstallerContext

logger = logging.getLogger(__name__)

DEFAULT_DESTINATION = "/var/www/seat"

MINIMUM_PYTHON = "3.11"


def production_checks() -> list[CheckSpec]:
    return [
        PlatformSupportedCheck(),
        MinimumSoftwareVersionCheck(
            software="Python",
            minimum=MINIMUM_PYTHON,
            current=platform.python_version(),
        ),
        FilesystemAccessCheck(),
        CommandPresentCheck(command="git"),
        CommandPresentCheck(command="unzip"),
    ]


_SUMMARY = [
    "Check the needed software dependencies.",
    "Update the Operating System.",
    "Install PHP.",
    "Ensure Composer is available for use.",
    "Configure / Install MySQL.",
    "Install SeAT.",
    "Install & Configure supervisor.",
    "Setup the crontab for SeAT.",
    "Install and configure a Webserver.",
]


def install_production(
    ctx: InstallerContext,
    destination: str = DEFAULT_DESTINATION,
    webserver: WebServerKind | None = None,
    stability: str = "stable",
) -> bool:
    """Run the production install.

    Returns:
        True when installation completed; False when the operator
        cancelled or requirements were not satisfied.

    Raises:
        InstallerError: any step failed.
    """
    console = ctx.console
    console.title("SeAT Installer")

    if not _confirm_continue(ctx, destination):
        console.text("Installer stopped via user cancel.")
        return False

    if webserver is None:
        choice = console.choice(
            "Which webserver do you want to use?",
            [k.value for k in WebServerKind],
            WebServerKind.APACHE.value,
        )
        webserver = WebServerKind(choice)

    _create_install_directory(ctx, destination)

    console.text("Checking Requirements")
    report = ctx.verifier().verify(production_checks())
    if not report.all_passed:
        if report.rerun_required:
            console.note("Missing requirements were installed. Rerun the installer to continue.")
        else:
            console.error("Requirements check failed. Fix the problems above and rerun the installer.")
        return False
    console.success("Passed requirements check")

    console.text("Updating Operating System")
    ctx.os_updater().update()

    ctx.package_installer().install_package_group("php")

    console.text("Checking Composer installation")
    ctx.composer().ensure()

    credentials = _configure_mysql(ctx)

    redis = ctx.redis()
    redis.install()
    redis.enable()
    console.success("Redis configuration complete")

    seat = ctx.seat(destination)
    seat.install(stability)
    seat.configure(credentials)

    server = ctx.webserver(webserver)
    user = server.user()

    supervisor = ctx.supervisor()
    supervisor.install()
    supervisor.setup(destination, user)
    supervisor.setup_integration(destination)

    ctx.crontab().install(destination, user)

    server.install()
    server.harden()
    server.configure(destination)

    console.success("Installation complete!")
    console.text("Remember to set an admin password with 'php artisan seat:admin:reset'")
    return True


def _confirm_continue(ctx: InstallerContext, destination: str) -> bool:
    console = ctx.console
    console.text(f"This installer will install SeAT on this server with hostname: {socket.gethostname()}")
    console.text(
        f"SeAT will be installed at: {destination}. "
        "If the directory does not exist, it will be created."
    )
    console.text("The following is a short summary of actions that will be performed:")
    console.listing(_SUMMARY)
    console.text("It may be needed to restart the installer sometimes to continue.")
    return console.confirm("Would like to continue with the installation?")


def _create_install_directory(ctx: InstallerContext, destination: str) -> None:
    try:
        Path(destination).mkdir(mode=0o755, parents=True, exist_ok=True)
    except OSError as e:
        raise TargetDirectoryError(f"Cannot create {destination}: {e}") from e
    ctx.console.success(f"Directory {destination} created.")


def _configure_mysql(ctx: InstallerContext) -> DatabaseCredentials:
    mysql = ctx.mysql()
    if mysql.is_installed():
        return _prompt_for_credentials(ctx, mysql)

    mysql.install()
    credentials = mysql.configure()
    mysql.save_credentials()
    return credentials


def _prompt_for_credentials(ctx: InstallerContext, mysql: MySql) -> DatabaseCredentials:
    """Loop until the operator supplies credentials that connect."""
    console = ctx.console
    console.warning("MySQL appears to already be installed.")
    console.text(
        "Entering mode to get access details for SeAT to use. It is recommended that you "
        "create a *new* database and MySQL user for SeAT. The user must have the following "
        "MySQL privileges on the SeAT database:"
    )
    console.text("CREATE, LOCK TABLES, INDEX, INSERT, SELECT, UPDATE, DELETE, DROP, ALTER")
    console.text("A user can be created with the following SQL statements:")
    console.text("CREATE USER 'seat'@'localhost' IDENTIFIED BY 'password';")
    console.text("GRANT ALL ON seat.* TO 'seat'@'localhost';")

    previous = mysql.read_credentials()
    root_password = previous.root_password if previous else None

    while True:
        console.text(
            "If you are back here after a failed install run, check the file at "
            f"{mysql.credentials_file} for the auto-generated seat users password."
        )
        console.text("Please provide database details:")
        mysql.credentials = DatabaseCredentials(
            username=console.ask("Username"),
            password=console.ask_hidden("Password"),
            database=console.ask("Database"),
            root_password=root_password,
        )
        try:
            mysql.validate_credentials()
        except CredentialValidationError as e:
            console.error(e.message)
            console.error("Unable to connect to MySQL. Please retry.")
            continue
        break

    console.success("Database connected!")
    mysql.save_credentials()
    return mysql.credentials
