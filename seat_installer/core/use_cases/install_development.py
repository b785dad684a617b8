"""
Development install use case — a git checkout of every SeAT package,
wired together with the development composer.json.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from seat_installer.core.errors import (
    ArtisanCommandError,
    CommandExecutionError,
    InstallerError,
    TargetDirectoryError,
)
from seat_installer.core.models.requirement import (
    CheckSpec,
    CommandPresentCheck,
    MinimumSoftwareVersionCheck,
    PhpExtensionCheck,
)
from seat_installer.core.services.executables import find_executables
from seat_installer.core.services.requirements import detect_php_version
from seat_installer.core.services.resources import fetch
from seat_installer.core.use_cases.context import InstallerContext

logger = logging.getLogger(__name__)

DEFAULT_DESTINATION = "seat-development"

MAIN_REPOSITORY = "https://github.com/eveseat/seat.git"

PACKAGES: dict[str, str] = {
    name: f"https://github.com/eveseat/{name}.git"
    for name in ("api", "console", "eveapi", "installer", "notifications", "services", "web")
}

COMPOSER_DEV_JSON = "https://raw.githubusercontent.com/eveseat/scripts/master/development/composer.dev.json"

REQUIRED_EXECUTABLES = ("git", "unzip", "composer", "php")
REQUIRED_PHP_EXTENSIONS = ("intl", "gd", "PDO", "curl", "mbstring", "dom", "xml", "zip")

MINIMUM_PHP = "7.1"


def development_checks() -> list[CheckSpec]:
    checks: list[CheckSpec] = [CommandPresentCheck(command=c) for c in REQUIRED_EXECUTABLES]
    checks.append(MinimumSoftwareVersionCheck(software="PHP", minimum=MINIMUM_PHP, current=detect_php_version()))
    checks += [PhpExtensionCheck(extension=e) for e in REQUIRED_PHP_EXTENSIONS]
    return checks


def resolve_destination(destination: str) -> Path:
    """Absolute install path; the directory must not exist yet.

    Raises:
        TargetDirectoryError: the destination already exists.
    """
    full = Path(destination).expanduser().absolute()
    if full.exists():
        raise TargetDirectoryError(f"{destination} already exists")
    return full


def install_development(ctx: InstallerContext, destination: str = DEFAULT_DESTINATION) -> bool:
    """Clone and prepare a development instance at ``destination``.

    Returns:
        False when requirements are missing (after offering fixes).

    Raises:
        InstallerError: a clone, download or composer step failed.
    """
    console = ctx.console
    console.title("SeAT Development Installer")

    report = ctx.verifier().verify(development_checks())
    if not report.all_passed:
        console.error("Development requirements are not met.")
        return False

    executables = find_executables(REQUIRED_EXECUTABLES)
    for name, path in executables.items():
        console.text(f"Using {path} for {name}")

    install_dir = resolve_destination(destination)
    packages_dir = install_dir / "packages" / "eveseat"

    console.text(f"Cloning Main SeAT repository to {install_dir}...")
    _clone(ctx, executables["git"], MAIN_REPOSITORY, install_dir)
    packages_dir.mkdir(parents=True, exist_ok=True)

    console.text("Cloning Packages...")
    for name, repository in PACKAGES.items():
        target = packages_dir / name
        console.text(f"Processing {name} to {target}")
        _clone(ctx, executables["git"], repository, target)

    console.text("Downloading Development composer.json and installing dependencies...")
    (install_dir / "composer.json").write_bytes(fetch(COMPOSER_DEV_JSON))
    ctx.composer().install_packages(str(install_dir))

    console.text("Preparing .env file...")
    env_file = install_dir / ".env"
    if not env_file.exists():
        shutil.copyfile(install_dir / ".env.example", env_file)

    console.text("Enabling debug mode...")
    env_file.write_text(
        env_file.read_text(encoding="utf-8").replace("APP_DEBUG=false", "APP_DEBUG=true"),
        encoding="utf-8",
    )

    console.text("Generating Encryption Key...")
    command = f"cd {install_dir} && {executables['php']} artisan key:generate"
    if not ctx.runner.run_command(command):
        raise ArtisanCommandError("Unable to generate the application key", command=command)

    console.success("Done! Remember to setup Redis and the DB")
    return True


def _clone(ctx: InstallerContext, git: str | None, repository: str, target: Path) -> None:
    command = f"{git or 'git'} clone {repository} {target}"
    result = ctx.runner.execute(command, prefix="Git")
    if result.failed:
        raise CommandExecutionError(
            f"Cloning {repository} failed",
            command=command,
            output=result.combined_output,
        )


def make_package(ctx: InstallerContext, folder: str = "my-package") -> None:
    """Clone the example package skeleton into ``folder``.

    Raises:
        TargetDirectoryError: ``folder`` already exists.
        InstallerError: git is missing or the clone failed.
    """
    target = Path(folder).expanduser().absolute()
    if target.exists():
        raise TargetDirectoryError(f"{folder} already exists")
    git = find_executables(["git"])["git"]
    if git is None:
        raise InstallerError("Cant find executable for git")
    ctx.console.text(f"Cloning the example package into {target}")
    _clone(ctx, git, "https://github.com/eveseat/package-example.git", target)
    ctx.console.success(f"Package skeleton created at {target}")
