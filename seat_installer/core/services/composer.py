"""
Composer — the PHP dependency manager SeAT is installed with.

Installation follows the upstream procedure: download the installer,
compare its SHA-384 with the published signature, run it with php and
move the resulting ``composer.phar`` onto PATH.
"""

from __future__ import annotations

import hashlib
import logging
import os
import shutil
from pathlib import Path

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.errors import ComposerInstallError, ExternalDownloadError
from seat_installer.core.services.executables import find_executable, has_executable
from seat_installer.core.services.resources import fetch

logger = logging.getLogger(__name__)

INSTALLER_URL = "https://getcomposer.org/installer"
SIGNATURE_URL = "https://composer.github.io/installer.sig"


class Composer:
    """Install, self-update and drive composer.

    Args:
        console: Operator output.
        runner: Command runner.
        temp_file: Where the downloaded installer is stored.
        executable_dir: Directory the executable is moved into.
        work_dir: Directory the installer writes ``composer.phar`` to.
    """

    def __init__(
        self,
        console: Console,
        runner: CommandRunner,
        *,
        temp_file: Path = Path("/tmp/composer"),
        executable_dir: Path = Path("/usr/local/bin"),
        work_dir: Path | None = None,
    ) -> None:
        self.console = console
        self.runner = runner
        self.temp_file = temp_file
        self.executable_dir = executable_dir
        self.work_dir = work_dir or Path.cwd()

    def has_composer(self) -> bool:
        return has_executable("composer")

    @property
    def executable(self) -> str:
        return find_executable("composer") or str(self.executable_dir / "composer")

    # ── Install ─────────────────────────────────────────────────

    def install(self) -> None:
        """Download, verify and install composer.

        Raises:
            ComposerInstallError: on download, signature or install failure.
        """
        self.console.text(f"Downloading Composer from {INSTALLER_URL}")
        try:
            installer = fetch(INSTALLER_URL)
            self.console.text("Downloading and verifying signatures")
            signature = fetch(SIGNATURE_URL).decode("utf-8").strip()
        except ExternalDownloadError as e:
            raise ComposerInstallError(str(e)) from e

        actual = hashlib.sha384(installer).hexdigest()
        if actual != signature.lower():
            logger.debug("Composer signature mismatch: expected %s, got %s", signature, actual)
            raise ComposerInstallError("Signature mismatch")

        self.temp_file.write_bytes(installer)

        self.console.text("Running Composer Installer")
        command = f"php {self.temp_file} --install-dir={self.work_dir}"
        result = self.runner.execute(command, prefix="Composer Installation")
        if result.failed:
            raise ComposerInstallError(
                "Composer installation failed.",
                command=command,
                output=result.combined_output,
            )

        self.console.text("Moving the installed executable")
        self._move_executable()

        self.console.text("Checking that PATH is configured correctly")
        self._check_path()

        self.console.text("Checking if composer can now be found.")
        if not self.has_composer():
            raise ComposerInstallError("Composer could not be found after installation")

        self.console.success("Composer Installation Complete")

    def _move_executable(self) -> None:
        phar = self.work_dir / "composer.phar"
        target = self.executable_dir / "composer"
        try:
            shutil.copy2(phar, target)
            target.chmod(0o755)
        except OSError as e:
            raise ComposerInstallError(f"Could not install {target}: {e}") from e
        finally:
            for leftover in (phar, self.temp_file):
                leftover.unlink(missing_ok=True)

    def _check_path(self) -> None:
        path_dirs = os.environ.get("PATH", "").split(os.pathsep)
        if str(self.executable_dir) not in path_dirs:
            self.console.warning(
                f"Installation path {self.executable_dir} is not in the PATH environment "
                "variable. This may cause tools to fail when they need to use composer."
            )
            return
        self.console.text(f"PATH contains the installation path of {self.executable_dir}")

    # ── Update ──────────────────────────────────────────────────

    def self_update(self) -> None:
        command = f"{self.executable} self-update -n"
        result = self.runner.execute(command, prefix="Composer Update")
        if result.failed:
            raise ComposerInstallError(
                "Composer self-update failed.",
                command=command,
                output=result.combined_output,
            )

    def ensure(self) -> None:
        """Install composer when missing, otherwise self-update it."""
        if self.has_composer():
            self.self_update()
        else:
            self.install()

    def update_packages(self, path: str, include_dev: bool = False) -> None:
        """Run ``composer update`` inside ``path``."""
        command = f"{self.executable} update --no-ansi --no-progress -n -d {path}"
        if not include_dev:
            command += " --no-dev"
        result = self.runner.execute(command, prefix="Composer")
        if result.failed:
            raise ComposerInstallError(
                "Composer package update failed.",
                command=command,
                output=result.combined_output,
            )

    def install_packages(self, path: str) -> None:
        """Run ``composer install`` inside ``path``."""
        command = f"{self.executable} install --no-ansi --no-progress -n -d {path}"
        result = self.runner.execute(command, prefix="Composer")
        if result.failed:
            raise ComposerInstallError(
                "Composer install failed.",
                command=command,
                output=result.combined_output,
            )
