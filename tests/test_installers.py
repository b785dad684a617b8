"""
Tests for package installation, OS updates, crontab and composer.
"""

import hashlib
from pathlib import Path

import pytest

from seat_installer.core.errors import (
    ComposerInstallError,
    CrontabInstallationError,
    ExternalDownloadError,
    OsUpdateError,
    PackageInstallationError,
    UnknownCapabilityError,
    UnsupportedPlatformError,
)
from seat_installer.core.services import composer as composer_module
from seat_installer.core.services import crontab as crontab_module
from seat_installer.core.services.composer import Composer
from seat_installer.core.services.crontab import Crontab, cron_entry
from seat_installer.core.services.os_updates import OsUpdater
from seat_installer.core.services.package_installer import PackageInstaller

# ── Package installer ───────────────────────────────────────────


class TestPackageInstaller:
    def test_deb_install_is_noninteractive(self, console, runner, make_facts, table):
        PackageInstaller(console, runner, make_facts("ubuntu", "18.04"), table).install_package("git")
        assert runner.commands == ["apt-get install git -y"]
        assert runner.envs == [{"DEBIAN_FRONTEND": "noninteractive"}]
        assert runner.prefixes == ["Package Installation (git)"]
        assert "Package git installed OK" in console.lines("success")

    def test_centos_uses_yum(self, console, runner, make_facts, table):
        PackageInstaller(console, runner, make_facts("centos", "7"), table).install_package("git")
        assert runner.commands == ["yum install git -y"]
        assert runner.envs == [None]

    def test_failure_raises_with_output(self, console, make_runner, make_facts, table):
        runner = make_runner(fail_on=["apt-get"], output="E: Unable to locate package")
        installer = PackageInstaller(console, runner, make_facts(), table)
        with pytest.raises(PackageInstallationError) as exc:
            installer.install_package("nope")
        assert exc.value.message == "nope installation failed."
        assert exc.value.command == "apt-get install nope -y"
        assert "Unable to locate" in exc.value.output

    def test_unsupported_platform(self, console, runner, make_facts, table):
        installer = PackageInstaller(console, runner, make_facts("centos", "8"), table)
        with pytest.raises(UnsupportedPlatformError):
            installer.install_package("git")
        assert runner.commands == []

    def test_group_installs_each_package(self, console, runner, make_facts, table):
        PackageInstaller(console, runner, make_facts("debian", "9"), table).install_package_group("mysql")
        assert runner.commands == [
            "apt-get install mariadb-server -y",
            "apt-get install expect -y",
        ]

    def test_group_stops_on_first_failure(self, console, make_runner, make_facts, table):
        runner = make_runner(fail_on=["php7.1-intl"])
        installer = PackageInstaller(console, runner, make_facts(), table)
        with pytest.raises(PackageInstallationError):
            installer.install_package_group("php")
        assert runner.commands[-1] == "apt-get install php7.1-intl -y"

    def test_for_command_uses_mapping(self, console, runner, make_facts, table):
        PackageInstaller(console, runner, make_facts(), table).install_for_command("pdo_mysql")
        assert runner.commands == ["apt-get install php7.1-mysql -y"]

    def test_for_command_falls_back_to_name(self, console, runner, make_facts, table):
        PackageInstaller(console, runner, make_facts(), table).install_for_command("htop")
        assert runner.commands == ["apt-get install htop -y"]

    def test_for_php_extension(self, console, runner, make_facts, table):
        PackageInstaller(console, runner, make_facts("centos", "7"), table).install_for_php_extension("zip")
        assert runner.commands == ["yum install php-pecl-zip -y"]

    def test_unknown_php_extension(self, console, runner, make_facts, table):
        installer = PackageInstaller(console, runner, make_facts(), table)
        with pytest.raises(UnknownCapabilityError):
            installer.install_for_php_extension("imaginary")


# ── OS updater ──────────────────────────────────────────────────


class TestOsUpdater:
    def test_runs_platform_update(self, console, runner, make_facts, table):
        OsUpdater(console, runner, make_facts("centos", "6"), table).update()
        assert runner.commands == ["yum update -y"]
        assert runner.prefixes == ["OS Update"]

    def test_failure(self, console, make_runner, make_facts, table):
        runner = make_runner(fail_on=["apt-get update"])
        with pytest.raises(OsUpdateError):
            OsUpdater(console, runner, make_facts(), table).update()


# ── Crontab ─────────────────────────────────────────────────────


@pytest.fixture
def plain_executables(monkeypatch):
    monkeypatch.setattr(crontab_module, "find_executable", lambda name: name)


class TestCrontab:
    def test_entry(self):
        assert cron_entry("/usr/bin/php", "/var/www/seat/") == (
            "* * * * * /usr/bin/php /var/www/seat/artisan schedule:run>> /dev/null 2>&1"
        )

    def test_install(self, console, runner, plain_executables):
        Crontab(console, runner).install("/var/www/seat", "www-data")
        assert len(runner.commands) == 3
        assert runner.commands[0].startswith("crontab -u www-data -l > ")
        assert "schedule:run" in runner.commands[1]
        assert runner.commands[2].startswith("crontab -u www-data /")
        tmp = runner.commands[2].split()[-1]
        assert not Path(tmp).exists()

    def test_empty_crontab_listing_is_tolerated(self, console, make_runner, plain_executables):
        runner = make_runner(fail_on=[" -l "])
        Crontab(console, runner).install("/var/www/seat", "www-data")
        assert len(runner.commands) == 3
        assert "Crontab entry installed for www-data" in console.lines("success")

    def test_load_failure_raises(self, console, make_runner, plain_executables):
        runner = make_runner(fail_on=["crontab -u www-data /"])
        with pytest.raises(CrontabInstallationError) as exc:
            Crontab(console, runner).install("/var/www/seat", "www-data")
        assert exc.value.command.startswith("crontab -u www-data /")


# ── Composer ────────────────────────────────────────────────────


class TestComposer:
    @pytest.fixture
    def on_path(self, monkeypatch):
        monkeypatch.setattr(composer_module, "find_executable", lambda name: f"/usr/local/bin/{name}")
        monkeypatch.setattr(composer_module, "has_executable", lambda name: True)

    def test_update_packages_excludes_dev(self, console, runner, on_path):
        Composer(console, runner).update_packages("/var/www/seat")
        assert runner.commands == [
            "/usr/local/bin/composer update --no-ansi --no-progress -n -d /var/www/seat --no-dev"
        ]

    def test_update_packages_include_dev(self, console, runner, on_path):
        Composer(console, runner).update_packages("/var/www/seat", include_dev=True)
        assert "--no-dev" not in runner.commands[0]

    def test_ensure_self_updates_when_present(self, console, runner, on_path):
        Composer(console, runner).ensure()
        assert runner.commands == ["/usr/local/bin/composer self-update -n"]

    def test_signature_mismatch(self, console, runner, monkeypatch, tmp_path: Path):
        payload = {
            composer_module.INSTALLER_URL: b"<?php echo 'installer';",
            composer_module.SIGNATURE_URL: b"0" * 96,
        }
        monkeypatch.setattr(composer_module, "fetch", lambda url: payload[url])
        composer = Composer(console, runner, temp_file=tmp_path / "composer-setup")
        with pytest.raises(ComposerInstallError, match="Signature mismatch"):
            composer.install()
        assert runner.commands == []
        assert not (tmp_path / "composer-setup").exists()

    def test_install(self, console, runner, monkeypatch, tmp_path: Path):
        installer = b"<?php echo 'installer';"
        payload = {
            composer_module.INSTALLER_URL: installer,
            composer_module.SIGNATURE_URL: hashlib.sha384(installer).hexdigest().encode() + b"\n",
        }
        monkeypatch.setattr(composer_module, "fetch", lambda url: payload[url])
        monkeypatch.setattr(composer_module, "has_executable", lambda name: True)
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        work = tmp_path / "work"
        work.mkdir()
        (work / "composer.phar").write_text("phar")
        monkeypatch.setenv("PATH", str(bin_dir))

        Composer(
            console, runner,
            temp_file=tmp_path / "composer-setup",
            executable_dir=bin_dir,
            work_dir=work,
        ).install()

        assert runner.commands == [f"php {tmp_path / 'composer-setup'} --install-dir={work}"]
        assert (bin_dir / "composer").read_text() == "phar"
        assert (bin_dir / "composer").stat().st_mode & 0o777 == 0o755
        assert not (work / "composer.phar").exists()
        assert "Composer Installation Complete" in console.lines("success")

    def test_download_failure(self, console, runner, monkeypatch):
        def fail(url):
            raise ExternalDownloadError(f"Download of {url} failed: HTTP 503")

        monkeypatch.setattr(composer_module, "fetch", fail)
        with pytest.raises(ComposerInstallError, match="HTTP 503"):
            Composer(console, runner).install()
