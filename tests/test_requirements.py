"""
Tests for the requirement verifier — checks, remediation and state.
"""

import pytest

from seat_installer.core.errors import PackageInstallationError, UnsupportedSoftwareVersionError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.models.requirement import (
    CommandPresentCheck,
    FilesystemAccessCheck,
    MinimumSoftwareVersionCheck,
    PhpExtensionCheck,
    PlatformSupportedCheck,
)
from seat_installer.core.services import requirements
from seat_installer.core.services.requirements import (
    RequirementVerifier,
    VerifierState,
    ensure_minimum_version,
    version_at_least,
)


class FakeInstaller:
    def __init__(self, *, fail: bool = False) -> None:
        self.commands: list[str] = []
        self.extensions: list[str] = []
        self.fail = fail

    def install_for_command(self, command: str) -> None:
        self.commands.append(command)
        if self.fail:
            raise PackageInstallationError(f"{command} installation failed.")

    def install_for_php_extension(self, extension: str) -> None:
        self.extensions.append(extension)
        if self.fail:
            raise PackageInstallationError(f"{extension} installation failed.")


@pytest.fixture
def present(monkeypatch):
    """Control which executables ``has_executable`` reports."""
    available: set[str] = set()
    monkeypatch.setattr(requirements, "has_executable", lambda name: name in available)
    return available


def _verifier(console, facts, table, installer=None, *, modules=(), euid=0):
    return RequirementVerifier(
        console, facts, table, installer,
        php_modules=lambda: {m.lower() for m in modules},
        euid=lambda: euid,
    )


class TestVersionCompare:
    @pytest.mark.parametrize("current, minimum, expected", [
        ("3.11.4", "3.11", True),
        ("3.12", "3.11", True),
        ("3.10.12", "3.11", False),
        ("7.1.33-1+ubuntu", "7.1", True),
        ("7", "7.0.0", True),
    ])
    def test_version_at_least(self, current, minimum, expected):
        assert version_at_least(current, minimum) is expected

    def test_ensure_minimum_version(self):
        ensure_minimum_version("PHP", "7.4.3", "7.1")
        with pytest.raises(UnsupportedSoftwareVersionError, match="older than the required 7.1"):
            ensure_minimum_version("PHP", "7.0.33", "7.1")
        with pytest.raises(UnsupportedSoftwareVersionError, match="PHP not found"):
            ensure_minimum_version("PHP", None, "7.1")


class TestChecks:
    def test_all_pass(self, console, make_facts, table, present):
        present.update({"git", "unzip"})
        verifier = _verifier(console, make_facts("ubuntu", "18.04"), table, modules=["intl", "PDO"])
        report = verifier.verify([
            PlatformSupportedCheck(),
            MinimumSoftwareVersionCheck(software="Python", minimum="3.11", current="3.12.1"),
            FilesystemAccessCheck(),
            CommandPresentCheck(command="git"),
            CommandPresentCheck(command="unzip"),
            PhpExtensionCheck(extension="intl"),
            PhpExtensionCheck(extension="pdo"),
        ])
        assert report.all_passed
        assert not report.rerun_required
        assert len(report.checks) == 7
        assert verifier.state is VerifierState.SATISFIED
        assert "Operating system detected as: ubuntu 18.04" in console.lines("text")

    def test_unsupported_platform(self, console, make_facts, table):
        verifier = _verifier(console, make_facts("centos", "8"), table)
        report = verifier.verify([PlatformSupportedCheck()])
        assert not report.all_passed
        assert report.checks[0].remediation is None
        assert verifier.state is VerifierState.UNSATISFIED

    def test_old_software(self, console, make_facts, table):
        report = _verifier(console, make_facts(), table).verify([
            MinimumSoftwareVersionCheck(software="PHP", minimum="7.1", current="7.0.33"),
        ])
        assert not report.all_passed
        assert "older than the required 7.1" in report.checks[0].detail

    def test_missing_software(self, console, make_facts, table):
        report = _verifier(console, make_facts(), table).verify([
            MinimumSoftwareVersionCheck(software="PHP", minimum="7.1"),
        ])
        assert report.checks[0].detail == "PHP not found"

    def test_not_root(self, console, make_facts, table):
        report = _verifier(console, make_facts(), table, euid=1000).verify([FilesystemAccessCheck()])
        assert not report.all_passed
        assert report.checks[0].remediation is None

    def test_every_check_runs_after_a_failure(self, make_facts, table, present):
        verifier = _verifier(None, make_facts("ubuntu", None), table, euid=1000)
        report = verifier.verify([
            PlatformSupportedCheck(),
            FilesystemAccessCheck(),
            CommandPresentCheck(command="git"),
        ])
        assert len(report.checks) == 3
        assert len(report.failed) == 3

    def test_one_failure_among_three(self, make_facts, table, present):
        present.add("git")
        verifier = _verifier(None, make_facts("ubuntu", "18.04"), table)
        report = verifier.verify([
            PlatformSupportedCheck(),
            CommandPresentCheck(command="git"),
            CommandPresentCheck(command="unzip"),
        ])
        assert len(report.checks) == 3
        assert [c.name for c in report.failed] == [report.checks[2].name]
        assert [c.passed for c in report.checks] == [True, True, False]
        assert verifier.state is VerifierState.UNSATISFIED

    def test_php_modules_loaded_once(self, make_facts, table):
        calls = []

        def modules():
            calls.append(1)
            return {"gd"}

        verifier = RequirementVerifier(None, make_facts(), table, None, php_modules=modules)
        report = verifier.verify([PhpExtensionCheck(extension="gd"), PhpExtensionCheck(extension="zip")])
        assert [c.passed for c in report.checks] == [True, False]
        assert len(calls) == 1

    def test_php_modules_not_loaded_without_php_checks(self, make_facts, table):
        def modules():
            raise AssertionError("php -m should not run")

        verifier = RequirementVerifier(None, make_facts(), table, None, php_modules=modules)
        assert verifier.verify([PlatformSupportedCheck()]).all_passed


class TestRemediation:
    def test_consent_installs_and_requires_rerun(self, console, make_facts, table, present):
        installer = FakeInstaller()
        verifier = _verifier(console, make_facts(), table, installer)
        report = verifier.verify([CommandPresentCheck(command="unzip"), PhpExtensionCheck(extension="intl")])

        assert installer.commands == ["unzip"]
        assert installer.extensions == ["intl"]
        assert report.rerun_required
        # A remediation never turns its check green in the same pass.
        assert not report.all_passed
        assert all(c.remediation_attempted for c in report.checks)
        assert all(c.remediation is CapabilityKind.PACKAGE_NAME for c in report.checks)
        assert "Would you like to try and install it?" in console.questions
        assert any("rerun the script" in line for line in console.lines("success"))

    def test_declined(self, console, make_facts, table, present):
        console.confirm_answer = False
        installer = FakeInstaller()
        report = _verifier(console, make_facts(), table, installer).verify([CommandPresentCheck(command="git")])
        assert installer.commands == []
        assert not report.rerun_required
        assert not report.checks[0].remediation_attempted

    def test_failed_remediation_is_reported(self, console, make_facts, table, present):
        installer = FakeInstaller(fail=True)
        report = _verifier(console, make_facts(), table, installer).verify([CommandPresentCheck(command="git")])
        check = report.checks[0]
        assert not check.passed
        assert check.remediation_attempted
        assert "remediation failed" in check.detail
        assert not report.rerun_required
        assert any("Could not fix" in line for line in console.lines("error"))

    def test_no_installer_means_no_prompt(self, console, make_facts, table, present):
        _verifier(console, make_facts(), table, None).verify([CommandPresentCheck(command="git")])
        assert console.questions == []

    def test_report_to_dict(self, console, make_facts, table, present):
        report = _verifier(console, make_facts(), table, FakeInstaller()).verify([
            CommandPresentCheck(command="git"),
        ])
        data = report.to_dict()
        assert data["rerun_required"] is True
        assert data["checks"][0]["remediation"] == "package-name"


class TestPhpDetection:
    @pytest.fixture
    def denied(self, monkeypatch):
        def run(*args, **kwargs):
            raise PermissionError(13, "Permission denied", "php")

        monkeypatch.setattr(requirements.subprocess, "run", run)

    def test_unexecutable_php_lists_no_modules(self, denied):
        assert requirements.list_php_modules() == set()

    def test_unexecutable_php_has_no_version(self, denied):
        assert requirements.detect_php_version() is None

    def test_verify_completes_when_php_cannot_run(self, denied, make_facts, table):
        verifier = RequirementVerifier(None, make_facts(), table, None)
        report = verifier.verify([PhpExtensionCheck(extension="gd")])
        assert not report.all_passed
        assert verifier.state is VerifierState.UNSATISFIED

    def test_state_settles_when_a_check_raises(self, make_facts, table):
        def modules():
            raise RuntimeError("boom")

        verifier = RequirementVerifier(None, make_facts(), table, None, php_modules=modules)
        with pytest.raises(RuntimeError):
            verifier.verify([PhpExtensionCheck(extension="gd")])
        assert verifier.state is VerifierState.UNSATISFIED
