"""
Tests for the command runner — real ``sh`` processes, no mocks.
"""

from pathlib import Path

import pytest

from seat_installer.adapters.shell.command import CommandRunner, is_crontab_listing
from seat_installer.core.models.command import CommandSpec, OutputPolicy


class TestExitStatus:
    def test_true_succeeds(self):
        assert CommandRunner().run_command("true") is True

    def test_false_fails(self):
        assert CommandRunner().run_command("false") is False

    def test_return_code_kept(self):
        result = CommandRunner().execute("exit 3", prefix="")
        assert result.failed
        assert result.return_code == 3
        assert not result.timed_out

    def test_repeated_failure_fails_each_time(self):
        runner = CommandRunner()
        first = runner.execute("exit 3", prefix="")
        second = runner.execute("exit 3", prefix="")
        assert (first.succeeded, second.succeeded) == (False, False)
        assert first.return_code == second.return_code == 3

    def test_stderr_merged(self):
        result = CommandRunner().run(CommandSpec(program_and_args="echo out; echo err 1>&2"))
        assert "out" in result.combined_output
        assert "err" in result.combined_output

    def test_env_overlay(self):
        result = CommandRunner().execute('echo "$SEAT_TEST_VALUE"', env={"SEAT_TEST_VALUE": "bar"})
        assert result.combined_output.strip() == "bar"

    def test_cwd(self, tmp_path: Path):
        result = CommandRunner().run(CommandSpec(program_and_args="pwd", cwd=str(tmp_path)))
        assert Path(result.combined_output.strip()).resolve() == tmp_path.resolve()


class TestTimeout:
    def test_timeout_kills_and_reports(self):
        spec = CommandSpec(program_and_args="sleep 5", timeout=0.3)
        result = CommandRunner().run(spec)
        assert result.timed_out
        assert not result.succeeded
        assert result.duration_ms < 4000

    def test_timeout_kills_children(self):
        spec = CommandSpec(program_and_args="sleep 5 & sleep 5; wait", timeout=0.3)
        result = CommandRunner().run(spec)
        assert result.timed_out
        assert result.duration_ms < 4000

    def test_background_child_does_not_hold_result(self):
        spec = CommandSpec(program_and_args="echo started; sleep 4 & exit 0", timeout=1)
        result = CommandRunner().run(spec)
        assert result.succeeded
        assert not result.timed_out
        assert result.return_code == 0
        assert result.duration_ms < 3000
        assert "started" in result.combined_output


class TestSpawnFailure:
    def test_missing_cwd_is_a_failed_result(self, tmp_path: Path):
        spec = CommandSpec(program_and_args="true", cwd=str(tmp_path / "missing"))
        result = CommandRunner().run(spec)
        assert not result.succeeded
        assert result.return_code is None
        assert result.combined_output


class TestOutputPolicy:
    def test_prefixed(self, console):
        CommandRunner(console).execute("printf 'a\\n\\nb\\n'", prefix="Test")
        assert "".join(console.written) == "Test> a\n\nTest> b\n"

    def test_prefixed_flushes_partial_line(self, console):
        CommandRunner(console).execute("printf 'no newline'", prefix="Test")
        assert "".join(console.written) == "Test> no newline\n"

    def test_streamed(self, console):
        CommandRunner(console).execute("printf 'a\\n\\nb'", prefix="")
        assert "".join(console.written) == "a\n\nb"

    def test_silent_still_captures(self, console):
        spec = CommandSpec(program_and_args="echo hi", output_policy=OutputPolicy.SILENT)
        result = CommandRunner(console).run(spec)
        assert console.written == []
        assert result.combined_output == "hi\n"

    def test_no_console(self):
        result = CommandRunner(None).execute("echo quiet", prefix="")
        assert result.combined_output == "quiet\n"


class TestAnnounce:
    def test_command_announced(self, console):
        CommandRunner(console).run_command("true")
        assert "Running command: true" in console.lines("text")

    def test_redacted(self, console):
        CommandRunner(console).execute("echo secret-password", announce=False)
        assert not any("secret-password" in line for line in console.lines("text"))


class TestCrontabProbe:
    @pytest.mark.parametrize("command, expected", [
        ("crontab -u www-data -l > /tmp/cron", True),
        ("/usr/bin/crontab -l", True),
        ("crontab -u www-data /tmp/cron", False),
        ("echo crontab -l", False),
        ("", False),
    ])
    def test_crontab_listing(self, command: str, expected: bool):
        assert is_crontab_listing(command) is expected
