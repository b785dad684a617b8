"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from seat_installer.core.models.command import CommandResult
from seat_installer.core.models.platform import Distribution, PlatformIdentity
from seat_installer.core.services.capabilities import CapabilityTable
from seat_installer.core.services.platform_facts import PlatformFacts


class RecordingConsole:
    """In-memory ``Console`` that records output and returns scripted answers."""

    def __init__(self, *, confirm: bool = True, answers: Sequence[str] = ()) -> None:
        self.messages: list[tuple[str, str]] = []
        self.written: list[str] = []
        self.questions: list[str] = []
        self.confirm_answer = confirm
        self.answers = list(answers)

    def lines(self, kind: str | None = None) -> list[str]:
        return [m for k, m in self.messages if kind is None or k == kind]

    def title(self, message: str) -> None:
        self.messages.append(("title", message))

    def text(self, message: str) -> None:
        self.messages.append(("text", message))

    def note(self, message: str) -> None:
        self.messages.append(("note", message))

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def listing(self, items: Sequence[str]) -> None:
        for item in items:
            self.messages.append(("listing", item))

    def write(self, chunk: str) -> None:
        self.written.append(chunk)

    def confirm(self, question: str, default: bool = True) -> bool:
        self.questions.append(question)
        return self.confirm_answer

    def ask(self, question: str, default: str | None = None) -> str:
        self.questions.append(question)
        return self.answers.pop(0)

    def ask_hidden(self, question: str) -> str:
        self.questions.append(question)
        return self.answers.pop(0)

    def choice(self, question: str, choices: Sequence[str], default: str) -> str:
        self.questions.append(question)
        return self.answers.pop(0) if self.answers else default


class FakeRunner:
    """Records commands instead of running them.

    Any command containing one of ``fail_on`` fails with ``output``.
    """

    def __init__(self, *, fail_on: Sequence[str] = (), output: str = "") -> None:
        self.commands: list[str] = []
        self.envs: list[dict[str, str] | None] = []
        self.prefixes: list[str] = []
        self.fail_on = tuple(fail_on)
        self.output = output

    def _result(self, command: str) -> CommandResult:
        self.commands.append(command)
        failed = any(marker in command for marker in self.fail_on)
        return CommandResult(
            succeeded=not failed,
            combined_output=self.output,
            return_code=1 if failed else 0,
        )

    def run_command(self, command: str, timeout: float | None = None) -> bool:
        self.envs.append(None)
        self.prefixes.append("")
        return self._result(command).succeeded

    def run_command_with_output(self, command: str, prefix: str = "Command", timeout: float | None = None) -> bool:
        return self.execute(command, prefix=prefix, timeout=timeout).succeeded

    def execute(
        self,
        command: str,
        *,
        prefix: str = "Command",
        timeout: float | None = None,
        env: dict[str, str] | None = None,
        announce: bool = True,
    ) -> CommandResult:
        self.envs.append(env)
        self.prefixes.append(prefix)
        return self._result(command)


@pytest.fixture
def console() -> RecordingConsole:
    return RecordingConsole()


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def table() -> CapabilityTable:
    return CapabilityTable()


@pytest.fixture
def make_facts():
    """Factory: ``make_facts("ubuntu", "18.04")`` → pinned PlatformFacts."""

    def _make(distribution: str = "ubuntu", version: str | None = "18.04") -> PlatformFacts:
        identity = PlatformIdentity(distribution=Distribution(distribution), version=version)
        return PlatformFacts(identity=identity)

    return _make


@pytest.fixture
def make_runner():
    """Factory: ``make_runner(fail_on=["apt-get"])`` → FakeRunner."""
    return FakeRunner


class FakeResources:
    """``ResourceDownloader`` stand-in serving templates from a dict."""

    def __init__(self, templates: dict[str, str] | None = None) -> None:
        self.templates = dict(templates or {})
        self.requested: list[str] = []

    def download_resource(self, name: str) -> str:
        self.requested.append(name)
        return self.templates[name]


@pytest.fixture
def make_resources():
    """Factory: ``make_resources({"supervisor-seat.ini": "..."})``."""
    return FakeResources
