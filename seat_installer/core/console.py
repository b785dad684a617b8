"""
Console protocol — the operator-facing output and prompt sink.

Services receive a ``Console`` at construction and never reach for a
global writer.  The CLI passes a ``ClickConsole``; tests pass a
recording fake.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class Console(Protocol):
    """What services may say to (and ask of) the operator."""

    def title(self, message: str) -> None: ...

    def text(self, message: str) -> None: ...

    def note(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def listing(self, items: Sequence[str]) -> None: ...

    def write(self, chunk: str) -> None:
        """Emit raw output (no newline added)."""

    def confirm(self, question: str, default: bool = True) -> bool: ...

    def ask(self, question: str, default: str | None = None) -> str: ...

    def ask_hidden(self, question: str) -> str: ...

    def choice(self, question: str, choices: Sequence[str], default: str) -> str: ...
