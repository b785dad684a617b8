"""
Command models — the execution contract.

A ``CommandSpec`` is built immediately before a command runs and is
discarded afterwards.  The runner turns it into a ``CommandResult``.
Never an exception: callers decide what a failed result means.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# One hour, the same for package installs and composer downloads.
DEFAULT_TIMEOUT = 3600


class OutputPolicy(str, Enum):
    """How command output reaches the operator while it runs."""

    SILENT = "silent"        # captured only
    STREAMED = "streamed"    # raw chunks forwarded as they arrive
    PREFIXED = "prefixed"    # "label> line", bare newlines unprefixed


class CommandSpec(BaseModel):
    """One external command invocation."""

    model_config = ConfigDict(frozen=True)

    program_and_args: str
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    output_policy: OutputPolicy = OutputPolicy.SILENT
    label: str = "Command"
    env: dict[str, str] = Field(default_factory=dict)
    cwd: str | None = None


class CommandResult(BaseModel):
    """Outcome of running a ``CommandSpec``."""

    succeeded: bool
    combined_output: str = ""
    return_code: int | None = None
    timed_out: bool = False
    duration_ms: int = 0

    @property
    def failed(self) -> bool:
        return not self.succeeded
