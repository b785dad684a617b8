"""
Shell command runner — the single place external commands are spawned.

Every package install, service restart and crontab write goes through
``CommandRunner.run``.  The runner NEVER raises: a non-zero exit, a
timeout or a spawn failure all come back as ``succeeded=False`` and the
caller converts that into its own named error.

Commands are shell strings (redirections and ``&&`` are used by the
installers), run in their own session so a timeout can kill the whole
process group rather than just the ``sh`` wrapper.  Only the main
process is timed: output from background children it leaves running is
collected for a short grace period after it exits, then dropped.
"""

from __future__ import annotations

import codecs
import logging
import os
import signal
import subprocess
import threading
import time
from typing import IO

from seat_installer.core.console import Console
from seat_installer.core.models.command import (
    DEFAULT_TIMEOUT,
    CommandResult,
    CommandSpec,
    OutputPolicy,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 4096

# Keep results bounded; apt/composer can produce megabytes.
_MAX_CAPTURE = 64 * 1024

# How long to keep reading after the main process exits.
_DRAIN_GRACE = 1.0


class CommandRunner:
    """Run ``CommandSpec``s and reduce them to ``CommandResult``s.

    Args:
        console: Where streamed/prefixed output goes.  ``None`` silences
            everything regardless of the command's output policy.
        default_timeout: Timeout used by the convenience helpers.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        default_timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.console = console
        self.default_timeout = default_timeout

    # ── Convenience helpers ─────────────────────────────────────

    def run_command(self, command: str, timeout: float | None = None) -> bool:
        """Run a command, suppressing its output."""
        spec = CommandSpec(
            program_and_args=command,
            timeout=timeout or self.default_timeout,
            output_policy=OutputPolicy.SILENT,
        )
        return self.run(spec).succeeded

    def run_command_with_output(
        self,
        command: str,
        prefix: str = "Command",
        timeout: float | None = None,
    ) -> bool:
        """Run a command, printing output as it goes.

        An empty ``prefix`` streams the raw output untouched.
        """
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
        """Like ``run_command_with_output`` but returns the full result."""
        spec = CommandSpec(
            program_and_args=command,
            timeout=timeout or self.default_timeout,
            output_policy=OutputPolicy.PREFIXED if prefix else OutputPolicy.STREAMED,
            label=prefix,
            env=env or {},
        )
        return self.run(spec, announce=announce)

    # ── Core ────────────────────────────────────────────────────

    def run(self, spec: CommandSpec, *, announce: bool = True) -> CommandResult:
        """Execute ``spec``.  Never raises.

        ``announce=False`` keeps the command text out of the console and
        logs (used for commands carrying generated passwords).
        """
        shown = spec.program_and_args if announce else "<redacted>"
        if announce and self.console is not None:
            self.console.text(f"Running command: {spec.program_and_args}")
        logger.debug("Executing: %s (timeout=%ss, policy=%s)", shown, spec.timeout, spec.output_policy.value)

        env = os.environ.copy()
        env.update(spec.env)

        start = time.monotonic()
        try:
            proc = subprocess.Popen(
                spec.program_and_args,
                shell=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                env=env,
                cwd=spec.cwd,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning("Could not start %s: %s", shown, e)
            return CommandResult(
                succeeded=False,
                combined_output=str(e),
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        timed_out = False
        reader = _PipeReader(proc.stdout, _OutputEmitter(self.console, spec))
        reader.start()
        try:
            proc.wait(timeout=spec.timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            _kill_process_group(proc)
            proc.wait()
        finally:
            if proc.poll() is None:
                _kill_process_group(proc)
                proc.wait()

        output = reader.finish(_DRAIN_GRACE)
        elapsed_ms = int((time.monotonic() - start) * 1000)

        if timed_out:
            logger.warning("Command timed out after %ss: %s", spec.timeout, shown)
            return CommandResult(
                succeeded=False,
                combined_output=output,
                return_code=proc.returncode,
                timed_out=True,
                duration_ms=elapsed_ms,
            )

        logger.debug("Exit %s after %dms: %s", proc.returncode, elapsed_ms, shown)
        return CommandResult(
            succeeded=proc.returncode == 0,
            combined_output=output,
            return_code=proc.returncode,
            duration_ms=elapsed_ms,
        )


def is_crontab_listing(command: str) -> bool:
    """Whether ``command`` is a ``crontab ... -l`` listing.

    Listing exits non-zero when the user has no crontab yet, which is
    not an error.  This is the one failure callers may ignore.
    """
    tokens = command.split()
    if not tokens or os.path.basename(tokens[0]) != "crontab":
        return False
    return "-l" in tokens


# ── Internals ───────────────────────────────────────────────────


class _OutputEmitter:
    """Apply an ``OutputPolicy`` to a stream of decoded chunks."""

    def __init__(self, console: Console | None, spec: CommandSpec) -> None:
        self.console = console
        self.policy = spec.output_policy
        self.label = spec.label
        self._pending = ""

    def feed(self, chunk: str) -> None:
        if self.console is None or self.policy is OutputPolicy.SILENT:
            return
        if self.policy is OutputPolicy.STREAMED:
            self.console.write(chunk)
            return

        self._pending += chunk
        while "\n" in self._pending:
            line, _, self._pending = self._pending.partition("\n")
            self._emit_line(line)

    def flush(self) -> None:
        if self._pending:
            self._emit_line(self._pending)
            self._pending = ""

    def _emit_line(self, line: str) -> None:
        assert self.console is not None
        if not line.strip():
            self.console.write("\n")
        else:
            self.console.write(f"{self.label}> {line.rstrip()}\n")


class _PipeReader(threading.Thread):
    """Drain a child's output pipe into a buffer and an emitter.

    Background children inherit the pipe and can hold it open long after
    the main process exits.  ``finish`` waits ``grace`` seconds for EOF,
    then detaches: later output is read and dropped, and the pipe is
    closed by this thread once the last holder lets go.
    """

    def __init__(self, pipe: IO[bytes], emitter: _OutputEmitter) -> None:
        super().__init__(name="command-output", daemon=True)
        self._pipe = pipe
        self._emitter = emitter
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._chunks: list[str] = []
        self._lock = threading.Lock()
        self._detached = False

    def run(self) -> None:
        try:
            for raw in iter(lambda: self._pipe.read1(_CHUNK_SIZE), b""):
                self._take(self._decoder.decode(raw))
            self._take(self._decoder.decode(b"", final=True))
        except (OSError, ValueError) as e:
            logger.debug("Output pipe closed early: %s", e)
        finally:
            self._pipe.close()

    def _take(self, chunk: str) -> None:
        if not chunk:
            return
        with self._lock:
            if self._detached:
                return
            self._chunks.append(chunk)
            self._emitter.feed(chunk)

    def finish(self, grace: float) -> str:
        self.join(grace)
        with self._lock:
            self._detached = True
            self._emitter.flush()
            return "".join(self._chunks)[-_MAX_CAPTURE:]


def _kill_process_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass
