"""Adapters — bindings to external processes."""

from seat_installer.adapters.shell.command import CommandRunner

__all__ = [
    "CommandRunner",
]
