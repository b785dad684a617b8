"""
Logging configuration — set up once by the CLI entrypoint.

Modules log through ``logging.getLogger(__name__)``; this decides where
those records go.  Operator-facing progress is printed by the Console,
so the stderr handler stays quiet (WARNING) unless asked otherwise.

Level precedence:
    --debug / --verbose / --quiet  >  SEAT_LOG_LEVEL  >  WARNING

SEAT_LOG_FILE adds a file handler; SEAT_LOG_FILE_LEVEL sets its level
independently (an install log at DEBUG while the terminal stays quiet).
"""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path

# ── Formats ─────────────────────────────────────────────────────

# (threshold, format, datefmt): first threshold >= level wins
_CONSOLE_FORMATS: tuple[tuple[int, str, str | None], ...] = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d: %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(levelname)s: %(message)s", None),
)

_FILE_FORMAT = "%(asctime)s %(process)d %(levelname)-5s %(name)s:%(lineno)d: %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Database and cache clients log connection chatter at INFO/DEBUG.
_CLIENT_LOGGERS = ("mysql.connector", "redis", "urllib3")

# Marks handlers installed here so a second call replaces only those.
_HANDLER_TAG = "_seat_installer"

_SECRET = re.compile(r"(?i)(password[=:]\s*|--password=)('?)[^\s']+")


class RedactingFilter(logging.Filter):
    """Mask ``password=...`` values in the final message text."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _SECRET.sub(r"\1\2****", message)
        if masked != message:
            record.msg, record.args = masked, None
        return True


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Install the stderr handler (and optional file handler) on the root logger.

    Args:
        level: Level name for stderr output.  Unknown names mean WARNING.
        log_file: Append records to this file as well.
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Hold the client-library loggers at WARNING
            unless ``level`` is DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_stderr_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(Path(log_file), file_level))

    root = logging.getLogger()
    for handler in [h for h in root.handlers if getattr(h, _HANDLER_TAG, False)]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        setattr(handler, _HANDLER_TAG, True)
        handler.addFilter(RedactingFilter())
        root.addHandler(handler)
    root.setLevel(min(h.level for h in handlers))

    client_level = logging.NOTSET if not quiet_third_party or console_level <= logging.DEBUG else logging.WARNING
    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)

    logging.raiseExceptions = False


def _stderr_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    fmt, datefmt = next((f, d) for threshold, f, d in _CONSOLE_FORMATS if level <= threshold)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(name: str | None) -> int:
    value = logging.getLevelName(name.upper()) if name else logging.WARNING
    return value if isinstance(value, int) else logging.WARNING
