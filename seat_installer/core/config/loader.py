"""
Configuration loader — reads the tool config and dotenv-style files.

``/etc/seat-tool.conf`` is a plain ``KEY=value`` file (the same
syntax SeAT's own ``.env`` uses).  A ``.yml``/``.yaml`` path is read as
YAML instead.  Values are validated into a ``ToolConfig``.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from seat_installer.core.errors import ConfigError
from seat_installer.core.models.config import ToolConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/etc/seat-tool.conf")

# KEY in the env-style file → ToolConfig field
_ENV_KEYS = {
    "SEAT_PATH": "seat_path",
    "SEAT_RESOURCE_URL": "resource_url",
    "SEAT_COMMAND_TIMEOUT": "command_timeout",
}

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "default_config_path",
    "load_tool_config",
    "parse_env_file",
    "parse_env_text",
]


def default_config_path() -> Path:
    """The tool config path, honouring the SEAT_TOOL_CONF override."""
    override = os.environ.get("SEAT_TOOL_CONF")
    return Path(override) if override else DEFAULT_CONFIG_PATH


def parse_env_text(content: str) -> dict[str, str]:
    """Parse dotenv-formatted text into a key/value dict.

    Handles:
    - KEY=value
    - KEY="value"
    - KEY='value'
    - export KEY=value
    - Comments (#)
    - Empty lines
    """
    result: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("export "):
            line = line[7:].strip()

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        result[key] = value

    return result


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file; a missing or unreadable file yields ``{}``."""
    if not path.is_file():
        return {}
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Cannot read %s: %s", path, e)
        return {}
    return parse_env_text(content)


def load_tool_config(path: Path | None = None) -> ToolConfig:
    """Load and validate the tool configuration.

    Args:
        path: Explicit config path.  Defaults to ``default_config_path()``.

    Returns:
        Validated ToolConfig (all defaults if the file does not exist).

    Raises:
        ConfigError: If the file exists but cannot be read or validated.
    """
    if path is None:
        path = default_config_path()

    if not path.exists():
        logger.debug("No tool config at %s, using defaults", path)
        return ToolConfig()

    if not path.is_file():
        raise ConfigError(f"Config path is not a file: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    if path.suffix in (".yml", ".yaml"):
        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    else:
        values = parse_env_text(raw)
        data = {field: values[key] for key, field in _ENV_KEYS.items() if values.get(key)}

    try:
        config = ToolConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid tool configuration in {path}: {e}") from e

    logger.debug("Loaded tool config from %s", path)
    return config
