"""
Capability kinds — the categories of OS/version-specific facts.
"""

from __future__ import annotations

from enum import Enum


class CapabilityKind(str, Enum):
    """What sort of value a capability lookup returns."""

    PACKAGE_NAME = "package-name"        # str: package providing a command/extension
    PACKAGE_GROUP = "package-group"      # tuple[str, ...]: packages for a subsystem
    PACKAGE_MANAGER = "package-manager"  # str: install template with ":package"
    SERVICE_UNIT = "service-unit"        # str: init-system unit name
    SERVICE_COMMAND = "service-command"  # tuple[str, ...]: enable/restart command list
    CONFIG_PATH = "config-path"          # str: absolute path of a config file
    SYSTEM_USER = "system-user"          # str: user owning web-served files
    SOCKET_PATH = "socket-path"          # str: unix socket path
