"""
Redis — cache and queue broker for the target application.
"""

from __future__ import annotations

import logging

import redis

from seat_installer.adapters.shell.command import CommandRunner
from seat_installer.core.console import Console
from seat_installer.core.errors import ServiceControlError
from seat_installer.core.models.capability import CapabilityKind
from seat_installer.core.services.base import ProvisioningService
from seat_installer.core.services.capabilities import CapabilityTable
from seat_installer.core.services.package_installer import PackageInstaller
from seat_installer.core.services.platform_facts import PlatformFacts

logger = logging.getLogger(__name__)

SMOKE_TEST_KEY = "seat_diagnostics"


def smoke_test(host: str = "127.0.0.1", port: int = 6379, timeout: float = 5) -> tuple[bool, str]:
    """Set and read back a key.  Never raises.

    Returns:
        (ok, detail)
    """
    client = redis.StrictRedis(host=host, port=port, socket_timeout=timeout, socket_connect_timeout=timeout)
    try:
        client.set(SMOKE_TEST_KEY, "ok", ex=60)
        value = client.get(SMOKE_TEST_KEY)
        client.delete(SMOKE_TEST_KEY)
    except redis.RedisError as e:
        logger.debug("Redis smoke test against %s:%s failed: %s", host, port, e)
        return False, str(e)
    finally:
        client.close()

    if value != b"ok":
        return False, f"Read back {value!r} instead of the value written"
    return True, f"{host}:{port} read/write OK"


class Redis(ProvisioningService):

    def __init__(
        self,
        console: Console,
        runner: CommandRunner,
        facts: PlatformFacts,
        table: CapabilityTable,
        *,
        installer: PackageInstaller,
    ) -> None:
        super().__init__(console, runner, facts, table)
        self.installer = installer

    def install(self) -> None:
        self.installer.install_package_group("redis")

    def enable(self) -> None:
        """Enable at boot and (re)start the server."""
        commands = self.lookup(CapabilityKind.SERVICE_COMMAND, "redis")
        self.run_all(
            commands,
            label="Redis Enable",
            error=ServiceControlError,
            message="Unable to enable Redis",
        )

    def smoke_test(self, host: str = "127.0.0.1", port: int = 6379) -> bool:
        ok, detail = smoke_test(host, port)
        if ok:
            self.console.success(f"Redis {detail}")
        else:
            self.console.error(f"Redis check failed: {detail}")
        return ok
