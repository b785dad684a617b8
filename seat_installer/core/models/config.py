"""
Tool configuration and credential models.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_RESOURCE_URL = "https://raw.githubusercontent.com/eveseat/installer/master/resources/"


class ToolConfig(BaseModel):
    """Settings read from ``/etc/seat-tool.conf``.

    Every field is optional: a host without the file runs on defaults.
    """

    seat_path: str | None = None
    resource_url: str = DEFAULT_RESOURCE_URL
    command_timeout: int = Field(default=3600, gt=0)


class DatabaseCredentials(BaseModel):
    """Database account the target application connects with.

    ``root_password`` is only present when this tool installed the
    database server itself.
    """

    username: str | None = None
    password: str | None = None
    database: str | None = None
    root_password: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.database and self.password is not None)
