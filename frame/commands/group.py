from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..errors import ValidationError

if TYPE_CHECKING:
    from ..core.client import FrameClient
    from .base import Command

logger = logging.getLogger(__name__)


def guild_key(guild: Any) -> str | None:
    """Normalise a guild object or snowflake to the key used for per-guild state."""
    if guild is None:
        return None
    return str(getattr(guild, "id", guild))


class CommandGroup:
    """A named bucket of commands that can be enabled or disabled as a whole."""

    def __init__(self, client: FrameClient, id: str, name: str | None = None, guarded: bool = False) -> None:
        if client is None:
            raise ValidationError("A client must be specified.")
        if not isinstance(id, str):
            raise ValidationError("Group ID must be a string.")
        if id != id.lower():
            raise ValidationError("Group ID must be lowercase.")

        self.client = client
        self.id = id
        self.name = name or id
        self.guarded = bool(guarded)
        self.commands: dict[str, Command] = {}
        self._global_enabled = True
        self._guild_enabled: dict[str, bool] = {}

    def set_enabled_in(self, guild: Any, enabled: bool) -> bool:
        """Enable or disable the group globally (``guild=None``) or in one guild.

        Guarded groups stay enabled; the call is ignored and returns False.
        """
        if self.guarded:
            logger.warning(f"Group {self.id} is guarded and cannot be disabled")
            return False

        key = guild_key(guild)
        if key is None:
            self._global_enabled = bool(enabled)
        else:
            self._guild_enabled[key] = bool(enabled)

        self.client.event_system.emit_nowait("group_status_change", key, self, bool(enabled))
        return True

    def is_enabled_in(self, guild: Any) -> bool:
        if self.guarded:
            return True
        key = guild_key(guild)
        if key is None:
            return self._global_enabled
        return self._guild_enabled.get(key, self._global_enabled)

    def restore_guild_state(self, guild: Any, enabled: bool) -> None:
        """Apply a persisted flag without emitting a change event."""
        key = guild_key(guild)
        if key is None:
            self._global_enabled = bool(enabled)
        else:
            self._guild_enabled[key] = bool(enabled)

    def reload(self) -> None:
        for command in list(self.commands.values()):
            command.reload()

    def __repr__(self) -> str:
        return f"CommandGroup(id={self.id!r}, name={self.name!r}, commands={len(self.commands)})"
