"""Settings provider contract and the cache logic shared by the concrete providers."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .broadcast import SettingBroadcaster, SettingChange

if TYPE_CHECKING:
    from ..commands.base import Command
    from ..commands.group import CommandGroup
    from ..core.client import FrameClient

logger = logging.getLogger(__name__)

GLOBAL = "global"


class SettingProvider(ABC):
    """Per-guild key/value settings.

    ``guild`` arguments accept a guild object, a snowflake, or ``"global"``
    / ``None`` for settings that apply everywhere. Reads are synchronous and
    served from memory; writes are coroutines.
    """

    @abstractmethod
    async def init(self, client: FrameClient) -> None: ...

    @abstractmethod
    async def destroy(self) -> None: ...

    @abstractmethod
    def get(self, guild: Any, key: str, default: Any = None) -> Any: ...

    @abstractmethod
    async def set(self, guild: Any, key: str, value: Any) -> Any: ...

    @abstractmethod
    async def remove(self, guild: Any, key: str) -> Any: ...

    @abstractmethod
    async def clear(self, guild: Any) -> None: ...

    @staticmethod
    def get_guild_id(guild: Any) -> str:
        if guild is None or guild == GLOBAL:
            return GLOBAL
        return str(getattr(guild, "id", guild))


class CachedSettingProvider(SettingProvider):
    """Keeps every guild's settings in memory and restores command state from them.

    Subclasses implement :meth:`_load`, :meth:`_persist` and :meth:`_delete`.
    """

    def __init__(self, broadcaster: SettingBroadcaster | None = None) -> None:
        self.client: FrameClient | None = None
        self.settings: dict[str, dict[str, Any]] = {}
        self.broadcaster = broadcaster
        self._listeners: dict[str, Callable] = {}

    async def _load(self) -> dict[str, dict[str, Any]]:
        return {}

    async def _persist(self, guild_id: str, settings: dict[str, Any]) -> None:
        pass

    async def _delete(self, guild_id: str) -> None:
        pass

    async def init(self, client: FrameClient) -> None:
        self.client = client
        self.settings.update(await self._load())
        for guild_id, settings in self.settings.items():
            self.setup_guild(guild_id, settings)

        self._listeners = {
            "command_status_change": self._on_command_status_change,
            "group_status_change": self._on_group_status_change,
            "command_register": self._on_command_register,
            "group_register": self._on_group_register,
        }
        for event_name, listener in self._listeners.items():
            client.event_system.add_listener(event_name, listener)

        if self.broadcaster is not None:
            await self.broadcaster.start(self.apply_change)
        logger.info(f"{type(self).__name__} initialized with {len(self.settings)} setting scope(s)")

    async def destroy(self) -> None:
        if self.client is not None:
            for event_name, listener in self._listeners.items():
                self.client.event_system.remove_listener(event_name, listener)
        self._listeners = {}
        if self.broadcaster is not None:
            await self.broadcaster.stop()

    def get(self, guild: Any, key: str, default: Any = None) -> Any:
        settings = self.settings.get(self.get_guild_id(guild))
        if settings is None:
            return default
        return settings.get(key, default)

    async def set(self, guild: Any, key: str, value: Any) -> Any:
        guild_id = self.get_guild_id(guild)
        settings = self.settings.setdefault(guild_id, {})
        settings[key] = value
        await self._persist(guild_id, settings)
        await self._publish(SettingChange(scope=guild_id, key=key, value=value))
        return value

    async def remove(self, guild: Any, key: str) -> Any:
        guild_id = self.get_guild_id(guild)
        settings = self.settings.get(guild_id)
        if not settings or key not in settings:
            return None

        previous = settings.pop(key)
        await self._persist(guild_id, settings)
        await self._publish(SettingChange(scope=guild_id, key=key, removed=True))
        return previous

    async def clear(self, guild: Any) -> None:
        guild_id = self.get_guild_id(guild)
        if guild_id not in self.settings:
            return
        del self.settings[guild_id]
        await self._delete(guild_id)
        await self._publish(SettingChange(scope=guild_id, removed=True))

    async def _publish(self, change: SettingChange) -> None:
        if self.broadcaster is not None:
            await self.broadcaster.publish(change)

    def apply_change(self, change: SettingChange) -> None:
        """Apply a change made by another process to the in-memory cache only."""
        if change.key is None:
            self.settings.pop(change.scope, None)
            return

        settings = self.settings.setdefault(change.scope, {})
        if change.removed:
            settings.pop(change.key, None)
        else:
            settings[change.key] = change.value
            self.setup_guild(change.scope, {change.key: change.value})

    def setup_guild(self, guild_id: str, settings: dict[str, Any]) -> None:
        if self.client is None:
            return
        registry = self.client.registry
        for group in registry.groups.values():
            self.setup_guild_group(guild_id, group, settings)
        for command in registry.commands.values():
            self.setup_guild_command(guild_id, command, settings)

    @staticmethod
    def setup_guild_command(guild_id: str, command: Command, settings: dict[str, Any]) -> None:
        key = f"cmd-{command.name}"
        if key in settings:
            command.restore_guild_state(None if guild_id == GLOBAL else guild_id, settings[key])

    @staticmethod
    def setup_guild_group(guild_id: str, group: CommandGroup, settings: dict[str, Any]) -> None:
        key = f"grp-{group.id}"
        if key in settings:
            group.restore_guild_state(None if guild_id == GLOBAL else guild_id, settings[key])

    async def _on_command_status_change(self, guild_id: str | None, command: Command, enabled: bool) -> None:
        await self.set(guild_id, f"cmd-{command.name}", enabled)

    async def _on_group_status_change(self, guild_id: str | None, group: CommandGroup, enabled: bool) -> None:
        await self.set(guild_id, f"grp-{group.id}", enabled)

    def _on_command_register(self, command: Command, registry: Any) -> None:
        for guild_id, settings in self.settings.items():
            self.setup_guild_command(guild_id, command, settings)

    def _on_group_register(self, group: CommandGroup, registry: Any) -> None:
        for guild_id, settings in self.settings.items():
            self.setup_guild_group(guild_id, group, settings)
