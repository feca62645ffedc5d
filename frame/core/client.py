import logging
from typing import Any

import hikari

from config.settings import settings

from ..commands.group import guild_key
from ..commands.options import OptionDescriptorFactory
from ..errors import FrameError
from ..providers.base import SettingProvider
from ..providers.memory import MemoryProvider
from .dispatcher import CommandDispatcher
from .event_system import EventSystem
from .registry import CommandRegistry

logger = logging.getLogger(__name__)

DEFAULT_INTENTS = (
    hikari.Intents.ALL_MESSAGES
    | hikari.Intents.GUILD_MEMBERS
    | hikari.Intents.GUILDS
    | hikari.Intents.MESSAGE_CONTENT
)

_UNSET: Any = object()


class FrameClient:
    """Composition root tying the hikari app to the command framework.

    Every framework component receives this object explicitly; there is no
    module-level client.
    """

    def __init__(
        self,
        app: hikari.GatewayBot | None = None,
        *,
        prefix: str | None = _UNSET,
        owner_ids: list[int] | None = None,
        invite: str | None = _UNSET,
        provider: SettingProvider | None = None,
    ) -> None:
        if app is None:
            if not settings.discord_token:
                raise FrameError("No bot token configured; set DISCORD_TOKEN or pass an app.")
            app = hikari.GatewayBot(token=settings.discord_token, intents=DEFAULT_INTENTS)

        self.app = app
        self.prefix = settings.command_prefix if prefix is _UNSET else prefix
        self.invite = settings.invite if invite is _UNSET else invite
        self._owner_ids: set[int] = {int(owner_id) for owner_id in (owner_ids if owner_ids is not None else settings.owner_ids)}

        self.event_system = EventSystem()
        self.registry = CommandRegistry(self)
        self.dispatcher = CommandDispatcher(self, self.registry)
        self.provider: SettingProvider | None = provider or MemoryProvider()

        self.is_ready = False
        self._setup_event_listeners()

    def _setup_event_listeners(self) -> None:
        @self.app.listen(hikari.StartedEvent)
        async def on_started(event: hikari.StartedEvent) -> None:
            logger.info("Bot has started, initializing framework...")
            await self._initialize()

        @self.app.listen(hikari.StoppingEvent)
        async def on_stopping(event: hikari.StoppingEvent) -> None:
            logger.info("Bot is stopping...")
            await self.close()

        @self.app.listen(hikari.MessageCreateEvent)
        async def on_message_create(event: hikari.MessageCreateEvent) -> None:
            await self.dispatcher.handle_message(event)

        @self.app.listen(hikari.InteractionCreateEvent)
        async def on_interaction_create(event: hikari.InteractionCreateEvent) -> None:
            await self.dispatcher.handle_interaction(event)

    async def _initialize(self) -> None:
        if not self._owner_ids:
            await self.fetch_owners()
        if self.provider is not None:
            await self.provider.init(self)
        self.is_ready = True
        await self.event_system.emit("ready", self)
        logger.info("Framework initialized")

    async def fetch_owners(self) -> frozenset[int]:
        """Load the owners from the application (its owner, or every team member)."""
        application = await self.rest.fetch_application()
        if application.team is not None:
            self._owner_ids = {int(member_id) for member_id in application.team.members}
        else:
            self._owner_ids = {int(application.owner.id)}
        logger.info(f"Loaded {len(self._owner_ids)} owner(s) from the application")
        return self.owners

    @property
    def owners(self) -> frozenset[int]:
        return frozenset(self._owner_ids)

    def is_owner(self, user: Any) -> bool:
        user_id = getattr(user, "id", user)
        if user_id is None:
            return False
        return int(user_id) in self._owner_ids

    @property
    def rest(self) -> hikari.api.RESTClient:
        return self.app.rest

    @property
    def cache(self) -> hikari.api.Cache:
        return self.app.cache

    def get_me(self) -> hikari.OwnUser | None:
        return self.app.get_me()

    def get_prefix(self, guild: Any = None) -> str | None:
        """The prefix in effect for a guild (or globally), falling back to the default."""
        if self.provider is None:
            return self.prefix
        global_prefix = self.provider.get("global", "prefix", self.prefix)
        if guild is None:
            return global_prefix
        return self.provider.get(guild, "prefix", global_prefix)

    async def set_prefix(self, guild: Any, prefix: str | None) -> None:
        """Set the prefix for a guild, or globally with ``guild=None``. ``None`` disables prefixes."""
        if self.provider is not None:
            await self.provider.set(guild if guild is not None else "global", "prefix", prefix)
        elif guild is None:
            self.prefix = prefix
        self.event_system.emit_nowait("command_prefix_change", guild_key(guild), prefix)

    async def reset_prefix(self, guild: Any) -> None:
        """Drop a guild's custom prefix so it follows the global one again."""
        if self.provider is not None:
            await self.provider.remove(guild if guild is not None else "global", "prefix")
        self.event_system.emit_nowait("command_prefix_change", guild_key(guild), self.get_prefix(guild))

    async def set_provider(self, provider: SettingProvider) -> None:
        if self.provider is not None:
            await self.provider.destroy()
        self.provider = provider
        if self.is_ready:
            await provider.init(self)
        await self.event_system.emit("provider_change", provider)
        logger.info(f"Settings provider set to {type(provider).__name__}")

    async def sync_application_commands(self, guild: Any = None) -> int:
        """Publish every eligible command as a slash command. Returns how many were published."""
        application = await self.rest.fetch_application()
        builders = []
        for command in self.registry.commands.values():
            builder = OptionDescriptorFactory.build(self.rest, command)
            if builder is not None:
                builders.append(builder)

        await self.rest.set_application_commands(
            application.id, builders, guild if guild is not None else hikari.UNDEFINED
        )
        logger.info(f"Published {len(builders)} application commands")
        return len(builders)

    async def close(self) -> None:
        for command in self.registry.commands.values():
            command.clear_throttles()
        await self.event_system.drain()
        if self.provider is not None:
            await self.provider.destroy()
        self.is_ready = False
        logger.info("Cleanup completed")

    def run(self) -> None:
        try:
            logger.info("Starting bot...")
            self.app.run()
        except KeyboardInterrupt:
            logger.info("Bot stopped by user")
        except Exception as e:
            logger.error(f"Bot crashed: {e}")
            raise
