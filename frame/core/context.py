from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import hikari

from ..permissions import calculate_member_permissions, missing_permissions

if TYPE_CHECKING:
    from ..commands.base import Command
    from .client import FrameClient

logger = logging.getLogger(__name__)


class CommandContext:
    """State shared by every invocation, whatever the entry mode."""

    is_interaction = False

    def __init__(
        self,
        client: FrameClient,
        *,
        author: hikari.User,
        member: hikari.Member | None,
        guild_id: hikari.Snowflake | None,
        channel_id: hikari.Snowflake,
    ) -> None:
        self.client = client
        self.author = author
        self.member = member
        self.guild_id = guild_id
        self.channel_id = channel_id

        # Filled in by the dispatcher once the command is resolved
        self.command: Command | None = None
        self.invoked_with: str | None = None
        self.prefix: str | None = None
        self.arg_string: str = ""
        self.responses: list[Any] = []

    @property
    def can_prompt(self) -> bool:
        return False

    def get_guild(self) -> hikari.Guild | None:
        if self.guild_id and self.client.cache:
            return self.client.cache.get_guild(self.guild_id)
        return None

    def get_channel(self) -> hikari.PartialChannel | None:
        if self.client.cache:
            return self.client.cache.get_guild_channel(self.channel_id)
        return None

    def is_nsfw_channel(self) -> bool:
        channel = self.get_channel()
        return bool(getattr(channel, "is_nsfw", False))

    def get_author_permissions(self) -> hikari.Permissions | None:
        """Permissions of the author in the invoking channel, if resolvable."""
        guild = self.get_guild()
        if not guild or not self.member:
            return None
        return calculate_member_permissions(self.member, guild, self.get_channel())

    def missing_author_permissions(self, required: list[str]) -> list[str]:
        have = self.get_author_permissions()
        if have is None:
            return list(required)
        return missing_permissions(have, required)

    def get_bot_permissions(self) -> hikari.Permissions | None:
        guild = self.get_guild()
        me = self.client.get_me()
        if not guild or not me or not self.client.cache:
            return None
        member = self.client.cache.get_member(guild, me.id)
        if not member:
            return None
        return calculate_member_permissions(member, guild, self.get_channel())

    async def respond(self, content: Any = hikari.UNDEFINED, *, embed: Any = hikari.UNDEFINED, components: Any = hikari.UNDEFINED) -> Any:
        raise NotImplementedError

    async def reply(self, content: str) -> Any:
        return await self.respond(content)

    async def wait_for_reply(self, timeout: float) -> hikari.Message | None:
        return None


class MessageContext(CommandContext):
    """Context for a command triggered by a text message (prefix or mention)."""

    def __init__(self, event: hikari.MessageCreateEvent, client: FrameClient) -> None:
        super().__init__(
            client,
            author=event.author,
            member=getattr(event, "member", None),
            guild_id=getattr(event, "guild_id", None),
            channel_id=event.channel_id,
        )
        self.event = event
        self.message = event.message
        self.content = event.content or ""

    @property
    def can_prompt(self) -> bool:
        return True

    async def respond(self, content: Any = hikari.UNDEFINED, *, embed: Any = hikari.UNDEFINED, components: Any = hikari.UNDEFINED) -> Any:
        message = await self.client.rest.create_message(
            self.channel_id,
            content=content,
            embed=embed,
            components=components,
        )
        self.responses.append(message)
        return message

    async def reply(self, content: str) -> Any:
        if self.guild_id:
            content = f"{self.author.mention}, {content}"
        return await self.respond(content)

    async def wait_for_reply(self, timeout: float) -> hikari.Message | None:
        """Wait for the author's next message in the same channel."""
        author_id = self.author.id
        channel_id = self.channel_id

        def predicate(event: hikari.MessageCreateEvent) -> bool:
            return event.author.id == author_id and event.channel_id == channel_id

        try:
            event = await self.client.app.wait_for(hikari.MessageCreateEvent, timeout=timeout, predicate=predicate)
        except asyncio.TimeoutError:
            return None
        return event.message


class InteractionContext(CommandContext):
    """Context for an application (slash) command interaction."""

    is_interaction = True

    def __init__(self, interaction: hikari.CommandInteraction, client: FrameClient) -> None:
        super().__init__(
            client,
            author=interaction.user,
            member=interaction.member,
            guild_id=interaction.guild_id,
            channel_id=interaction.channel_id,
        )
        self.interaction = interaction
        self._responded = False

    def get_author_permissions(self) -> hikari.Permissions | None:
        # Discord resolves these for the invoking channel
        if self.member is not None and getattr(self.member, "permissions", None) is not None:
            return self.member.permissions
        return super().get_author_permissions()

    def get_bot_permissions(self) -> hikari.Permissions | None:
        if getattr(self.interaction, "app_permissions", None) is not None:
            return self.interaction.app_permissions
        return super().get_bot_permissions()

    async def respond(self, content: Any = hikari.UNDEFINED, *, embed: Any = hikari.UNDEFINED, components: Any = hikari.UNDEFINED) -> Any:
        if not self._responded:
            self._responded = True
            response = await self.interaction.create_initial_response(
                hikari.ResponseType.MESSAGE_CREATE,
                content,
                embed=embed,
                components=components,
            )
        else:
            response = await self.interaction.execute(content, embed=embed, components=components)
        self.responses.append(response)
        return response
