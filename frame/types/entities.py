"""Argument types that resolve to platform entities (users, roles, channels, ...)."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import emoji
import hikari

from ..core.utils import disambiguation, escape_markdown
from .base import ArgumentType

if TYPE_CHECKING:
    from ..commands.argument import Argument
    from ..core.context import CommandContext

logger = logging.getLogger(__name__)

MAX_DISAMBIGUATION = 15

_USER_MENTION = re.compile(r"^(?:<@!?)?([0-9]+)>?$")
_ROLE_MENTION = re.compile(r"^(?:<@&)?([0-9]+)>?$")
_CHANNEL_MENTION = re.compile(r"^(?:<#)?([0-9]+)>?$")
_SNOWFLAKE = re.compile(r"^([0-9]+)$")
_CUSTOM_EMOJI = re.compile(r"^(?:<a?:[a-zA-Z0-9_]+:)?([0-9]+)>?$")


def search(items: Iterable[Any], query: str, names: Callable[[Any], Iterable[str | None]]) -> list[Any]:
    """Case-insensitive name search preferring exact matches over partial ones."""
    query = query.lower()
    partial = [item for item in items if any(query in name.lower() for name in names(item) if name)]
    if len(partial) <= 1:
        return partial
    exact = [item for item in partial if any(query == name.lower() for name in names(item) if name)]
    return exact or partial


def pick(matches: list[Any], label: str, display: Callable[[Any], str]) -> tuple[Any, bool | str]:
    if not matches:
        return None, False
    if len(matches) == 1:
        return matches[0], True
    if len(matches) <= MAX_DISAMBIGUATION:
        names = [escape_markdown(display(match)) for match in matches]
        return None, f"{disambiguation(names, label, None)}\n"
    return None, f"Multiple {label} found. Please be more specific."


class EntityArgumentType(ArgumentType):
    """Resolves once and derives both validation and parsing from the result."""

    async def resolve(self, value: str, ctx: CommandContext, argument: Argument) -> tuple[Any, bool | str]:
        raise NotImplementedError

    async def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool | str:
        _, result = await self.resolve(value, ctx, argument)
        return result

    async def parse(self, value: str, ctx: CommandContext, argument: Argument) -> Any:
        entity, _ = await self.resolve(value, ctx, argument)
        return entity

    @property
    def cache(self) -> Any:
        return self.client.cache

    @property
    def rest(self) -> Any:
        return self.client.rest


def _member_names(member: hikari.Member) -> list[str | None]:
    return [member.username, member.display_name, getattr(member, "nickname", None)]


class UserArgumentType(EntityArgumentType):
    id = "user"
    option_type = hikari.OptionType.USER

    async def resolve(self, value: str, ctx: CommandContext, argument: Argument) -> tuple[Any, bool | str]:
        match = _USER_MENTION.match(value)
        if match:
            user_id = int(match.group(1))
            user = self.cache.get_user(user_id) if self.cache else None
            if user is None:
                try:
                    user = await self.rest.fetch_user(user_id)
                except hikari.NotFoundError:
                    return None, False
            return user, True

        if not ctx.guild_id or not self.cache:
            return None, False
        members = self.cache.get_members_view_for_guild(ctx.guild_id).values()
        member, result = pick(search(members, value, _member_names), "users", lambda m: m.username)
        return (member.user if member else None), result


class MemberArgumentType(EntityArgumentType):
    id = "member"
    option_type = hikari.OptionType.USER

    async def resolve(self, value: str, ctx: CommandContext, argument: Argument) -> tuple[Any, bool | str]:
        if not ctx.guild_id:
            return None, False

        match = _USER_MENTION.match(value)
        if match:
            user_id = int(match.group(1))
            member = self.cache.get_member(ctx.guild_id, user_id) if self.cache else None
            if member is None:
                try:
                    member = await self.rest.fetch_member(ctx.guild_id, user_id)
                except hikari.NotFoundError:
                    return None, False
            return member, True

        if not self.cache:
            return None, False
        members = self.cache.get_members_view_for_guild(ctx.guild_id).values()
        return pick(search(members, value, _member_names), "members", lambda m: m.username)


class RoleArgumentType(EntityArgumentType):
    id = "role"
    option_type = hikari.OptionType.ROLE

    async def _roles(self, guild_id: hikari.Snowflake) -> list[hikari.Role]:
        if self.cache:
            roles = list(self.cache.get_roles_view_for_guild(guild_id).values())
            if roles:
                return roles
        return list(await self.rest.fetch_roles(guild_id))

    async def resolve(self, value: str, ctx: CommandContext, argument: Argument) -> tuple[Any, bool | str]:
        if not ctx.guild_id:
            return None, False

        match = _ROLE_MENTION.match(value)
        if match:
            role_id = int(match.group(1))
            role = self.cache.get_role(role_id) if self.cache else None
            if role is None:
                role = next((r for r in await self._roles(ctx.guild_id) if r.id == role_id), None)
            return role, role is not None

        roles = await self._roles(ctx.guild_id)
        return pick(search(roles, value, lambda r: [r.name]), "roles", lambda r: r.name)


class ChannelArgumentType(EntityArgumentType):
    """Any guild channel; subclasses narrow ``channel_types``."""

    id = "channel"
    option_type = hikari.OptionType.CHANNEL
    channel_types: frozenset[hikari.ChannelType] | None = None
    label = "channels"

    def _accepts(self, channel: Any) -> bool:
        return self.channel_types is None or getattr(channel, "type", None) in self.channel_types

    async def resolve(self, value: str, ctx: CommandContext, argument: Argument) -> tuple[Any, bool | str]:
        match = _CHANNEL_MENTION.match(value)
        if match:
            channel_id = int(match.group(1))
            channel = self.cache.get_guild_channel(channel_id) if self.cache else None
            if channel is None:
                try:
                    channel = await self.rest.fetch_channel(channel_id)
                except (hikari.NotFoundError, hikari.ForbiddenError):
                    return None, False
            if not self._accepts(channel):
                return None, False
            return channel, True

        if not ctx.guild_id or not self.cache:
            return None, False
        channels = [
            channel
            for channel in self.cache.get_guild_channels_view_for_guild(ctx.guild_id).values()
            if self._accepts(channel)
        ]
        return pick(search(channels, value, lambda c: [c.name]), self.label, lambda c: c.name)


class TextChannelArgumentType(ChannelArgumentType):
    id = "text-channel"
    channel_types = frozenset({hikari.ChannelType.GUILD_TEXT, hikari.ChannelType.GUILD_NEWS})
    label = "text channels"


class VoiceChannelArgumentType(ChannelArgumentType):
    id = "voice-channel"
    channel_types = frozenset({hikari.ChannelType.GUILD_VOICE, hikari.ChannelType.GUILD_STAGE})
    label = "voice channels"


class CategoryChannelArgumentType(ChannelArgumentType):
    id = "category-channel"
    channel_types = frozenset({hikari.ChannelType.GUILD_CATEGORY})
    label = "categories"


class MessageArgumentType(EntityArgumentType):
    """A message in the invoking channel, by ID."""

    id = "message"

    async def resolve(self, value: str, ctx: CommandContext, argument: Argument) -> tuple[Any, bool | str]:
        match = _SNOWFLAKE.match(value.strip())
        if not match:
            return None, False
        try:
            message = await self.rest.fetch_message(ctx.channel_id, int(match.group(1)))
        except (hikari.NotFoundError, hikari.ForbiddenError):
            return None, False
        return message, True


class CustomEmojiArgumentType(EntityArgumentType):
    id = "custom-emoji"

    async def resolve(self, value: str, ctx: CommandContext, argument: Argument) -> tuple[Any, bool | str]:
        match = _CUSTOM_EMOJI.match(value)
        if match:
            emoji_id = int(match.group(1))
            found = self.cache.get_emoji(emoji_id) if self.cache else None
            if found is None and ctx.guild_id:
                try:
                    found = await self.rest.fetch_emoji(ctx.guild_id, emoji_id)
                except hikari.NotFoundError:
                    return None, False
            return found, found is not None

        if not ctx.guild_id or not self.cache:
            return None, False
        emojis = self.cache.get_emojis_view_for_guild(ctx.guild_id).values()
        return pick(search(emojis, value, lambda e: [e.name]), "emojis", lambda e: e.name)


class DefaultEmojiArgumentType(ArgumentType):
    """A single unicode emoji."""

    id = "default-emoji"

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool:
        return emoji.is_emoji(value.strip())

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> str:
        return value.strip()
