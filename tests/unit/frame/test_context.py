"""Tests for invocation contexts."""

import asyncio
from unittest.mock import MagicMock

import hikari
import pytest

USER_ID = 111111111
CHANNEL_ID = 444444444


class TestMessageContext:
    """Test contexts built from message events."""

    def test_fields(self, guild_context):
        assert guild_context.author.id == USER_ID
        assert guild_context.channel_id == CHANNEL_ID
        assert guild_context.can_prompt
        assert not guild_context.is_interaction
        assert guild_context.command is None

    @pytest.mark.asyncio
    async def test_reply_mentions_author_in_guilds(self, guild_context, mock_hikari_bot):
        message = await guild_context.reply("hi")

        mock_hikari_bot.rest.create_message.assert_awaited_once()
        assert mock_hikari_bot.rest.create_message.call_args.args[0] == CHANNEL_ID
        assert mock_hikari_bot.rest.create_message.call_args.kwargs["content"] == f"<@{USER_ID}>, hi"
        assert guild_context.responses == [message]

    @pytest.mark.asyncio
    async def test_reply_in_dm_has_no_mention(self, dm_context, mock_hikari_bot):
        await dm_context.reply("hi")

        assert mock_hikari_bot.rest.create_message.call_args.kwargs["content"] == "hi"

    @pytest.mark.asyncio
    async def test_wait_for_reply_timeout(self, guild_context, mock_hikari_bot):
        mock_hikari_bot.wait_for.side_effect = asyncio.TimeoutError

        assert await guild_context.wait_for_reply(1) is None

    @pytest.mark.asyncio
    async def test_wait_for_reply_returns_message(self, guild_context, mock_hikari_bot):
        answer = MagicMock(content="yes")
        mock_hikari_bot.wait_for.side_effect = [MagicMock(message=answer)]

        assert await guild_context.wait_for_reply(1) is answer
        assert mock_hikari_bot.wait_for.call_args.args[0] is hikari.MessageCreateEvent

    def test_permissions_unresolvable_without_guild(self, guild_context):
        assert guild_context.get_author_permissions() is None
        assert guild_context.missing_author_permissions(["KICK_MEMBERS"]) == ["KICK_MEMBERS"]
        assert guild_context.get_bot_permissions() is None

    def test_author_permissions_from_cache(self, guild_context, mock_hikari_bot):
        guild = MagicMock()
        guild.id = guild_context.guild_id
        guild.owner_id = 1
        guild.get_role = MagicMock(return_value=MagicMock(permissions=hikari.Permissions.KICK_MEMBERS))
        mock_hikari_bot.cache.get_guild.return_value = guild
        guild_context.member = MagicMock(id=USER_ID, role_ids=[])

        assert guild_context.missing_author_permissions(["KICK_MEMBERS", "BAN_MEMBERS"]) == ["BAN_MEMBERS"]

    def test_nsfw_channel(self, guild_context, mock_hikari_bot):
        assert not guild_context.is_nsfw_channel()
        mock_hikari_bot.cache.get_guild_channel.return_value = MagicMock(is_nsfw=True)
        assert guild_context.is_nsfw_channel()


class TestInteractionContext:
    """Test contexts built from interactions."""

    def test_cannot_prompt(self, interaction_context):
        assert interaction_context.is_interaction
        assert not interaction_context.can_prompt

    @pytest.mark.asyncio
    async def test_first_response_then_followups(self, interaction_context, mock_interaction):
        await interaction_context.respond("first")
        await interaction_context.reply("second")

        mock_interaction.create_initial_response.assert_awaited_once()
        assert mock_interaction.create_initial_response.call_args.args == (hikari.ResponseType.MESSAGE_CREATE, "first")
        mock_interaction.execute.assert_awaited_once()
        assert mock_interaction.execute.call_args.args == ("second",)
        assert len(interaction_context.responses) == 2

    @pytest.mark.asyncio
    async def test_wait_for_reply_is_none(self, interaction_context):
        assert await interaction_context.wait_for_reply(5) is None

    def test_permissions_from_interaction(self, interaction_context, mock_interaction):
        interaction_context.member = MagicMock(permissions=hikari.Permissions.MANAGE_MESSAGES)
        mock_interaction.app_permissions = hikari.Permissions.SEND_MESSAGES

        assert interaction_context.missing_author_permissions(["MANAGE_MESSAGES"]) == []
        assert interaction_context.get_bot_permissions() == hikari.Permissions.SEND_MESSAGES
