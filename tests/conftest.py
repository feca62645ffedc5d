"""Pytest configuration and shared fixtures."""

import logging
from unittest.mock import AsyncMock, MagicMock

import hikari
import pytest

from frame.core.client import FrameClient
from frame.core.context import InteractionContext, MessageContext

# Disable logging during tests
logging.disable(logging.CRITICAL)

BOT_ID = 12345
OWNER_ID = 1
USER_ID = 111111111
GUILD_ID = 123456789
CHANNEL_ID = 444444444


@pytest.fixture(autouse=True)
def _enable_logging_for_caplog(request):
    """Re-enable logging for tests that capture it with ``caplog``."""
    if "caplog" not in request.fixturenames:
        yield
        return
    logging.disable(logging.NOTSET)
    try:
        yield
    finally:
        logging.disable(logging.CRITICAL)


@pytest.fixture
def mock_hikari_bot():
    """Mock Hikari bot instance."""
    bot = MagicMock(spec=hikari.GatewayBot)
    bot.cache = MagicMock()
    bot.rest = MagicMock()
    bot.get_me = MagicMock(
        return_value=MagicMock(
            id=BOT_ID,
            username="TestBot",
            display_name="TestBot",
        )
    )
    bot.heartbeat_latency = 0.05
    bot.wait_for = AsyncMock()

    # Mock cache methods
    bot.cache.get_guild = MagicMock(return_value=None)
    bot.cache.get_member = MagicMock(return_value=None)
    bot.cache.get_user = MagicMock(return_value=None)
    bot.cache.get_guild_channel = MagicMock(return_value=None)
    bot.cache.get_role = MagicMock(return_value=None)
    bot.cache.get_emoji = MagicMock(return_value=None)
    bot.cache.get_members_view_for_guild = MagicMock(return_value={})
    bot.cache.get_guild_channels_view_for_guild = MagicMock(return_value={})
    bot.cache.get_roles_view_for_guild = MagicMock(return_value={})
    bot.cache.get_emojis_view_for_guild = MagicMock(return_value={})

    # Mock REST methods
    bot.rest.create_message = AsyncMock(side_effect=lambda channel, content=None, **kwargs: MagicMock(content=content))
    bot.rest.edit_message = AsyncMock()
    bot.rest.fetch_user = AsyncMock()
    bot.rest.fetch_member = AsyncMock()
    bot.rest.fetch_roles = AsyncMock(return_value=[])
    bot.rest.fetch_channel = AsyncMock()
    bot.rest.fetch_message = AsyncMock()
    bot.rest.fetch_emoji = AsyncMock()
    bot.rest.fetch_application = AsyncMock()
    bot.rest.set_application_commands = AsyncMock()

    return bot


@pytest.fixture
def client(mock_hikari_bot):
    """Framework client with no groups, types or commands registered."""
    return FrameClient(mock_hikari_bot, prefix="!", owner_ids=[OWNER_ID], invite=None)


@pytest.fixture
def default_client(client):
    """Framework client with the default types, groups and commands registered."""
    client.registry.register_defaults()
    return client


@pytest.fixture
def mock_user():
    """Mock Discord user."""
    user = MagicMock(spec=hikari.User)
    user.id = USER_ID
    user.username = "testuser"
    user.display_name = "Test User"
    user.is_bot = False
    user.mention = f"<@{USER_ID}>"
    return user


@pytest.fixture
def mock_owner():
    owner = MagicMock(spec=hikari.User)
    owner.id = OWNER_ID
    owner.username = "owner"
    owner.is_bot = False
    owner.mention = f"<@{OWNER_ID}>"
    return owner


@pytest.fixture
def make_message_event(mock_user):
    """Build message create events; ``guild_id=None`` makes a DM."""

    def factory(content, *, guild_id=GUILD_ID, author=None, channel_id=CHANNEL_ID):
        event = MagicMock(spec=hikari.MessageCreateEvent)
        event.author = author or mock_user
        event.author_id = event.author.id
        event.member = None
        event.guild_id = guild_id
        event.channel_id = channel_id
        event.content = content
        event.is_webhook = False
        event.message = MagicMock(content=content, author=event.author, channel_id=channel_id)
        return event

    return factory


@pytest.fixture
def make_context(client, make_message_event):
    """Build message contexts for a client."""

    def factory(content="", **kwargs):
        return MessageContext(make_message_event(content, **kwargs), client)

    return factory


@pytest.fixture
def dm_context(make_context):
    return make_context("", guild_id=None)


@pytest.fixture
def guild_context(make_context):
    return make_context("")


@pytest.fixture
def mock_interaction(mock_user):
    """Mock slash command interaction in a guild."""
    interaction = MagicMock(spec=hikari.CommandInteraction)
    interaction.user = mock_user
    interaction.member = None
    interaction.guild_id = GUILD_ID
    interaction.channel_id = CHANNEL_ID
    interaction.app_permissions = None
    interaction.options = []
    interaction.resolved = None
    interaction.create_initial_response = AsyncMock()
    interaction.execute = AsyncMock()
    return interaction


@pytest.fixture
def interaction_context(client, mock_interaction):
    return InteractionContext(mock_interaction, client)
