"""Tests for permission name resolution and effective permission calculation."""

from unittest.mock import MagicMock

import hikari

from frame.permissions import (
    ALL_PERMISSIONS,
    calculate_member_permissions,
    display_name,
    get_permission,
    is_valid_permission,
    missing_permissions,
)

GUILD_ID = 100
MEMBER_ID = 200
ROLE_ID = 300


def make_role(permissions):
    role = MagicMock(spec=hikari.Role)
    role.permissions = permissions
    return role


def make_guild(everyone=hikari.Permissions.SEND_MESSAGES, roles=None, owner_id=999):
    guild = MagicMock(spec=hikari.GatewayGuild)
    guild.id = GUILD_ID
    guild.owner_id = owner_id
    all_roles = {GUILD_ID: make_role(everyone), **(roles or {})}
    guild.get_role = MagicMock(side_effect=all_roles.get)
    return guild


def make_member(role_ids=()):
    member = MagicMock(spec=hikari.Member)
    member.id = MEMBER_ID
    member.role_ids = list(role_ids)
    return member


def make_overwrite(allow=hikari.Permissions.NONE, deny=hikari.Permissions.NONE):
    overwrite = MagicMock(spec=hikari.PermissionOverwrite)
    overwrite.allow = allow
    overwrite.deny = deny
    return overwrite


class TestPermissionNames:
    """Test the permission vocabulary helpers."""

    def test_get_permission(self):
        assert get_permission("MANAGE_MESSAGES") == hikari.Permissions.MANAGE_MESSAGES

    def test_unknown_or_lowercase_names_are_invalid(self):
        assert not is_valid_permission("MANAGE_EVERYTHING")
        assert not is_valid_permission("manage_messages")
        assert not is_valid_permission(42)

    def test_display_name(self):
        assert display_name("MANAGE_MESSAGES") == "Manage Messages"
        assert display_name("MANAGE_GUILD") == "Manage Server"

    def test_missing_permissions(self):
        have = hikari.Permissions.SEND_MESSAGES | hikari.Permissions.EMBED_LINKS

        missing = missing_permissions(have, ["SEND_MESSAGES", "MANAGE_MESSAGES", "KICK_MEMBERS"])

        assert missing == ["MANAGE_MESSAGES", "KICK_MEMBERS"]

    def test_administrator_has_everything(self):
        assert missing_permissions(hikari.Permissions.ADMINISTRATOR, ["BAN_MEMBERS"]) == []


class TestCalculateMemberPermissions:
    """Test effective permission calculation."""

    def test_guild_owner_has_all_permissions(self):
        guild = make_guild(owner_id=MEMBER_ID)

        assert calculate_member_permissions(make_member(), guild) == ALL_PERMISSIONS

    def test_roles_are_combined_with_everyone(self):
        guild = make_guild(roles={ROLE_ID: make_role(hikari.Permissions.KICK_MEMBERS)})

        permissions = calculate_member_permissions(make_member([ROLE_ID]), guild)

        assert permissions & hikari.Permissions.SEND_MESSAGES
        assert permissions & hikari.Permissions.KICK_MEMBERS
        assert not permissions & hikari.Permissions.BAN_MEMBERS

    def test_administrator_role_grants_everything(self):
        guild = make_guild(roles={ROLE_ID: make_role(hikari.Permissions.ADMINISTRATOR)})

        assert calculate_member_permissions(make_member([ROLE_ID]), guild) == ALL_PERMISSIONS

    def test_channel_overwrites_apply_in_order(self):
        guild = make_guild(roles={ROLE_ID: make_role(hikari.Permissions.NONE)})
        channel = MagicMock()
        channel.permission_overwrites = {
            GUILD_ID: make_overwrite(deny=hikari.Permissions.SEND_MESSAGES),
            ROLE_ID: make_overwrite(allow=hikari.Permissions.EMBED_LINKS),
            MEMBER_ID: make_overwrite(allow=hikari.Permissions.SEND_MESSAGES),
        }

        permissions = calculate_member_permissions(make_member([ROLE_ID]), guild, channel)

        assert permissions & hikari.Permissions.SEND_MESSAGES
        assert permissions & hikari.Permissions.EMBED_LINKS

    def test_everyone_overwrite_denies(self):
        guild = make_guild()
        channel = MagicMock()
        channel.permission_overwrites = {GUILD_ID: make_overwrite(deny=hikari.Permissions.SEND_MESSAGES)}

        permissions = calculate_member_permissions(make_member(), guild, channel)

        assert not permissions & hikari.Permissions.SEND_MESSAGES
