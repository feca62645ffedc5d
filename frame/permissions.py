"""Permission vocabulary and resolution helpers.

Command ``client_permissions`` and ``user_permissions`` are declared with the
member names of :class:`hikari.Permissions` (``"MANAGE_MESSAGES"``, ...).
"""

from collections.abc import Iterable

import hikari

ALL_PERMISSIONS = hikari.Permissions.all_permissions()

# Names whose display form isn't just the title-cased flag name
_DISPLAY_OVERRIDES = {
    "MANAGE_GUILD": "Manage Server",
    "STREAM": "Video",
    "VIEW_CHANNEL": "View Channels",
    "SEND_TTS_MESSAGES": "Send TTS Messages",
    "MENTION_ROLES": "Mention @everyone, @here, and All Roles",
    "VIEW_GUILD_INSIGHTS": "View Server Insights",
    "USE_APPLICATION_COMMANDS": "Use Application Commands",
    "MANAGE_GUILD_EXPRESSIONS": "Manage Expressions",
    "USE_EMBEDDED_ACTIVITIES": "Use Activities",
    "MODERATE_MEMBERS": "Timeout Members",
}


def get_permission(name: str) -> hikari.Permissions | None:
    """Look up a permission flag by its member name."""
    if not isinstance(name, str) or not name.isupper():
        return None
    value = getattr(hikari.Permissions, name, None)
    return value if isinstance(value, hikari.Permissions) else None


def is_valid_permission(name: str) -> bool:
    return get_permission(name) is not None


def display_name(name: str) -> str:
    """Human readable form of a permission name."""
    if name in _DISPLAY_OVERRIDES:
        return _DISPLAY_OVERRIDES[name]
    return name.replace("_", " ").title()


def missing_permissions(have: hikari.Permissions, required: Iterable[str]) -> list[str]:
    """Return the names from ``required`` not granted by ``have``."""
    if have & hikari.Permissions.ADMINISTRATOR:
        return []

    missing = []
    for name in required:
        flag = get_permission(name)
        if flag is None or (have & flag) != flag:
            missing.append(name)
    return missing


def calculate_member_permissions(
    member: hikari.Member, guild: hikari.Guild, channel: hikari.GuildChannel | None = None
) -> hikari.Permissions:
    """
    Calculate the effective permissions for a member in a guild or channel.

    Args:
        member: The guild member to calculate permissions for
        guild: The guild the member belongs to
        channel: Optional channel to include channel overwrites

    Returns:
        The calculated permissions for the member
    """
    if guild.owner_id == member.id:
        return ALL_PERMISSIONS

    # @everyone role shares the guild's ID
    everyone_role = guild.get_role(guild.id)
    permissions = everyone_role.permissions if everyone_role else hikari.Permissions.NONE

    for role_id in member.role_ids:
        role = guild.get_role(role_id)
        if role:
            permissions |= role.permissions

    if permissions & hikari.Permissions.ADMINISTRATOR:
        return ALL_PERMISSIONS

    if channel is None or not hasattr(channel, "permission_overwrites"):
        return permissions

    overwrites = channel.permission_overwrites

    everyone_overwrite = overwrites.get(guild.id)
    if everyone_overwrite:
        permissions &= ~everyone_overwrite.deny
        permissions |= everyone_overwrite.allow

    deny = hikari.Permissions.NONE
    allow = hikari.Permissions.NONE
    for role_id in member.role_ids:
        role_overwrite = overwrites.get(role_id)
        if role_overwrite:
            deny |= role_overwrite.deny
            allow |= role_overwrite.allow
    permissions &= ~deny
    permissions |= allow

    member_overwrite = overwrites.get(member.id)
    if member_overwrite:
        permissions &= ~member_overwrite.deny
        permissions |= member_overwrite.allow

    return permissions
