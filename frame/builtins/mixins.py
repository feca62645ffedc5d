from typing import Any


class AdminOnlyMixin:
    """Restricts a command to server administrators and the bot owners.

    In DMs only the owners may use it.
    """

    def has_permission(self, ctx: Any, owner_override: bool = True) -> bool | str:
        if self.client.is_owner(ctx.author):
            return True
        if not ctx.guild_id:
            return f"The `{self.name}` command can only be used by the bot owner in direct messages."
        if ctx.missing_author_permissions(["ADMINISTRATOR"]):
            return f"The `{self.name}` command requires you to have the \"Administrator\" permission."
        return True


def kind_of(target: Any) -> str:
    """``command`` or ``group``, for replies about either."""
    return "group" if hasattr(target, "commands") else "command"


def is_enabled(target: Any, guild: Any) -> bool:
    if kind_of(target) == "command":
        return target.is_enabled_in(guild, True)
    return target.is_enabled_in(guild)
