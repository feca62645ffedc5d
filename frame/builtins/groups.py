from typing import Any

from ..commands.base import Command
from .mixins import AdminOnlyMixin


class ListGroupsCommand(AdminOnlyMixin, Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="groups",
            aliases=["list-groups", "show-groups"],
            group="commands",
            member_name="groups",
            description="Lists all command groups.",
            details="Only administrators may use this command.",
            guarded=True,
        )

    async def run(self, ctx: Any, args: Any) -> None:
        lines = [
            f"**{group.name}:** {'Enabled' if group.is_enabled_in(ctx.guild_id) else 'Disabled'}"
            for group in self.client.registry.groups.values()
        ]
        await ctx.reply("__**Groups**__\n" + "\n".join(lines))
