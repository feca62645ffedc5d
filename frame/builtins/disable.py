from typing import Any

from ..commands.base import Command
from .mixins import AdminOnlyMixin, is_enabled, kind_of


class DisableCommand(AdminOnlyMixin, Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="disable",
            aliases=["disable-command", "cmd-off", "command-off"],
            group="commands",
            member_name="disable",
            description="Disables a command or command group.",
            details=(
                "The argument must be the name/ID (partial or whole) of a command or command group. "
                "Only administrators may use this command."
            ),
            examples=["disable util", "disable Utility", "disable prefix"],
            guarded=True,
            args=[
                {
                    "key": "cmd_or_grp",
                    "label": "command/group",
                    "prompt": "Which command or group would you like to disable?",
                    "type": "group|command",
                }
            ],
        )

    async def run(self, ctx: Any, args: dict[str, Any]) -> None:
        target = args["cmd_or_grp"]
        kind = kind_of(target)

        if not is_enabled(target, ctx.guild_id):
            await ctx.reply(f"The `{target.name}` {kind} is already disabled.")
            return
        if target.guarded:
            await ctx.reply(f"You cannot disable the `{target.name}` {kind}.")
            return

        target.set_enabled_in(ctx.guild_id, False)
        await ctx.reply(f"Disabled the `{target.name}` {kind}.")
