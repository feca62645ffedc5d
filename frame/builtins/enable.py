from typing import Any

from ..commands.base import Command
from .mixins import AdminOnlyMixin, is_enabled, kind_of


class EnableCommand(AdminOnlyMixin, Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="enable",
            aliases=["enable-command", "cmd-on", "command-on"],
            group="commands",
            member_name="enable",
            description="Enables a command or command group.",
            details=(
                "The argument must be the name/ID (partial or whole) of a command or command group. "
                "Only administrators may use this command."
            ),
            examples=["enable util", "enable Utility", "enable prefix"],
            guarded=True,
            args=[
                {
                    "key": "cmd_or_grp",
                    "label": "command/group",
                    "prompt": "Which command or group would you like to enable?",
                    "type": "group|command",
                }
            ],
        )

    async def run(self, ctx: Any, args: dict[str, Any]) -> None:
        target = args["cmd_or_grp"]
        kind = kind_of(target)
        group = target.group if kind == "command" else None
        group_note = (
            f", but the `{group.name}` group is disabled, so it still can't be used"
            if group is not None and not group.is_enabled_in(ctx.guild_id)
            else ""
        )

        if is_enabled(target, ctx.guild_id):
            await ctx.reply(f"The `{target.name}` {kind} is already enabled{group_note}.")
            return

        target.set_enabled_in(ctx.guild_id, True)
        await ctx.reply(f"Enabled the `{target.name}` {kind}{group_note}.")
