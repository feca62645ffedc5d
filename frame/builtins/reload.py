from typing import Any

from ..commands.base import Command
from .mixins import kind_of


class ReloadCommand(Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="reload",
            aliases=["reload-command"],
            group="commands",
            member_name="reload",
            description="Reloads a command or command group.",
            details=(
                "The argument must be the name/ID (partial or whole) of a command or command group. "
                "Providing a command group will reload all of the commands in that group. "
                "Only the bot owner(s) may use this command."
            ),
            examples=["reload some-command"],
            owner_only=True,
            guarded=True,
            args=[
                {
                    "key": "cmd_or_grp",
                    "label": "command/group",
                    "prompt": "Which command or group would you like to reload?",
                    "type": "group|command",
                }
            ],
        )

    async def run(self, ctx: Any, args: dict[str, Any]) -> None:
        target = args["cmd_or_grp"]
        target.reload()
        if kind_of(target) == "group":
            await ctx.reply(f"Reloaded all of the commands in the `{target.name}` group.")
        else:
            await ctx.reply(f"Reloaded the `{target.name}` command.")
