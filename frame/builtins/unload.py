from typing import Any

from ..commands.base import Command


class UnloadCommand(Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="unload",
            aliases=["unload-command"],
            group="commands",
            member_name="unload",
            description="Unloads a command.",
            details=(
                "The argument must be the name/ID (partial or whole) of a command. "
                "Only the bot owner(s) may use this command."
            ),
            examples=["unload some-command"],
            owner_only=True,
            guarded=True,
            args=[
                {
                    "key": "command",
                    "prompt": "Which command would you like to unload?",
                    "type": "command",
                }
            ],
        )

    async def run(self, ctx: Any, args: dict[str, Any]) -> None:
        command = args["command"]
        command.unload()
        await ctx.reply(f"Unloaded the `{command.name}` command.")
