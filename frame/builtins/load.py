from pathlib import Path
from typing import Any

from ..commands.base import Command
from ..errors import RegistrationError


def _validate_path(value: str, ctx: Any, argument: Any) -> bool | str:
    parts = value.split(":")
    if len(parts) != 2:
        return False
    registry = ctx.client.registry
    if registry.find_commands(value, exact=True):
        return "That command is already registered."
    try:
        path = registry.resolve_command_path(parts[0], parts[1])
    except RegistrationError as e:
        return str(e)
    return True if path.is_file() else False


def _parse_path(value: str, ctx: Any, argument: Any) -> Path:
    group, member_name = value.split(":")
    return ctx.client.registry.resolve_command_path(group, member_name)


class LoadCommand(Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="load",
            aliases=["load-command"],
            group="commands",
            member_name="load",
            description="Loads a new command.",
            details=(
                "The argument must be full name of the command in the format of `group:memberName`. "
                "Only the bot owner(s) may use this command."
            ),
            examples=["load some-command"],
            owner_only=True,
            guarded=True,
            args=[
                {
                    "key": "command",
                    "prompt": "Which command would you like to load?",
                    "validate": _validate_path,
                    "parse": _parse_path,
                }
            ],
        )

    async def run(self, ctx: Any, args: dict[str, Any]) -> None:
        commands = self.client.registry.load_command(args["command"])
        names = ", ".join(f"`{command.name}`" for command in commands)
        await ctx.reply(f"Loaded {names or 'no commands'}.")
