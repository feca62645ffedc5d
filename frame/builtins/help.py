from typing import Any

from ..commands.base import Command
from ..core.utils import disambiguation, split_message

MAX_LISTED = 15


class HelpCommand(Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="help",
            aliases=["commands"],
            group="util",
            member_name="help",
            description="Displays a list of available commands, or detailed information for a specified command.",
            details=(
                "The command may be part of a command name or a whole command name. "
                "If it isn't specified, all available commands will be listed."
            ),
            examples=["help", "help prefix"],
            guarded=True,
            args=[
                {
                    "key": "command",
                    "prompt": "Which command would you like to view the help for?",
                    "type": "string",
                    "default": "",
                }
            ],
        )

    def describe(self, command: Command) -> str:
        lines = [
            f"__Command **{command.name}**:__ {command.description}"
            f"{' (Usable only in servers)' if command.guild_only else ''}"
            f"{' (NSFW)' if command.nsfw else ''}",
            "",
            f"**Format:** {command.usage(command.format or '')}",
        ]
        if command.aliases:
            lines.append(f"**Aliases:** {', '.join(command.aliases)}")
        group_name = command.group.name if command.group else command.group_id
        lines.append(f"**Group:** {group_name} (`{command.group_id}:{command.member_name}`)")
        if command.details:
            lines.append(f"**Details:** {command.details}")
        if command.examples:
            lines.append("**Examples:**\n" + "\n".join(command.examples))
        return "\n".join(lines)

    def overview(self, ctx: Any, show_all: bool) -> str:
        prefix = self.client.get_prefix(ctx.guild_id)
        me = self.client.get_me()
        guild = ctx.get_guild()
        where = guild.name if guild else "this DM"
        heading = "All commands" if show_all else f"Available commands in {guild.name if guild else 'this DM'}"

        lines = [
            f"To run a command in {where}, use {Command.build_usage('command', prefix, me)}. "
            f"For example, {Command.build_usage('prefix', prefix, me)}.",
            "",
            f"Use {self.usage('<command>', prefix, me)} to view detailed information about a specific command.",
            f"Use {self.usage('all', prefix, me)} to view a list of *all* commands, not just available ones.",
            "",
            f"__**{heading}**__",
        ]

        for group in self.client.registry.groups.values():
            commands = [
                command
                for command in group.commands.values()
                if not command.hidden and (show_all or command.is_usable(ctx))
            ]
            if not commands:
                continue
            lines.append("")
            lines.append(f"__{group.name}__")
            lines.extend(f"**{command.name}:** {command.description}" for command in commands)
        return "\n".join(lines)

    async def run(self, ctx: Any, args: dict[str, Any]) -> None:
        search = args["command"]
        show_all = search.lower() == "all"

        if search and not show_all:
            commands = self.client.registry.find_commands(search, False, ctx)
            if len(commands) == 1:
                text = self.describe(commands[0])
            elif len(commands) > MAX_LISTED:
                text = "Multiple commands found. Please be more specific."
            elif commands:
                text = disambiguation(commands, "commands")
            else:
                text = f"Unable to identify command. Use {self.usage(None, None, None)} to view the list of all commands."
        else:
            text = self.overview(ctx, show_all)

        for chunk in split_message(text):
            await ctx.respond(chunk)
