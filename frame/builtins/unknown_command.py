from typing import Any

from ..commands.base import Command


class UnknownCommand(Command):
    """Replies to invocations that don't match any command."""

    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="unknown-command",
            group="util",
            member_name="unknown-command",
            description="Displays help information for when an unknown command is used.",
            examples=["unknown-command kickeverybodyever"],
            unknown=True,
            hidden=True,
        )

    async def run(self, ctx: Any, args: Any) -> None:
        help_command = self.client.registry.commands.get("help")
        usage = help_command.usage(None, self.client.get_prefix(ctx.guild_id)) if help_command else None
        hint = f" Use {usage} to view the command list." if usage else ""
        await ctx.reply(f"Unknown command.{hint}")
