from typing import Any

from ..commands.base import Command


class PrefixCommand(Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="prefix",
            group="util",
            member_name="prefix",
            description="Shows or sets the command prefix.",
            format='[prefix/"default"/"none"]',
            details=(
                "If no prefix is provided, the current prefix will be shown. "
                'If the prefix is "default", the prefix will be reset to the bot\'s default prefix. '
                'If the prefix is "none", the prefix will be removed entirely, only allowing mentions to run commands. '
                "Only administrators may change the prefix."
            ),
            examples=["prefix", "prefix -", "prefix omg!", "prefix default", "prefix none"],
            args=[
                {
                    "key": "prefix",
                    "prompt": "What would you like to set the bot's prefix to?",
                    "type": "string",
                    "max": 15,
                    "default": "",
                }
            ],
        )

    def _how_to_run(self, prefix: str | None) -> str:
        return f"To run commands, use {Command.build_usage('command', prefix, self.client.get_me())}."

    async def run(self, ctx: Any, args: dict[str, Any]) -> None:
        requested = args["prefix"]
        if not requested:
            prefix = self.client.get_prefix(ctx.guild_id)
            current = f"The command prefix is `{prefix}`." if prefix else "There is no command prefix."
            await ctx.reply(f"{current}\n{self._how_to_run(prefix)}")
            return

        if ctx.guild_id:
            if not self.client.is_owner(ctx.author) and ctx.missing_author_permissions(["ADMINISTRATOR"]):
                await ctx.reply("Only administrators may change the command prefix.")
                return
        elif not self.client.is_owner(ctx.author):
            await ctx.reply("Only the bot owner(s) may change the global command prefix.")
            return

        guild = ctx.guild_id
        lowered = requested.lower()
        if lowered == "default":
            await self.client.reset_prefix(guild)
            prefix = self.client.get_prefix(guild)
            current = f"`{prefix}`" if prefix else "no prefix"
            response = f"Reset the command prefix to the default (currently {current})."
        else:
            prefix = None if lowered == "none" else requested
            await self.client.set_prefix(guild, prefix)
            response = f"Set the command prefix to `{prefix}`." if prefix else "Removed the command prefix entirely."

        await ctx.reply(f"{response} {self._how_to_run(prefix)}")
