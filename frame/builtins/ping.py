import math
import time
from typing import Any

from ..commands.base import Command


class PingCommand(Command):
    def __init__(self, client: Any) -> None:
        super().__init__(
            client,
            name="ping",
            group="util",
            member_name="ping",
            description="Checks the bot's ping to the Discord server.",
            throttling={"usages": 5, "duration": 10},
        )

    async def run(self, ctx: Any, args: Any) -> None:
        started = time.perf_counter()
        message = await ctx.reply("Pinging...")
        round_trip = round((time.perf_counter() - started) * 1000)

        text = f"Pong! The message round-trip took {round_trip}ms."
        heartbeat = getattr(self.client.app, "heartbeat_latency", math.nan)
        if heartbeat is not None and math.isfinite(heartbeat):
            text += f" The heartbeat ping is {round(heartbeat * 1000)}ms."

        if ctx.is_interaction:
            await ctx.respond(text)
        else:
            await self.client.rest.edit_message(ctx.channel_id, message, text)
