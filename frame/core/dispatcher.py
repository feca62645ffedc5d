from __future__ import annotations

import logging
import math
import re
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import hikari

from ..commands.collector import ArgumentCollectorResult
from ..errors import FriendlyError
from .context import CommandContext, InteractionContext, MessageContext
from .utils import parse_args

if TYPE_CHECKING:
    from ..commands.base import Command
    from .client import FrameClient
    from .registry import CommandRegistry

logger = logging.getLogger(__name__)

BLACKLIST_KEY = "user-blacklist"


class CommandDispatcher:
    """Turns inbound messages and interactions into command invocations."""

    def __init__(self, client: FrameClient, registry: CommandRegistry) -> None:
        self.client = client
        self.registry = registry
        self._awaiting: set[tuple[int, int]] = set()
        self._command_patterns: dict[tuple[str | None, int | None], re.Pattern | None] = {}

    def build_command_pattern(self, prefix: str | None) -> re.Pattern | None:
        """Pattern matching ``<prefix>name`` or ``<@bot> [prefix]name`` at the start of a message."""
        me = self.client.get_me()
        bot_id = int(me.id) if me else None
        cache_key = (prefix, bot_id)
        if cache_key in self._command_patterns:
            return self._command_patterns[cache_key]

        escaped = re.escape(prefix) if prefix else None
        mention = rf"<@!?{bot_id}>\s+" if bot_id else None
        if escaped and mention:
            pattern = rf"^({mention}(?:{escaped}\s*)?|{escaped}\s*)([^\s]+)"
        elif escaped:
            pattern = rf"^({escaped}\s*)([^\s]+)"
        elif mention:
            pattern = rf"^({mention})([^\s]+)"
        else:
            pattern = None

        compiled = re.compile(pattern, re.IGNORECASE) if pattern else None
        self._command_patterns[cache_key] = compiled
        logger.debug(f"Built command pattern for prefix {prefix!r}: {pattern}")
        return compiled

    def is_blacklisted(self, user_id: Any) -> bool:
        provider = self.client.provider
        if provider is None:
            return False
        blacklist = provider.get("global", BLACKLIST_KEY, []) or []
        return str(user_id) in {str(entry) for entry in blacklist}

    def should_handle(self, event: hikari.MessageCreateEvent) -> bool:
        if event.author.is_bot or getattr(event, "is_webhook", False):
            return False
        if not event.content:
            return False
        # The author is answering an argument prompt
        if (int(event.author.id), int(event.channel_id)) in self._awaiting:
            return False
        return not self.is_blacklisted(event.author.id)

    def parse_message(self, ctx: MessageContext) -> tuple[Command, str | re.Match] | None:
        """Find the command a message invokes, along with its argument string or pattern match."""
        content = ctx.content
        prefix = self.client.get_prefix(ctx.guild_id)

        pattern = self.build_command_pattern(prefix)
        match = pattern.match(content) if pattern else None
        if match:
            return self._match_default(ctx, match)

        for command in self.registry.commands.values():
            for trigger in command.patterns or ():
                trigger_match = trigger.search(content)
                if trigger_match:
                    ctx.invoked_with = command.name
                    return command, trigger_match
        return None

    def _match_default(self, ctx: MessageContext, match: re.Match) -> tuple[Command, str] | None:
        token = match.group(2).lower()
        ctx.prefix = match.group(1)
        ctx.invoked_with = token

        commands = [c for c in self.registry.find_commands(token, exact=True) if c.default_handling]
        if len(commands) == 1:
            return commands[0], ctx.content[match.end():]

        if self.registry.unknown_command is not None:
            return self.registry.unknown_command, ctx.content[match.end(1):]
        return None

    async def handle_message(self, event: hikari.MessageCreateEvent) -> bool:
        """Run the command a message invokes. Returns True if it was handled as a command."""
        if not self.should_handle(event):
            return False

        ctx = MessageContext(event, self.client)
        parsed = self.parse_message(ctx)
        if parsed is None:
            return False

        command, payload = parsed
        ctx.command = command
        if command.unknown:
            await self.client.event_system.emit("unknown_command", ctx)

        logger.info(f"Command {command.name} invoked by {ctx.author.username} ({ctx.author.id})")
        if await self.run_guards(ctx, command):
            return True

        if isinstance(payload, re.Match):
            args: Any = payload
        else:
            ctx.arg_string = payload
            if command.args_collector:
                result = await self._collect(ctx, command, payload)
                if not result.ok:
                    await self._cancel(ctx, command, result)
                    return True
                args = result.values
            elif command.args_type == "single":
                args = payload.strip()
            else:
                args = parse_args(payload, command.args_count, command.args_single_quotes)

        await self.execute(ctx, command, args, command.run)
        return True

    async def _collect(self, ctx: MessageContext, command: Command, arg_string: str) -> ArgumentCollectorResult:
        collector = command.args_collector
        count = math.inf if collector.args[-1].infinite else len(collector.args)
        provided = parse_args(arg_string.strip(), count, command.args_single_quotes)

        key = (int(ctx.author.id), int(ctx.channel_id))
        self._awaiting.add(key)
        try:
            return await collector.obtain(ctx, provided)
        finally:
            self._awaiting.discard(key)

    async def _cancel(self, ctx: CommandContext, command: Command, result: ArgumentCollectorResult) -> None:
        await self.client.event_system.emit("command_cancel", command, result.cancelled, ctx, result)

        if result.failure is not None and (not result.prompts or result.cancelled == "promptLimit"):
            await ctx.reply(f"{result.failure.message}\n{self.format_error(command, ctx)}")
        elif result.cancelled != "invalid":
            await ctx.reply("Cancelled command.")
        else:
            await ctx.reply(self.format_error(command, ctx))

    def format_error(self, command: Command, ctx: CommandContext) -> str:
        prefix = self.client.get_prefix(ctx.guild_id)
        user = None if ctx.is_interaction else self.client.get_me()
        usage = command.usage(command.format, prefix, user)
        help_usage = command.usage(f"help {command.name}", prefix, user)
        return (
            f"Invalid command usage. The `{command.name}` command's accepted format is: {usage}. "
            f"Use {help_usage} for more information."
        )

    async def run_guards(self, ctx: CommandContext, command: Command) -> bool:
        """Run the guard chain. Returns True if the invocation was blocked."""
        if not command.is_enabled_in(ctx.guild_id):
            if command.unknown:
                return True
            return await self._block(ctx, command, "disabled")

        if command.guild_only and not ctx.guild_id:
            return await self._block(ctx, command, "guild_only")

        if command.nsfw and ctx.guild_id and not ctx.is_nsfw_channel():
            return await self._block(ctx, command, "nsfw")

        has_permission = command.has_permission(ctx)
        if has_permission is not True:
            response = has_permission if isinstance(has_permission, str) else None
            return await self._block(ctx, command, "permission", {"response": response})

        missing = command.missing_client_permissions(ctx)
        if missing:
            return await self._block(ctx, command, "client_permissions", {"missing": missing})

        throttle = command.throttle(ctx.author.id)
        if throttle is not None and throttle.usages + 1 > command.throttling.usages:
            remaining = command.throttle_remaining(throttle)
            return await self._block(ctx, command, "throttling", {"throttle": throttle, "remaining": remaining})

        return False

    async def _block(self, ctx: CommandContext, command: Command, reason: str, data: dict[str, Any] | None = None) -> bool:
        logger.debug(f"Command {command.name} blocked for {ctx.author.id}: {reason}")
        await self.client.event_system.emit("command_block", ctx, reason, data)
        await command.on_block(ctx, reason, data)
        return True

    async def execute(
        self,
        ctx: CommandContext,
        command: Command,
        args: Any,
        handler: Callable[[CommandContext, Any], Awaitable[Any]],
    ) -> None:
        """Count the usage and run the handler, routing any error it raises."""
        throttle = command.throttle(ctx.author.id)
        if throttle is not None:
            throttle.usages += 1

        await self.client.event_system.emit("command_run", command, ctx, args)
        try:
            await handler(ctx, args)
        except FriendlyError as e:
            await self.client.event_system.emit("command_error", command, e, ctx, args)
            await ctx.reply(str(e))
        except Exception as e:
            logger.error(f"Error running command {command.name}: {e}", exc_info=True)
            await self.client.event_system.emit("command_error", command, e, ctx, args)
            try:
                await command.on_error(e, ctx, args)
            except Exception as reply_error:
                logger.error(f"Failed to report error for command {command.name}: {reply_error}")

    @staticmethod
    def flatten_options(interaction: hikari.CommandInteraction) -> dict[str, Any]:
        """Flatten interaction options to ``{name: value}``, substituting resolved objects for snowflakes."""
        resolved = interaction.resolved
        flattened: dict[str, Any] = {}

        def resolve(option: Any) -> Any:
            value = option.value
            if resolved is None or value is None:
                return value
            if option.type == hikari.OptionType.USER:
                return resolved.members.get(value) or resolved.users.get(value, value)
            if option.type == hikari.OptionType.ROLE:
                return resolved.roles.get(value, value)
            if option.type == hikari.OptionType.CHANNEL:
                return resolved.channels.get(value, value)
            if option.type == hikari.OptionType.MENTIONABLE:
                return (
                    resolved.members.get(value)
                    or resolved.users.get(value)
                    or resolved.roles.get(value, value)
                )
            if option.type == hikari.OptionType.ATTACHMENT:
                return resolved.attachments.get(value, value)
            return value

        def walk(options: Any) -> None:
            for option in options or ():
                if option.type in (hikari.OptionType.SUB_COMMAND, hikari.OptionType.SUB_COMMAND_GROUP):
                    walk(option.options)
                else:
                    flattened[option.name] = resolve(option)

        walk(interaction.options)
        return flattened

    async def handle_interaction(self, event: hikari.InteractionCreateEvent) -> bool:
        """Run the command a slash command interaction invokes."""
        interaction = event.interaction
        if not isinstance(interaction, hikari.CommandInteraction):
            return False

        name = interaction.command_name.lower()
        command = self.registry.commands.get(name)
        if command is None:
            logger.debug(f"Received interaction for unregistered command {name}")
            return False
        if self.is_blacklisted(interaction.user.id):
            return False

        ctx = InteractionContext(interaction, self.client)
        ctx.command = command
        ctx.invoked_with = name
        ctx.prefix = "/"

        logger.info(f"Slash command {command.name} invoked by {ctx.author.username} ({ctx.author.id})")
        if await self.run_guards(ctx, command):
            return True

        options = self.flatten_options(interaction)
        if command.args_collector:
            for argument in command.args_collector.args:
                value = options.get(argument.key)
                if argument.infinite and isinstance(value, str):
                    options[argument.key] = parse_args(value, math.inf, command.args_single_quotes)

            result = await command.args_collector.obtain_mapping(ctx, options)
            if not result.ok:
                await self._cancel(ctx, command, result)
                return True
            args: Any = result.values
        else:
            raw = options.get("arguments") or ""
            ctx.arg_string = raw
            if command.args_type == "single":
                args = raw.strip()
            else:
                args = parse_args(raw, command.args_count, command.args_single_quotes)

        await self.execute(ctx, command, args, command.run_interaction)
        return True
