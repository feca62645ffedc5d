from __future__ import annotations

import asyncio
import logging
import math
import re
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ..core.utils import human_join
from ..errors import ValidationError
from ..permissions import display_name, is_valid_permission, missing_permissions
from .collector import ArgumentCollector
from .group import guild_key

if TYPE_CHECKING:
    from ..core.client import FrameClient
    from ..core.context import CommandContext
    from .group import CommandGroup

logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(frozen=True, slots=True)
class Throttling:
    usages: int
    duration: float


@dataclass(slots=True)
class ThrottleRecord:
    """Usage window of one user for one command."""

    start: float
    usages: int = 0
    timeout: asyncio.TimerHandle | None = None


class Command:
    """A command declaration plus its runtime state.

    Subclasses pass their declaration to ``super().__init__`` as keyword
    arguments and override :meth:`run` (and optionally
    :meth:`run_interaction`). The declaration is validated eagerly; any
    problem raises :class:`~frame.errors.ValidationError`.
    """

    def __init__(
        self,
        client: FrameClient,
        *,
        name: str | None = None,
        group: str | None = None,
        member_name: str | None = None,
        description: str | None = None,
        aliases: list[str] | None = None,
        auto_aliases: bool = True,
        details: str = "",
        examples: list[str] | None = None,
        format: str | None = None,
        guild_only: bool = False,
        owner_only: bool = False,
        nsfw: bool = False,
        client_permissions: list[str] | None = None,
        user_permissions: list[str] | None = None,
        throttling: Throttling | dict[str, Any] | None = None,
        default_handling: bool = True,
        args: list[Any] | None = None,
        args_prompt_limit: float = math.inf,
        args_type: str = "single",
        args_count: int = 0,
        args_single_quotes: bool = True,
        patterns: list[re.Pattern | str] | None = None,
        guarded: bool = False,
        hidden: bool = False,
        unknown: bool = False,
    ) -> None:
        self._validate_info(
            client,
            name=name,
            group=group,
            member_name=member_name,
            description=description,
            aliases=aliases,
            details=details,
            examples=examples,
            client_permissions=client_permissions,
            user_permissions=user_permissions,
            throttling=throttling,
            args=args,
            args_prompt_limit=args_prompt_limit,
            args_type=args_type,
            args_count=args_count,
            patterns=patterns,
        )

        self.client = client
        self.name: str = name
        self.aliases: list[str] = list(aliases or [])
        if auto_aliases:
            for candidate in [self.name, *self.aliases]:
                for variant in (candidate.replace("-", "").replace("_", ""), candidate.replace("-", "_")):
                    if variant != self.name and variant not in self.aliases:
                        self.aliases.append(variant)

        self.group_id: str = group
        self.group: CommandGroup | None = None
        self.member_name: str = member_name
        self.description: str = description
        self.details = details or ""
        self.examples = list(examples or [])

        self.guild_only = bool(guild_only)
        self.owner_only = bool(owner_only)
        self.nsfw = bool(nsfw)
        self.client_permissions = list(client_permissions) if client_permissions else None
        self.user_permissions = list(user_permissions) if user_permissions else None
        self.default_handling = bool(default_handling)

        if isinstance(throttling, dict):
            throttling = Throttling(usages=throttling["usages"], duration=throttling["duration"])
        self.throttling: Throttling | None = throttling

        self.args_collector = ArgumentCollector(client, args, args_prompt_limit) if args else None
        self.format = format
        if self.args_collector and format is None:
            self.format = " ".join(argument.format_usage() for argument in self.args_collector.args)

        self.args_type = args_type
        self.args_count = args_count
        self.args_single_quotes = bool(args_single_quotes)
        self.patterns = [re.compile(pattern) if isinstance(pattern, str) else pattern for pattern in patterns] if patterns else None

        self.guarded = bool(guarded)
        self.hidden = bool(hidden)
        self.unknown = bool(unknown)

        self._global_enabled = True
        self._guild_enabled: dict[str, bool] = {}
        self._throttles: dict[int, ThrottleRecord] = {}

    def has_permission(self, ctx: CommandContext, owner_override: bool = True) -> bool | str:
        """Check whether the invoking user may use the command.

        Returns True, or the message to reply with when they may not.
        """
        if not self.owner_only and not self.user_permissions:
            return True
        if owner_override and self.client.is_owner(ctx.author):
            return True

        if self.owner_only and (owner_override or not self.client.is_owner(ctx.author)):
            return f"The `{self.name}` command can only be used by the bot owner."

        if ctx.guild_id and self.user_permissions:
            missing = ctx.missing_author_permissions(self.user_permissions)
            if len(missing) == 1:
                return f'The `{self.name}` command requires you to have the "{display_name(missing[0])}" permission.'
            if missing:
                names = ", ".join(display_name(name) for name in missing)
                return f"The `{self.name}` command requires you to have the following permissions: {names}"

        return True

    def missing_client_permissions(self, ctx: CommandContext) -> list[str]:
        if not self.client_permissions or not ctx.guild_id:
            return []
        have = ctx.get_bot_permissions()
        if have is None:
            return []
        return missing_permissions(have, self.client_permissions)

    async def on_block(self, ctx: CommandContext, reason: str, data: dict[str, Any] | None = None) -> Any:
        """Reply to a blocked invocation.

        Built-in reasons are ``disabled``, ``guild_only``, ``nsfw``,
        ``permission`` (data: ``response``), ``client_permissions`` (data:
        ``missing``) and ``throttling`` (data: ``throttle``, ``remaining``).
        Any other reason gets no reply.
        """
        data = data or {}
        if reason == "disabled":
            return await ctx.reply(f"The `{self.name}` command is disabled.")
        if reason == "guild_only":
            return await ctx.reply(f"The `{self.name}` command must be used in a server channel.")
        if reason == "nsfw":
            return await ctx.reply(f"The `{self.name}` command can only be used in NSFW channels.")
        if reason == "permission":
            if data.get("response"):
                return await ctx.reply(data["response"])
            return await ctx.reply(f"You do not have permission to use the `{self.name}` command.")
        if reason == "client_permissions":
            missing = data.get("missing", [])
            if len(missing) == 1:
                return await ctx.reply(
                    f'I need the "{display_name(missing[0])}" permission for the `{self.name}` command to work.'
                )
            names = ", ".join(display_name(name) for name in missing)
            return await ctx.reply(f"I need the following permissions for the `{self.name}` command to work: {names}")
        if reason == "throttling":
            return await ctx.reply(
                f"You may not use the `{self.name}` command again for another {data['remaining']:.1f} seconds."
            )
        return None

    async def on_error(self, error: Exception, ctx: CommandContext, args: Any = None) -> Any:
        """Tell the user something went wrong, without leaking the error itself."""
        owners = human_join([f"<@{owner_id}>" for owner_id in sorted(self.client.owners)])
        invite = self.client.invite
        contact = f"Please contact {owners or 'the bot owner'}"
        contact += f" in this server: {invite}" if invite else "."
        return await ctx.reply(
            "An error occurred while running the command.\n"
            "You shouldn't ever receive an error like this.\n"
            f"{contact}"
        )

    def throttle(self, user_id: Any) -> ThrottleRecord | None:
        """Get or create the throttle record for a user.

        Returns None when the command isn't throttled or the user is an owner.
        """
        if not self.throttling or self.client.is_owner(user_id):
            return None

        key = int(getattr(user_id, "id", user_id))
        now = time.monotonic()
        record = self._throttles.get(key)
        if record and now - record.start >= self.throttling.duration:
            self._expire_throttle(key, record)
            record = None

        if record is None:
            record = ThrottleRecord(start=now)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                pass
            else:
                record.timeout = loop.call_later(self.throttling.duration, self._expire_throttle, key, record)
            self._throttles[key] = record

        return record

    def throttle_remaining(self, record: ThrottleRecord) -> float:
        return record.start + self.throttling.duration - time.monotonic()

    def _expire_throttle(self, key: int, record: ThrottleRecord) -> None:
        if self._throttles.get(key) is record:
            del self._throttles[key]
        if record.timeout:
            record.timeout.cancel()

    def clear_throttles(self) -> None:
        """Cancel every pending throttle expiry."""
        for key, record in list(self._throttles.items()):
            self._expire_throttle(key, record)

    def set_enabled_in(self, guild: Any, enabled: bool) -> bool:
        """Enable or disable the command globally (``guild=None``) or in one guild.

        Guarded commands stay enabled; the call is ignored and returns False.
        """
        if self.guarded:
            logger.warning(f"Command {self.name} is guarded and cannot be disabled")
            return False

        key = guild_key(guild)
        if key is None:
            self._global_enabled = bool(enabled)
        else:
            self._guild_enabled[key] = bool(enabled)

        self.client.event_system.emit_nowait("command_status_change", key, self, bool(enabled))
        return True

    def restore_guild_state(self, guild: Any, enabled: bool) -> None:
        """Apply a persisted flag without emitting a change event."""
        key = guild_key(guild)
        if key is None:
            self._global_enabled = bool(enabled)
        else:
            self._guild_enabled[key] = bool(enabled)

    def is_enabled_in(self, guild: Any, bypass_group: bool = False) -> bool:
        if self.guarded:
            return True

        group_enabled = bypass_group or self.group is None or self.group.is_enabled_in(guild)
        key = guild_key(guild)
        if key is None:
            return group_enabled and self._global_enabled
        return group_enabled and self._guild_enabled.get(key, self._global_enabled)

    def is_usable(self, ctx: CommandContext | None = None) -> bool:
        if ctx is None:
            return self._global_enabled
        if self.guild_only and not ctx.guild_id:
            return False
        has_permission = self.has_permission(ctx)
        return self.is_enabled_in(ctx.guild_id) and has_permission is True

    def usage(self, arg_string: str | None = None, prefix: Any = _UNSET, user: Any = _UNSET) -> str:
        if prefix is _UNSET:
            prefix = self.client.prefix
        if user is _UNSET:
            user = self.client.get_me()
        command = f"{self.name} {arg_string}" if arg_string else self.name
        return self.build_usage(command, prefix, user)

    @staticmethod
    def build_usage(command: str, prefix: str | None = None, user: Any = None) -> str:
        """Format a command string as it would be typed, with the prefix and/or a mention."""
        nbsp = "\xa0"
        command = command.replace(" ", nbsp)
        if not prefix and user is None:
            return f"`{command}`"

        prefix_part = ""
        if prefix:
            if len(prefix) > 1 and not prefix.endswith(" "):
                prefix += " "
            prefix_part = f"`{prefix.replace(' ', nbsp)}{command}`"

        mention_part = ""
        if user is not None:
            username = user.username.replace(" ", nbsp)
            mention_part = f"`@{username}{nbsp}{command}`"

        joiner = " or " if prefix_part and mention_part else ""
        return f"{prefix_part}{joiner}{mention_part}"

    def reload(self) -> None:
        self.client.registry.reload_command(self)

    def unload(self) -> None:
        self.client.registry.unload_command(self)

    async def run(self, ctx: CommandContext, args: Any) -> Any:
        logger.warning(f"Command {self.name} has no run method")

    async def run_interaction(self, ctx: CommandContext, args: Any) -> Any:
        return await self.run(ctx, args)

    @staticmethod
    def _validate_info(client: FrameClient, **info: Any) -> None:
        if client is None:
            raise ValidationError("A client must be specified.")

        name = info["name"]
        if not isinstance(name, str) or not name:
            raise ValidationError("Command name must be a string.")
        if name != name.lower():
            raise ValidationError("Command name must be lowercase.")

        aliases = info["aliases"]
        if aliases is not None:
            if not isinstance(aliases, (list, tuple)) or any(not isinstance(alias, str) for alias in aliases):
                raise ValidationError("Command aliases must be a list of strings.")
            if any(alias != alias.lower() for alias in aliases):
                raise ValidationError("Command aliases must be lowercase.")

        group = info["group"]
        if not isinstance(group, str) or not group:
            raise ValidationError("Command group must be specified.")
        if group != group.lower():
            raise ValidationError("Command group must be lowercase.")
        if group not in client.registry.groups:
            raise ValidationError(f'Command group "{group}" is not registered.')

        member_name = info["member_name"]
        if not isinstance(member_name, str) or not member_name:
            raise ValidationError("Command member_name must be specified.")

        description = info["description"]
        if not isinstance(description, str) or not description:
            raise ValidationError("Command description must be specified.")
        if info["details"] and not isinstance(info["details"], str):
            raise ValidationError("Command details must be a string.")

        examples = info["examples"]
        if examples is not None and (
            not isinstance(examples, (list, tuple)) or any(not isinstance(example, str) for example in examples)
        ):
            raise ValidationError("Command examples must be a list of strings.")

        for field in ("client_permissions", "user_permissions"):
            permissions = info[field]
            if not permissions:
                continue
            if not isinstance(permissions, (list, tuple, set, frozenset)):
                raise ValidationError(f"Command {field} must be a list of permission names.")
            for permission in permissions:
                if not is_valid_permission(permission):
                    raise ValidationError(f"Invalid command {field[:-1]}: {permission}")

        throttling = info["throttling"]
        if throttling is not None:
            if isinstance(throttling, Throttling):
                usages, duration = throttling.usages, throttling.duration
            elif isinstance(throttling, dict):
                usages, duration = throttling.get("usages"), throttling.get("duration")
            else:
                raise ValidationError("Command throttling must be a dict or Throttling.")
            if not _is_number(usages):
                raise ValidationError("Command throttling usages must be a number.")
            if usages < 1:
                raise ValidationError("Command throttling usages must be at least 1.")
            if not _is_number(duration):
                raise ValidationError("Command throttling duration must be a number.")
            if duration < 1:
                raise ValidationError("Command throttling duration must be at least 1.")

        if info["args"] is not None and not isinstance(info["args"], (list, tuple)):
            raise ValidationError("Command args must be a list.")

        prompt_limit = info["args_prompt_limit"]
        if not _is_number(prompt_limit):
            raise ValidationError("Command args_prompt_limit must be a number.")
        if prompt_limit < 0:
            raise ValidationError("Command args_prompt_limit must be at least 0.")

        if info["args_type"] not in ("single", "multiple"):
            raise ValidationError('Command args_type must be one of "single" or "multiple".')
        if info["args_type"] == "multiple" and info["args_count"] and info["args_count"] < 2:
            raise ValidationError("Command args_count must be at least 2.")

        patterns = info["patterns"]
        if patterns is not None:
            if not isinstance(patterns, (list, tuple)):
                raise ValidationError("Command patterns must be a list of regular expressions.")
            for pattern in patterns:
                if isinstance(pattern, str):
                    try:
                        re.compile(pattern)
                    except re.error as e:
                        raise ValidationError(f"Invalid command pattern {pattern!r}: {e}") from e
                elif not isinstance(pattern, re.Pattern):
                    raise ValidationError("Command patterns must be a list of regular expressions.")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, group={self.group_id!r})"


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and not math.isnan(value)
