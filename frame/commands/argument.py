from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from config.settings import settings

from ..core.utils import escape_markdown, maybe_await
from ..errors import ValidationError
from ..types.base import ArgumentType, UnionArgumentType

if TYPE_CHECKING:
    from ..core.client import FrameClient
    from ..core.context import CommandContext

logger = logging.getLogger(__name__)

CANCEL_WORD = "cancel"
FINISH_WORD = "finish"


@dataclass(slots=True)
class ArgumentFailure:
    """Why a value was rejected.

    ``reason`` is one of ``empty``, ``type``, ``one_of``, ``range`` or ``custom``.
    """

    argument: Argument
    reason: str
    message: str
    value: Any = None


@dataclass(slots=True)
class ArgumentResult:
    value: Any = None
    cancelled: str | None = None
    failure: ArgumentFailure | None = None
    prompts: list[Any] = field(default_factory=list)
    answers: list[Any] = field(default_factory=list)


class Argument:
    """A single declared argument of a command."""

    def __init__(
        self,
        client: FrameClient,
        key: str,
        prompt: str | None = None,
        *,
        label: str | None = None,
        type: str | list[str] | ArgumentType | None = None,
        default: Any = None,
        infinite: bool = False,
        one_of: list[Any] | None = None,
        min: float | None = None,
        max: float | None = None,
        validate: Callable[..., Any] | None = None,
        parse: Callable[..., Any] | None = None,
        is_empty: Callable[..., Any] | None = None,
        error: str | None = None,
        wait: float | None = None,
    ) -> None:
        if client is None:
            raise ValidationError("A client must be specified.")
        if not isinstance(key, str) or not key:
            raise ValidationError("Argument key must be a non-empty string.")
        if label is not None and not isinstance(label, str):
            raise ValidationError("Argument label must be a string.")
        if prompt is not None and not isinstance(prompt, str):
            raise ValidationError("Argument prompt must be a string.")
        if type is None and (validate is None or parse is None):
            raise ValidationError("Argument type must be specified unless both validate and parse are.")
        if one_of is not None and not isinstance(one_of, (list, tuple, set, frozenset)):
            raise ValidationError("Argument one_of must be a list.")
        for bound_name, bound in (("min", min), ("max", max)):
            if bound is not None and (not isinstance(bound, (int, float)) or isinstance(bound, bool)):
                raise ValidationError(f"Argument {bound_name} must be a number.")
        if wait is not None and (not isinstance(wait, (int, float)) or wait < 0):
            raise ValidationError("Argument wait must be a number of at least 0.")

        self.client = client
        self.key = key
        self.label = label or key
        self.prompt = prompt or f"Please enter the {self.label}."
        self.type = self._resolve_type(client, type)
        self.default = default
        self.infinite = bool(infinite)
        self.one_of = [value.lower() if isinstance(value, str) else value for value in one_of] if one_of else None
        self.min = min
        self.max = max
        self.validator = validate
        self.parser = parse
        self.empty_checker = is_empty
        self.error = error
        self.wait = settings.args_prompt_wait if wait is None else wait

    @staticmethod
    def _resolve_type(client: FrameClient, type: Any) -> ArgumentType | None:
        if type is None or isinstance(type, ArgumentType):
            return type
        if isinstance(type, (list, tuple)):
            type = "|".join(type)
        if not isinstance(type, str):
            raise ValidationError("Argument type must be a type ID or a list of type IDs.")
        if "|" in type:
            return UnionArgumentType(client, type)
        resolved = client.registry.types.get(type)
        if resolved is None:
            raise ValidationError(f'Argument type "{type}" is not registered.')
        return resolved

    @property
    def is_optional(self) -> bool:
        return self.default is not None

    def format_usage(self) -> str:
        name = f"{self.key}..." if self.infinite else self.key
        return f"[{name}]" if self.is_optional else f"<{name}>"

    async def is_empty(self, value: Any, ctx: CommandContext) -> bool:
        if self.empty_checker is not None:
            return bool(await maybe_await(self.empty_checker(value, ctx, self)))
        if self.type is not None:
            return bool(await maybe_await(self.type.is_empty(value, ctx, self)))
        if isinstance(value, (list, tuple)):
            return len(value) == 0
        return value is None or value == ""

    async def validate(self, value: Any, ctx: CommandContext) -> bool | str:
        """Check a raw value, returning True or the message explaining the rejection."""
        _, failure = await self._check(value, ctx)
        if failure is None:
            return True
        return failure.message

    async def parse(self, value: Any, ctx: CommandContext) -> Any:
        if self.parser is not None:
            return await maybe_await(self.parser(value, ctx, self))
        return await maybe_await(self.type.parse(value, ctx, self))

    async def _check(self, value: Any, ctx: CommandContext, raw: bool = True) -> tuple[Any, ArgumentFailure | None]:
        if await self.is_empty(value, ctx):
            return None, ArgumentFailure(self, "empty", f"The {self.label} is required.", value)

        # Pre-resolved interaction values skip the text conversion
        if raw and self.type is not None:
            result = await maybe_await(self.type.validate(value, ctx, self))
            if result is not True:
                message = self.error or (result if isinstance(result, str) else self._invalid_message(value))
                return None, ArgumentFailure(self, "type", message, value)

        if self.validator is not None:
            result = await maybe_await(self.validator(value, ctx, self))
            if result is not True:
                message = self.error or (result if isinstance(result, str) else self._invalid_message(value))
                return None, ArgumentFailure(self, "custom", message, value)

        parsed = await self.parse(value, ctx) if raw or self.parser is not None else value

        if self.one_of is not None and not self._in_one_of(parsed):
            options = " | ".join(str(option) for option in self.one_of)
            return None, ArgumentFailure(self, "one_of", f"Please enter one of the following options: {options}", value)

        if isinstance(parsed, (int, float)) and not isinstance(parsed, bool):
            if self.min is not None and parsed < self.min:
                return None, ArgumentFailure(self, "range", f"Please enter a number above or exactly {self.min}.", value)
            if self.max is not None and parsed > self.max:
                return None, ArgumentFailure(self, "range", f"Please enter a number below or exactly {self.max}.", value)

        return parsed, None

    def _in_one_of(self, parsed: Any) -> bool:
        candidate = parsed.lower() if isinstance(parsed, str) else parsed
        if candidate in self.one_of:
            return True
        entity_id = getattr(parsed, "id", None)
        return entity_id is not None and (entity_id in self.one_of or str(entity_id) in self.one_of)

    def _invalid_message(self, value: Any) -> str:
        text = escape_markdown(str(value)).replace("@", "@\u200b")
        shown = text if len(text) < 1850 else "[too long to show]"
        return f'You provided an invalid {self.label}, "{shown}". Please try again.'

    async def _resolve_default(self, ctx: CommandContext) -> Any:
        if callable(self.default):
            return await maybe_await(self.default(ctx, self))
        return self.default

    async def obtain(self, ctx: CommandContext, value: Any = None, prompt_limit: float = math.inf) -> ArgumentResult:
        """Turn a raw value into the argument's final value.

        When the value is missing or invalid and the context supports it, the
        user is prompted until they give a valid answer, cancel, time out or
        hit ``prompt_limit``. Otherwise the result carries ``cancelled="invalid"``
        and the failure that caused it.
        """
        if self.default is not None and await self.is_empty(value, ctx):
            return ArgumentResult(value=await self._resolve_default(ctx))

        if self.infinite:
            return await self._obtain_infinite(ctx, value, prompt_limit)

        result = ArgumentResult()
        parsed, failure = await self._check(value, ctx)

        while failure is not None:
            if not ctx.can_prompt or prompt_limit <= 0:
                result.cancelled, result.failure = "invalid", failure
                return result
            if len(result.prompts) >= prompt_limit:
                result.cancelled, result.failure = "promptLimit", failure
                return result

            intro = self.prompt if failure.reason == "empty" else failure.message
            result.prompts.append(
                await ctx.reply(
                    f"{intro}\nRespond with `{CANCEL_WORD}` to cancel the command. "
                    f"The command will automatically be cancelled in {self.wait} seconds."
                )
            )

            answer = await ctx.wait_for_reply(self.wait)
            if answer is None:
                result.cancelled, result.failure = "time", failure
                return result
            result.answers.append(answer)

            value = answer.content or ""
            if value.lower() == CANCEL_WORD:
                result.cancelled = "user"
                return result
            parsed, failure = await self._check(value, ctx)

        result.value = parsed
        return result

    async def _obtain_infinite(self, ctx: CommandContext, values: Any, prompt_limit: float) -> ArgumentResult:
        if values is not None and not isinstance(values, (list, tuple)):
            values = [values]
        values = list(values or [])

        result = ArgumentResult()
        collected: list[Any] = []
        index = 0

        while True:
            value = values[index] if index < len(values) else None
            if value is None:
                parsed, failure = None, ArgumentFailure(self, "empty", f"The {self.label} is required.")
            else:
                parsed, failure = await self._check(value, ctx)
            attempts = 0

            while failure is not None:
                if not ctx.can_prompt or prompt_limit <= 0:
                    result.cancelled, result.failure = "invalid", failure
                    return result
                attempts += 1
                if attempts > prompt_limit:
                    result.cancelled, result.failure = "promptLimit", failure
                    return result

                if value is not None:
                    result.prompts.append(
                        await ctx.reply(
                            f"{failure.message}\nRespond with `{CANCEL_WORD}` to cancel the command, "
                            f"or `{FINISH_WORD}` to finish entry up to this point.\n"
                            f"The command will automatically be cancelled in {self.wait} seconds."
                        )
                    )
                elif not collected:
                    result.prompts.append(
                        await ctx.reply(
                            f"{self.prompt}\nRespond with `{CANCEL_WORD}` to cancel the command, "
                            f"or `{FINISH_WORD}` to finish entry.\n"
                            f"The command will automatically be cancelled in {self.wait} seconds, unless you respond."
                        )
                    )

                answer = await ctx.wait_for_reply(self.wait)
                if answer is None:
                    result.cancelled, result.failure = "time", failure
                    return result
                result.answers.append(answer)
                value = answer.content or ""

                lowered = value.lower()
                if lowered == FINISH_WORD:
                    result.value = collected or None
                    if not collected and self.default is None:
                        result.cancelled = "user"
                    return result
                if lowered == CANCEL_WORD:
                    result.cancelled = "user"
                    return result
                parsed, failure = await self._check(value, ctx)

            collected.append(parsed)
            if values:
                index += 1
                if index >= len(values):
                    result.value = collected
                    return result

    async def obtain_value(self, ctx: CommandContext, value: Any) -> ArgumentResult:
        """Resolve an already-structured value, as delivered by interactions. Never prompts."""
        if await self.is_empty(value, ctx):
            if self.default is not None:
                return ArgumentResult(value=await self._resolve_default(ctx))
            return ArgumentResult(
                cancelled="invalid", failure=ArgumentFailure(self, "empty", f"The {self.label} is required.", value)
            )

        items = value if isinstance(value, (list, tuple)) else [value]
        parsed_items = []
        for item in items:
            parsed, failure = await self._check(item, ctx, raw=isinstance(item, str))
            if failure is not None:
                return ArgumentResult(cancelled="invalid", failure=failure)
            parsed_items.append(parsed)

        if self.infinite:
            return ArgumentResult(value=parsed_items)
        return ArgumentResult(value=parsed_items[0] if len(parsed_items) == 1 else parsed_items)

    def __repr__(self) -> str:
        return f"Argument(key={self.key!r}, type={getattr(self.type, 'id', None)!r})"
