from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..errors import ValidationError
from .argument import Argument, ArgumentFailure

if TYPE_CHECKING:
    from ..core.client import FrameClient
    from ..core.context import CommandContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ArgumentCollectorResult:
    values: dict[str, Any] | None = None
    cancelled: str | None = None
    failure: ArgumentFailure | None = None
    prompts: list[Any] = field(default_factory=list)
    answers: list[Any] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.cancelled is None


class ArgumentCollector:
    """Obtains the values of an ordered list of arguments.

    Required arguments may not follow optional ones and nothing may follow
    an infinite argument.
    """

    def __init__(self, client: FrameClient, args: Sequence[Argument | dict[str, Any]], prompt_limit: float = math.inf) -> None:
        if client is None:
            raise ValidationError("Collector client must be specified.")
        if not isinstance(args, (list, tuple)):
            raise ValidationError("Collector args must be a list.")
        if not isinstance(prompt_limit, (int, float)) or isinstance(prompt_limit, bool) or prompt_limit < 0:
            raise ValidationError("Collector prompt_limit must be a number of at least 0.")

        self.client = client
        self.prompt_limit = prompt_limit
        self.args: list[Argument] = []

        has_infinite = False
        has_optional = False
        for info in args:
            if has_infinite:
                raise ValidationError("No other argument may come after an infinite argument.")
            argument = info if isinstance(info, Argument) else Argument(client, **info)
            if argument.default is not None:
                has_optional = True
            elif has_optional:
                raise ValidationError("Required arguments may not come after optional arguments.")
            has_infinite = argument.infinite
            self.args.append(argument)

    async def obtain(
        self, ctx: CommandContext, provided: Sequence[Any] | None = None, prompt_limit: float | None = None
    ) -> ArgumentCollectorResult:
        """Obtain every argument from positional tokens, prompting where allowed.

        An infinite last argument receives all remaining tokens. Collection
        stops at the first cancellation.
        """
        provided = list(provided or [])
        limit = self.prompt_limit if prompt_limit is None else prompt_limit
        collected = ArgumentCollectorResult(values={})

        for index, argument in enumerate(self.args):
            if argument.infinite:
                value = provided[index:]
            else:
                value = provided[index] if index < len(provided) else None

            result = await argument.obtain(ctx, value, limit)
            collected.prompts.extend(result.prompts)
            collected.answers.extend(result.answers)

            if result.cancelled:
                collected.values = None
                collected.cancelled = result.cancelled
                collected.failure = result.failure
                return collected

            collected.values[argument.key] = result.value

        return collected

    async def obtain_mapping(self, ctx: CommandContext, options: Mapping[str, Any]) -> ArgumentCollectorResult:
        """Obtain every argument from values keyed by argument key. Never prompts."""
        collected = ArgumentCollectorResult(values={})

        for argument in self.args:
            result = await argument.obtain_value(ctx, options.get(argument.key))
            if result.cancelled:
                return ArgumentCollectorResult(cancelled=result.cancelled, failure=result.failure)
            collected.values[argument.key] = result.value

        return collected
