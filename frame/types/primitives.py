from __future__ import annotations

import math
from typing import TYPE_CHECKING

import hikari

from .base import ArgumentType

if TYPE_CHECKING:
    from ..commands.argument import Argument
    from ..core.context import CommandContext

TRUTHY = frozenset({"true", "t", "yes", "y", "on", "enable", "enabled", "1", "+"})
FALSY = frozenset({"false", "f", "no", "n", "off", "disable", "disabled", "0", "-"})


class StringArgumentType(ArgumentType):
    """Free text. ``min``/``max`` on the argument bound its length."""

    id = "string"

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool | str:
        if argument.min is not None and len(value) < argument.min:
            return f"Please keep the {argument.label} above or exactly {argument.min} characters."
        if argument.max is not None and len(value) > argument.max:
            return f"Please keep the {argument.label} below or exactly {argument.max} characters."
        return True

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> str:
        return value


class IntegerArgumentType(ArgumentType):
    id = "integer"
    option_type = hikari.OptionType.INTEGER

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool:
        try:
            int(value.strip())
        except ValueError:
            return False
        return True

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> int:
        return int(value.strip())


class FloatArgumentType(ArgumentType):
    id = "float"
    option_type = hikari.OptionType.FLOAT

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool:
        try:
            number = float(value.strip())
        except ValueError:
            return False
        return math.isfinite(number)

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> float:
        return float(value.strip())


class BooleanArgumentType(ArgumentType):
    id = "boolean"
    option_type = hikari.OptionType.BOOLEAN

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool:
        lowered = value.lower()
        return lowered in TRUTHY or lowered in FALSY

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> bool:
        lowered = value.lower()
        if lowered in TRUTHY:
            return True
        if lowered in FALSY:
            return False
        raise ValueError("Unknown boolean value.")
