"""Argument type plugins using strategy pattern."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import hikari

from ..core.utils import maybe_await
from ..errors import ValidationError

if TYPE_CHECKING:
    from ..commands.argument import Argument
    from ..core.client import FrameClient
    from ..core.context import CommandContext

logger = logging.getLogger(__name__)


class ArgumentType:
    """Base class for argument types.

    Subclasses set ``id`` and implement :meth:`validate` and :meth:`parse`.
    Both may be coroutines. ``validate`` returns True when the raw value is
    acceptable, False when it isn't, or a string explaining why it isn't.
    """

    id: str = ""
    option_type: ClassVar[hikari.OptionType] = hikari.OptionType.STRING

    def __init__(self, client: FrameClient, id: str | None = None) -> None:
        if client is None:
            raise ValidationError("A client must be specified.")
        type_id = id or self.id
        if not isinstance(type_id, str) or not type_id:
            raise ValidationError("Argument type ID must be a string.")
        if type_id != type_id.lower():
            raise ValidationError("Argument type ID must be lowercase.")

        self.client = client
        self.id = type_id

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> Any:
        raise NotImplementedError(f"{type(self).__name__} doesn't have a validate() method.")

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> Any:
        raise NotImplementedError(f"{type(self).__name__} doesn't have a parse() method.")

    def is_empty(self, value: Any, ctx: CommandContext, argument: Argument) -> bool:
        if isinstance(value, (list, tuple)):
            return len(value) == 0
        return value is None or value == ""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


class UnionArgumentType(ArgumentType):
    """Accepts a value if any of its member types accepts it."""

    def __init__(self, client: FrameClient, id: str) -> None:
        super().__init__(client, id)
        self.types: list[ArgumentType] = []
        for type_id in id.split("|"):
            argument_type = client.registry.types.get(type_id)
            if argument_type is None:
                raise ValidationError(f'Argument type "{type_id}" is not registered.')
            self.types.append(argument_type)

    @property
    def option_type(self) -> hikari.OptionType:
        option_types = {argument_type.option_type for argument_type in self.types}
        if option_types <= {hikari.OptionType.USER, hikari.OptionType.ROLE, hikari.OptionType.MENTIONABLE}:
            return hikari.OptionType.MENTIONABLE
        return hikari.OptionType.STRING

    async def validate(self, value: str, ctx: CommandContext, argument: Argument) -> Any:
        # First acceptance wins; otherwise report the last rejection
        result: Any = False
        for argument_type in self.types:
            result = await maybe_await(argument_type.validate(value, ctx, argument))
            if result is True:
                return True
        return result

    async def parse(self, value: str, ctx: CommandContext, argument: Argument) -> Any:
        for argument_type in self.types:
            if await maybe_await(argument_type.validate(value, ctx, argument)) is True:
                return await maybe_await(argument_type.parse(value, ctx, argument))
        raise ValidationError(f"Couldn't parse value {value!r} with union type {self.id}.")

    def is_empty(self, value: Any, ctx: CommandContext, argument: Argument) -> bool:
        return all(argument_type.is_empty(value, ctx, argument) for argument_type in self.types)
