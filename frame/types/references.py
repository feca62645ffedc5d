"""Argument types that refer to the framework's own commands and groups."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .base import ArgumentType
from .entities import pick

if TYPE_CHECKING:
    from ..commands.argument import Argument
    from ..core.context import CommandContext


class CommandReferenceType(ArgumentType):
    id = "command"

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool | str:
        _, result = pick(self.client.registry.find_commands(value), "commands", lambda c: c.name)
        return result

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> Any:
        return self.client.registry.find_commands(value)[0]


class GroupReferenceType(ArgumentType):
    id = "group"

    def validate(self, value: str, ctx: CommandContext, argument: Argument) -> bool | str:
        _, result = pick(self.client.registry.find_groups(value), "groups", lambda g: g.name)
        return result

    def parse(self, value: str, ctx: CommandContext, argument: Argument) -> Any:
        return self.client.registry.find_groups(value)[0]
