"""Application (slash) command option building."""

import logging
import re
from typing import Any

import hikari

from .argument import Argument
from .base import Command

logger = logging.getLogger(__name__)

MAX_DESCRIPTION = 100
MAX_CHOICES = 25
SLASH_NAME = re.compile(r"^[-_\w]{1,32}$")

# Types that don't support choices
NO_CHOICES_TYPES = {
    hikari.OptionType.BOOLEAN,
    hikari.OptionType.USER,
    hikari.OptionType.CHANNEL,
    hikari.OptionType.ROLE,
    hikari.OptionType.MENTIONABLE,
    hikari.OptionType.ATTACHMENT,
}


def _truncate(text: str) -> str:
    text = text.splitlines()[0] if text else ""
    return text if len(text) <= MAX_DESCRIPTION else f"{text[: MAX_DESCRIPTION - 3]}..."


class OptionDescriptorFactory:
    """Factory for creating application command options from arguments."""

    @staticmethod
    def option_type(argument: Argument) -> hikari.OptionType:
        # Infinite arguments are entered as one string and split afterwards
        if argument.infinite or argument.type is None:
            return hikari.OptionType.STRING
        return argument.type.option_type

    @classmethod
    def create(cls, argument: Argument) -> hikari.CommandOption:
        """Create the option describing a single argument."""
        option_type = cls.option_type(argument)
        kwargs: dict[str, Any] = {
            "type": option_type,
            "name": argument.key.lower(),
            "description": _truncate(argument.label if argument.label != argument.key else argument.prompt),
            "is_required": not argument.is_optional,
        }

        if argument.one_of and option_type not in NO_CHOICES_TYPES and len(argument.one_of) <= MAX_CHOICES:
            kwargs["choices"] = [hikari.CommandChoice(name=str(value), value=value) for value in argument.one_of]

        if option_type in (hikari.OptionType.INTEGER, hikari.OptionType.FLOAT):
            if argument.min is not None:
                kwargs["min_value"] = argument.min
            if argument.max is not None:
                kwargs["max_value"] = argument.max
        elif option_type == hikari.OptionType.STRING and argument.type is not None and argument.type.id == "string":
            if argument.min is not None:
                kwargs["min_length"] = int(argument.min)
            if argument.max is not None:
                kwargs["max_length"] = int(argument.max)

        channel_types = getattr(argument.type, "channel_types", None)
        if option_type == hikari.OptionType.CHANNEL and channel_types:
            kwargs["channel_types"] = sorted(channel_types)

        return hikari.CommandOption(**kwargs)

    @classmethod
    def build(cls, rest: hikari.api.RESTClient, command: Command) -> hikari.api.SlashCommandBuilder | None:
        """Build the slash command for a command, or None if it can't be expressed as one."""
        if command.unknown or command.hidden or not SLASH_NAME.match(command.name):
            return None

        builder = rest.slash_command_builder(command.name, _truncate(command.description))
        if command.args_collector:
            for argument in command.args_collector.args:
                builder.add_option(cls.create(argument))
        else:
            # Free-form commands take their whole argument string as one option
            builder.add_option(
                hikari.CommandOption(
                    type=hikari.OptionType.STRING,
                    name="arguments",
                    description="Command arguments",
                    is_required=False,
                )
            )
        return builder
