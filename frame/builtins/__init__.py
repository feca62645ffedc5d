"""Commands registered by ``CommandRegistry.register_default_commands``."""

from .disable import DisableCommand
from .enable import EnableCommand
from .groups import ListGroupsCommand
from .help import HelpCommand
from .load import LoadCommand
from .ping import PingCommand
from .prefix import PrefixCommand
from .reload import ReloadCommand
from .unknown_command import UnknownCommand
from .unload import UnloadCommand

__all__ = [
    "DisableCommand",
    "EnableCommand",
    "ListGroupsCommand",
    "HelpCommand",
    "LoadCommand",
    "PingCommand",
    "PrefixCommand",
    "ReloadCommand",
    "UnknownCommand",
    "UnloadCommand",
]
