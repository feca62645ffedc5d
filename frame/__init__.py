"""Command registration, argument collection and dispatch for hikari bots."""

from .commands import (
    Argument,
    ArgumentCollector,
    ArgumentCollectorResult,
    Command,
    CommandGroup,
    Throttling,
    command,
)
from .core.client import FrameClient
from .core.context import CommandContext, InteractionContext, MessageContext
from .core.dispatcher import CommandDispatcher
from .core.event_system import EventSystem
from .core.registry import CommandRegistry
from .errors import FrameError, FriendlyError, RegistrationError, ValidationError
from .providers import MemoryProvider, SettingProvider, SQLAlchemyProvider
from .types import ArgumentType

__version__ = "1.0.0"

__all__ = [
    "Argument",
    "ArgumentCollector",
    "ArgumentCollectorResult",
    "ArgumentType",
    "Command",
    "CommandContext",
    "CommandDispatcher",
    "CommandGroup",
    "CommandRegistry",
    "EventSystem",
    "FrameClient",
    "FrameError",
    "FriendlyError",
    "InteractionContext",
    "MemoryProvider",
    "MessageContext",
    "RegistrationError",
    "SQLAlchemyProvider",
    "SettingProvider",
    "Throttling",
    "ValidationError",
    "command",
]
