"""Command declarations, arguments and argument collection."""

from .argument import Argument, ArgumentFailure, ArgumentResult
from .base import Command, Throttling, ThrottleRecord
from .collector import ArgumentCollector, ArgumentCollectorResult
from .decorators import command
from .group import CommandGroup
from .options import OptionDescriptorFactory

__all__ = [
    "Argument",
    "ArgumentFailure",
    "ArgumentResult",
    "ArgumentCollector",
    "ArgumentCollectorResult",
    "Command",
    "CommandGroup",
    "OptionDescriptorFactory",
    "Throttling",
    "ThrottleRecord",
    "command",
]
