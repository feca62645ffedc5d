"""Exceptions raised by the command framework."""


class FrameError(Exception):
    """Base class for all framework errors."""


class RegistrationError(FrameError):
    """A command, group or argument type could not be registered."""


class ValidationError(FrameError, ValueError):
    """A command, group or argument declaration is malformed."""


class FriendlyError(FrameError):
    """An error whose message is safe to show to the invoking user."""
