"""Decorator for declaring commands from plain coroutine functions."""

from collections.abc import Awaitable, Callable
from typing import Any

from .base import Command


def command(
    name: str,
    *,
    group: str,
    description: str,
    member_name: str | None = None,
    **info: Any,
) -> Callable[[Callable[..., Awaitable[Any]]], type[Command]]:
    """
    Turn ``async def handler(ctx, args)`` into a :class:`Command` subclass.

    The returned class takes the client as its only constructor argument, so
    it can be exported from a command module or passed to ``register_command``.
    Remaining keyword arguments are forwarded to :class:`Command`.
    """

    def decorator(func: Callable[..., Awaitable[Any]]) -> type[Command]:
        def __init__(self: Command, client: Any) -> None:
            Command.__init__(
                self,
                client,
                name=name,
                group=group,
                member_name=member_name or name,
                description=description,
                **info,
            )

        async def run(self: Command, ctx: Any, args: Any) -> Any:
            return await func(ctx, args)

        cls_name = f"{name.title().replace('-', '').replace('_', '')}Command"
        return type(
            cls_name,
            (Command,),
            {
                "__init__": __init__,
                "run": run,
                "__doc__": func.__doc__,
                "__module__": func.__module__,
            },
        )

    return decorator
