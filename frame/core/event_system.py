import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class EventSystem:
    """Named-event bus used for framework notifications.

    Events emitted by the framework: ``group_register``, ``command_register``,
    ``command_unregister``, ``command_reregister``, ``type_register``,
    ``command_block``, ``command_cancel``, ``command_run``, ``command_error``,
    ``unknown_command``, ``command_status_change``, ``group_status_change``,
    ``command_prefix_change`` and ``provider_change``.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable]] = {}
        self._middleware: list[Callable] = []
        self._pending: set[asyncio.Task] = set()

    def add_middleware(self, middleware: Callable) -> None:
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {_name_of(middleware)}")

    def remove_middleware(self, middleware: Callable) -> None:
        if middleware in self._middleware:
            self._middleware.remove(middleware)
            logger.debug(f"Removed middleware: {_name_of(middleware)}")

    def listen(self, event_name: str) -> Callable:
        def decorator(func: Callable) -> Callable:
            self.add_listener(event_name, func)
            return func

        return decorator

    def add_listener(self, event_name: str, callback: Callable) -> None:
        self._listeners.setdefault(event_name, []).append(callback)
        logger.debug(f"Added listener for {event_name}: {_name_of(callback)}")

    def remove_listener(self, event_name: str, callback: Callable) -> None:
        if event_name in self._listeners:
            try:
                self._listeners[event_name].remove(callback)
                logger.debug(f"Removed listener for {event_name}: {_name_of(callback)}")
            except ValueError:
                logger.warning(f"Listener {_name_of(callback)} not found for {event_name}")

    def remove_all_listeners(self, event_name: str) -> None:
        if event_name in self._listeners:
            self._listeners[event_name].clear()
            logger.debug(f"Removed all listeners for {event_name}")

    async def emit(self, event_name: str, *args: Any, **kwargs: Any) -> None:
        listeners = self._listeners.get(event_name)
        if not listeners:
            return

        event_context = {
            "event_name": event_name,
            "args": args,
            "kwargs": kwargs,
            "stopped": False,
        }

        for middleware in self._middleware:
            try:
                result = await _call_maybe_async(middleware, event_context, "pre")
                if result is False or event_context.get("stopped"):
                    logger.debug(f"Event {event_name} stopped by middleware")
                    return
            except Exception as e:
                logger.error(f"Error in middleware {_name_of(middleware)}: {e}")

        listeners = list(listeners)
        results = await asyncio.gather(
            *(_call_maybe_async(listener, *args, **kwargs) for listener in listeners),
            return_exceptions=True,
        )
        for listener, result in zip(listeners, results):
            if isinstance(result, Exception):
                logger.error(f"Error in listener {_name_of(listener)} for {event_name}: {result}")

        for middleware in self._middleware:
            try:
                await _call_maybe_async(middleware, event_context, "post")
            except Exception as e:
                logger.error(f"Error in middleware {_name_of(middleware)} (post): {e}")

    def emit_nowait(self, event_name: str, *args: Any, **kwargs: Any) -> None:
        """Emit from synchronous code.

        Plain listeners run inline. Coroutine listeners are scheduled on the
        running loop, or skipped when there is none.
        """
        for listener in list(self._listeners.get(event_name, [])):
            if inspect.iscoroutinefunction(listener):
                try:
                    loop = asyncio.get_running_loop()
                except RuntimeError:
                    logger.debug(f"No running loop, skipped async listener {_name_of(listener)} for {event_name}")
                    continue

                task = loop.create_task(self._run_listener(event_name, listener, *args, **kwargs))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)
                continue

            try:
                listener(*args, **kwargs)
            except Exception as e:
                logger.error(f"Error in listener {_name_of(listener)} for {event_name}: {e}")

    async def _run_listener(self, event_name: str, listener: Callable, *args: Any, **kwargs: Any) -> None:
        try:
            await listener(*args, **kwargs)
        except Exception as e:
            logger.error(f"Error in listener {_name_of(listener)} for {event_name}: {e}")

    async def drain(self) -> None:
        """Wait for listeners scheduled by :meth:`emit_nowait`."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def get_listeners(self, event_name: str) -> list[Callable]:
        return self._listeners.get(event_name, []).copy()

    def get_all_events(self) -> list[str]:
        return list(self._listeners.keys())


async def _call_maybe_async(func: Callable, *args: Any, **kwargs: Any) -> Any:
    if inspect.iscoroutinefunction(func):
        return await func(*args, **kwargs)
    return func(*args, **kwargs)


def _name_of(func: Callable) -> str:
    return getattr(func, "__name__", repr(func))
