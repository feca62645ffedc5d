"""Tests for event system functionality."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from frame.core.event_system import EventSystem


class TestEventSystem:
    """Test EventSystem functionality."""

    def test_event_system_creation(self):
        """Test creating an EventSystem instance."""
        event_system = EventSystem()

        assert event_system._listeners == {}
        assert event_system._middleware == []

    def test_add_listener(self):
        """Test adding an event listener."""
        event_system = EventSystem()
        listener = MagicMock()
        listener.__name__ = "test_listener"

        event_system.add_listener("command_run", listener)

        assert listener in event_system.get_listeners("command_run")

    def test_listen_decorator(self):
        """Test registering a listener with the decorator."""
        event_system = EventSystem()

        @event_system.listen("command_block")
        async def on_block(ctx, reason, data):
            pass

        assert event_system.get_listeners("command_block") == [on_block]
        assert event_system.get_all_events() == ["command_block"]

    def test_remove_listener(self):
        """Test removing an event listener."""
        event_system = EventSystem()
        listener = MagicMock()
        listener.__name__ = "test_listener"

        event_system.add_listener("command_run", listener)
        event_system.remove_listener("command_run", listener)

        assert listener not in event_system.get_listeners("command_run")

    def test_remove_nonexistent_listener(self):
        """Test removing a listener that doesn't exist."""
        event_system = EventSystem()
        listener = MagicMock()
        listener.__name__ = "test_listener"

        # Should not raise an exception
        event_system.remove_listener("command_run", listener)

    @pytest.mark.asyncio
    async def test_emit_passes_arguments(self):
        """Test emitting an event with listeners."""
        event_system = EventSystem()
        listener = AsyncMock()
        event_system.add_listener("command_status_change", listener)

        await event_system.emit("command_status_change", "123", "command", False)

        listener.assert_called_once_with("123", "command", False)

    @pytest.mark.asyncio
    async def test_emit_event_no_listeners(self):
        """Test emitting an event with no listeners."""
        event_system = EventSystem()

        await event_system.emit("command_run", None)

    @pytest.mark.asyncio
    async def test_emit_event_with_error_in_listener(self):
        """Test a failing listener doesn't stop the others."""
        event_system = EventSystem()

        def error_listener(*args):
            raise Exception("Listener error")

        working_listener = AsyncMock()
        event_system.add_listener("command_run", error_listener)
        event_system.add_listener("command_run", working_listener)

        await event_system.emit("command_run", "data")

        working_listener.assert_called_once_with("data")

    @pytest.mark.asyncio
    async def test_emit_with_middleware(self):
        """Test middleware runs before and after the listeners."""
        event_system = EventSystem()
        phases = []

        async def middleware(event_context, phase):
            assert event_context["event_name"] == "command_run"
            phases.append(phase)

        listener = AsyncMock()
        event_system.add_middleware(middleware)
        event_system.add_listener("command_run", listener)

        await event_system.emit("command_run", "data")

        assert phases == ["pre", "post"]
        listener.assert_called_once_with("data")

    @pytest.mark.asyncio
    async def test_middleware_can_stop_event(self):
        """Test middleware returning False stops delivery."""
        event_system = EventSystem()
        listener = AsyncMock()
        event_system.add_middleware(lambda event_context, phase: False)
        event_system.add_listener("command_run", listener)

        await event_system.emit("command_run", "data")

        listener.assert_not_called()

    def test_emit_nowait_runs_sync_listeners_inline(self):
        """Test synchronous emit without a running loop."""
        event_system = EventSystem()
        listener = MagicMock()
        listener.__name__ = "listener"
        event_system.add_listener("group_register", listener)

        event_system.emit_nowait("group_register", "group", "registry")

        listener.assert_called_once_with("group", "registry")

    def test_emit_nowait_skips_async_listeners_without_loop(self):
        """Test coroutine listeners are skipped when no loop is running."""
        event_system = EventSystem()
        calls = []

        async def listener(*args):
            calls.append(args)

        event_system.add_listener("group_register", listener)

        event_system.emit_nowait("group_register", "group")

        assert calls == []

    @pytest.mark.asyncio
    async def test_emit_nowait_schedules_async_listeners(self):
        """Test coroutine listeners are scheduled and can be drained."""
        event_system = EventSystem()
        calls = []

        async def listener(*args):
            await asyncio.sleep(0)
            calls.append(args)

        event_system.add_listener("command_status_change", listener)

        event_system.emit_nowait("command_status_change", None, "cmd", True)
        await event_system.drain()

        assert calls == [(None, "cmd", True)]

    def test_get_listeners_nonexistent_event(self):
        """Test getting listeners for a nonexistent event."""
        event_system = EventSystem()

        assert event_system.get_listeners("nonexistent_event") == []
