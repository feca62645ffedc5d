"""Propagation of setting changes between processes sharing one settings store."""

import asyncio
import logging
import uuid
from collections.abc import Callable
from typing import Any

import pydantic
import redis.asyncio as redis
from pydantic import BaseModel, Field

from config.settings import settings

logger = logging.getLogger(__name__)


class SettingChange(BaseModel):
    """A single settings write. ``key=None`` with ``removed=True`` clears the whole scope."""

    origin: str = ""
    scope: str
    key: str | None = None
    value: Any = None
    removed: bool = False


class SettingBroadcaster:
    """Broadcaster for a single process: publishing goes nowhere."""

    def __init__(self, origin: str | None = None) -> None:
        self.origin = origin or uuid.uuid4().hex
        self._handler: Callable[[SettingChange], None] | None = None

    async def start(self, handler: Callable[[SettingChange], None]) -> None:
        self._handler = handler

    async def stop(self) -> None:
        self._handler = None

    async def publish(self, change: SettingChange) -> None:
        pass

    def deliver(self, change: SettingChange) -> None:
        # Our own writes are already applied
        if change.origin == self.origin or self._handler is None:
            return
        self._handler(change)


class RedisSettingBroadcaster(SettingBroadcaster):
    """Publishes changes as JSON on a redis pub/sub channel and applies everyone else's."""

    def __init__(self, redis_url: str | None = None, channel: str | None = None, origin: str | None = None) -> None:
        super().__init__(origin)
        self.redis_url = redis_url or settings.redis_url
        self.channel = channel or settings.settings_channel
        self.redis_client: redis.Redis | None = None
        self._pubsub: Any = None
        self._reader: asyncio.Task | None = None

    async def start(self, handler: Callable[[SettingChange], None]) -> None:
        await super().start(handler)
        if not self.redis_url:
            raise ValueError("A redis URL is required for the redis broadcaster")

        self.redis_client = redis.from_url(self.redis_url, decode_responses=True, encoding="utf-8")
        self._pubsub = self.redis_client.pubsub()
        await self._pubsub.subscribe(self.channel)
        self._reader = asyncio.create_task(self._read())
        logger.info(f"Listening for setting changes on {self.channel}")

    async def _read(self) -> None:
        try:
            async for message in self._pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    change = SettingChange.model_validate_json(message["data"])
                except pydantic.ValidationError as e:
                    logger.warning(f"Ignoring malformed setting change on {self.channel}: {e}")
                    continue
                try:
                    self.deliver(change)
                except Exception as e:
                    logger.error(f"Error applying setting change from {change.origin}: {e}")
        except redis.RedisError as e:
            logger.error(f"Stopped listening for setting changes on {self.channel}: {e}")

    async def publish(self, change: SettingChange) -> None:
        if self.redis_client is None:
            return
        change = change.model_copy(update={"origin": self.origin})
        await self.redis_client.publish(self.channel, change.model_dump_json())

    async def stop(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        if self._pubsub is not None:
            await self._pubsub.unsubscribe(self.channel)
            await self._pubsub.aclose()
            self._pubsub = None
        if self.redis_client is not None:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("Redis setting broadcaster disconnected")
        await super().stop()
