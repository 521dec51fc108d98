"""Storage abstractions and Redis implementation for repositories."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, List, Optional

from redis.asyncio.client import PubSub
from redis.exceptions import RedisError

from ..domain.repositories import Subscription
from .database import DatabaseClient

logger = logging.getLogger(__name__)

MessageCallback = Callable[[str], Awaitable[None]]
ListenerErrorCallback = Callable[[Exception], Awaitable[None]]


class KeyValueStore(ABC):
    """Abstract key-value store with minimal operations used by repositories."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def zrevrange(self, key: str, start: int, end: int) -> list[str]:
        pass

    @abstractmethod
    async def eval(self, script: str, keys: List[str], args: List[str]) -> Any:
        """Run a Lua script atomically on the server."""
        pass

    @abstractmethod
    async def subscribe(
        self,
        channel: str,
        callback: MessageCallback,
        on_error: Optional[ListenerErrorCallback] = None,
    ) -> Subscription:
        """Invoke ``callback`` for every message published on ``channel``.

        ``on_error`` receives the failure that ends the listener, e.g. a lost
        connection. No further messages are delivered after it is called.
        """
        pass


class RedisSubscription(Subscription):
    """Pub/sub listener task plus its dedicated Redis connection."""

    def __init__(self, pubsub: PubSub, channel: str, task: asyncio.Task) -> None:
        self._pubsub = pubsub
        self._channel = channel
        self._task = task
        self._active = True

    @property
    def is_active(self) -> bool:
        return self._active

    async def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # Already reported through on_error by the listener.
            logger.debug("Listener on %s ended with %r", self._channel, e)
        try:
            await self._pubsub.unsubscribe(self._channel)
        except RedisError as e:
            logger.debug("Unsubscribe from %s failed: %s", self._channel, e)
        finally:
            await self._pubsub.aclose()
        logger.debug("Released subscription on %s", self._channel)


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed implementation of KeyValueStore."""

    def __init__(self, db_client: DatabaseClient):
        self._db_client = db_client

    async def get(self, key: str) -> Optional[str]:
        async with self._db_client.get_connection() as conn:
            return await conn.get(key)

    async def zrevrange(self, key: str, start: int, end: int) -> list[str]:
        async with self._db_client.get_connection() as conn:
            return await conn.zrevrange(key, start, end)

    async def eval(self, script: str, keys: List[str], args: List[str]) -> Any:
        async with self._db_client.get_connection() as conn:
            return await conn.eval(script, len(keys), *keys, *args)

    async def subscribe(
        self,
        channel: str,
        callback: MessageCallback,
        on_error: Optional[ListenerErrorCallback] = None,
    ) -> Subscription:
        async with self._db_client.get_connection() as conn:
            pubsub = conn.pubsub(ignore_subscribe_messages=True)
        await pubsub.subscribe(channel)
        task = asyncio.create_task(_pump_messages(pubsub, callback, on_error))
        return RedisSubscription(pubsub, channel, task)


async def _pump_messages(
    pubsub: PubSub,
    callback: MessageCallback,
    on_error: Optional[ListenerErrorCallback],
) -> None:
    try:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            try:
                await callback(message["data"])
            except Exception:
                logger.exception("Subscriber callback failed")
    except (RedisError, OSError) as e:
        logger.warning("Subscription listener stopped: %s", e)
        if on_error is not None:
            await on_error(e)
