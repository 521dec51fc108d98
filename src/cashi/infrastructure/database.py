"""Database connection and configuration."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Protocol

import redis.asyncio as redis


class HasDatabaseSettings(Protocol):
    database_url: str


class DatabaseClient:
    """Redis database client backing the payment store."""

    def __init__(self, settings: HasDatabaseSettings):
        self.settings = settings
        self._redis: Optional[redis.Redis] = None

    def initialize_database(self) -> None:
        """Initialize Redis connection instance. No schema to create."""
        # Expecting URL like: redis://host:port/0
        self._redis = redis.from_url(self.settings.database_url, decode_responses=True)

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[redis.Redis, None]:
        """Yield a Redis connection (async client)."""
        if self._redis is None:
            self.initialize_database()
        assert self._redis is not None
        try:
            yield self._redis
        finally:
            # Keep pooled connection alive; do not close here
            pass

    async def close(self) -> None:
        """Release the connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
