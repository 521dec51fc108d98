"""Shared pytest fixtures for payment tests."""

from __future__ import annotations

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio

from cashi.domain.entities import Currency, Payment, TransactionStatus
from cashi.infrastructure.database import DatabaseClient
from cashi.infrastructure.storage import RedisKeyValueStore
from tests.fixtures import InMemoryKeyValueStore, InMemoryTransactionRepository


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    """Create an empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
async def transaction_repository(
    memory_store: InMemoryKeyValueStore,
) -> AsyncGenerator[InMemoryTransactionRepository, None]:
    """Create an in-memory transaction repository."""
    repo = InMemoryTransactionRepository(memory_store)
    yield repo
    repo.clear()


@pytest.fixture
def sample_payment() -> Payment:
    return Payment(
        id="payment123",
        recipient_email="test.recipient@example.com",
        amount=100.50,
        currency=Currency.USD,
        timestamp=1_700_000_000_000,
        status=TransactionStatus.COMPLETED,
    )


class TestDatabaseSettings:
    """Test settings for Redis connection."""

    __test__ = False

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url


@pytest_asyncio.fixture
async def redis_db_client() -> AsyncGenerator[DatabaseClient, None]:
    """Create a Redis database client for testing.

    Uses database 15 by default, or TEST_REDIS_URL if set.
    """
    test_redis_url = os.getenv("TEST_REDIS_URL", "redis://localhost:6379/15")
    settings = TestDatabaseSettings(database_url=test_redis_url)
    client = DatabaseClient(settings)
    client.initialize_database()

    try:
        async with client.get_connection() as conn:
            await conn.ping()
    except Exception as e:
        await client.close()
        pytest.skip(f"Redis not available at {test_redis_url}: {e}")

    yield client

    async with client.get_connection() as conn:
        await conn.flushdb()
    await client.close()


@pytest_asyncio.fixture
async def redis_store(redis_db_client: DatabaseClient) -> RedisKeyValueStore:
    """Create a Redis-backed key-value store for testing."""
    return RedisKeyValueStore(redis_db_client)
