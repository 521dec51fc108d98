"""Integration tests for the transaction repository against a real Redis.

Skipped when no Redis server answers at TEST_REDIS_URL (default db 15).
"""

from __future__ import annotations

import asyncio
from typing import List

from cashi.domain.entities import Currency, Payment
from cashi.infrastructure.storage import RedisKeyValueStore
from cashi.infrastructure.transaction_repository_impl import TransactionRepositoryImpl


async def test_add_and_list_recent(redis_store: RedisKeyValueStore) -> None:
    repository = TransactionRepositoryImpl(redis_store)

    older = await repository.add(
        Payment(
            recipient_email="a@example.com",
            amount=1.0,
            currency=Currency.USD,
            timestamp=1_000,
        )
    )
    newer = await repository.add(
        Payment(
            recipient_email="b@example.com",
            amount=2.0,
            currency=Currency.EUR,
            timestamp=2_000,
        )
    )

    payments = await repository.list_recent()

    assert [p.id for p in payments] == [newer.id, older.id]
    assert payments[0] == newer


async def test_listen_receives_updates_until_cancelled(
    redis_store: RedisKeyValueStore,
) -> None:
    repository = TransactionRepositoryImpl(redis_store)
    received: asyncio.Queue[List[Payment]] = asyncio.Queue()

    async def on_change(payments: List[Payment]) -> None:
        received.put_nowait(payments)

    subscription = await repository.listen(on_change)
    try:
        saved = await repository.add(
            Payment(
                recipient_email="live@example.com", amount=3.0, currency=Currency.USD
            )
        )
        payments = await asyncio.wait_for(received.get(), timeout=5)
    finally:
        await subscription.cancel()

    assert [p.id for p in payments] == [saved.id]
    assert not subscription.is_active
    await subscription.cancel()
