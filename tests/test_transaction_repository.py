"""Tests for the store-side transaction repository."""

from __future__ import annotations

import json
from typing import List

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from cashi.domain.entities import Currency, Payment, TransactionStatus
from cashi.domain.errors import PaymentPersistenceError
from cashi.infrastructure.transaction_repository_impl import (
    APPEND_PAYMENT_SCRIPT,
    PAYMENTS_BY_TIMESTAMP,
    PAYMENTS_UPDATES_CHANNEL,
    TransactionRepositoryImpl,
    decode_record,
    encode_record,
)
from tests.fixtures import (
    InMemoryKeyValueStore,
    InMemoryTransactionRepository,
    UnavailableKeyValueStore,
)


def _payment(email: str = "test@example.com", timestamp: int = 1_000) -> Payment:
    return Payment(
        recipient_email=email,
        amount=42.0,
        currency=Currency.EUR,
        timestamp=timestamp,
        status=TransactionStatus.COMPLETED,
    )


async def test_add_assigns_id_and_persists_record(
    transaction_repository: InMemoryTransactionRepository,
    memory_store: InMemoryKeyValueStore,
) -> None:
    # Act
    saved = await transaction_repository.add(_payment())

    # Assert
    assert saved.id
    raw = await memory_store.get(f"payment:{saved.id}")
    assert json.loads(raw) == {
        "recipientEmail": "test@example.com",
        "amount": 42.0,
        "currency": "EUR",
        "timestamp": 1_000,
        "status": "COMPLETED",
    }
    assert await memory_store.zrevrange(PAYMENTS_BY_TIMESTAMP, 0, -1) == [saved.id]
    assert memory_store.published == [(PAYMENTS_UPDATES_CHANNEL, saved.id)]


async def test_add_assigns_distinct_ids(
    transaction_repository: InMemoryTransactionRepository,
) -> None:
    first = await transaction_repository.add(_payment())
    second = await transaction_repository.add(_payment())

    assert first.id != second.id


async def test_list_recent_orders_by_timestamp_descending(
    transaction_repository: InMemoryTransactionRepository,
) -> None:
    for email, ts in [
        ("a@example.com", 2_000),
        ("b@example.com", 5_000),
        ("c@example.com", 1_000),
    ]:
        await transaction_repository.add(_payment(email, ts))

    payments = await transaction_repository.list_recent()

    assert [p.timestamp for p in payments] == [5_000, 2_000, 1_000]
    assert [p.recipient_email for p in payments] == [
        "b@example.com",
        "a@example.com",
        "c@example.com",
    ]


async def test_list_recent_on_empty_store(
    transaction_repository: InMemoryTransactionRepository,
) -> None:
    assert await transaction_repository.list_recent() == []


async def test_malformed_records_are_dropped(
    transaction_repository: InMemoryTransactionRepository,
    memory_store: InMemoryKeyValueStore,
) -> None:
    # Arrange
    good = await transaction_repository.add(_payment("good@example.com", 3_000))
    await memory_store.set("payment:broken", "{not json")
    await memory_store.zadd(PAYMENTS_BY_TIMESTAMP, {"broken": 4_000})
    await memory_store.set(
        "payment:nocurrency",
        json.dumps(
            {"recipientEmail": "x@example.com", "amount": 1.0, "timestamp": 5_000}
        ),
    )
    await memory_store.zadd(PAYMENTS_BY_TIMESTAMP, {"nocurrency": 5_000})
    await memory_store.zadd(PAYMENTS_BY_TIMESTAMP, {"missing": 6_000})

    # Act
    payments = await transaction_repository.list_recent()

    # Assert
    assert [p.id for p in payments] == [good.id]


def test_record_round_trip_keeps_id_out_of_value() -> None:
    payment = _payment().with_id("abc")

    raw = encode_record(payment)

    assert "id" not in json.loads(raw)
    assert decode_record("abc", raw) == payment


def test_decode_record_rejects_unknown_currency() -> None:
    raw = json.dumps(
        {
            "recipientEmail": "x@example.com",
            "amount": 1.0,
            "currency": "GBP",
            "timestamp": 1,
            "status": "COMPLETED",
        }
    )

    assert decode_record("x", raw) is None
    assert decode_record("x", None) is None


async def test_listen_delivers_full_list_on_every_add(
    transaction_repository: InMemoryTransactionRepository,
) -> None:
    # Arrange
    received: List[List[Payment]] = []

    async def on_change(payments: List[Payment]) -> None:
        received.append(payments)

    subscription = await transaction_repository.listen(on_change)

    # Act
    await transaction_repository.add(_payment("a@example.com", 1_000))
    await transaction_repository.add(_payment("b@example.com", 2_000))

    # Assert
    assert [[p.recipient_email for p in batch] for batch in received] == [
        ["a@example.com"],
        ["b@example.com", "a@example.com"],
    ]
    await subscription.cancel()


async def test_cancel_releases_listener_exactly_once(
    transaction_repository: InMemoryTransactionRepository,
    memory_store: InMemoryKeyValueStore,
) -> None:
    received: List[List[Payment]] = []

    async def on_change(payments: List[Payment]) -> None:
        received.append(payments)

    subscription = await transaction_repository.listen(on_change)
    assert subscription.is_active
    assert memory_store.subscriber_count(PAYMENTS_UPDATES_CHANNEL) == 1

    await subscription.cancel()
    await subscription.cancel()

    assert not subscription.is_active
    assert memory_store.subscriptions[0].release_count == 1
    assert memory_store.subscriber_count(PAYMENTS_UPDATES_CHANNEL) == 0

    await transaction_repository.add(_payment())
    assert received == []


async def test_add_failure_raises_persistence_error() -> None:
    repository = TransactionRepositoryImpl(UnavailableKeyValueStore())

    with pytest.raises(PaymentPersistenceError, match="Connection refused"):
        await repository.add(_payment())


async def test_list_failure_raises_persistence_error() -> None:
    repository = TransactionRepositoryImpl(UnavailableKeyValueStore())

    with pytest.raises(PaymentPersistenceError):
        await repository.list_recent()


async def test_listen_routes_read_failures_to_error_callback() -> None:
    # Arrange
    store = UnavailableKeyValueStore()
    repository = TransactionRepositoryImpl(store)
    errors: List[Exception] = []
    received: List[List[Payment]] = []

    async def on_change(payments: List[Payment]) -> None:
        received.append(payments)

    async def on_error(error: Exception) -> None:
        errors.append(error)

    await repository.listen(on_change, on_error)

    # Act
    await store.publish(PAYMENTS_UPDATES_CHANNEL, "someid")

    # Assert
    assert received == []
    assert len(errors) == 1
    assert isinstance(errors[0], PaymentPersistenceError)


async def test_add_writes_record_index_and_notification_in_one_step(
    transaction_repository: InMemoryTransactionRepository,
    memory_store: InMemoryKeyValueStore,
) -> None:
    saved = await transaction_repository.add(_payment(timestamp=7_000))

    assert len(memory_store.evals) == 1
    script, keys, args = memory_store.evals[0]
    assert script == APPEND_PAYMENT_SCRIPT
    assert keys == [f"payment:{saved.id}", PAYMENTS_BY_TIMESTAMP]
    assert args == [encode_record(saved), saved.id, "7000", PAYMENTS_UPDATES_CHANNEL]


async def test_failed_add_leaves_nothing_behind() -> None:
    # Arrange
    store = UnavailableKeyValueStore(fail_reads=False)
    repository = TransactionRepositoryImpl(store)

    # Act
    with pytest.raises(PaymentPersistenceError):
        await repository.add(_payment())

    # Assert
    assert await repository.list_recent() == []
    assert store.published == []


async def test_listen_reports_lost_listener_to_error_callback(
    transaction_repository: InMemoryTransactionRepository,
    memory_store: InMemoryKeyValueStore,
) -> None:
    # Arrange
    errors: List[Exception] = []

    async def on_change(payments: List[Payment]) -> None:
        pass

    async def on_error(error: Exception) -> None:
        errors.append(error)

    subscription = await transaction_repository.listen(on_change, on_error)

    # Act
    await memory_store.drop_listeners(
        PAYMENTS_UPDATES_CHANNEL, RedisConnectionError("Connection lost")
    )

    # Assert
    assert len(errors) == 1
    assert isinstance(errors[0], PaymentPersistenceError)
    assert str(errors[0]) == "Connection lost"
    await subscription.cancel()
