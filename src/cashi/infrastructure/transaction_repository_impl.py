"""Transaction repository implementation over a storage abstraction."""

from __future__ import annotations

import json
import logging
from typing import List, Optional
from uuid import uuid4

from redis.exceptions import RedisError

from ..domain.entities import Payment
from ..domain.errors import PaymentPersistenceError
from ..domain.repositories import (
    ErrorCallback,
    Subscription,
    TransactionRepository,
    TransactionsCallback,
)
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

PAYMENTS_BY_TIMESTAMP = "payments:by_timestamp"
PAYMENTS_UPDATES_CHANNEL = "payments:updates"

# Record, index entry and notification are written in one server-side step.
# KEYS: record key, index key. ARGV: record json, payment id, timestamp, channel.
APPEND_PAYMENT_SCRIPT = """
redis.call("SET", KEYS[1], ARGV[1])
redis.call("ZADD", KEYS[2], ARGV[3], ARGV[2])
return redis.call("PUBLISH", ARGV[4], ARGV[2])
"""


def _payment_key(payment_id: str) -> str:
    return f"payment:{payment_id}"


def encode_record(payment: Payment) -> str:
    """Serialize the store-resident record (the id lives in the key)."""
    return json.dumps(
        payment.model_dump(mode="json", by_alias=True, exclude={"id"}),
    )


def decode_record(payment_id: str, raw: Optional[str]) -> Optional[Payment]:
    """Rebuild a Payment from a stored record; None when malformed."""
    if not raw:
        return None
    try:
        data = json.loads(raw)
        return Payment.model_validate({**data, "id": payment_id})
    except (ValueError, TypeError) as e:
        logger.debug("Dropping malformed payment record %s: %s", payment_id, e)
        return None


class TransactionRepositoryImpl(TransactionRepository):
    """Payment records as JSON values indexed by a timestamp-scored sorted set."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def add(self, payment: Payment) -> Payment:
        saved = payment.with_id(uuid4().hex)
        try:
            await self.store.eval(
                APPEND_PAYMENT_SCRIPT,
                keys=[_payment_key(saved.id), PAYMENTS_BY_TIMESTAMP],
                args=[
                    encode_record(saved),
                    saved.id,
                    str(saved.timestamp),
                    PAYMENTS_UPDATES_CHANNEL,
                ],
            )
        except RedisError as e:
            raise PaymentPersistenceError(str(e)) from e
        return saved

    async def list_recent(self) -> List[Payment]:
        try:
            ids: list[str] = await self.store.zrevrange(PAYMENTS_BY_TIMESTAMP, 0, -1)
            payments: List[Payment] = []
            for pid in ids:
                payment = decode_record(pid, await self.store.get(_payment_key(pid)))
                if payment is not None:
                    payments.append(payment)
        except RedisError as e:
            raise PaymentPersistenceError(str(e)) from e
        return payments

    async def listen(
        self,
        callback: TransactionsCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Re-read the full list on every update notification.

        Read failures and loss of the listener itself go to ``on_error`` as
        ``PaymentPersistenceError`` when given; otherwise read failures
        propagate to the store's listener loop.
        """

        async def _on_update(_payment_id: str) -> None:
            try:
                payments = await self.list_recent()
            except PaymentPersistenceError as e:
                if on_error is None:
                    raise
                await on_error(e)
                return
            await callback(payments)

        async def _on_listener_lost(error: Exception) -> None:
            if on_error is not None:
                await on_error(PaymentPersistenceError(str(error) or "Listener lost"))

        return await self.store.subscribe(
            PAYMENTS_UPDATES_CHANNEL, _on_update, _on_listener_lost
        )
