"""Client-side PaymentRepository bindings."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, List, Union

from ..domain.entities import Payment, PaymentRequest, PaymentResponse
from ..domain.errors import PaymentPersistenceError, PaymentRepositoryError
from ..domain.repositories import PaymentRepository, TransactionRepository
from .payment_api_client import PaymentApiClient


class RemotePaymentRepository(PaymentRepository):
    """Submits through the HTTP API and reads straight from the store.

    The server saves each accepted payment to the store, which notifies the
    listener behind ``observe_transactions``.
    """

    def __init__(
        self,
        api_client: PaymentApiClient,
        transactions: TransactionRepository,
    ) -> None:
        self._api_client = api_client
        self._transactions = transactions

    async def submit_payment(self, request: PaymentRequest) -> PaymentResponse:
        return await self._api_client.submit_payment(request)

    async def observe_transactions(self) -> AsyncIterator[List[Payment]]:
        updates: asyncio.Queue[Union[List[Payment], Exception]] = asyncio.Queue()

        async def _on_change(payments: List[Payment]) -> None:
            updates.put_nowait(payments)

        async def _on_error(error: Exception) -> None:
            updates.put_nowait(error)

        subscription = await self._transactions.listen(_on_change, _on_error)
        try:
            yield await self.get_transactions()
            while True:
                item = await updates.get()
                if isinstance(item, Exception):
                    raise PaymentRepositoryError(str(item)) from item
                yield item
        finally:
            await subscription.cancel()

    async def get_transactions(self) -> List[Payment]:
        try:
            return await self._transactions.list_recent()
        except PaymentPersistenceError as e:
            raise PaymentRepositoryError(str(e)) from e


class StubPaymentRepository(PaymentRepository):
    """Binding for environments without a reachable store or API."""

    async def submit_payment(self, request: PaymentRequest) -> PaymentResponse:
        raise PaymentRepositoryError(
            "Payment submission is not available in this environment"
        )

    async def observe_transactions(self) -> AsyncIterator[List[Payment]]:
        yield []

    async def get_transactions(self) -> List[Payment]:
        return []
