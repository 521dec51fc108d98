from __future__ import annotations

from typing import AsyncIterator, List

from ...domain.entities import Payment
from ...domain.repositories import PaymentRepository


class ObserveTransactionsUseCase:
    """Live and one-shot access to the transaction list, most recent first."""

    def __init__(self, repository: PaymentRepository):
        self.repository = repository

    def observe(self) -> AsyncIterator[List[Payment]]:
        """Full list on every store change; close the iterator to stop listening."""
        return self.repository.observe_transactions()

    async def get_once(self) -> List[Payment]:
        return await self.repository.get_transactions()
