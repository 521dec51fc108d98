"""Repository interfaces (ports) for the domain layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from .entities import Payment, PaymentRequest, PaymentResponse


class Subscription(ABC):
    """Handle for a live listener registered with a store.

    ``cancel`` releases the underlying listener exactly once; calling it again
    is a no-op.
    """

    @abstractmethod
    async def cancel(self) -> None:
        pass

    @property
    @abstractmethod
    def is_active(self) -> bool:
        pass


TransactionsCallback = Callable[[List[Payment]], Awaitable[None]]
ErrorCallback = Callable[[Exception], Awaitable[None]]


class PaymentRepository(ABC):
    """Client-side capability for submitting and reading payments."""

    @abstractmethod
    async def submit_payment(self, request: PaymentRequest) -> PaymentResponse:
        """Submit a payment with exactly one wire call.

        Raises:
            PaymentRepositoryError: On transport failure, timeout or non-2xx status.
        """
        pass

    @abstractmethod
    def observe_transactions(self) -> AsyncIterator[List[Payment]]:
        """Yield the full transaction list, most recent first, on every change."""
        pass

    @abstractmethod
    async def get_transactions(self) -> List[Payment]:
        """One-shot fetch of all transactions, most recent first."""
        pass


class TransactionRepository(ABC):
    """Store-side repository for persisted payment records."""

    @abstractmethod
    async def add(self, payment: Payment) -> Payment:
        """Append a payment and return it with its assigned id."""
        pass

    @abstractmethod
    async def list_recent(self) -> List[Payment]:
        """All payments ordered by timestamp descending."""
        pass

    @abstractmethod
    async def listen(
        self,
        callback: TransactionsCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """Call ``callback`` with the current list whenever the records change."""
        pass
