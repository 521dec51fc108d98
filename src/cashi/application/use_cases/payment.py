"""Server-side payment use cases."""

from __future__ import annotations

import logging
from typing import List

from ...domain.entities import Payment, TransactionStatus, now_millis
from ...domain.repositories import TransactionRepository
from ...domain.validators import validate_payment
from ..dtos import CreatePaymentDTO

logger = logging.getLogger(__name__)


class PaymentService:
    """Validates incoming payments with the shared rules and persists them."""

    def __init__(self, transaction_repository: TransactionRepository):
        self.transaction_repository = transaction_repository

    async def create_payment(self, dto: CreatePaymentDTO) -> Payment:
        """Validate and append a payment.

        The server owns the timestamp and records the payment as completed.

        Raises:
            ValueError: With the first validation message when input is invalid.
            PaymentPersistenceError: When the store rejects the write.
        """
        validation = validate_payment(dto.recipient_email, dto.amount, dto.currency)
        if not validation.is_valid:
            raise ValueError(validation.error_message())

        assert dto.currency is not None
        payment = Payment(
            recipient_email=dto.recipient_email,
            amount=dto.amount,
            currency=dto.currency,
            timestamp=now_millis(),
            status=TransactionStatus.COMPLETED,
        )
        saved = await self.transaction_repository.add(payment)
        logger.info("Stored payment %s (%s)", saved.id, saved.formatted_amount())
        return saved

    async def list_payments(self) -> List[Payment]:
        """All stored payments, most recent first."""
        return await self.transaction_repository.list_recent()
