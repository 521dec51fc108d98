"""Client-side submission pipeline: validate, then submit."""

from __future__ import annotations

import logging
from typing import List, Optional

from ...domain.entities import Currency, PaymentRequest, PaymentResponse
from ...domain.errors import NetworkError, SubmitPaymentError, ValidationError
from ...domain.repositories import PaymentRepository
from ...domain.result import Err, Ok, Result
from ...domain.validators import (
    validate_payment,
    validate_payment_with_all_errors,
)

logger = logging.getLogger(__name__)


class SubmitPaymentUseCase:
    """Gate network submission behind validation.

    Stateless and safe to call concurrently; every call returns its own
    result. Failures come back as one of two tags: ``ValidationError`` when
    the input was rejected locally (the repository is never called) and
    ``NetworkError`` when the repository call failed.
    """

    def __init__(self, repository: PaymentRepository):
        self.repository = repository

    async def submit(
        self,
        recipient_email: str,
        amount: float,
        currency: Optional[Currency],
    ) -> Result[PaymentResponse, SubmitPaymentError]:
        email = recipient_email.strip()

        validation = validate_payment(email, amount, currency)
        if not validation.is_valid:
            return Err(ValidationError(validation.error_message() or "Validation failed"))

        assert currency is not None
        request = PaymentRequest(recipient_email=email, amount=amount, currency=currency)

        try:
            response = await self.repository.submit_payment(request)
        except Exception as e:
            logger.info("Payment submission failed: %s", e)
            return Err(NetworkError(str(e) or "Network error"))
        return Ok(response)

    def get_validation_errors(
        self,
        recipient_email: str,
        amount: float,
        currency: Optional[Currency],
    ) -> List[str]:
        """All validation messages for display, without submitting."""
        return validate_payment_with_all_errors(recipient_email, amount, currency)
