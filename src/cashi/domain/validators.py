"""Pure validation rules for payment input.

This module is the single rule set for payments: the submission pipeline on
the client and the payment route on the server both call it, so the two tiers
accept and reject exactly the same input with the same messages.

Invalid input is returned as an ``Invalid`` value, never raised.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional, Union

from .entities import Currency

EMAIL_EMPTY = "Email cannot be empty"
EMAIL_INVALID_FORMAT = "Invalid email format"
AMOUNT_NOT_POSITIVE = "Amount must be greater than 0"
AMOUNT_ABOVE_MAXIMUM = "Amount exceeds maximum limit"
CURRENCY_REQUIRED = "Currency is required"

MAX_AMOUNT = 1_000_000

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9+_.-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")


@dataclass(frozen=True)
class Valid:
    """Validation passed."""

    @property
    def is_valid(self) -> bool:
        return True

    def error_message(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Invalid:
    """Validation failed with a human-readable message."""

    message: str

    @property
    def is_valid(self) -> bool:
        return False

    def error_message(self) -> Optional[str]:
        return self.message


ValidationResult = Union[Valid, Invalid]

VALID = Valid()


def validate_email(email: str) -> ValidationResult:
    """Validate recipient email format.

    Blank input (after trimming) is reported as empty; anything else must
    match ``local-part@domain.tld`` as a whole.
    """
    if not email.strip():
        return Invalid(EMAIL_EMPTY)
    if EMAIL_PATTERN.fullmatch(email) is None:
        return Invalid(EMAIL_INVALID_FORMAT)
    return VALID


def validate_amount(amount: float) -> ValidationResult:
    """Validate that 0 < amount <= MAX_AMOUNT."""
    if math.isnan(amount) or amount <= 0:
        return Invalid(AMOUNT_NOT_POSITIVE)
    if amount > MAX_AMOUNT:
        return Invalid(AMOUNT_ABOVE_MAXIMUM)
    return VALID


def validate_currency(currency: Optional[Currency]) -> ValidationResult:
    if currency is None:
        return Invalid(CURRENCY_REQUIRED)
    return VALID


def validate_payment(
    recipient_email: str,
    amount: float,
    currency: Optional[Currency],
) -> ValidationResult:
    """Return the first failure in the order email, amount, currency.

    Args:
        recipient_email: Recipient email as entered
        amount: Payment amount
        currency: Selected currency, or None when unset

    Returns:
        ``VALID`` when every check passes, otherwise the first ``Invalid``.
    """
    for result in (
        validate_email(recipient_email),
        validate_amount(amount),
        validate_currency(currency),
    ):
        if not result.is_valid:
            return result
    return VALID


def validate_payment_with_all_errors(
    recipient_email: str,
    amount: float,
    currency: Optional[Currency],
) -> List[str]:
    """Run every check and collect all failure messages in field order."""
    results = [
        validate_email(recipient_email),
        validate_amount(amount),
        validate_currency(currency),
    ]
    return [r.message for r in results if isinstance(r, Invalid)]
