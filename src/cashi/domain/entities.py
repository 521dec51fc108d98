"""Payment domain entities: Currency, TransactionStatus, Payment and wire records."""

from __future__ import annotations

import time
from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, StrictFloat
from pydantic.alias_generators import to_camel


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class Currency(str, Enum):
    """Supported currencies for payment transactions."""

    USD = "USD"
    EUR = "EUR"

    @property
    def code(self) -> str:
        return self.value

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional[Currency]:
        """Look up a currency by code, ignoring case. Unknown codes give None."""
        if code is None:
            return None
        wanted = code.upper()
        for currency in cls:
            if currency.value == wanted:
                return currency
        return None

    @classmethod
    def supported(cls) -> List[Currency]:
        return list(cls)


_SYMBOLS = {
    Currency.USD: "$",
    Currency.EUR: "€",
}


class TransactionStatus(str, Enum):
    """Current status of a payment transaction."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


def _currency_from_wire(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, Currency):
        return Currency.from_code(value) or value
    return value


# Accepts currency codes in any case; unknown codes still fail validation.
CurrencyCode = Annotated[Currency, BeforeValidator(_currency_from_wire)]


class WireModel(BaseModel):
    """Base for models exchanged over HTTP and with the store (camelCase keys)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Payment(WireModel):
    """A single money-transfer record.

    A saved payment is a new value carrying the store-assigned id; instances
    are never mutated.
    """

    id: str = ""
    recipient_email: str
    amount: StrictFloat
    currency: CurrencyCode
    timestamp: int = Field(default_factory=now_millis)
    status: TransactionStatus = TransactionStatus.PENDING

    def with_id(self, payment_id: str) -> Payment:
        return self.model_copy(update={"id": payment_id})

    def formatted_amount(self) -> str:
        """Amount with currency symbol, rounded to two decimals for display."""
        return f"{self.currency.symbol}{self.amount:.2f}"


class PaymentRequest(WireModel):
    """Payload sent to POST /payments once client-side validation passed."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipientEmail": "test.recipient@example.com",
                "amount": 100.5,
                "currency": "USD",
            }
        }
    )

    recipient_email: str
    amount: StrictFloat
    currency: CurrencyCode


class PaymentResponse(WireModel):
    """Result envelope of a submission: payment on success, error otherwise."""

    success: bool
    payment: Optional[Payment] = None
    error: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
