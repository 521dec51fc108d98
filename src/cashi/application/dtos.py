"""Data Transfer Objects for the payment API."""

from __future__ import annotations

from typing import Optional

from pydantic import ConfigDict, StrictFloat

from ..domain.entities import CurrencyCode, WireModel


class CreatePaymentDTO(WireModel):
    """Body of POST /payments as received by the server.

    ``currency`` may be missing or null so that the shared validator reports
    it with its regular message instead of a schema error. ``amount`` must be
    a JSON number; numeric strings and booleans are rejected.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "recipientEmail": "test.recipient@example.com",
                "amount": 100.5,
                "currency": "USD",
            }
        }
    )

    recipient_email: str = ""
    amount: StrictFloat
    currency: Optional[CurrencyCode] = None
