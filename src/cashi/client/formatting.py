"""Text rendering of transactions for the terminal client."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Optional

from ..domain.entities import Payment


def format_timestamp(timestamp_ms: int, tz: Optional[tzinfo] = None) -> str:
    """Render epoch millis as e.g. ``Mar 7, 2025 at 09:05`` (local time by default)."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=tz)
    if tz is None:
        moment = moment.astimezone()
    return f"{moment:%b} {moment.day}, {moment.year} at {moment:%H:%M}"


def format_transaction(payment: Payment, tz: Optional[tzinfo] = None) -> str:
    return (
        f"{payment.formatted_amount():>14}  {payment.recipient_email:<32}  "
        f"{payment.status.value:<9}  {format_timestamp(payment.timestamp, tz)}"
    )
