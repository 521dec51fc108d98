"""Domain-specific errors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ValidationError:
    """Submission rejected by client-side validation; never reached the network."""

    message: str


@dataclass(frozen=True)
class NetworkError:
    """Submission failed in transport or on the server."""

    message: str


SubmitPaymentError = Union[ValidationError, NetworkError]


class PaymentRepositoryError(Exception):
    """Raised when a repository call fails (transport, timeout, non-2xx)."""


class PaymentPersistenceError(Exception):
    """Raised when the store cannot append or read payment records."""
