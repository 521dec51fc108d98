from __future__ import annotations

import logging
from typing import Optional, Type
from types import TracebackType

import httpx

from ..domain.entities import PaymentRequest, PaymentResponse
from ..domain.errors import PaymentRepositoryError
from .http.http_client import DEFAULT_TIMEOUT_SECONDS, AsyncHttpClient

logger = logging.getLogger(__name__)


def _describe_status_error(e: httpx.HTTPStatusError) -> str:
    """Prefer the server's ``error`` field; fall back to the status reason."""
    try:
        error = e.response.json().get("error")
    except (ValueError, AttributeError):
        error = None
    if error:
        return str(error)
    return f"Payment failed: {e.response.reason_phrase or e.response.status_code}"


class PaymentApiClient:
    """Asynchronous client for the payment HTTP API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._http = AsyncHttpClient(base_url, timeout=timeout, transport=transport)

    async def submit_payment(self, request: PaymentRequest) -> PaymentResponse:
        """POST the request to ``/payments`` once, without retrying.

        The JSON response is validated into ``PaymentResponse`` to keep this
        client aligned with the server contract.

        Raises:
            PaymentRepositoryError: On timeout, connection failure, non-2xx
                status or an unreadable response body.
        """
        body = request.model_dump(mode="json", by_alias=True)
        try:
            resp = await self._http.post("/payments", json=body)
            return PaymentResponse.model_validate(resp.json())
        except httpx.TimeoutException as e:
            raise PaymentRepositoryError("Request timed out") from e
        except httpx.HTTPStatusError as e:
            raise PaymentRepositoryError(_describe_status_error(e)) from e
        except httpx.RequestError as e:
            logger.warning("Payment request failed: %s", e)
            raise PaymentRepositoryError(str(e) or "Network error") from e
        except ValueError as e:
            raise PaymentRepositoryError(f"Malformed payment response: {e}") from e

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "PaymentApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
