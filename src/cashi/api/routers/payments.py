"""Payment API routes."""

from __future__ import annotations

import logging
import time
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram

from ...application.dtos import CreatePaymentDTO
from ...application.use_cases.payment import PaymentService
from ...domain.entities import Payment, PaymentResponse
from ..dependencies import get_payment_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["payments"])


payment_requests_total = Counter(
    "payment_requests_total",
    "Total payment requests processed",
    ["status"],
)

payment_request_duration_seconds = Histogram(
    "payment_request_duration_seconds",
    "Wall time to process a payment request",
    ["status"],
)


def _observe(outcome: str, start_time: float) -> None:
    payment_requests_total.labels(status=outcome).inc()
    elapsed = time.perf_counter() - start_time
    payment_request_duration_seconds.labels(status=outcome).observe(elapsed)


def payment_response(status_code: int, response: PaymentResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=response.to_wire())


@router.post(
    "",
    response_model=PaymentResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": PaymentResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": PaymentResponse},
    },
)
async def create_payment(
    payment_data: CreatePaymentDTO,
    payment_service: PaymentService = Depends(get_payment_service),
) -> JSONResponse:
    """Validate and store a new payment."""
    start_time = time.perf_counter()
    try:
        payment = await payment_service.create_payment(payment_data)
    except ValueError as e:
        _observe("client_error", start_time)
        return payment_response(
            status.HTTP_400_BAD_REQUEST,
            PaymentResponse(success=False, error=str(e)),
        )
    except Exception as e:
        _observe("server_error", start_time)
        logger.exception("Failed to process payment")
        return payment_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            PaymentResponse(success=False, error=f"Payment processing failed: {e}"),
        )
    _observe("success", start_time)
    return payment_response(
        status.HTTP_201_CREATED,
        PaymentResponse(success=True, payment=payment),
    )


@router.get("", response_model=List[Payment], response_model_by_alias=True)
async def list_payments(
    payment_service: PaymentService = Depends(get_payment_service),
) -> List[Payment]:
    """All payments, most recent first."""
    return await payment_service.list_payments()
