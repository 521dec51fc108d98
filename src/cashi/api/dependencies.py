"""FastAPI dependencies for the payment API."""

from __future__ import annotations

from fastapi import Depends, Request

from ..application.use_cases.payment import PaymentService
from ..domain.repositories import TransactionRepository
from ..infrastructure.context import AppContext


def get_app_context(request: Request) -> AppContext:
    """Context built by the application lifespan."""
    return request.app.state.context


def get_transaction_repository(
    context: AppContext = Depends(get_app_context),
) -> TransactionRepository:
    """Get transaction repository."""
    return context.transactions


def get_payment_service(
    transaction_repository: TransactionRepository = Depends(
        get_transaction_repository
    ),
) -> PaymentService:
    """Get payment service."""
    return PaymentService(transaction_repository)
