"""Presentation state for the transaction list and payment submission."""

from __future__ import annotations

import asyncio
import logging
from contextlib import aclosing, suppress
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Union

from ..application.use_cases.observe_transactions import ObserveTransactionsUseCase
from ..application.use_cases.submit_payment import SubmitPaymentUseCase
from ..domain.entities import Currency, Payment
from ..domain.result import Ok

logger = logging.getLogger(__name__)

INVALID_AMOUNT_FORMAT = "Invalid amount format"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Validating:
    pass


@dataclass(frozen=True)
class Submitting:
    pass


@dataclass(frozen=True)
class Success:
    payment: Optional[Payment] = None


@dataclass(frozen=True)
class Error:
    message: str


SubmissionState = Union[Idle, Validating, Submitting, Success, Error]


@dataclass(frozen=True)
class PaymentSuccess:
    """One-shot action: the payment was accepted, the form can be dismissed."""

    payment: Optional[Payment] = None


TransactionUIAction = PaymentSuccess


@dataclass(frozen=True)
class TransactionUIState:
    """Complete UI state for the transaction screen.

    ``error`` belongs to the transaction stream; submission failures live in
    ``submission_state``.
    """

    transactions: List[Payment] = field(default_factory=list)
    is_loading_transactions: bool = True
    submission_state: SubmissionState = field(default_factory=Idle)
    error: Optional[str] = None

    @property
    def is_submitting_payment(self) -> bool:
        return isinstance(self.submission_state, (Validating, Submitting))


StateListener = Callable[[TransactionUIState], None]


class TransactionViewModel:
    """Holds UI-observable state and reacts to pipeline and stream results."""

    def __init__(
        self,
        observe_transactions: ObserveTransactionsUseCase,
        submit_payment: SubmitPaymentUseCase,
    ):
        self._observe_transactions = observe_transactions
        self._submit_payment = submit_payment
        self._state = TransactionUIState()
        self._listeners: List[StateListener] = []
        self._observer_task: Optional[asyncio.Task] = None
        self.actions: asyncio.Queue[TransactionUIAction] = asyncio.Queue()

    @property
    def state(self) -> TransactionUIState:
        return self._state

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Register a state observer; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _update(self, **changes) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _dispatch_action(self, action: TransactionUIAction) -> None:
        self.actions.put_nowait(action)

    # -- read side ---------------------------------------------------------

    def start(self) -> None:
        """Begin observing transactions. Must be called from a running loop."""
        if self._observer_task is not None and not self._observer_task.done():
            return
        self._observer_task = asyncio.create_task(self._observe())

    async def _observe(self) -> None:
        try:
            async with aclosing(self._observe_transactions.observe()) as stream:
                async for payments in stream:
                    self._update(
                        transactions=payments,
                        is_loading_transactions=False,
                        error=None,
                    )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Keep the last good list on screen.
            logger.warning("Transaction stream failed: %s", e)
            self._update(
                is_loading_transactions=False,
                error=f"Failed to load transactions: {e}",
            )

    async def close(self) -> None:
        """Stop observing; releases the store listener."""
        task, self._observer_task = self._observer_task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    def clear_error(self) -> None:
        self._update(error=None)

    # -- submission --------------------------------------------------------

    async def submit_payment(
        self,
        recipient_email: str,
        amount: str,
        currency: Optional[Currency],
    ) -> bool:
        """Validate and submit a payment from raw form input.

        Returns False, leaving state untouched, when a submission is already
        in flight; True once this attempt has reached a final state.
        """
        if self._state.is_submitting_payment:
            return False

        try:
            amount_value = float(amount.strip())
        except ValueError:
            self._update(submission_state=Error(INVALID_AMOUNT_FORMAT))
            return True

        self._update(submission_state=Validating())
        errors = self._submit_payment.get_validation_errors(
            recipient_email.strip(), amount_value, currency
        )
        if errors:
            self._update(submission_state=Error(errors[0]))
            return True

        self._update(submission_state=Submitting())
        try:
            result = await self._submit_payment.submit(
                recipient_email, amount_value, currency
            )
        except asyncio.CancelledError:
            # Abandoned attempt: unlock the form for the next one.
            self._update(submission_state=Idle())
            raise

        if isinstance(result, Ok):
            response = result.value
            if response.success:
                self._update(submission_state=Success(response.payment))
                self._dispatch_action(PaymentSuccess(response.payment))
            else:
                self._update(
                    submission_state=Error(response.error or "Unknown error")
                )
        else:
            self._update(submission_state=Error(result.error.message))
        return True

    def clear_submission(self) -> None:
        """Dismiss the current submission outcome."""
        self._update(submission_state=Idle())
