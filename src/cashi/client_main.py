"""Terminal client: submit payments and watch the live transaction list."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from .application.use_cases.observe_transactions import ObserveTransactionsUseCase
from .application.use_cases.submit_payment import SubmitPaymentUseCase
from .client.formatting import format_transaction
from .client.transaction_view_model import (
    Error,
    PaymentSuccess,
    TransactionUIState,
    TransactionViewModel,
)
from .domain.entities import Currency
from .envs.client_env import Settings, get_settings
from .infrastructure.context import AppContext
from .infrastructure.payment_api_client import PaymentApiClient
from .infrastructure.payment_repository_impl import RemotePaymentRepository


def build_view_model(repository: RemotePaymentRepository) -> TransactionViewModel:
    return TransactionViewModel(
        observe_transactions=ObserveTransactionsUseCase(repository),
        submit_payment=SubmitPaymentUseCase(repository),
    )


def _print_transactions(state: TransactionUIState) -> None:
    if state.error:
        print(f"! {state.error}")
        return
    print(f"--- {len(state.transactions)} transaction(s) ---")
    for payment in state.transactions:
        print(format_transaction(payment))


async def _submit(vm: TransactionViewModel, email: str, amount: str, code: str) -> int:
    currency = Currency.from_code(code)
    if not await vm.submit_payment(email, amount, currency):
        print("A payment is already being submitted")
        return 1

    outcome = vm.state.submission_state
    vm.clear_submission()
    exit_code = 1
    while not vm.actions.empty():
        action = vm.actions.get_nowait()
        if isinstance(action, PaymentSuccess):
            payment = action.payment
            if payment is not None:
                print(f"Payment {payment.id} accepted: {payment.formatted_amount()}")
            else:
                print("Payment accepted")
            exit_code = 0
    if isinstance(outcome, Error):
        print(f"Payment rejected: {outcome.message}")
    return exit_code


async def _watch(vm: TransactionViewModel) -> int:
    last_seen: List[object] = []

    def _on_state(state: TransactionUIState) -> None:
        snapshot = [state.transactions, state.error]
        if state.is_loading_transactions or snapshot == last_seen:
            return
        last_seen[:] = snapshot
        _print_transactions(state)

    vm.add_listener(_on_state)
    vm.start()
    try:
        await asyncio.Event().wait()
    finally:
        await vm.close()
    return 0


async def run(args: argparse.Namespace, settings: Settings) -> int:
    context = AppContext.create(settings)
    api_client = PaymentApiClient(settings.api_base_url, timeout=settings.request_timeout)
    try:
        repository = RemotePaymentRepository(api_client, context.transactions)
        vm = build_view_model(repository)
        if args.command == "submit":
            return await _submit(vm, args.email, args.amount, args.currency)
        if args.command == "list":
            payments = await ObserveTransactionsUseCase(repository).get_once()
            for payment in payments:
                print(format_transaction(payment))
            return 0
        return await _watch(vm)
    finally:
        await api_client.aclose()
        await context.close()


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cashi-client", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    submit = sub.add_parser("submit", help="submit a payment")
    submit.add_argument("email", help="recipient email")
    submit.add_argument("amount", help="amount, e.g. 100.50")
    submit.add_argument(
        "currency",
        help="currency code: "
        + ", ".join(c.code for c in Currency.supported()),
    )

    sub.add_parser("list", help="print the transaction list once")
    sub.add_parser("watch", help="print the transaction list on every change")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = _parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    try:
        code = asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        code = 0
    raise SystemExit(code)


if __name__ == "__main__":
    main()
