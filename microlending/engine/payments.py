"""Payment application against a loan schedule."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Callable

from microlending.exceptions import (
    AlreadyPaidError,
    ClientMissingError,
    InvalidAmountError,
    NegativeBalanceGuardError,
    NotFoundError,
)
from microlending.engine.state import LoanStateMachine
from microlending.generators.base import BaseGenerator
from microlending.logging import log_context
from microlending.models.client import Client
from microlending.models.enums import InstallmentStatus
from microlending.models.loan import Loan
from microlending.models.receipt import Receipt
from microlending.money import ROUNDING_TOLERANCE, ZERO, to_money

logger = logging.getLogger(__name__)

ClientLookup = Callable[[str], "Client | None"]


class PaymentProcessor(BaseGenerator):
    """Apply collected payments to installments and issue receipts.

    The only component allowed to mutate installment status/paid fields and
    loan totals. Every check runs before the first mutation, so a failed
    call leaves the loan untouched.

    Parameters
    ----------
    client_lookup : Callable[[str], Client | None]
        Resolves a client id; returning None or raising KeyError means the
        client is missing.
    seed : int | None
        Seed for receipt ids.
    state_machine : LoanStateMachine | None
        Status evaluator (a default one is created if omitted).
    clock : Callable[[], datetime]
        Source of payment timestamps.
    """

    def __init__(
        self,
        client_lookup: ClientLookup,
        seed: int | None = None,
        state_machine: LoanStateMachine | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(seed)
        self._client_lookup = client_lookup
        self._state_machine = state_machine or LoanStateMachine()
        self._clock = clock
        self._lock = threading.Lock()

    def apply_payment(
        self,
        loan: Loan,
        installment_id: str,
        base_amount: Decimal,
        penalty_amount: Decimal = ZERO,
    ) -> Receipt:
        """Mark an installment PAID and return the receipt.

        Parameters
        ----------
        loan : Loan
            Loan owning the installment.
        installment_id : str
            Installment to pay.
        base_amount : Decimal
            Amount applied to the installment. May differ from the scheduled
            payment; later installments are not re-amortized.
        penalty_amount : Decimal
            Pre-computed late-payment penalty collected alongside.

        Returns
        -------
        Receipt
            Immutable payment record.

        Raises
        ------
        InvalidAmountError
            If ``base_amount`` is not positive or ``penalty_amount`` is negative.
        NotFoundError
            If the installment does not belong to the loan.
        ClientMissingError
            If the loan's client cannot be resolved.
        AlreadyPaidError
            If the installment is already PAID.
        NegativeBalanceGuardError
            If the payment would drive the loan balance below zero.
        """
        base_amount = to_money(base_amount)
        penalty_amount = to_money(penalty_amount)
        if base_amount <= 0:
            raise InvalidAmountError(
                f"Payment amount must be positive, got {base_amount}",
                loan_id=loan.loan_id,
                installment_id=installment_id,
            )
        if penalty_amount < 0:
            raise InvalidAmountError(
                f"Penalty amount must be non-negative, got {penalty_amount}",
                loan_id=loan.loan_id,
                installment_id=installment_id,
            )

        installment = loan.installment(installment_id)
        if installment is None:
            raise NotFoundError(
                f"Installment {installment_id} not found in loan {loan.loan_id}",
                loan_id=loan.loan_id,
                installment_id=installment_id,
            )

        client = self._resolve_client(loan, installment_id)

        with self._lock:
            # Re-checked under the lock: callers may have checked earlier
            if installment.status == InstallmentStatus.PAID:
                raise AlreadyPaidError(
                    f"Installment #{installment.number} of loan {loan.loan_id} is already paid",
                    loan_id=loan.loan_id,
                    installment_id=installment_id,
                )

            new_total_paid = loan.total_paid + base_amount + penalty_amount
            new_total_penalty = loan.total_penalty + penalty_amount
            remaining = loan.total_due - new_total_paid
            if remaining < -ROUNDING_TOLERANCE:
                raise NegativeBalanceGuardError(
                    f"Payment of {base_amount + penalty_amount} would leave loan {loan.loan_id} "
                    f"with balance {remaining}",
                    loan_id=loan.loan_id,
                    installment_id=installment_id,
                )

            now = self._clock()
            due_amount = installment.payment
            installment.status = InstallmentStatus.PAID
            installment.paid_amount = base_amount
            installment.paid_date = now
            loan.total_paid = new_total_paid
            loan.total_penalty = new_total_penalty
            loan.updated_at = now
            self._state_machine.evaluate(loan)

        receipt = Receipt(
            receipt_id=self.new_id(),
            date=now,
            loan_id=loan.loan_id,
            client_id=loan.client_id,
            client_name=client.name,
            installment_number=installment.number,
            amount=base_amount,
            penalty_amount=penalty_amount,
            remaining_balance=max(remaining, ZERO),
            installment_id=installment.installment_id,
            due_amount=due_amount,
            collector_id=client.collector_id,
        )
        logger.debug(
            "Applied payment to loan %s installment #%d: amount=%s penalty=%s remaining=%s",
            loan.loan_id,
            installment.number,
            base_amount,
            penalty_amount,
            receipt.remaining_balance,
            extra=log_context(
                loan_id=loan.loan_id,
                installment_id=installment.installment_id,
                receipt_id=receipt.receipt_id,
                amount=base_amount,
                penalty=penalty_amount,
                remaining=receipt.remaining_balance,
            ),
        )
        return receipt

    def apply_payment_by_number(
        self,
        loan: Loan,
        number: int,
        base_amount: Decimal,
        penalty_amount: Decimal = ZERO,
    ) -> Receipt:
        """Apply a payment to the installment with the given 1-based number."""
        installment = loan.installment_by_number(number)
        if installment is None:
            raise NotFoundError(
                f"Installment #{number} not found in loan {loan.loan_id}",
                loan_id=loan.loan_id,
            )
        return self.apply_payment(loan, installment.installment_id, base_amount, penalty_amount)

    def _resolve_client(self, loan: Loan, installment_id: str) -> Client:
        error = ClientMissingError(
            f"Client {loan.client_id} of loan {loan.loan_id} not found",
            loan_id=loan.loan_id,
            installment_id=installment_id,
        )
        try:
            client = self._client_lookup(loan.client_id)
        except KeyError as e:
            raise error from e
        if client is None:
            raise error
        return client
