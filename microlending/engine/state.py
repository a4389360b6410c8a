"""Loan lifecycle status."""

import logging

from microlending.logging import log_context
from microlending.models.enums import LoanStatus
from microlending.models.loan import Loan

logger = logging.getLogger(__name__)


class LoanStateMachine:
    """Derive a loan's status from its installments.

    ACTIVE is the initial state; PAID is terminal and reached exactly when
    every installment is PAID. A PAID loan is never reopened.
    """

    @staticmethod
    def derive(loan: Loan) -> LoanStatus:
        """Status the loan should hold given its schedule."""
        if loan.status == LoanStatus.PAID:
            return LoanStatus.PAID
        return LoanStatus.PAID if loan.all_installments_paid else LoanStatus.ACTIVE

    def evaluate(self, loan: Loan) -> LoanStatus:
        """Re-evaluate and store the loan status, returning the new value."""
        status = self.derive(loan)
        if status != loan.status:
            logger.debug(
                "Loan %s transitioned %s -> %s",
                loan.loan_id,
                loan.status.value,
                status.value,
                extra=log_context(loan_id=loan.loan_id, status=status.value),
            )
            loan.status = status
        return status
