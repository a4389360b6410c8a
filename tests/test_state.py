"""Tests for loan status evaluation."""

from decimal import Decimal

from microlending.engine import LoanStateMachine
from microlending.models import InstallmentStatus, Loan, LoanStatus


def _mark_paid(loan: Loan, count: int) -> None:
    for inst in loan.schedule[:count]:
        inst.status = InstallmentStatus.PAID
        inst.paid_amount = inst.payment


class TestLoanStateMachine:
    """Tests for LoanStateMachine."""

    def test_new_loan_is_active(self, example_loan: Loan) -> None:
        assert LoanStateMachine.derive(example_loan) == LoanStatus.ACTIVE

    def test_partially_paid_stays_active(self, example_loan: Loan) -> None:
        _mark_paid(example_loan, 11)

        assert LoanStateMachine().evaluate(example_loan) == LoanStatus.ACTIVE
        assert example_loan.status == LoanStatus.ACTIVE

    def test_all_paid_transitions(self, example_loan: Loan) -> None:
        _mark_paid(example_loan, 12)

        assert LoanStateMachine().evaluate(example_loan) == LoanStatus.PAID
        assert example_loan.status == LoanStatus.PAID

    def test_paid_is_terminal(self, example_loan: Loan) -> None:
        """A PAID loan is never reopened."""
        _mark_paid(example_loan, 12)
        machine = LoanStateMachine()
        machine.evaluate(example_loan)

        example_loan.schedule[0].status = InstallmentStatus.PENDING

        assert machine.evaluate(example_loan) == LoanStatus.PAID

    def test_status_ignores_amounts(self, example_loan: Loan) -> None:
        """Status follows installment flags even when paid amounts fall short."""
        for inst in example_loan.schedule:
            inst.status = InstallmentStatus.PAID
            inst.paid_amount = Decimal("1")

        assert LoanStateMachine().evaluate(example_loan) == LoanStatus.PAID
