"""Installment schedule generation."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import ROUND_DOWN, Decimal

from microlending.exceptions import InvalidTermError
from microlending.generators.base import BaseGenerator
from microlending.models.enums import AmortizationSystem, Frequency, InstallmentStatus, LoanStatus
from microlending.models.loan import Installment, Loan
from microlending.money import CENT, ZERO, quantize, to_money

logger = logging.getLogger(__name__)


class ScheduleGenerator(BaseGenerator):
    """Generate deterministic installment schedules from loan terms.

    All arithmetic is Decimal. Per-period interest and the level payment are
    rounded to cents and the final installment absorbs the rounding
    residue, so that for every system:

    - ``sum(principal) == loan principal``
    - ``sum(payment) == loan principal + sum(interest)``
    - the final installment's balance is zero.

    The ``rate`` argument is an annual percentage for FRENCH, FLAT and
    INTEREST_ONLY, a flat profit amount for FIXED_PROFIT and the payment
    amount for FIXED_PAYMENT.
    """

    def generate(
        self,
        principal: Decimal,
        rate: Decimal,
        term: int,
        frequency: Frequency | str,
        start_date: date,
        system: AmortizationSystem = AmortizationSystem.FRENCH,
    ) -> list[Installment]:
        """Generate the installment list for a loan.

        Parameters
        ----------
        principal : Decimal
            Amount lent.
        rate : Decimal
            Annual rate percent (or amount, see class docstring).
        term : int
            Number of installments, at least 1.
        frequency : Frequency | str
            Payment frequency.
        start_date : date
            Loan start; installment ``i`` is due ``i * days_per_period``
            days later.
        system : AmortizationSystem
            Amortization system.

        Returns
        -------
        list[Installment]
            Installments numbered 1..term, all PENDING.

        Raises
        ------
        InvalidTermError
            If term < 1, principal <= 0 or rate < 0.
        """
        principal = to_money(principal)
        rate = Decimal(str(rate)) if isinstance(rate, float) else Decimal(rate)
        frequency = Frequency.parse(frequency)
        system = AmortizationSystem(system)

        if term < 1:
            raise InvalidTermError(f"Term must be at least 1 installment, got {term}")
        if principal <= 0:
            raise InvalidTermError(f"Principal must be positive, got {principal}")
        if rate < 0:
            raise InvalidTermError(f"Rate must be non-negative, got {rate}")

        if system == AmortizationSystem.FRENCH:
            rows = self._french(principal, rate, term, frequency)
        elif system == AmortizationSystem.FLAT:
            rows = self._level(principal, quantize(principal * rate / 100), term)
        elif system == AmortizationSystem.FIXED_PROFIT:
            rows = self._level(principal, to_money(rate), term)
        elif system == AmortizationSystem.FIXED_PAYMENT:
            total = to_money(rate) * term
            if total < principal:
                raise InvalidTermError(
                    f"Payments of {to_money(rate)} x {term} do not cover principal {principal}"
                )
            rows = self._level(principal, total - principal, term, payment=to_money(rate))
        else:  # INTEREST_ONLY
            rows = self._interest_only(principal, rate, term, frequency)

        step = timedelta(days=frequency.days_per_period)
        schedule = [
            Installment(
                installment_id=self.new_id(),
                number=i,
                due_date=start_date + step * i,
                payment=payment,
                interest=interest,
                principal=principal_part,
                balance=balance,
                status=InstallmentStatus.PENDING,
            )
            for i, (payment, interest, principal_part, balance) in enumerate(rows, start=1)
        ]
        logger.debug(
            "Generated %s schedule: principal=%s term=%d frequency=%s",
            system.value,
            principal,
            term,
            frequency.value,
        )
        return schedule

    def create_loan(
        self,
        client_id: str,
        principal: Decimal,
        rate: Decimal,
        term: int,
        frequency: Frequency | str,
        start_date: date,
        system: AmortizationSystem = AmortizationSystem.FRENCH,
        loan_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Loan:
        """Create an ACTIVE loan with its schedule and interest total."""
        schedule = self.generate(principal, rate, term, frequency, start_date, system)
        return Loan(
            loan_id=loan_id or self.new_id(),
            client_id=client_id,
            principal=principal,
            rate=rate,
            term=term,
            frequency=frequency,
            start_date=start_date,
            schedule=schedule,
            amortization_system=system,
            status=LoanStatus.ACTIVE,
            total_interest=sum((inst.interest for inst in schedule), ZERO),
            total_paid=ZERO,
            created_at=created_at or datetime.now(),
        )

    @staticmethod
    def period_rate(rate: Decimal, frequency: Frequency) -> Decimal:
        """Per-period rate for an annual percentage."""
        return rate / 100 / frequency.periods_per_year

    def _french(
        self, principal: Decimal, rate: Decimal, term: int, frequency: Frequency
    ) -> list[tuple[Decimal, Decimal, Decimal, Decimal]]:
        """Level-payment (annuity) rows."""
        period_rate = self.period_rate(rate, frequency)
        if period_rate == 0:
            payment = quantize(principal / term)
        else:
            payment = quantize(principal * period_rate / (1 - (1 + period_rate) ** -term))

        rows = []
        balance = principal
        for i in range(1, term + 1):
            interest = quantize(balance * period_rate)
            if i == term:
                principal_part = balance
                installment_payment = principal_part + interest
            else:
                principal_part = min(payment - interest, balance)
                installment_payment = principal_part + interest
            balance = max(balance - principal_part, ZERO)
            rows.append((installment_payment, interest, principal_part, balance))
        return rows

    def _level(
        self,
        principal: Decimal,
        total_interest: Decimal,
        term: int,
        payment: Decimal | None = None,
    ) -> list[tuple[Decimal, Decimal, Decimal, Decimal]]:
        """Equal principal and equal interest rows (FLAT, FIXED_PROFIT, FIXED_PAYMENT).

        Shares are rounded down so the final row never goes negative. When
        ``payment`` is given every row pays exactly that amount: the interest
        share is rounded down and the principal share is what remains of the
        payment.
        """
        interest = (total_interest / term).quantize(CENT, rounding=ROUND_DOWN)
        if payment is None:
            principal_part = (principal / term).quantize(CENT, rounding=ROUND_DOWN)
        else:
            principal_part = payment - interest

        rows = []
        balance = principal
        for i in range(1, term + 1):
            if i == term:
                row_principal = balance
                row_interest = total_interest - interest * (term - 1)
            else:
                row_principal = min(principal_part, balance)
                row_interest = interest
            balance = max(balance - row_principal, ZERO)
            rows.append((row_principal + row_interest, row_interest, row_principal, balance))
        return rows

    def _interest_only(
        self, principal: Decimal, rate: Decimal, term: int, frequency: Frequency
    ) -> list[tuple[Decimal, Decimal, Decimal, Decimal]]:
        """Interest-only rows with the principal as a final balloon."""
        interest = quantize(principal * self.period_rate(rate, frequency))
        rows = [(interest, interest, ZERO, principal) for _ in range(term - 1)]
        rows.append((principal + interest, interest, principal, ZERO))
        return rows
