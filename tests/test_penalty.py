"""Tests for late-payment penalties."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from microlending.config import PenaltyConfig
from microlending.engine import compute_penalty
from microlending.exceptions import ConfigurationError
from microlending.models import InstallmentStatus, Loan


class TestComputePenalty:
    """Tests for compute_penalty."""

    def test_none_mode(self, example_loan: Loan) -> None:
        inst = example_loan.schedule[0]

        assert compute_penalty(inst, inst.due_date + timedelta(days=30), PenaltyConfig()) == Decimal("0")

    def test_not_late(self, example_loan: Loan) -> None:
        inst = example_loan.schedule[0]
        policy = PenaltyConfig(mode="percent", rate=Decimal("5"))

        assert compute_penalty(inst, inst.due_date, policy) == Decimal("0")
        assert compute_penalty(inst, inst.due_date - timedelta(days=3), policy) == Decimal("0")

    def test_percent(self, example_loan: Loan) -> None:
        inst = example_loan.schedule[0]
        policy = PenaltyConfig(mode="percent", rate=Decimal("5"))

        # 5% of 879.16 = 43.958
        assert compute_penalty(inst, inst.due_date + timedelta(days=1), policy) == Decimal("43.96")

    def test_per_day(self, example_loan: Loan) -> None:
        inst = example_loan.schedule[0]
        policy = PenaltyConfig(mode="per_day", daily_amount=Decimal("2.50"))

        assert compute_penalty(inst, inst.due_date + timedelta(days=4), policy) == Decimal("10.00")

    def test_grace_days(self, example_loan: Loan) -> None:
        inst = example_loan.schedule[0]
        policy = PenaltyConfig(mode="per_day", daily_amount=Decimal("2"), grace_days=3)

        assert compute_penalty(inst, inst.due_date + timedelta(days=3), policy) == Decimal("0")
        assert compute_penalty(inst, inst.due_date + timedelta(days=5), policy) == Decimal("4.00")

    def test_paid_installment(self, example_loan: Loan) -> None:
        inst = example_loan.schedule[0]
        inst.status = InstallmentStatus.PAID
        policy = PenaltyConfig(mode="percent", rate=Decimal("5"))

        assert compute_penalty(inst, date(2025, 1, 1), policy) == Decimal("0")


class TestPenaltyConfig:
    """Tests for PenaltyConfig validation."""

    def test_unknown_mode(self) -> None:
        with pytest.raises(ConfigurationError):
            PenaltyConfig(mode="compound")

    def test_negative_rate(self) -> None:
        with pytest.raises(ConfigurationError):
            PenaltyConfig(mode="percent", rate=Decimal("-1"))

    def test_negative_grace(self) -> None:
        with pytest.raises(ConfigurationError):
            PenaltyConfig(grace_days=-1)
