"""Loan and installment models."""

from dataclasses import FrozenInstanceError, dataclass
from datetime import date, datetime
from decimal import Decimal

from microlending.exceptions import InvalidTermError
from microlending.models.enums import (
    AmortizationSystem,
    Frequency,
    InstallmentStatus,
    LoanStatus,
)
from microlending.money import ZERO, quantize, to_money

# Fixed at generation time; only status and paid fields change afterwards
SCHEDULED_FIELDS = frozenset(
    {"installment_id", "number", "due_date", "payment", "interest", "principal", "balance"}
)


@dataclass
class Installment:
    """One scheduled payment obligation (cuota)."""

    installment_id: str
    number: int  # 1, 2, 3, ...
    due_date: date
    payment: Decimal
    interest: Decimal
    principal: Decimal
    balance: Decimal  # Outstanding principal after this installment
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_amount: Decimal = ZERO
    paid_date: datetime | None = None

    def __post_init__(self) -> None:
        if self.number < 1:
            raise InvalidTermError(
                f"Installment number must be >= 1, got {self.number}",
                installment_id=self.installment_id,
            )
        for name in ("payment", "interest", "principal", "balance"):
            value = to_money(getattr(self, name))
            if value < 0:
                raise InvalidTermError(
                    f"Installment {name} must be non-negative, got {value}",
                    installment_id=self.installment_id,
                )
            object.__setattr__(self, name, value)
        self.status = InstallmentStatus(self.status)
        self.paid_amount = to_money(self.paid_amount)

    def __setattr__(self, name: str, value: object) -> None:
        if name in SCHEDULED_FIELDS and name in self.__dict__:
            raise FrozenInstanceError(f"cannot assign to scheduled field {name!r}")
        super().__setattr__(name, value)

    @property
    def is_paid(self) -> bool:
        return self.status == InstallmentStatus.PAID

    def days_late(self, on_date: date) -> int:
        """Days past the due date as of ``on_date`` (0 when not late)."""
        return max((on_date - self.due_date).days, 0)


@dataclass
class Loan:
    """Loan contract entity.

    Owns its schedule exclusively. ``total_interest``, ``total_paid`` and
    ``total_penalty`` are the only stored aggregates; everything else
    (remaining balance, percent paid, next due installment) is derived on
    demand.
    """

    loan_id: str
    client_id: str
    principal: Decimal
    rate: Decimal  # Annual percent for FRENCH/FLAT/INTEREST_ONLY
    term: int  # Number of installments
    frequency: Frequency
    start_date: date
    schedule: list[Installment]
    amortization_system: AmortizationSystem = AmortizationSystem.FRENCH
    status: LoanStatus = LoanStatus.ACTIVE
    total_interest: Decimal = ZERO
    total_paid: Decimal = ZERO  # Base amounts plus penalties collected
    total_penalty: Decimal = ZERO  # Penalties collected
    archived: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.principal = to_money(self.principal)
        self.rate = Decimal(str(self.rate)) if isinstance(self.rate, float) else Decimal(self.rate)
        self.frequency = Frequency.parse(self.frequency)
        self.amortization_system = AmortizationSystem(self.amortization_system)
        self.status = LoanStatus(self.status)
        self.total_interest = to_money(self.total_interest)
        self.total_paid = to_money(self.total_paid)
        self.total_penalty = to_money(self.total_penalty)

        if self.principal <= 0:
            raise InvalidTermError(f"Loan amount must be positive, got {self.principal}", loan_id=self.loan_id)
        if self.rate < 0:
            raise InvalidTermError(f"Loan rate must be non-negative, got {self.rate}", loan_id=self.loan_id)
        if self.term < 1:
            raise InvalidTermError(f"Loan term must be >= 1, got {self.term}", loan_id=self.loan_id)
        if len(self.schedule) != self.term:
            raise InvalidTermError(
                f"Schedule has {len(self.schedule)} installments, expected {self.term}",
                loan_id=self.loan_id,
            )
        numbers = [inst.number for inst in self.schedule]
        if numbers != list(range(1, self.term + 1)):
            raise InvalidTermError("Installment numbers must be contiguous from 1", loan_id=self.loan_id)

    def installment(self, installment_id: str) -> Installment | None:
        """Return the installment with the given id, if it belongs to this loan."""
        return next((inst for inst in self.schedule if inst.installment_id == installment_id), None)

    def installment_by_number(self, number: int) -> Installment | None:
        """Return the installment with the given 1-based number."""
        if 1 <= number <= len(self.schedule):
            return self.schedule[number - 1]
        return None

    # Derived values
    @property
    def total_due(self) -> Decimal:
        """Principal plus scheduled interest."""
        return self.principal + self.total_interest

    @property
    def remaining_balance(self) -> Decimal:
        """Principal plus interest minus everything paid, penalties included."""
        return self.total_due - self.total_paid

    @property
    def percent_paid(self) -> Decimal:
        if self.total_due == 0:
            return Decimal("100.00")
        paid = self.total_paid - self.total_penalty
        return min(quantize(paid * 100 / self.total_due), Decimal("100.00"))

    @property
    def paid_count(self) -> int:
        return sum(1 for inst in self.schedule if inst.is_paid)

    @property
    def all_installments_paid(self) -> bool:
        return all(inst.is_paid for inst in self.schedule)

    @property
    def next_due_installment(self) -> Installment | None:
        """First installment, by number, that is not yet paid."""
        return next((inst for inst in self.schedule if not inst.is_paid), None)

    def overdue_installments(self, today: date) -> list[Installment]:
        """Unpaid installments whose due date is before ``today``."""
        return [inst for inst in self.schedule if not inst.is_paid and inst.due_date < today]
