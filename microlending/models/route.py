"""Route collection and closing models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class RouteClosing:
    """A collector's reconciliation record (cuadre) for a day.

    Append-only: closing the same collector/day twice yields two records.
    """

    closing_id: str
    collector_id: str
    date: date
    total_amount: Decimal
    receipts_count: int
    created_at: datetime
    notes: str | None = None


@dataclass(frozen=True)
class RouteStop:
    """One due installment a collector should visit."""

    loan_id: str
    installment_id: str
    installment_number: int
    due_date: date
    amount_due: Decimal
    client_id: str
    client_name: str
    client_address: str
    client_phone: str | None = None


@dataclass(frozen=True)
class CollectorSummary:
    """A collector's collections for a day compared to their last closing."""

    collector_id: str
    total_amount: Decimal
    receipts_count: int
    last_closing: RouteClosing | None
    drift: Decimal  # Collected minus last closing total

    @property
    def closing_amount(self) -> Decimal:
        return self.last_closing.total_amount if self.last_closing else Decimal("0.00")


@dataclass(frozen=True)
class DailyTotals:
    """Cash collected on a day, split into base and penalty."""

    day: date
    base_amount: Decimal
    penalty_amount: Decimal
    receipts_count: int

    @property
    def total_amount(self) -> Decimal:
        return self.base_amount + self.penalty_amount
