"""Payment receipt model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class Receipt:
    """Immutable record of one payment event.

    ``amount`` is the base amount applied to the installment;
    ``penalty_amount`` is the late-payment surcharge collected alongside it.
    """

    receipt_id: str
    date: datetime
    loan_id: str
    client_id: str
    client_name: str
    installment_number: int
    amount: Decimal
    penalty_amount: Decimal
    remaining_balance: Decimal  # Loan balance after this payment
    installment_id: str | None = None
    due_amount: Decimal | None = None  # Scheduled payment of the installment
    collector_id: str | None = None

    @property
    def total(self) -> Decimal:
        """Cash collected: base amount plus penalty."""
        return self.amount + self.penalty_amount
