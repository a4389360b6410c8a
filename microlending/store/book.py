"""In-memory loan book with referential integrity."""

from dataclasses import dataclass, field
from datetime import date

from microlending.engine.routes import receipts_for, same_day_closings
from microlending.exceptions import ReferentialIntegrityError
from microlending.models.client import Client, Collector
from microlending.models.loan import Loan
from microlending.models.receipt import Receipt
from microlending.models.route import RouteClosing
from microlending.money import ZERO


@dataclass
class LoanBook:
    """In-memory store for lending entities with relationship tracking.

    Stands in for the persistence layer: entities are loaded from here,
    passed to the engine, and the records it returns are added back.
    Receipts and closings are append-only.
    """

    clients: dict[str, Client] = field(default_factory=dict)
    collectors: dict[str, Collector] = field(default_factory=dict)
    loans: dict[str, Loan] = field(default_factory=dict)

    receipts: list[Receipt] = field(default_factory=list)
    closings: list[RouteClosing] = field(default_factory=list)

    # Relationship indexes
    _client_loans: dict[str, list[str]] = field(default_factory=dict)
    _loan_receipts: dict[str, list[int]] = field(default_factory=dict)

    def add_collector(self, collector: Collector) -> None:
        """Add a collector to the book."""
        self.collectors[collector.collector_id] = collector

    def add_client(self, client: Client) -> None:
        """Add a client to the book."""
        if client.collector_id and client.collector_id not in self.collectors:
            raise ReferentialIntegrityError(f"Collector {client.collector_id} not found")

        self.clients[client.client_id] = client
        self._client_loans.setdefault(client.client_id, [])

    def add_loan(self, loan: Loan) -> None:
        """Add a loan to the book."""
        if loan.client_id not in self.clients:
            raise ReferentialIntegrityError(f"Client {loan.client_id} not found", loan_id=loan.loan_id)

        self.loans[loan.loan_id] = loan
        self._client_loans[loan.client_id].append(loan.loan_id)
        self._loan_receipts[loan.loan_id] = []

    def add_receipt(self, receipt: Receipt) -> None:
        """Record a receipt returned by the payment processor."""
        if receipt.loan_id not in self.loans:
            raise ReferentialIntegrityError(f"Loan {receipt.loan_id} not found", loan_id=receipt.loan_id)

        idx = len(self.receipts)
        self.receipts.append(receipt)
        self._loan_receipts[receipt.loan_id].append(idx)

    def add_closing(self, closing: RouteClosing) -> None:
        """Record a route closing."""
        if closing.collector_id not in self.collectors:
            raise ReferentialIntegrityError(f"Collector {closing.collector_id} not found")
        self.closings.append(closing)

    def archive_loan(self, loan_id: str) -> None:
        """Archive a loan; loans are never deleted."""
        self.get_loan(loan_id).archived = True

    # Query methods
    def get_client(self, client_id: str) -> Client | None:
        """Client lookup, suitable as a ``PaymentProcessor`` client lookup."""
        return self.clients.get(client_id)

    def get_loan(self, loan_id: str) -> Loan:
        """Get a loan by id."""
        try:
            return self.loans[loan_id]
        except KeyError:
            raise ReferentialIntegrityError(f"Loan {loan_id} not found", loan_id=loan_id) from None

    def get_client_loans(self, client_id: str) -> list[Loan]:
        """Get all loans for a client."""
        return [self.loans[lid] for lid in self._client_loans.get(client_id, [])]

    def get_loan_receipts(self, loan_id: str) -> list[Receipt]:
        """Get all receipts for a loan."""
        return [self.receipts[i] for i in self._loan_receipts.get(loan_id, [])]

    def get_collector_receipts(self, collector_id: str, day: date) -> list[Receipt]:
        """Receipts a collector took on a day."""
        return receipts_for(self.receipts, collector_id, day)

    def get_closings(self, collector_id: str, day: date) -> list[RouteClosing]:
        """Closings for a collector on a day, oldest first."""
        return same_day_closings(self.closings, collector_id, day)

    def archived_loan_ids(self) -> set[str]:
        """Ids of archived loans."""
        return {loan_id for loan_id, loan in self.loans.items() if loan.archived}

    def loan_is_consistent(self, loan_id: str) -> bool:
        """Check that a loan's paid total matches its receipts."""
        loan = self.get_loan(loan_id)
        collected = sum((r.total for r in self.get_loan_receipts(loan_id)), ZERO)
        return loan.total_paid == collected

    def summary(self) -> dict[str, int]:
        """Return summary counts of all entities."""
        return {
            "clients": len(self.clients),
            "collectors": len(self.collectors),
            "loans": len(self.loans),
            "receipts": len(self.receipts),
            "closings": len(self.closings),
        }
