"""Collection day scenario: a portfolio, one day of field collection, closings."""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

from microlending.config import EngineConfig
from microlending.engine import (
    PaymentProcessor,
    ReceiptFactory,
    RouteReconciler,
    compute_penalty,
    route_total,
)
from microlending.events import EventFactory
from microlending.generators import ClientGenerator, CollectorGenerator, ScheduleGenerator
from microlending.models.enums import Frequency, LoanStatus
from microlending.store.book import LoanBook

logger = logging.getLogger(__name__)


class CollectionDayScenario:
    """Simulate a micro-lending portfolio through one collection day.

    This scenario creates:
    - Collectors and the clients on their routes
    - One loan per client with a generated schedule
    - Payment history for installments due before the collection day
    - The day's route for each collector, collections (with penalties for
      late installments) and one route closing per collector
    """

    # Terms offered per frequency
    TERMS = {
        Frequency.DAILY: [20, 30, 45, 60],
        Frequency.WEEKLY: [8, 12, 16, 24],
        Frequency.BIWEEKLY: [6, 8, 12],
        Frequency.MONTHLY: [3, 6, 12, 18],
    }
    FREQUENCY_WEIGHTS = [0.35, 0.30, 0.15, 0.20]
    ANNUAL_RATES = [Decimal("10"), Decimal("12"), Decimal("18"), Decimal("24"), Decimal("36")]

    def __init__(
        self,
        num_clients: int = 50,
        num_collectors: int = 3,
        collection_date: date | None = None,
        history_paid_rate: float = 0.85,
        collect_rate: float = 0.75,
        seed: int | None = None,
        *,
        config: EngineConfig | None = None,
    ) -> None:
        """Initialize collection day scenario.

        Parameters
        ----------
        num_clients : int
            Number of clients (one loan each).
        num_collectors : int
            Number of collectors; clients are spread evenly across them.
        collection_date : date | None
            Day being simulated (default: today).
        history_paid_rate : float
            Probability a past-due installment was already paid.
        collect_rate : float
            Probability a route stop pays on the collection day.
        seed : int | None
            Random seed for reproducibility.
        config : EngineConfig | None
            Penalty and route policy; defaults are used if omitted.
        """
        self.num_clients = num_clients
        self.num_collectors = num_collectors
        self.collection_date = collection_date or date.today()
        self.history_paid_rate = history_paid_rate
        self.collect_rate = collect_rate
        self.seed = seed
        self.config = config or EngineConfig()

        self.book = LoanBook()
        self.events: list[Any] = []
        self._now = datetime.combine(self.collection_date, time(9, 0))
        # Each id-issuing component gets its own seed so that ids of
        # different entity types never repeat one another
        self._collector_gen = CollectorGenerator(seed=self._derive_seed(0))
        self._client_gen = ClientGenerator(seed=self._derive_seed(1))
        self._schedule_gen = ScheduleGenerator(seed=self._derive_seed(2))
        self._processor = PaymentProcessor(
            self.book.get_client, seed=self._derive_seed(3), clock=lambda: self._now
        )
        self._reconciler = RouteReconciler(self.config.route, seed=self._derive_seed(4), clock=lambda: self._now)
        self._event_factory = EventFactory(seed=self._derive_seed(5))

        # Generators reseed the module RNG; the scenario draws from its own seed
        if seed is not None:
            random.seed(seed)

    def _derive_seed(self, offset: int) -> int | None:
        return None if self.seed is None else self.seed + offset

    def generate(self) -> LoanBook:
        """Generate all data for the collection day.

        Returns
        -------
        LoanBook
            Book containing clients, loans, receipts and closings.
        """
        logger.info(
            "Starting collection day scenario: %d clients, %d collectors, day=%s",
            self.num_clients,
            self.num_collectors,
            self.collection_date.isoformat(),
        )

        for _ in range(self.num_collectors):
            self.book.add_collector(self._collector_gen.generate())
        collector_ids = list(self.book.collectors)

        for client in self._client_gen.generate_batch(self.num_clients, collector_ids):
            self.book.add_client(client)
            self.book.add_loan(self._generate_loan(client.client_id))

        self._apply_history()
        logger.info(
            "Generated %d loans with %d historical receipts",
            len(self.book.loans),
            len(self.book.receipts),
        )

        for collector_id in collector_ids:
            self._collect_route(collector_id)
            self._close_route(collector_id)

        logger.info("Collection day complete: %s", self.book.summary())
        return self.book

    def _generate_loan(self, client_id: str):
        frequency = random.choices(list(self.TERMS), weights=self.FREQUENCY_WEIGHTS)[0]
        term = random.choice(self.TERMS[frequency])
        principal = Decimal(random.randint(10, 100) * 500)
        # Start far enough back that part of the schedule is already due
        span = frequency.days_per_period * term
        start_date = self.collection_date - timedelta(days=random.randint(1, span))
        return self._schedule_gen.create_loan(
            client_id=client_id,
            principal=principal,
            rate=random.choice(self.ANNUAL_RATES),
            term=term,
            frequency=frequency,
            start_date=start_date,
            created_at=datetime.combine(start_date, time(10, 0)),
        )

    def _apply_history(self) -> None:
        """Pay installments due before the collection day, mostly on time."""
        for loan in self.book.loans.values():
            for installment in loan.schedule:
                if installment.due_date >= self.collection_date:
                    break
                if random.random() > self.history_paid_rate:
                    continue
                self._now = datetime.combine(installment.due_date, time(11, 0))
                receipt = self._processor.apply_payment(loan, installment.installment_id, installment.payment)
                self.book.add_receipt(receipt)
        self._now = datetime.combine(self.collection_date, time(9, 0))

    def _collect_route(self, collector_id: str) -> None:
        """Visit the collector's stops and record payments."""
        stops = self._reconciler.stops(
            self.book.loans.values(),
            self.book.clients,
            self.collection_date,
            collector_id=collector_id,
        )
        logger.info(
            "Collector %s route: %d stops, %s due",
            collector_id,
            len(stops),
            route_total(stops),
        )

        for i, stop in enumerate(stops):
            if random.random() > self.collect_rate:
                continue
            self._now = datetime.combine(self.collection_date, time(9, 0)) + timedelta(minutes=15 * i)
            loan = self.book.get_loan(stop.loan_id)
            installment = loan.installment(stop.installment_id)
            # Penalties collected earlier count against the balance, so the
            # final installments may be owed less than scheduled
            owed = loan.remaining_balance
            if owed <= 0:
                continue
            amount = min(stop.amount_due, owed)
            penalty = min(compute_penalty(installment, self.collection_date, self.config.penalty), owed - amount)
            receipt = self._processor.apply_payment(loan, stop.installment_id, amount, penalty)
            self.book.add_receipt(receipt)
            self.events.append(self._event_factory.receipt_created(receipt))

    def _close_route(self, collector_id: str) -> None:
        """Close the collector's route for the day."""
        if self.book.get_closings(collector_id, self.collection_date):
            logger.warning(
                "Collector %s already has a closing on %s; recording another",
                collector_id,
                self.collection_date.isoformat(),
            )
        self._now = datetime.combine(self.collection_date, time(18, 0))
        receipts = self.book.get_collector_receipts(collector_id, self.collection_date)
        closing = self._reconciler.close_route(collector_id, self.collection_date, receipts)
        self.book.add_closing(closing)
        self.events.append(self._event_factory.route_closing_created(closing))

    def export(self, sinks: list[Any]) -> None:
        """Export generated data to sinks.

        Parameters
        ----------
        sinks : list[Any]
            List of sink instances (JsonFileSink, KafkaSink).
        """
        loans = [ReceiptFactory.loan_record(loan) for loan in self.book.loans.values()]
        receipts = [ReceiptFactory.to_record(r) for r in self.book.receipts]
        for sink in sinks:
            sink.write_batch("collectors", list(self.book.collectors.values()))
            sink.write_batch("clients", list(self.book.clients.values()))
            sink.write_batch("loans", loans)
            sink.write_batch("receipts", receipts)
            sink.write_batch("route_closings", self.book.closings)
            sink.write_batch("events", self.events)

        logger.info("Exported collection day to %d sinks", len(sinks))

    def get_summary(self) -> dict[str, Any]:
        """Get summary statistics for the collection day.

        Returns
        -------
        dict[str, Any]
            Day totals, discrepancy flag and loan status distribution.
        """
        archived = self.book.archived_loan_ids()
        totals = self._reconciler.daily_totals(self.book.receipts, self.collection_date, archived)
        summaries = self._reconciler.summarize(
            self.book.receipts, self.book.closings, self.collection_date, archived
        )

        status_counts: dict[str, int] = {}
        for loan in self.book.loans.values():
            status_counts[loan.status.value] = status_counts.get(loan.status.value, 0) + 1

        return {
            "collection_date": self.collection_date.isoformat(),
            "total_collected": str(totals.total_amount),
            "base_collected": str(totals.base_amount),
            "penalties_collected": str(totals.penalty_amount),
            "receipts_today": totals.receipts_count,
            "closings": len(self.book.closings),
            "has_discrepancies": self._reconciler.has_discrepancies(summaries),
            "loan_status_distribution": status_counts,
            "paid_loans": status_counts.get(LoanStatus.PAID.value, 0),
        }
