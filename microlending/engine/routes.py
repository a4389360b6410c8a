"""Route stop selection and collector reconciliation (cuadre)."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Callable

from microlending.config import RouteConfig
from microlending.exceptions import CollectorMismatchError
from microlending.generators.base import BaseGenerator
from microlending.logging import log_context
from microlending.models.client import Client
from microlending.models.loan import Loan
from microlending.models.receipt import Receipt
from microlending.models.route import CollectorSummary, DailyTotals, RouteClosing, RouteStop
from microlending.money import ZERO

logger = logging.getLogger(__name__)

UNASSIGNED = "UNASSIGNED"


def select_route_stops(
    loans: Iterable[Loan],
    clients: Mapping[str, Client],
    today: date,
    include_future: bool = False,
    collector_id: str | None = None,
) -> list[RouteStop]:
    """Select what a route should collect today.

    One stop per loan: its first unpaid installment. With
    ``include_future=False`` the installment must be due on or before
    ``today``. Loans that are archived, fully paid or whose client is
    unknown are skipped.

    Stops are ordered by client address, compared as lower-cased strings.
    This groups nearby clients only roughly; it is not route optimization.
    """
    stops = []
    for loan in loans:
        if loan.archived:
            continue
        client = clients.get(loan.client_id)
        if client is None:
            continue
        if collector_id is not None and client.collector_id != collector_id:
            continue

        installment = loan.next_due_installment
        if installment is None:
            continue
        if not include_future and installment.due_date > today:
            continue

        stops.append(
            RouteStop(
                loan_id=loan.loan_id,
                installment_id=installment.installment_id,
                installment_number=installment.number,
                due_date=installment.due_date,
                amount_due=installment.payment,
                client_id=client.client_id,
                client_name=client.name,
                client_address=client.address or "",
                client_phone=client.phone,
            )
        )

    return sorted(stops, key=lambda stop: stop.client_address.lower())


def route_total(stops: Iterable[RouteStop]) -> Decimal:
    """Sum of amounts due over a route."""
    return sum((stop.amount_due for stop in stops), ZERO)


def receipts_for(receipts: Iterable[Receipt], collector_id: str, day: date) -> list[Receipt]:
    """Receipts collected by ``collector_id`` on ``day``."""
    return [r for r in receipts if r.collector_id == collector_id and r.date.date() == day]


def same_day_closings(closings: Iterable[RouteClosing], collector_id: str, day: date) -> list[RouteClosing]:
    """Closings already recorded for a collector on a day, oldest first.

    Callers use this to warn before closing a route twice on the same day.
    """
    matches = [c for c in closings if c.collector_id == collector_id and c.date == day]
    return sorted(matches, key=lambda c: c.created_at)


class RouteReconciler(BaseGenerator):
    """Reconcile a collector's receipts into closing records.

    Closing and drift computation are pure with respect to their inputs;
    the only state is the id generator.
    """

    def __init__(
        self,
        config: RouteConfig | None = None,
        seed: int | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        super().__init__(seed)
        self.config = config or RouteConfig()
        self._clock = clock

    def stops(
        self,
        loans: Iterable[Loan],
        clients: Mapping[str, Client],
        today: date,
        collector_id: str | None = None,
    ) -> list[RouteStop]:
        """Route stops using the configured future-installment policy."""
        return select_route_stops(
            loans,
            clients,
            today,
            include_future=self.config.include_future_installments,
            collector_id=collector_id,
        )

    def close_route(
        self,
        collector_id: str,
        day: date,
        receipts: list[Receipt],
        notes: str | None = None,
    ) -> RouteClosing:
        """Create a closing over exactly the receipts given.

        A second closing for the same collector and day is a new, independent
        record; nothing is merged or overwritten.
        """
        total = sum((r.total for r in receipts), ZERO)
        closing = RouteClosing(
            closing_id=self.new_id(),
            collector_id=collector_id,
            date=day,
            total_amount=total,
            receipts_count=len(receipts),
            created_at=self._clock(),
            notes=notes,
        )
        logger.debug(
            "Closed route for collector %s on %s: total=%s receipts=%d",
            collector_id,
            day.isoformat(),
            total,
            len(receipts),
            extra=log_context(
                collector_id=collector_id,
                closing_id=closing.closing_id,
                day=day.isoformat(),
                total=total,
            ),
        )
        return closing

    @staticmethod
    def compute_drift(collector_id: str, prior_closing: RouteClosing, receipts: Iterable[Receipt]) -> Decimal:
        """Signed difference between collected receipts and a prior closing.

        Sums the collector's receipts on the closing's day and subtracts the
        closing total. Positive means more was collected than closed.
        """
        if prior_closing.collector_id != collector_id:
            raise CollectorMismatchError(
                f"Closing {prior_closing.closing_id} belongs to collector "
                f"{prior_closing.collector_id}, not {collector_id}",
                collector_id=collector_id,
                closing_id=prior_closing.closing_id,
            )
        collected = sum((r.total for r in receipts_for(receipts, collector_id, prior_closing.date)), ZERO)
        return collected - prior_closing.total_amount

    def summarize(
        self,
        receipts: Iterable[Receipt],
        closings: Iterable[RouteClosing],
        day: date,
        archived_loan_ids: Iterable[str] = (),
    ) -> list[CollectorSummary]:
        """Per-collector totals for a day against each collector's latest closing.

        Receipts of archived loans are excluded. Receipts without a collector
        are grouped under ``UNASSIGNED``.
        """
        archived = set(archived_loan_ids)
        closings = list(closings)
        totals: dict[str, list] = {}
        for receipt in receipts:
            if receipt.loan_id in archived or receipt.date.date() != day:
                continue
            entry = totals.setdefault(receipt.collector_id or UNASSIGNED, [ZERO, 0])
            entry[0] += receipt.total
            entry[1] += 1

        summaries = []
        for collector_id, (total, count) in totals.items():
            day_closings = same_day_closings(closings, collector_id, day)
            last_closing = day_closings[-1] if day_closings else None
            closing_amount = last_closing.total_amount if last_closing else ZERO
            summaries.append(
                CollectorSummary(
                    collector_id=collector_id,
                    total_amount=total,
                    receipts_count=count,
                    last_closing=last_closing,
                    drift=total - closing_amount,
                )
            )
        return summaries

    def has_discrepancies(self, summaries: Iterable[CollectorSummary]) -> bool:
        """True when any collector's drift exceeds the configured tolerance."""
        return any(abs(s.drift) > self.config.discrepancy_tolerance for s in summaries)

    @staticmethod
    def daily_totals(
        receipts: Iterable[Receipt],
        day: date,
        archived_loan_ids: Iterable[str] = (),
    ) -> DailyTotals:
        """Base, penalty and count of receipts collected on ``day``."""
        archived = set(archived_loan_ids)
        selected = [r for r in receipts if r.date.date() == day and r.loan_id not in archived]
        return DailyTotals(
            day=day,
            base_amount=sum((r.amount for r in selected), ZERO),
            penalty_amount=sum((r.penalty_amount for r in selected), ZERO),
            receipts_count=len(selected),
        )
