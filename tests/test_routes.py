"""Tests for route stop selection and reconciliation."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from microlending.config import RouteConfig
from microlending.engine import (
    PaymentProcessor,
    RouteReconciler,
    receipts_for,
    route_total,
    same_day_closings,
    select_route_stops,
)
from microlending.engine.routes import UNASSIGNED
from microlending.exceptions import CollectorMismatchError, EngineError
from microlending.generators import ScheduleGenerator
from microlending.models import Client, Frequency, Loan, Receipt

DAY = date(2024, 3, 4)


def make_receipt(
    receipt_id: str,
    amount: str,
    penalty: str = "0",
    collector_id: str | None = "col-001",
    loan_id: str = "loan-1",
    when: datetime = datetime(2024, 3, 4, 9, 0),
) -> Receipt:
    return Receipt(
        receipt_id=receipt_id,
        date=when,
        loan_id=loan_id,
        client_id="client-1",
        client_name="Cliente",
        installment_number=1,
        amount=Decimal(amount),
        penalty_amount=Decimal(penalty),
        remaining_balance=Decimal("0"),
        collector_id=collector_id,
    )


@pytest.fixture
def reconciler(seed: int) -> RouteReconciler:
    return RouteReconciler(seed=seed, clock=lambda: datetime(2024, 3, 4, 18, 0))


@pytest.fixture
def day_receipts() -> list[Receipt]:
    """Three receipts for col-001 totalling 1390.50."""
    return [
        make_receipt("r1", "500"),
        make_receipt("r2", "750.50"),
        make_receipt("r3", "120", penalty="20"),
    ]


class TestCloseRoute:
    """Tests for route closings."""

    def test_totals(self, reconciler: RouteReconciler, day_receipts: list[Receipt]) -> None:
        """Closing totals include penalties."""
        closing = reconciler.close_route("col-001", DAY, day_receipts)

        assert closing.total_amount == Decimal("1390.50")
        assert closing.receipts_count == 3
        assert closing.collector_id == "col-001"
        assert closing.date == DAY
        assert closing.created_at == datetime(2024, 3, 4, 18, 0)

    def test_empty_route(self, reconciler: RouteReconciler) -> None:
        closing = reconciler.close_route("col-001", DAY, [], notes="sin cobros")

        assert closing.total_amount == Decimal("0")
        assert closing.receipts_count == 0
        assert closing.notes == "sin cobros"

    def test_same_day_closings_are_independent(self, reconciler: RouteReconciler, day_receipts: list[Receipt]) -> None:
        """Closing twice yields two records; neither is merged into the other."""
        first = reconciler.close_route("col-001", DAY, day_receipts[:1])
        second = reconciler.close_route("col-001", DAY, day_receipts[1:])

        assert first.closing_id != second.closing_id
        assert first.total_amount == Decimal("500")
        assert second.total_amount == Decimal("890.50")
        assert same_day_closings([second, first], "col-001", DAY) == [first, second]

    def test_same_day_closings_filters(self, reconciler: RouteReconciler) -> None:
        mine = reconciler.close_route("col-001", DAY, [])
        other = reconciler.close_route("col-002", DAY, [])
        earlier = reconciler.close_route("col-001", date(2024, 3, 3), [])

        assert same_day_closings([mine, other, earlier], "col-001", DAY) == [mine]


class TestDrift:
    """Tests for drift against a prior closing."""

    def test_no_drift(self, reconciler: RouteReconciler, day_receipts: list[Receipt]) -> None:
        closing = reconciler.close_route("col-001", DAY, day_receipts)

        assert reconciler.compute_drift("col-001", closing, day_receipts) == Decimal("0")

    def test_under_closed(self, reconciler: RouteReconciler, day_receipts: list[Receipt]) -> None:
        """Receipts collected after the closing show as positive drift."""
        closing = reconciler.close_route("col-001", DAY, day_receipts[:2])

        assert reconciler.compute_drift("col-001", closing, day_receipts) == Decimal("140")

    def test_ignores_other_collectors_and_days(self, reconciler: RouteReconciler, day_receipts: list[Receipt]) -> None:
        closing = reconciler.close_route("col-001", DAY, day_receipts)
        noise = [
            make_receipt("x1", "99", collector_id="col-002"),
            make_receipt("x2", "99", when=datetime(2024, 3, 5, 9, 0)),
        ]

        assert reconciler.compute_drift("col-001", closing, day_receipts + noise) == Decimal("0")

    def test_collector_mismatch(self, reconciler: RouteReconciler, day_receipts: list[Receipt]) -> None:
        """Comparing a closing against another collector raises a typed engine error."""
        closing = reconciler.close_route("col-001", DAY, day_receipts)

        with pytest.raises(CollectorMismatchError) as exc_info:
            reconciler.compute_drift("col-002", closing, day_receipts)

        assert isinstance(exc_info.value, EngineError)
        assert exc_info.value.collector_id == "col-002"
        assert exc_info.value.closing_id == closing.closing_id

    def test_close_route_logs_collector_context(
        self, reconciler: RouteReconciler, day_receipts: list[Receipt], caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("DEBUG", logger="microlending.engine.routes"):
            closing = reconciler.close_route("col-001", DAY, day_receipts)

        (record,) = [r for r in caplog.records if r.name == "microlending.engine.routes"]
        assert record.extra["collector_id"] == "col-001"
        assert record.extra["closing_id"] == closing.closing_id
        assert record.extra["total"] == closing.total_amount


class TestSummaries:
    """Tests for per-collector summaries and daily totals."""

    def test_summarize_uses_latest_closing(self, day_receipts: list[Receipt]) -> None:
        times = iter([datetime(2024, 3, 4, 12, 0), datetime(2024, 3, 4, 18, 0)])
        reconciler = RouteReconciler(clock=lambda: next(times))
        first = reconciler.close_route("col-001", DAY, day_receipts[:1])
        latest = reconciler.close_route("col-001", DAY, day_receipts)
        closings = [latest, first]

        (summary,) = reconciler.summarize(day_receipts, closings, DAY)

        assert summary.collector_id == "col-001"
        assert summary.total_amount == Decimal("1390.50")
        assert summary.receipts_count == 3
        assert summary.last_closing == latest
        assert summary.closing_amount == Decimal("1390.50")
        assert summary.drift == Decimal("0")
        assert not reconciler.has_discrepancies([summary])

    def test_summarize_without_closing(self, reconciler: RouteReconciler, day_receipts: list[Receipt]) -> None:
        (summary,) = reconciler.summarize(day_receipts, [], DAY)

        assert summary.last_closing is None
        assert summary.closing_amount == Decimal("0")
        assert summary.drift == Decimal("1390.50")
        assert reconciler.has_discrepancies([summary])

    def test_summarize_unassigned_and_archived(self, reconciler: RouteReconciler) -> None:
        receipts = [
            make_receipt("r1", "100", collector_id=None),
            make_receipt("r2", "200", loan_id="loan-archived"),
        ]

        summaries = reconciler.summarize(receipts, [], DAY, archived_loan_ids=["loan-archived"])

        assert [s.collector_id for s in summaries] == [UNASSIGNED]
        assert summaries[0].total_amount == Decimal("100")

    def test_tolerance(self, day_receipts: list[Receipt]) -> None:
        reconciler = RouteReconciler(RouteConfig(discrepancy_tolerance=Decimal("1.00")))
        closing = reconciler.close_route("col-001", DAY, day_receipts)
        short = [*day_receipts, make_receipt("r4", "0.50")]

        summaries = reconciler.summarize(short, [closing], DAY)

        assert summaries[0].drift == Decimal("0.50")
        assert not reconciler.has_discrepancies(summaries)

    def test_daily_totals(self, day_receipts: list[Receipt]) -> None:
        receipts = [
            *day_receipts,
            make_receipt("old", "300", when=datetime(2024, 3, 1, 9, 0)),
            make_receipt("arch", "400", loan_id="loan-archived"),
        ]

        totals = RouteReconciler.daily_totals(receipts, DAY, archived_loan_ids={"loan-archived"})

        assert totals.base_amount == Decimal("1370.50")
        assert totals.penalty_amount == Decimal("20")
        assert totals.total_amount == Decimal("1390.50")
        assert totals.receipts_count == 3

    def test_receipts_for(self, day_receipts: list[Receipt]) -> None:
        other = make_receipt("r9", "10", collector_id="col-002")

        assert receipts_for([*day_receipts, other], "col-002", DAY) == [other]


class TestRouteStops:
    """Tests for route stop selection."""

    @pytest.fixture
    def route_clients(self) -> dict[str, Client]:
        return {
            "c-b": Client("c-b", "Beatriz", "calle B 2", collector_id="col-001"),
            "c-a": Client("c-a", "Ana", "Calle A 1", collector_id="col-001"),
            "c-z": Client("c-z", "Zoe", "Avenida Z", collector_id="col-002"),
        }

    @pytest.fixture
    def route_loans(self, seed: int) -> list[Loan]:
        generator = ScheduleGenerator(seed=seed)
        return [
            generator.create_loan(
                client_id=client_id,
                principal=Decimal("1000"),
                rate=Decimal("20"),
                term=4,
                frequency=Frequency.WEEKLY,
                start_date=start,
                loan_id=f"loan-{client_id}",
            )
            for client_id, start in (
                ("c-b", date(2024, 2, 26)),  # first due 2024-03-04
                ("c-a", date(2024, 2, 20)),  # first due 2024-02-27
                ("c-z", date(2024, 3, 1)),  # first due 2024-03-08
            )
        ]

    def test_due_only(self, route_loans: list[Loan], route_clients: dict[str, Client]) -> None:
        """Default policy skips installments due after today and sorts by address."""
        stops = select_route_stops(route_loans, route_clients, DAY)

        assert [s.client_id for s in stops] == ["c-a", "c-b"]
        assert all(s.installment_number == 1 for s in stops)
        assert route_total(stops) == sum((s.amount_due for s in stops), Decimal("0"))

    def test_include_future(self, route_loans: list[Loan], route_clients: dict[str, Client]) -> None:
        stops = select_route_stops(route_loans, route_clients, DAY, include_future=True)

        assert [s.client_id for s in stops] == ["c-z", "c-a", "c-b"]

    def test_by_collector(self, route_loans: list[Loan], route_clients: dict[str, Client]) -> None:
        stops = select_route_stops(route_loans, route_clients, DAY, include_future=True, collector_id="col-002")

        assert [s.client_id for s in stops] == ["c-z"]
        assert stops[0].client_address == "Avenida Z"

    def test_skips_archived_and_missing_clients(
        self, route_loans: list[Loan], route_clients: dict[str, Client]
    ) -> None:
        route_loans[0].archived = True
        del route_clients["c-a"]

        assert select_route_stops(route_loans, route_clients, DAY, include_future=True)[0].client_id == "c-z"
        assert len(select_route_stops(route_loans, route_clients, DAY, include_future=True)) == 1

    def test_next_unpaid_installment(
        self, route_loans: list[Loan], route_clients: dict[str, Client], seed: int
    ) -> None:
        """A paid installment moves the stop to the following one."""
        processor = PaymentProcessor(route_clients.get, seed=seed)
        loan = route_loans[1]
        processor.apply_payment(loan, loan.schedule[0].installment_id, loan.schedule[0].payment)

        assert select_route_stops([loan], route_clients, DAY) == []
        stops = select_route_stops([loan], route_clients, DAY, include_future=True)

        assert stops[0].installment_number == 2
        assert stops[0].due_date == date(2024, 3, 5)

    def test_reconciler_policy(self, route_loans: list[Loan], route_clients: dict[str, Client]) -> None:
        reconciler = RouteReconciler(RouteConfig(include_future_installments=True))

        assert len(reconciler.stops(route_loans, route_clients, DAY, collector_id="col-001")) == 2
