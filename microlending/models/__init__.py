"""Domain models for the lending engine."""

from microlending.models.base import Event
from microlending.models.client import Client, Collector
from microlending.models.enums import (
    AmortizationSystem,
    Frequency,
    InstallmentStatus,
    LoanStatus,
)
from microlending.models.loan import Installment, Loan
from microlending.models.receipt import Receipt
from microlending.models.route import (
    CollectorSummary,
    DailyTotals,
    RouteClosing,
    RouteStop,
)

__all__ = [
    "AmortizationSystem",
    "Client",
    "Collector",
    "CollectorSummary",
    "DailyTotals",
    "Event",
    "Frequency",
    "Installment",
    "InstallmentStatus",
    "Loan",
    "LoanStatus",
    "Receipt",
    "RouteClosing",
    "RouteStop",
]
