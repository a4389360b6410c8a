"""Amortization, payment and reconciliation engine."""

from microlending.engine.payments import PaymentProcessor
from microlending.engine.penalty import compute_penalty
from microlending.engine.receipts import ReceiptFactory
from microlending.engine.routes import (
    RouteReconciler,
    receipts_for,
    route_total,
    same_day_closings,
    select_route_stops,
)
from microlending.engine.state import LoanStateMachine

__all__ = [
    "LoanStateMachine",
    "PaymentProcessor",
    "ReceiptFactory",
    "RouteReconciler",
    "compute_penalty",
    "receipts_for",
    "route_total",
    "same_day_closings",
    "select_route_stops",
]
