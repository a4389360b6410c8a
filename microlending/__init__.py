"""Loan amortization and payment reconciliation engine for micro-lending."""

__version__ = "0.1.0"
