"""Custom exception hierarchy for microlending."""


class LendingError(Exception):
    """Base exception for all microlending errors."""


class EngineError(LendingError):
    """Base for errors raised by engine operations.

    Carries the loan and installment the failure refers to so callers can
    render a useful message.
    """

    def __init__(
        self,
        message: str,
        *,
        loan_id: str | None = None,
        installment_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.loan_id = loan_id
        self.installment_id = installment_id


class InvalidTermError(EngineError):
    """Raised when loan terms are invalid (term < 1, non-positive amount, negative rate)."""


class InvalidAmountError(InvalidTermError):
    """Raised when a payment or penalty amount is out of range."""


class AlreadyPaidError(EngineError):
    """Raised when a payment targets an installment that is already PAID."""


class NotFoundError(EngineError):
    """Raised when a referenced loan, installment or client does not exist."""


class ClientMissingError(NotFoundError):
    """Raised when a loan's client cannot be resolved."""


class ReferentialIntegrityError(NotFoundError):
    """Raised when a foreign key reference is violated."""


class NegativeBalanceGuardError(EngineError):
    """Raised when a payment would drive a loan's balance below zero."""


class CollectorMismatchError(EngineError):
    """Raised when a route closing is compared against another collector's receipts."""

    def __init__(
        self,
        message: str,
        *,
        collector_id: str | None = None,
        closing_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.collector_id = collector_id
        self.closing_id = closing_id


class ConfigurationError(LendingError):
    """Raised when configuration is invalid or missing."""


class SinkError(LendingError):
    """Raised when a sink operation fails."""
