"""Enumeration types for lending entities."""

from enum import Enum


class Frequency(str, Enum):
    """Payment frequency.

    Periods per year drive the period rate; days per period drive due
    dates. Days per period is a calendar approximation (a "month" is
    always 30 days).
    """

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]

    @property
    def days_per_period(self) -> int:
        return _DAYS_PER_PERIOD[self]

    @classmethod
    def parse(cls, value: "str | Frequency") -> "Frequency":
        """Parse a frequency from its name or its Spanish label."""
        if isinstance(value, cls):
            return value
        key = str(value).strip()
        if key.upper() in cls.__members__:
            return cls[key.upper()]
        try:
            return _LABELS[key.lower()]
        except KeyError:
            raise ValueError(f"Unknown payment frequency: {value!r}") from None


_PERIODS_PER_YEAR = {
    Frequency.DAILY: 365,
    Frequency.WEEKLY: 52,
    Frequency.BIWEEKLY: 24,
    Frequency.MONTHLY: 12,
}

_DAYS_PER_PERIOD = {
    Frequency.DAILY: 1,
    Frequency.WEEKLY: 7,
    Frequency.BIWEEKLY: 15,
    Frequency.MONTHLY: 30,
}

_LABELS = {
    "diario": Frequency.DAILY,
    "semanal": Frequency.WEEKLY,
    "quincenal": Frequency.BIWEEKLY,
    "mensual": Frequency.MONTHLY,
}


class AmortizationSystem(str, Enum):
    FRENCH = "FRENCH"  # Level payment (annuity)
    FLAT = "FLAT"  # Simple interest on the original principal
    FIXED_PROFIT = "FIXED_PROFIT"  # Rate field holds an absolute profit amount
    FIXED_PAYMENT = "FIXED_PAYMENT"  # Rate field holds the per-period payment
    INTEREST_ONLY = "INTEREST_ONLY"  # Principal returned on the last installment


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    PAID = "PAID"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
