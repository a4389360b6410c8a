"""Decimal money helpers.

Every amount handled by the engine is a ``Decimal`` quantized to cents.
Floats are converted through ``str`` so binary representation errors never
leak into a schedule.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# One minor currency unit
ROUNDING_TOLERANCE = CENT


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Convert a value to a cent-quantized Decimal.

    Parameters
    ----------
    value : Decimal | int | float | str
        Amount to convert.

    Returns
    -------
    Decimal
        Amount rounded half-up to two decimal places.
    """
    if isinstance(value, float):
        value = str(value)
    return quantize(Decimal(value))


def quantize(value: Decimal) -> Decimal:
    """Round a Decimal half-up to cents."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def within_tolerance(a: Decimal, b: Decimal, tolerance: Decimal = ROUNDING_TOLERANCE) -> bool:
    """Return True when two amounts differ by at most ``tolerance``."""
    return abs(a - b) <= tolerance
