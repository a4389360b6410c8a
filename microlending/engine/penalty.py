"""Late-payment penalty (mora) calculation.

Penalties are a policy decision made outside the payment processor: the
caller computes one here and passes it to ``PaymentProcessor.apply_payment``.
"""

from datetime import date
from decimal import Decimal

from microlending.config import PenaltyConfig
from microlending.models.loan import Installment
from microlending.money import ZERO, quantize


def compute_penalty(installment: Installment, on_date: date, policy: PenaltyConfig) -> Decimal:
    """Compute the penalty owed on an installment collected on ``on_date``.

    Parameters
    ----------
    installment : Installment
        Installment being collected.
    on_date : date
        Collection date.
    policy : PenaltyConfig
        Penalty policy.

    Returns
    -------
    Decimal
        Penalty amount, zero when the installment is paid, not late beyond
        the grace period, or the policy is ``none``.
    """
    if policy.mode == "none" or installment.is_paid:
        return ZERO

    days_late = installment.days_late(on_date) - policy.grace_days
    if days_late <= 0:
        return ZERO

    if policy.mode == "percent":
        return quantize(installment.payment * policy.rate / 100)
    return quantize(policy.daily_amount * days_late)
