"""Late cancellation policy for employers."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from app.services.fee import (
    DEFAULT_FEE_SCHEDULE,
    ZERO,
    Amount,
    FeeSchedule,
    InvalidInputError,
    compute_cancellation_fee,
    to_amount,
)

logger = logging.getLogger(__name__)

CANCELLATION_WINDOW_HOURS = 12


@dataclass(frozen=True)
class CancellationAssessment:
    fee_applies: bool
    fee_amount: Decimal
    reason: str


def assess_cancellation(
    offered_rate: Amount,
    hours_before_shift: float,
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    window_hours: int = CANCELLATION_WINDOW_HOURS,
) -> CancellationAssessment:
    """Decide whether cancelling ``hours_before_shift`` ahead of the shift incurs a fee.

    Cancelling at least ``window_hours`` before the shift is free. Anything later,
    including after the shift has started (negative hours), is a late cancellation.
    """
    rate = to_amount(offered_rate, "offered_rate")
    try:
        hours = float(hours_before_shift)
    except (TypeError, ValueError):
        raise InvalidInputError(f"hours_before_shift must be a number, got {hours_before_shift!r}")
    if hours != hours:
        raise InvalidInputError("hours_before_shift must not be NaN")

    if hours >= window_hours:
        return CancellationAssessment(
            fee_applies=False,
            fee_amount=ZERO,
            reason="Cancelled within allowed window",
        )

    fee = compute_cancellation_fee(rate, schedule)
    logger.debug(f"Late cancellation: rate={rate} hours_before_shift={hours} fee={fee}")
    return CancellationAssessment(
        fee_applies=True,
        fee_amount=fee,
        reason=f"Cancelled less than {window_hours} hours before shift",
    )
