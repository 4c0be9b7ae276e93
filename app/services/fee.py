"""Fee calculator — booking fees, platform fees and professional payouts per stint.

Every screen that shows money for a stint (post-stint form, find-stints list,
earnings, landing page) goes through this module so the figures never drift.

Rounding: each line item is rounded to a whole currency unit (half away from
zero) and totals are sums of the rounded line items, so a total always equals
the sum of the parts displayed next to it.
"""

import logging
from dataclasses import dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Optional, Union

logger = logging.getLogger(__name__)

Amount = Union[int, float, str, Decimal]

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# (upper bound inclusive, cost) — simplified M-Pesa B2C tariff
MPESA_COST_TIERS = [
    (Decimal("100"), Decimal("0")),
    (Decimal("500"), Decimal("7")),
    (Decimal("1000"), Decimal("13")),
    (Decimal("1500"), Decimal("23")),
    (Decimal("2500"), Decimal("33")),
    (Decimal("3500"), Decimal("53")),
    (Decimal("5000"), Decimal("57")),
    (Decimal("7500"), Decimal("78")),
    (Decimal("10000"), Decimal("90")),
    (Decimal("15000"), Decimal("100")),
    (Decimal("20000"), Decimal("105")),
    (Decimal("50000"), Decimal("108")),
]
MPESA_MAX_COST = Decimal("108")

# Largest amount accepted anywhere; keeps every line item well inside Decimal precision
MAX_AMOUNT = Decimal("1000000000000000")


class InvalidInputError(ValueError):
    """Raised for negative, non-finite, oversized or non-numeric amounts and unknown urgencies."""


class Urgency(str, Enum):
    NORMAL = "normal"  # 24h+ notice
    URGENT = "urgent"  # less than 24h notice


def to_amount(value: Amount, name: str = "amount", maximum: Decimal = MAX_AMOUNT) -> Decimal:
    """Convert a caller-supplied amount to Decimal, rejecting negative, non-finite and out-of-range values."""
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}")
    if amount < 0:
        raise InvalidInputError(f"{name} must not be negative, got {value!r}")
    if amount > maximum:
        raise InvalidInputError(f"{name} must not exceed {maximum:,}, got {value!r}")
    return amount


def parse_urgency(value: Union[str, Urgency]) -> Urgency:
    try:
        return Urgency(value)
    except ValueError:
        raise InvalidInputError(f"urgency must be 'normal' or 'urgent', got {value!r}")


def round_unit(amount: Decimal) -> Decimal:
    """Round to a whole currency unit; there is no sub-unit currency in this market."""
    return amount.quantize(ONE, rounding=ROUND_HALF_UP)


def rate_to_percent(rate: Decimal) -> Decimal:
    percent = rate * HUNDRED
    if percent == percent.to_integral_value():
        return percent.quantize(ONE)
    return percent.normalize()


@dataclass(frozen=True)
class FeeSchedule:
    """Platform fee policy. Rates are fractions (0.15 == 15%), amounts are whole currency units."""

    normal_booking_rate: Decimal = Decimal("0.15")
    urgent_booking_rate: Decimal = Decimal("0.20")
    professional_service_rate: Decimal = Decimal("0.05")
    late_cancellation_min_amount: Decimal = Decimal("1000")
    late_cancellation_rate: Decimal = Decimal("0.20")
    permanent_hire_rate: Decimal = Decimal("0.35")
    fixed_transfer_cost: Decimal = Decimal("50")

    def __post_init__(self):
        for f in fields(self):
            value = to_amount(getattr(self, f.name), f.name)
            if f.name.endswith("_rate") and value > ONE:
                raise InvalidInputError(f"{f.name} must be between 0 and 1, got {value}")
            object.__setattr__(self, f.name, value)

    @classmethod
    def from_settings(cls, settings) -> "FeeSchedule":
        return cls(**{f.name: getattr(settings, f.name) for f in fields(cls)})

    def booking_rate(self, urgency: Urgency) -> Decimal:
        if urgency == Urgency.URGENT:
            return self.urgent_booking_rate
        return self.normal_booking_rate


DEFAULT_FEE_SCHEDULE = FeeSchedule()


@dataclass(frozen=True)
class FeeLine:
    percent: Decimal  # whole-number percentage for display, e.g. 15
    amount: Decimal


@dataclass(frozen=True)
class FeeBreakdown:
    offered_rate: Decimal
    urgency: Urgency
    # Clinic side
    clinic_booking_fee: FeeLine
    clinic_total_cost: Decimal
    # Professional side
    pro_gross_amount: Decimal
    pro_platform_fee: FeeLine
    pro_mpesa_cost: Decimal
    pro_net_payout: Decimal
    # Platform take = booking fee + platform fee
    platform_revenue: Decimal


def compute_booking_fee(
    offered_rate: Amount,
    urgency: Union[str, Urgency],
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
) -> FeeLine:
    """Employer booking fee: 15% with 24h+ notice, 20% when urgent."""
    rate = to_amount(offered_rate, "offered_rate")
    fee_rate = schedule.booking_rate(parse_urgency(urgency))
    return FeeLine(percent=rate_to_percent(fee_rate), amount=round_unit(rate * fee_rate))


def compute_professional_fee(offered_rate: Amount, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> FeeLine:
    """Platform/service fee deducted from the professional's payout."""
    rate = to_amount(offered_rate, "offered_rate")
    fee_rate = schedule.professional_service_rate
    return FeeLine(percent=rate_to_percent(fee_rate), amount=round_unit(rate * fee_rate))


def compute_breakdown(
    offered_rate: Amount,
    urgency: Union[str, Urgency],
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    transfer_cost: Optional[Amount] = None,
) -> FeeBreakdown:
    """Full clinic/professional/platform breakdown for one stint.

    Args:
        offered_rate: Rate posted by the employer for the stint.
        urgency: "normal" or "urgent"; only affects the employer booking fee.
        schedule: Fee policy to apply.
        transfer_cost: Overrides ``schedule.fixed_transfer_cost`` (e.g. a tiered
            M-Pesa estimate). Either way the transfer cost never exceeds the
            amount actually transferred, so the net payout is never negative.

    Raises:
        InvalidInputError: offered_rate or transfer_cost is negative, NaN,
            infinite, above MAX_AMOUNT or not a number, or urgency is unknown.
    """
    rate = to_amount(offered_rate, "offered_rate")
    urgency = parse_urgency(urgency)

    booking_fee = compute_booking_fee(rate, urgency, schedule)
    platform_fee = compute_professional_fee(rate, schedule)

    if transfer_cost is None:
        cost = schedule.fixed_transfer_cost
    else:
        cost = to_amount(transfer_cost, "transfer_cost")
    transferable = max(rate - platform_fee.amount, ZERO)
    mpesa_cost = min(cost, transferable)

    breakdown = FeeBreakdown(
        offered_rate=rate,
        urgency=urgency,
        clinic_booking_fee=booking_fee,
        clinic_total_cost=rate + booking_fee.amount,
        pro_gross_amount=rate,
        pro_platform_fee=platform_fee,
        pro_mpesa_cost=mpesa_cost,
        pro_net_payout=rate - platform_fee.amount - mpesa_cost,
        platform_revenue=booking_fee.amount + platform_fee.amount,
    )
    logger.debug(
        f"Fee breakdown: rate={rate} urgency={urgency.value} "
        f"booking={booking_fee.amount} platform={platform_fee.amount} net={breakdown.pro_net_payout}"
    )
    return breakdown


def compute_cancellation_fee(offered_rate: Amount, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> Decimal:
    """Late cancellation fee: the higher of the minimum amount and a share of the offered rate."""
    rate = to_amount(offered_rate, "offered_rate")
    percent_amount = round_unit(rate * schedule.late_cancellation_rate)
    return max(schedule.late_cancellation_min_amount, percent_amount)


def compute_permanent_hire_fee(monthly_salary: Amount, schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE) -> Decimal:
    """Success fee for a permanent hire: a share of the first month's salary."""
    salary = to_amount(monthly_salary, "monthly_salary")
    return round_unit(salary * schedule.permanent_hire_rate)


def estimate_mpesa_cost(amount: Amount, max_cost: Decimal = MPESA_MAX_COST) -> Decimal:
    """Estimate the M-Pesa transfer cost for sending ``amount``. Real costs vary by tier.

    ``max_cost`` is charged above the last tier.
    """
    value = to_amount(amount, "amount")
    for upper, cost in MPESA_COST_TIERS:
        if value <= upper:
            return cost
    return max_cost


def format_currency(amount: Amount, currency: str = "KSh") -> str:
    # totals (rate + booking fee) can reach twice the largest accepted rate
    return f"{currency} {round_unit(to_amount(amount, maximum=2 * MAX_AMOUNT)):,}"
