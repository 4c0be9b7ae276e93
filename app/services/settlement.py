"""Settlement — payout and invoice figures for a completed stint."""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Union

from dateutil.relativedelta import relativedelta

from app.services.fee import (
    DEFAULT_FEE_SCHEDULE,
    Amount,
    FeeBreakdown,
    FeeSchedule,
    Urgency,
    compute_breakdown,
    compute_professional_fee,
    estimate_mpesa_cost,
    to_amount,
)
from app.services.notice import as_utc

logger = logging.getLogger(__name__)

DISPUTE_WINDOW_HOURS = 24

# Payouts above the last tariff tier are charged the settlement ceiling
SETTLEMENT_MPESA_MAX_COST = Decimal("110")


class SettlementStatus(str, enum.Enum):
    PENDING = "pending"
    READY_FOR_SETTLEMENT = "ready_for_settlement"


@dataclass(frozen=True)
class Payout:
    professional_amount: Decimal  # net, after platform fee and transfer cost
    gross_amount: Decimal
    platform_fee_percent: Decimal
    platform_fee_amount: Decimal
    mpesa_cost: Decimal
    currency: str
    payout_method: str = "mpesa"


@dataclass(frozen=True)
class Invoice:
    fee_type: str
    amount: Decimal
    fee_percent: Decimal
    stint_amount: Decimal
    total_charge: Decimal
    currency: str


@dataclass(frozen=True)
class Settlement:
    stint_id: str
    breakdown: FeeBreakdown
    payout: Payout
    invoice: Invoice
    status: SettlementStatus


def calculate_settlement(
    stint_id: str,
    offered_rate: Amount,
    urgency: Union[str, Urgency],
    schedule: FeeSchedule = DEFAULT_FEE_SCHEDULE,
    currency: str = "KSh",
    status: SettlementStatus = SettlementStatus.PENDING,
) -> Settlement:
    """Build the payout (to the professional) and the booking-fee invoice (to the employer).

    The transfer cost is the tiered M-Pesa estimate for the amount actually sent,
    i.e. the offered rate minus the platform fee.
    """
    rate = to_amount(offered_rate, "offered_rate")
    platform_fee = compute_professional_fee(rate, schedule)
    transfer_cost = estimate_mpesa_cost(
        max(rate - platform_fee.amount, Decimal("0")), max_cost=SETTLEMENT_MPESA_MAX_COST
    )
    breakdown = compute_breakdown(rate, urgency, schedule, transfer_cost=transfer_cost)

    payout = Payout(
        professional_amount=breakdown.pro_net_payout,
        gross_amount=breakdown.pro_gross_amount,
        platform_fee_percent=breakdown.pro_platform_fee.percent,
        platform_fee_amount=breakdown.pro_platform_fee.amount,
        mpesa_cost=breakdown.pro_mpesa_cost,
        currency=currency,
    )
    invoice = Invoice(
        fee_type="booking_fee",
        amount=breakdown.clinic_booking_fee.amount,
        fee_percent=breakdown.clinic_booking_fee.percent,
        stint_amount=breakdown.offered_rate,
        total_charge=breakdown.clinic_total_cost,
        currency=currency,
    )
    logger.info(
        f"Settlement for stint {stint_id}: payout={payout.professional_amount} "
        f"invoice={invoice.total_charge} revenue={breakdown.platform_revenue} {currency}"
    )
    return Settlement(stint_id=stint_id, breakdown=breakdown, payout=payout, invoice=invoice, status=status)


def dispute_window_end(completed_at: datetime, window_hours: int = DISPUTE_WINDOW_HOURS) -> datetime:
    return as_utc(completed_at) + relativedelta(hours=window_hours)


def is_ready_for_settlement(
    completed_at: datetime,
    now: datetime,
    window_hours: int = DISPUTE_WINDOW_HOURS,
) -> bool:
    """A completed stint can be settled once its dispute window has passed."""
    return as_utc(now) >= dispute_window_end(completed_at, window_hours)
