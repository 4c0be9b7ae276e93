from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.config import Settings
from app.dependencies import get_fee_schedule, get_settings
from app.schemas.fees import (
    BreakdownRequest,
    BreakdownResponse,
    CancellationRequest,
    CancellationResponse,
    FeeLineResponse,
    FeeScheduleResponse,
    MpesaCostResponse,
    PermanentHireRequest,
    PermanentHireResponse,
)
from app.services.cancellation import assess_cancellation
from app.services.fee import (
    FeeLine,
    FeeSchedule,
    Urgency,
    compute_breakdown,
    compute_cancellation_fee,
    compute_permanent_hire_fee,
    estimate_mpesa_cost,
    format_currency,
    rate_to_percent,
)
from app.services.notice import determine_urgency

router = APIRouter()


def _line(line: FeeLine) -> FeeLineResponse:
    return FeeLineResponse(percent=float(line.percent), amount=float(line.amount))


@router.get("/schedule", response_model=FeeScheduleResponse)
async def get_schedule(
    schedule: FeeSchedule = Depends(get_fee_schedule),
    config: Settings = Depends(get_settings),
):
    """Fee policy currently applied by every calculation endpoint."""
    return FeeScheduleResponse(
        currency=config.currency,
        normal_booking_rate=float(schedule.normal_booking_rate),
        urgent_booking_rate=float(schedule.urgent_booking_rate),
        professional_service_rate=float(schedule.professional_service_rate),
        late_cancellation_min_amount=float(schedule.late_cancellation_min_amount),
        late_cancellation_rate=float(schedule.late_cancellation_rate),
        permanent_hire_rate=float(schedule.permanent_hire_rate),
        fixed_transfer_cost=float(schedule.fixed_transfer_cost),
        normal_booking_percent=float(rate_to_percent(schedule.normal_booking_rate)),
        urgent_booking_percent=float(rate_to_percent(schedule.urgent_booking_rate)),
        professional_service_percent=float(rate_to_percent(schedule.professional_service_rate)),
    )


@router.post("/breakdown", response_model=BreakdownResponse)
async def get_breakdown(
    req: BreakdownRequest,
    schedule: FeeSchedule = Depends(get_fee_schedule),
    config: Settings = Depends(get_settings),
):
    """Clinic cost, professional payout and platform revenue for one stint."""
    if req.urgency is not None:
        urgency = req.urgency
    elif req.shift_start is not None:
        urgency = determine_urgency(req.shift_start, datetime.now(timezone.utc), config.urgent_notice_hours)
    else:
        urgency = Urgency.NORMAL

    b = compute_breakdown(req.offered_rate, urgency, schedule, transfer_cost=req.transfer_cost)

    money = {
        "offered_rate": b.offered_rate,
        "clinic_booking_fee": b.clinic_booking_fee.amount,
        "clinic_total_cost": b.clinic_total_cost,
        "pro_gross_amount": b.pro_gross_amount,
        "pro_platform_fee": b.pro_platform_fee.amount,
        "pro_mpesa_cost": b.pro_mpesa_cost,
        "pro_net_payout": b.pro_net_payout,
        "platform_revenue": b.platform_revenue,
    }
    return BreakdownResponse(
        offered_rate=float(b.offered_rate),
        urgency=b.urgency.value,
        currency=config.currency,
        clinic_booking_fee=_line(b.clinic_booking_fee),
        clinic_total_cost=float(b.clinic_total_cost),
        pro_gross_amount=float(b.pro_gross_amount),
        pro_platform_fee=_line(b.pro_platform_fee),
        pro_mpesa_cost=float(b.pro_mpesa_cost),
        pro_net_payout=float(b.pro_net_payout),
        platform_revenue=float(b.platform_revenue),
        formatted={k: format_currency(v, config.currency) for k, v in money.items()},
    )


@router.post("/cancellation", response_model=CancellationResponse)
async def get_cancellation_fee(
    req: CancellationRequest,
    schedule: FeeSchedule = Depends(get_fee_schedule),
    config: Settings = Depends(get_settings),
):
    """Late cancellation fee; free when cancelled early enough before the shift."""
    if req.hours_before_shift is None:
        fee = compute_cancellation_fee(req.offered_rate, schedule)
        return CancellationResponse(
            offered_rate=req.offered_rate,
            fee_applies=True,
            fee_amount=float(fee),
            reason="Late cancellation",
            currency=config.currency,
        )

    assessment = assess_cancellation(
        req.offered_rate, req.hours_before_shift, schedule, window_hours=config.cancellation_window_hours
    )
    return CancellationResponse(
        offered_rate=req.offered_rate,
        fee_applies=assessment.fee_applies,
        fee_amount=float(assessment.fee_amount),
        reason=assessment.reason,
        currency=config.currency,
    )


@router.post("/permanent-hire", response_model=PermanentHireResponse)
async def get_permanent_hire_fee(
    req: PermanentHireRequest,
    schedule: FeeSchedule = Depends(get_fee_schedule),
    config: Settings = Depends(get_settings),
):
    fee = compute_permanent_hire_fee(req.monthly_salary, schedule)
    return PermanentHireResponse(
        monthly_salary=req.monthly_salary,
        fee_percent=float(rate_to_percent(schedule.permanent_hire_rate)),
        fee_amount=float(fee),
        currency=config.currency,
    )


@router.get("/mpesa-cost", response_model=MpesaCostResponse)
async def get_mpesa_cost(amount: float):
    return MpesaCostResponse(amount=amount, mpesa_cost=float(estimate_mpesa_cost(amount)))
