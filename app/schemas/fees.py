from datetime import datetime

from pydantic import BaseModel


class FeeLineResponse(BaseModel):
    percent: float
    amount: float


class FeeScheduleResponse(BaseModel):
    currency: str
    normal_booking_rate: float
    urgent_booking_rate: float
    professional_service_rate: float
    late_cancellation_min_amount: float
    late_cancellation_rate: float
    permanent_hire_rate: float
    fixed_transfer_cost: float
    normal_booking_percent: float
    urgent_booking_percent: float
    professional_service_percent: float


class BreakdownRequest(BaseModel):
    offered_rate: float
    urgency: str | None = None  # "normal" or "urgent"; derived from shift_start when omitted
    shift_start: datetime | None = None
    transfer_cost: float | None = None  # defaults to the schedule's fixed transfer cost


class BreakdownResponse(BaseModel):
    offered_rate: float
    urgency: str
    currency: str
    clinic_booking_fee: FeeLineResponse
    clinic_total_cost: float
    pro_gross_amount: float
    pro_platform_fee: FeeLineResponse
    pro_mpesa_cost: float
    pro_net_payout: float
    platform_revenue: float
    formatted: dict[str, str]  # display strings, e.g. {"clinic_total_cost": "KSh 5,750"}


class CancellationRequest(BaseModel):
    offered_rate: float
    hours_before_shift: float | None = None  # omitted: assume the cancellation is late


class CancellationResponse(BaseModel):
    offered_rate: float
    fee_applies: bool
    fee_amount: float
    reason: str
    currency: str


class PermanentHireRequest(BaseModel):
    monthly_salary: float


class PermanentHireResponse(BaseModel):
    monthly_salary: float
    fee_percent: float
    fee_amount: float
    currency: str


class MpesaCostResponse(BaseModel):
    amount: float
    mpesa_cost: float
