from datetime import datetime

from pydantic import BaseModel


class SettlementPreviewRequest(BaseModel):
    stint_id: str
    offered_rate: float
    urgency: str = "normal"
    completed_at: datetime | None = None


class PayoutResponse(BaseModel):
    gross_amount: float
    platform_fee_percent: float
    platform_fee_amount: float
    mpesa_cost: float
    net_amount: float
    payout_method: str
    currency: str


class InvoiceResponse(BaseModel):
    type: str
    amount: float
    fee_percent: float
    stint_amount: float
    total_charge: float
    currency: str


class SettlementPreviewResponse(BaseModel):
    stint_id: str
    status: str
    platform_revenue: float
    payout: PayoutResponse
    invoice: InvoiceResponse
    dispute_window_ends_at: str | None = None
    is_ready_for_settlement: bool | None = None
