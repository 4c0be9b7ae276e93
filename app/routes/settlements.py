from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.config import Settings
from app.dependencies import get_fee_schedule, get_settings
from app.schemas.settlements import (
    InvoiceResponse,
    PayoutResponse,
    SettlementPreviewRequest,
    SettlementPreviewResponse,
)
from app.services.fee import FeeSchedule
from app.services.settlement import (
    SettlementStatus,
    calculate_settlement,
    dispute_window_end,
    is_ready_for_settlement,
)

router = APIRouter()


@router.post("/preview", response_model=SettlementPreviewResponse)
async def preview_settlement(
    req: SettlementPreviewRequest,
    schedule: FeeSchedule = Depends(get_fee_schedule),
    config: Settings = Depends(get_settings),
):
    """Payout and invoice a completed stint would settle into, and whether its dispute window has passed."""
    window_end = None
    ready = None
    status = SettlementStatus.PENDING
    if req.completed_at is not None:
        window_end = dispute_window_end(req.completed_at, config.dispute_window_hours)
        ready = is_ready_for_settlement(req.completed_at, datetime.now(timezone.utc), config.dispute_window_hours)
        if ready:
            status = SettlementStatus.READY_FOR_SETTLEMENT

    s = calculate_settlement(
        req.stint_id, req.offered_rate, req.urgency, schedule, currency=config.currency, status=status
    )

    return SettlementPreviewResponse(
        stint_id=s.stint_id,
        status=s.status.value,
        platform_revenue=float(s.breakdown.platform_revenue),
        payout=PayoutResponse(
            gross_amount=float(s.payout.gross_amount),
            platform_fee_percent=float(s.payout.platform_fee_percent),
            platform_fee_amount=float(s.payout.platform_fee_amount),
            mpesa_cost=float(s.payout.mpesa_cost),
            net_amount=float(s.payout.professional_amount),
            payout_method=s.payout.payout_method,
            currency=s.payout.currency,
        ),
        invoice=InvoiceResponse(
            type=s.invoice.fee_type,
            amount=float(s.invoice.amount),
            fee_percent=float(s.invoice.fee_percent),
            stint_amount=float(s.invoice.stint_amount),
            total_charge=float(s.invoice.total_charge),
            currency=s.invoice.currency,
        ),
        dispute_window_ends_at=window_end.isoformat() if window_end else None,
        is_ready_for_settlement=ready,
    )
