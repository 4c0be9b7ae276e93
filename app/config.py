from decimal import Decimal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Booking fees (employer side)
    normal_booking_rate: Decimal = Decimal("0.15")
    urgent_booking_rate: Decimal = Decimal("0.20")

    # Professional side
    professional_service_rate: Decimal = Decimal("0.05")
    fixed_transfer_cost: Decimal = Decimal("50")

    # Late cancellation
    late_cancellation_min_amount: Decimal = Decimal("1000")
    late_cancellation_rate: Decimal = Decimal("0.20")
    cancellation_window_hours: int = 12

    # Permanent hire success fee
    permanent_hire_rate: Decimal = Decimal("0.35")

    # Scheduling / settlement windows
    urgent_notice_hours: int = 24
    dispute_window_hours: int = 24

    currency: str = "KSh"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
