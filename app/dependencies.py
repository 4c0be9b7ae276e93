from functools import lru_cache

from app.config import Settings, settings
from app.services.fee import FeeSchedule


def get_settings() -> Settings:
    return settings


@lru_cache
def _schedule_from_settings() -> FeeSchedule:
    return FeeSchedule.from_settings(settings)


def get_fee_schedule() -> FeeSchedule:
    """Active fee schedule; override this dependency to price with a different policy."""
    return _schedule_from_settings()
