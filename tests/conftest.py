from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_fee_schedule
from app.main import app
from app.services.fee import FeeSchedule


@pytest.fixture
def schedule():
    return FeeSchedule()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def flat_schedule_client(client):
    """Client pricing with a 10% booking fee for both urgencies and no transfer cost."""
    app.dependency_overrides[get_fee_schedule] = lambda: FeeSchedule(
        normal_booking_rate=Decimal("0.10"),
        urgent_booking_rate=Decimal("0.10"),
        fixed_transfer_cost=Decimal("0"),
    )
    return client
