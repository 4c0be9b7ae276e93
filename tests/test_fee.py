from decimal import Decimal

import pytest

from app.config import Settings
from app.services.fee import (
    MAX_AMOUNT,
    FeeSchedule,
    InvalidInputError,
    Urgency,
    compute_booking_fee,
    compute_breakdown,
    compute_cancellation_fee,
    compute_permanent_hire_fee,
    compute_professional_fee,
    estimate_mpesa_cost,
    format_currency,
)


def test_documented_normal_example(schedule):
    b = compute_breakdown(5000, "normal", schedule)

    assert b.clinic_booking_fee.percent == 15
    assert b.clinic_booking_fee.amount == 750
    assert b.clinic_total_cost == 5750
    assert b.pro_gross_amount == 5000
    assert b.pro_platform_fee.percent == 5
    assert b.pro_platform_fee.amount == 250
    assert b.pro_mpesa_cost == 50
    assert b.pro_net_payout == 4700
    assert b.platform_revenue == 1000
    assert b.urgency is Urgency.NORMAL


def test_urgent_only_changes_clinic_side(schedule):
    normal = compute_breakdown(5000, Urgency.NORMAL, schedule)
    urgent = compute_breakdown(5000, Urgency.URGENT, schedule)

    assert urgent.clinic_booking_fee.percent == 20
    assert urgent.clinic_booking_fee.amount == 1000
    assert urgent.clinic_total_cost == 6000
    assert urgent.pro_platform_fee == normal.pro_platform_fee
    assert urgent.pro_mpesa_cost == normal.pro_mpesa_cost
    assert urgent.pro_net_payout == normal.pro_net_payout


@pytest.mark.parametrize("rate", [20, 33, 999, 1234.5, 2501, 4999.99, 86000])
def test_urgent_booking_fee_exceeds_normal(schedule, rate):
    assert (
        compute_breakdown(rate, "urgent", schedule).clinic_booking_fee.amount
        > compute_breakdown(rate, "normal", schedule).clinic_booking_fee.amount
    )


@pytest.mark.parametrize("rate", [0, 1, 3, 10, 49, 55, 333, 1001, 2499.5, 5000, 12345.67, 99999])
@pytest.mark.parametrize("urgency", ["normal", "urgent"])
def test_totals_equal_sum_of_rounded_parts(schedule, rate, urgency):
    b = compute_breakdown(rate, urgency, schedule)

    assert b.clinic_total_cost == b.offered_rate + b.clinic_booking_fee.amount
    assert b.pro_net_payout == b.pro_gross_amount - b.pro_platform_fee.amount - b.pro_mpesa_cost
    assert b.platform_revenue == b.clinic_booking_fee.amount + b.pro_platform_fee.amount
    assert b.pro_net_payout >= 0


def test_line_items_are_whole_units(schedule):
    b = compute_breakdown(3333, "normal", schedule)

    # 3333 * 0.15 = 499.95, 3333 * 0.05 = 166.65
    assert b.clinic_booking_fee.amount == 500
    assert b.pro_platform_fee.amount == 167
    assert b.clinic_total_cost == 3833


def test_half_unit_rounds_up(schedule):
    # 10 * 0.05 = 0.5
    assert compute_professional_fee(10, schedule).amount == 1
    # 30 * 0.15 = 4.5
    assert compute_booking_fee(30, "normal", schedule).amount == 5


@pytest.mark.parametrize("urgency", ["normal", "urgent"])
def test_fees_are_monotonic_in_rate(schedule, urgency):
    previous_booking = previous_platform = Decimal("-1")
    rates = [*range(0, 3000, 7), 12345.5, 10**6, 10**9, 10**12, 999999999999999.5, 10**15]
    for rate in rates:
        b = compute_breakdown(rate, urgency, schedule)
        assert b.clinic_booking_fee.amount >= previous_booking
        assert b.pro_platform_fee.amount >= previous_platform
        previous_booking = b.clinic_booking_fee.amount
        previous_platform = b.pro_platform_fee.amount


def test_zero_rate_is_all_zero(schedule):
    b = compute_breakdown(0, "normal", schedule)

    for amount in (
        b.offered_rate,
        b.clinic_booking_fee.amount,
        b.clinic_total_cost,
        b.pro_gross_amount,
        b.pro_platform_fee.amount,
        b.pro_mpesa_cost,
        b.pro_net_payout,
        b.platform_revenue,
    ):
        assert amount == 0
    assert b.clinic_booking_fee.percent == 15
    assert b.pro_platform_fee.percent == 5


def test_transfer_cost_capped_at_transferred_amount(schedule):
    b = compute_breakdown(40, "normal", schedule)

    # 40 - round(2.0) = 38 left to transfer, less than the flat 50
    assert b.pro_platform_fee.amount == 2
    assert b.pro_mpesa_cost == 38
    assert b.pro_net_payout == 0


def test_explicit_transfer_cost_overrides_schedule(schedule):
    b = compute_breakdown(5000, "normal", schedule, transfer_cost=57)

    assert b.pro_mpesa_cost == 57
    assert b.pro_net_payout == 4693


@pytest.mark.parametrize("bad", [-1, -0.01, float("nan"), float("inf"), float("-inf"), "abc", None, True])
def test_invalid_rate_rejected(schedule, bad):
    with pytest.raises(InvalidInputError):
        compute_breakdown(bad, "normal", schedule)


@pytest.mark.parametrize("urgency", ["normal", "urgent"])
def test_largest_accepted_rate(schedule, urgency):
    b = compute_breakdown(MAX_AMOUNT, urgency, schedule)

    assert b.clinic_total_cost == b.offered_rate + b.clinic_booking_fee.amount
    assert b.pro_net_payout == b.pro_gross_amount - b.pro_platform_fee.amount - b.pro_mpesa_cost
    assert b.pro_platform_fee.amount == 50000000000000
    assert compute_cancellation_fee(MAX_AMOUNT, schedule) == 200000000000000
    assert compute_permanent_hire_fee(MAX_AMOUNT, schedule) == 350000000000000
    assert format_currency(b.clinic_total_cost).startswith("KSh 1,")


@pytest.mark.parametrize("huge", [1e30, 10**16, "1E+40", MAX_AMOUNT + 1])
def test_oversized_amounts_rejected(schedule, huge):
    with pytest.raises(InvalidInputError, match="must not exceed"):
        compute_breakdown(huge, "normal", schedule)
    with pytest.raises(InvalidInputError):
        compute_cancellation_fee(huge, schedule)
    with pytest.raises(InvalidInputError):
        compute_permanent_hire_fee(huge, schedule)


def test_invalid_rate_is_a_value_error(schedule):
    with pytest.raises(ValueError):
        compute_breakdown(-1, "normal", schedule)


def test_unknown_urgency_rejected(schedule):
    with pytest.raises(InvalidInputError, match="urgency"):
        compute_breakdown(5000, "asap", schedule)


def test_negative_transfer_cost_rejected(schedule):
    with pytest.raises(InvalidInputError, match="transfer_cost"):
        compute_breakdown(5000, "normal", schedule, transfer_cost=-5)


def test_breakdown_is_deterministic(schedule):
    assert compute_breakdown(4321, "urgent", schedule) == compute_breakdown(4321, "urgent", schedule)


def test_string_and_decimal_rates_match_numbers(schedule):
    assert compute_breakdown("5000", "normal", schedule) == compute_breakdown(Decimal("5000"), "normal", schedule)


@pytest.mark.parametrize(
    "rate,expected",
    [(2000, 1000), (10000, 2000), (5000, 1000), (0, 1000), (5003, 1001)],
)
def test_cancellation_fee_floor(schedule, rate, expected):
    assert compute_cancellation_fee(rate, schedule) == expected


def test_cancellation_fee_rejects_negative(schedule):
    with pytest.raises(InvalidInputError):
        compute_cancellation_fee(-100, schedule)


def test_permanent_hire_fee(schedule):
    assert compute_permanent_hire_fee(80000, schedule) == 28000
    # 12345 * 0.35 = 4320.75
    assert compute_permanent_hire_fee(12345, schedule) == 4321


def test_permanent_hire_fee_rejects_nan(schedule):
    with pytest.raises(InvalidInputError):
        compute_permanent_hire_fee(float("nan"), schedule)


@pytest.mark.parametrize(
    "amount,cost",
    [(0, 0), (100, 0), (101, 7), (1000, 13), (4750, 57), (5000, 57), (5001, 78), (20000, 105), (20001, 108), (50000, 108), (250000, 108)],
)
def test_mpesa_cost_tiers(amount, cost):
    assert estimate_mpesa_cost(amount) == cost


def test_format_currency():
    assert format_currency(5750) == "KSh 5,750"
    assert format_currency(Decimal("1234567.5"), "KES") == "KES 1,234,568"
    assert format_currency(0) == "KSh 0"


@pytest.mark.parametrize("bad", ["abc", float("nan"), -5, 1e30])
def test_format_currency_rejects_invalid_amounts(bad):
    with pytest.raises(InvalidInputError):
        format_currency(bad)


def test_mpesa_cost_ceiling_above_last_tier():
    assert estimate_mpesa_cost(50000, max_cost=Decimal("110")) == 108
    assert estimate_mpesa_cost(50001, max_cost=Decimal("110")) == 110


class TestFeeSchedule:
    def test_defaults(self):
        s = FeeSchedule()
        assert s.normal_booking_rate == Decimal("0.15")
        assert s.urgent_booking_rate == Decimal("0.20")
        assert s.professional_service_rate == Decimal("0.05")
        assert s.late_cancellation_min_amount == 1000
        assert s.late_cancellation_rate == Decimal("0.20")
        assert s.permanent_hire_rate == Decimal("0.35")
        assert s.fixed_transfer_cost == 50

    def test_coerces_numbers_to_decimal(self):
        s = FeeSchedule(normal_booking_rate=0.1, fixed_transfer_cost=35)
        assert s.normal_booking_rate == Decimal("0.1")
        assert isinstance(s.fixed_transfer_cost, Decimal)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"normal_booking_rate": Decimal("1.5")},
            {"professional_service_rate": Decimal("-0.05")},
            {"fixed_transfer_cost": Decimal("-1")},
            {"permanent_hire_rate": float("nan")},
        ],
    )
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(InvalidInputError):
            FeeSchedule(**kwargs)

    def test_is_immutable(self):
        s = FeeSchedule()
        with pytest.raises(AttributeError):
            s.normal_booking_rate = Decimal("0.5")

    def test_from_settings(self):
        s = FeeSchedule.from_settings(Settings(urgent_booking_rate=Decimal("0.25"), fixed_transfer_cost=Decimal("35")))
        assert s.urgent_booking_rate == Decimal("0.25")
        assert s.fixed_transfer_cost == 35
        assert compute_breakdown(5000, "urgent", s).clinic_booking_fee.percent == 25

    def test_fractional_percent(self):
        s = FeeSchedule(normal_booking_rate=Decimal("0.125"))
        line = compute_booking_fee(1000, "normal", s)
        assert line.percent == Decimal("12.5")
        assert line.amount == 125
