"""
Capacity forecaster — availability, weekends, leave and the two load policies.

TODAY is Friday 2025-03-14, so the default 14-day horizon holds ten
weekdays and four weekend days.
"""

from datetime import date

import pytest

from conftest import TODAY
from opspulse.core.exceptions import ConfigurationError
from opspulse.services.capacity import (
    RISK_HIGH,
    RISK_MEDIUM,
    RISK_OPTIMAL,
    capacity_from_records,
    compute_capacity,
    is_weekend,
    load_band,
    load_percentage,
    saturation_risk,
)
from opspulse.services.clock import FixedClock
from opspulse.services.records import MemberRecord, WorkItemRecord


def _team(gateway, size):
    for member_id in range(1, size + 1):
        gateway.add_member(member_id)


# ═══════════════════════════════════════════════════════════════════════════
# Classification policies
# ═══════════════════════════════════════════════════════════════════════════

class TestPolicies:
    def test_saturation_is_strict(self):
        assert saturation_risk(40, 50) == RISK_OPTIMAL
        assert saturation_risk(40.5, 50) == RISK_HIGH
        assert saturation_risk(0, 0) == RISK_OPTIMAL
        assert saturation_risk(1, 0) == RISK_HIGH

    @pytest.mark.parametrize("pct,label", [
        (0, RISK_OPTIMAL), (60, RISK_OPTIMAL), (61, RISK_MEDIUM),
        (85, RISK_MEDIUM), (86, RISK_HIGH), (None, RISK_HIGH),
    ])
    def test_load_band(self, pct, label):
        assert load_band(pct) == label

    def test_load_percentage_rounds_half_up(self):
        assert load_percentage(1, 8) == 13      # 12.5
        assert load_percentage(41, 50) == 82
        assert load_percentage(0, 0) == 0
        assert load_percentage(3, 0) is None

    def test_weekend_days(self):
        assert is_weekend(date(2025, 3, 15))
        assert is_weekend(date(2025, 3, 16))
        assert not is_weekend(date(2025, 3, 14))
        assert not is_weekend(date(2025, 3, 17))


# ═══════════════════════════════════════════════════════════════════════════
# Forecast
# ═══════════════════════════════════════════════════════════════════════════

class TestComputeCapacity:
    def test_daily_shape(self, gateway, clock):
        _team(gateway, 5)
        gateway.add_active(20)
        result = compute_capacity(1, gateway=gateway, clock=clock)

        assert len(result["daily"]) == 14
        assert result["daily"][0]["date"] == "2025-03-14"
        assert result["daily"][-1]["date"] == "2025-03-27"
        assert all(d["capacity"] == 5 for d in result["daily"])
        assert all(d["load"] == 2 for d in result["daily"])
        assert result["total_members"] == 5

    def test_weekends_have_no_availability(self, gateway, clock):
        _team(gateway, 5)
        result = compute_capacity(1, gateway=gateway, clock=clock)
        weekend = [d for d in result["daily"] if d["is_weekend"]]
        assert [d["date"] for d in weekend] == [
            "2025-03-15", "2025-03-16", "2025-03-22", "2025-03-23",
        ]
        assert all(d["available"] == 0 for d in weekend)
        assert result["total_available"] == 50

    def test_five_day_horizon_scenario(self, gateway):
        _team(gateway, 10)
        tuesday = FixedClock(date(2025, 3, 11))
        result = compute_capacity(1, gateway=gateway, clock=tuesday, horizon_days=5)
        assert [d["available"] for d in result["daily"]] == [10, 10, 10, 10, 0]

    def test_approved_leave_reduces_availability(self, gateway, clock):
        _team(gateway, 5)
        gateway.add_leave(1, date(2025, 3, 17), date(2025, 3, 19))
        gateway.add_leave(2, date(2025, 3, 20), date(2025, 3, 20), status="pending")
        result = compute_capacity(1, gateway=gateway, clock=clock)

        by_date = {d["date"]: d for d in result["daily"]}
        assert by_date["2025-03-17"]["available"] == 4
        assert by_date["2025-03-19"]["on_leave"] == 1
        assert by_date["2025-03-20"]["available"] == 5
        assert result["total_available"] == 47

    def test_availability_never_negative(self, gateway, clock):
        _team(gateway, 1)
        gateway.add_leave(1, date(2025, 3, 17), date(2025, 3, 17))
        gateway.add_leave(1, date(2025, 3, 17), date(2025, 3, 18))
        result = compute_capacity(1, gateway=gateway, clock=clock)
        assert result["daily"][3]["on_leave"] == 2
        assert result["daily"][3]["available"] == 0

    def test_equality_is_optimal(self, gateway, clock):
        _team(gateway, 5)
        gateway.add_active(25, status="To Do")
        gateway.add_active(15, status="Review")
        result = compute_capacity(1, gateway=gateway, clock=clock)
        assert result["current_load"] == 40
        assert result["risk_level"] == RISK_OPTIMAL
        assert result["load_percentage"] == 80
        assert result["load_label"] == RISK_MEDIUM

    def test_policies_diverge_above_eighty_percent(self, gateway, clock):
        _team(gateway, 5)
        gateway.add_active(41)
        result = compute_capacity(1, gateway=gateway, clock=clock)
        assert result["risk_level"] == RISK_HIGH
        assert result["load_label"] == RISK_MEDIUM

    def test_completed_items_not_active(self, gateway, clock):
        _team(gateway, 5)
        gateway.add_completed(TODAY, 100)
        assert compute_capacity(1, gateway=gateway, clock=clock)["current_load"] == 0

    def test_no_members(self, gateway, clock):
        result = compute_capacity(1, gateway=gateway, clock=clock)
        assert result["total_available"] == 0
        assert result["load_percentage"] == 0
        assert result["risk_level"] == RISK_OPTIMAL
        assert result["load_label"] == RISK_OPTIMAL

    def test_effort_without_capacity(self, gateway, clock):
        gateway.add_active(3)
        result = compute_capacity(1, gateway=gateway, clock=clock)
        assert result["load_percentage"] is None
        assert result["risk_level"] == RISK_HIGH
        assert result["load_label"] == RISK_HIGH

    @pytest.mark.parametrize("horizon", [0, -1, True, "7", 1.5])
    def test_invalid_horizon(self, gateway, clock, horizon):
        with pytest.raises(ConfigurationError):
            compute_capacity(1, gateway=gateway, clock=clock, horizon_days=horizon)
        assert gateway.calls == []


def test_pure_forecast_ignores_terminal_items():
    members = [MemberRecord(1, "Ada")]
    items = [WorkItemRecord(1, "Completed", 9), WorkItemRecord(2, "In Progress", 1)]
    result = capacity_from_records(members, [], items, TODAY, 14)
    assert result["current_load"] == 1
