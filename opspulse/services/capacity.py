"""
Capacity Forecaster

Projects available headcount per day over the forward horizon (14 days,
today inclusive) net of approved leave and weekends, and classifies the
active workload against it.

Two classification policies live here side by side and are deliberately
NOT unified; callers depend on each independently:

  saturation_risk  binary, feeds the sentinel (RS-09)
                   "High" iff current_load > total_available * 0.8
  load_band        three-tier display label on the rounded percentage
                   active_effort / total_available * 100
                   > 85 → High, > 60 → Medium, else Optimal

``load`` per day is a visualization value only: the whole active effort
spread over a fixed 10-day reference window, not a real schedule.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from opspulse.core.exceptions import ConfigurationError
from opspulse.models.standup import LEAVE_APPROVED
from opspulse.models.work import ACTIVE_STATUSES
from opspulse.services.analytics_rules import THRESHOLDS, WEEKEND_DAYS
from opspulse.services.helpers.analytics_context import (
    forward_horizon,
    normalize_effort,
    resolve_context,
    round_half_up,
    weekday_index,
)
from opspulse.services.records import LeaveRecord, MemberRecord, WorkItemRecord

logger = logging.getLogger(__name__)

RISK_HIGH = "High"
RISK_MEDIUM = "Medium"
RISK_OPTIMAL = "Optimal"


# ═════════════════════════════════════════════════════════════════════════════
# Classification policies
# ═════════════════════════════════════════════════════════════════════════════

def saturation_risk(current_load: float, total_available: float) -> str:
    """Binary saturation policy. Strict inequality: equality is Optimal."""
    if current_load > total_available * THRESHOLDS["capacity_saturation_ratio"]:
        return RISK_HIGH
    return RISK_OPTIMAL


def load_percentage(active_effort: float, total_available: float) -> int | None:
    """Rounded load percentage; None when there is effort but no capacity at all."""
    if total_available == 0:
        return 0 if active_effort == 0 else None
    return round_half_up(active_effort / total_available * 100)


def load_band(pct: int | None) -> str:
    """Three-tier display label. An unbounded (None) percentage is High."""
    if pct is None or pct > THRESHOLDS["capacity_load_high_pct"]:
        return RISK_HIGH
    if pct > THRESHOLDS["capacity_load_medium_pct"]:
        return RISK_MEDIUM
    return RISK_OPTIMAL


def is_weekend(day: date) -> bool:
    return weekday_index(day) in WEEKEND_DAYS


# ═════════════════════════════════════════════════════════════════════════════
# Forecast
# ═════════════════════════════════════════════════════════════════════════════

def capacity_from_records(
    members: list[MemberRecord],
    leave: Iterable[LeaveRecord],
    active_items: Iterable[WorkItemRecord],
    today: date,
    horizon_days: int | None = None,
) -> dict:
    """Pure forecast over already-fetched records."""
    horizon_days = horizon_days or THRESHOLDS["capacity_horizon_days"]
    total_members = len(members)
    leave = [plan for plan in leave if (plan.status or "").lower() == LEAVE_APPROVED]
    active_effort = sum(
        normalize_effort(item.effort) for item in active_items if item.status in ACTIVE_STATUSES
    )
    daily_load = active_effort / THRESHOLDS["capacity_load_reference_days"]

    daily = []
    for day in forward_horizon(today, horizon_days):
        on_leave = sum(1 for plan in leave if plan.covers(day))
        weekend = is_weekend(day)
        available = 0 if weekend else max(total_members - on_leave, 0)
        daily.append({
            "date": day.isoformat(),
            "available": available,
            "capacity": total_members,
            "load": daily_load,
            "on_leave": on_leave,
            "is_weekend": weekend,
        })

    total_available = sum(d["available"] for d in daily)
    pct = load_percentage(active_effort, total_available)
    return {
        "daily": daily,
        "total_members": total_members,
        "total_available": total_available,
        "current_load": active_effort,
        "risk_level": saturation_risk(active_effort, total_available),
        "load_percentage": pct,
        "load_label": load_band(pct),
    }


def compute_capacity(tenant_id, *, gateway=None, clock=None, snapshot=None,
                     horizon_days: int | None = None) -> dict:
    """Capacity forecast for one tenant.

    Returns:
        {
            "daily": [{"date", "available", "capacity", "load", "on_leave", "is_weekend"}, ...],
            "total_members": int,
            "total_available": int,     # member-days over the horizon
            "current_load": float,      # active effort
            "risk_level": "High" | "Optimal",
            "load_percentage": int | None,
            "load_label": "High" | "Medium" | "Optimal",
        }
    """
    default_horizon = THRESHOLDS["capacity_horizon_days"]
    if horizon_days is not None and (isinstance(horizon_days, bool)
                                     or not isinstance(horizon_days, int)
                                     or horizon_days <= 0):
        raise ConfigurationError(
            "horizon_days must be a positive integer", details={"horizon_days": horizon_days},
        )
    ctx = resolve_context(tenant_id, gateway=gateway, clock=clock, snapshot=snapshot)
    if horizon_days is None and ctx.snapshot is not None:
        horizon = ctx.snapshot.horizon_days
    else:
        horizon = horizon_days or default_horizon

    if ctx.snapshot is not None:
        if horizon != ctx.snapshot.horizon_days:
            raise ConfigurationError(
                "horizon_days differs from the snapshot's horizon",
                details={"horizon_days": horizon, "snapshot_horizon_days": ctx.snapshot.horizon_days},
            )
        members = ctx.snapshot.members
        leave = ctx.snapshot.leave
        active = ctx.snapshot.active_items
    else:
        days = forward_horizon(ctx.today, horizon)
        members = ctx.gateway.query_members(ctx.tenant_id)
        leave = ctx.gateway.query_approved_leave(ctx.tenant_id, days[0], days[-1])
        active = ctx.gateway.query_work_items(ctx.tenant_id, ACTIVE_STATUSES)

    result = capacity_from_records(members, leave, active, ctx.today, horizon)
    logger.debug(
        "Capacity computed: available=%s load=%.2f risk=%s",
        result["total_available"], result["current_load"], result["risk_level"],
        extra={"tenant_id": ctx.tenant_id, "calculator": "capacity"},
    )
    return result
