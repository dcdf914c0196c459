"""
AnalyticsSnapshot — one consistent read of everything the calculators use.

By default each calculator fetches its own records at its own moment, so
two widgets (or the sentinel and a widget) may see slightly different
store states. When a caller wants a single view, it captures a snapshot
and passes it to every calculator:

    snap = AnalyticsSnapshot.capture(tenant_id)
    compute_velocity(tenant_id, snapshot=snap)
    compute_sentinel(tenant_id, snapshot=snap)

A snapshot is immutable, holds no session or connection, and freezes
"today" at capture time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from opspulse.models.work import ACTIVE_STATUSES, STATUS_COMPLETED
from opspulse.services.analytics_rules import THRESHOLDS
from opspulse.services.helpers.analytics_context import (
    forward_horizon,
    resolve_context,
    trailing_window,
)
from opspulse.services.records import (
    LeaveRecord,
    MemberRecord,
    ReportRecord,
    WorkItemRecord,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsSnapshot:
    tenant_id: int
    today: date
    members: list[MemberRecord]
    completed_items: list[WorkItemRecord]
    active_items: list[WorkItemRecord]
    submissions: list[ReportRecord]
    leave: list[LeaveRecord]
    horizon_days: int = THRESHOLDS["capacity_horizon_days"]
    captured_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    gateway: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def capture(cls, tenant_id, *, gateway=None, clock=None,
                horizon_days: int | None = None) -> "AnalyticsSnapshot":
        """Fetch every record set needed by the calculators, back to back."""
        ctx = resolve_context(tenant_id, gateway=gateway, clock=clock)
        horizon = horizon_days or THRESHOLDS["capacity_horizon_days"]
        gw, tid, today = ctx.gateway, ctx.tenant_id, ctx.today

        velocity_start, velocity_end = trailing_window(today, THRESHOLDS["velocity_window_days"])
        # One submissions read serves both the engagement and blocker windows
        report_days = max(THRESHOLDS["engagement_window_days"], THRESHOLDS["blocker_window_days"])
        report_start, report_end = trailing_window(today, report_days)
        horizon_dates = forward_horizon(today, horizon)

        snapshot = cls(
            tenant_id=tid,
            today=today,
            members=list(gw.query_members(tid)),
            completed_items=list(gw.query_work_items(tid, [STATUS_COMPLETED], velocity_start, velocity_end)),
            active_items=list(gw.query_work_items(tid, ACTIVE_STATUSES)),
            submissions=list(gw.query_report_submissions(tid, report_start, report_end)),
            leave=list(gw.query_approved_leave(tid, horizon_dates[0], horizon_dates[-1])),
            horizon_days=horizon,
            gateway=gw,
        )
        logger.debug(
            "Analytics snapshot captured: %d members, %d submissions",
            len(snapshot.members), len(snapshot.submissions),
            extra={"tenant_id": tid, "calculator": "snapshot"},
        )
        return snapshot

    def summary(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "today": self.today.isoformat(),
            "captured_at": self.captured_at.isoformat(),
            "members": len(self.members),
            "completed_items": len(self.completed_items),
            "active_items": len(self.active_items),
            "submissions": len(self.submissions),
            "leave_plans": len(self.leave),
            "horizon_days": self.horizon_days,
        }
