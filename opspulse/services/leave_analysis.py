"""
Leave Analyzer

Leave patterns, utilization and a rough productivity-impact estimate over
a date range (default: the 90 days ending today), optionally narrowed to a
set of members and/or org units.

Only approved plans lying entirely inside the range are counted. Plan
duration is inclusive: a plan from Monday to Friday is 5 days.

Usage:
    from opspulse.services.leave_analysis import compute_leave_analysis
    report = compute_leave_analysis(tenant_id=1, unit_ids=[3])
    report["utilization"]["total_utilization_rate"]
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable

from opspulse.core.exceptions import ConfigurationError
from opspulse.models.standup import LEAVE_APPROVED
from opspulse.models.work import STATUS_COMPLETED
from opspulse.services.analytics_rules import THRESHOLDS
from opspulse.services.helpers.analytics_context import resolve_context, weekday_index
from opspulse.services.records import LeaveRecord, MemberRecord, WorkItemRecord

logger = logging.getLogger(__name__)


def empty_analysis() -> dict:
    return {
        "patterns": {
            "by_type": {},
            "by_month": {},
            "by_weekday": {},
            "total_days": 0,
            "average_duration": 0,
        },
        "utilization": {
            "total_utilization_rate": 0,
            "total_leave_days": 0,
            "by_member": [],
        },
        "productivity_impact": {
            "average_tasks_during_leave": 0,
            "team_productivity_drop": 0,
            "recommendations": [],
        },
    }


def leave_patterns(plans: list[LeaveRecord]) -> dict:
    by_type: dict[str, int] = defaultdict(int)
    by_month: dict[str, int] = defaultdict(int)
    by_weekday: dict[int, int] = defaultdict(int)
    total_days = 0

    for plan in plans:
        days = plan.duration_days
        total_days += days
        by_type[plan.leave_type or "unspecified"] += days
        by_month[plan.start_date.strftime("%Y-%m")] += days
        # Weekday of the first leave day only
        by_weekday[weekday_index(plan.start_date)] += 1

    return {
        "by_type": dict(by_type),
        "by_month": dict(by_month),
        "by_weekday": dict(by_weekday),
        "total_days": total_days,
        "average_duration": total_days / len(plans) if plans else 0,
    }


def leave_utilization(plans: list[LeaveRecord], members: list[MemberRecord],
                      start: date, end: date) -> dict:
    period_days = (end - start).days
    member_days = len(members) * period_days
    leave_days = sum(p.duration_days for p in plans)

    by_member = []
    for member in members:
        days = sum(p.duration_days for p in plans if p.member_id == member.id)
        by_member.append({
            "member_id": member.id,
            "name": member.name,
            "leave_days": days,
            "utilization_rate": days / period_days * 100 if period_days else 0,
        })

    return {
        "total_utilization_rate": leave_days / member_days * 100 if member_days else 0,
        "total_leave_days": leave_days,
        "by_member": by_member,
    }


def productivity_impact(plans: list[LeaveRecord], completed: list[WorkItemRecord],
                        members: list[MemberRecord]) -> dict:
    """Simplified estimate; not a per-absence attribution of output."""
    average_tasks = 0
    drop = 0
    if plans and completed:
        leave_days = sum(p.duration_days for p in plans)
        average_tasks = len(completed) / len(plans)
        reference = len(members) * THRESHOLDS["leave_drop_reference_days"]
        drop = min(leave_days / reference * 100, 100) if reference else 0

    recommendations = []
    if drop > THRESHOLDS["leave_drop_recommend_pct"]:
        recommendations.append("Consider redistributing workload during leave periods")
    if average_tasks < 1:
        recommendations.append("Monitor task completion during absences")

    return {
        "average_tasks_during_leave": average_tasks,
        "team_productivity_drop": drop,
        "recommendations": recommendations,
    }


def _select_members(members: Iterable[MemberRecord], member_ids, unit_ids) -> list[MemberRecord]:
    selected = list(members)
    if member_ids:
        wanted = set(member_ids)
        selected = [m for m in selected if m.id in wanted]
    if unit_ids:
        wanted_units = set(unit_ids)
        selected = [m for m in selected if m.unit_id in wanted_units]
    return selected


def compute_leave_analysis(tenant_id, *, start: date | None = None, end: date | None = None,
                           member_ids: Iterable[int] | None = None,
                           unit_ids: Iterable[int] | None = None,
                           gateway=None, clock=None) -> dict:
    """Leave patterns / utilization / productivity impact for one tenant.

    Returns:
        {
            "range": {"start": str, "end": str},
            "patterns": {...},
            "utilization": {...},
            "productivity_impact": {...},
        }
    """
    ctx = resolve_context(tenant_id, gateway=gateway, clock=clock)
    end = end or ctx.today
    start = start or end - timedelta(days=THRESHOLDS["leave_analysis_default_days"])
    if start > end:
        raise ConfigurationError(
            "start must not be after end",
            details={"start": start.isoformat(), "end": end.isoformat()},
        )

    result = {"range": {"start": start.isoformat(), "end": end.isoformat()}}
    members = _select_members(ctx.gateway.query_members(ctx.tenant_id), member_ids, unit_ids)
    if not members:
        result.update(empty_analysis())
        return result

    member_set = {m.id for m in members}
    plans = [
        p for p in ctx.gateway.query_approved_leave(ctx.tenant_id, start, end, contained=True)
        if p.member_id in member_set and (p.status or "").lower() == LEAVE_APPROVED
    ]
    completed = [
        item for item in ctx.gateway.query_work_items(ctx.tenant_id, [STATUS_COMPLETED], start, end)
        if item.assignee_id in member_set
    ]

    result.update({
        "patterns": leave_patterns(plans),
        "utilization": leave_utilization(plans, members, start, end),
        "productivity_impact": productivity_impact(plans, completed, members),
    })
    logger.debug(
        "Leave analysis computed: %d plans for %d members", len(plans), len(members),
        extra={"tenant_id": ctx.tenant_id, "calculator": "leave_analysis"},
    )
    return result
