"""
Velocity Calculator

Buckets completed-work effort by day over the trailing 14-day window and
derives total / average / peak and the short-horizon trend.

    trend = (recent3 - prev3) / prev3 * 100      (100 when prev3 == 0)

``average`` always divides by the window length, never by the number of
days that happened to have completions.

Usage:
    from opspulse.services.velocity import compute_velocity
    v = compute_velocity(tenant_id=1)
    v["trend"], v["series"][-1]
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Iterable

from opspulse.models.work import STATUS_COMPLETED
from opspulse.services.analytics_rules import THRESHOLDS
from opspulse.services.helpers.analytics_context import (
    normalize_effort,
    resolve_context,
    trailing_window,
)
from opspulse.services.records import WorkItemRecord

logger = logging.getLogger(__name__)


def daily_series(items: Iterable[WorkItemRecord], today: date,
                 days: int | None = None) -> list[dict]:
    """One ``{date, velocity, count}`` entry per window day, oldest first.

    Items that are not Completed or fall outside the window are ignored.
    """
    days = days or THRESHOLDS["velocity_window_days"]
    start, _ = trailing_window(today, days)

    effort_by_day: dict[date, float] = defaultdict(float)
    count_by_day: dict[date, int] = defaultdict(int)
    for item in items:
        if item.status != STATUS_COMPLETED or item.completed_on is None:
            continue
        effort_by_day[item.completed_on] += normalize_effort(item.effort)
        count_by_day[item.completed_on] += 1

    series = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        series.append({
            "date": day.isoformat(),
            "velocity": effort_by_day.get(day, 0.0),
            "count": count_by_day.get(day, 0),
        })
    return series


def trend_sums(series: list[dict], span: int | None = None) -> tuple[float, float]:
    """Return (recent, previous): velocity summed over the last ``span`` days
    and over the ``span`` days immediately before them."""
    span = span or THRESHOLDS["velocity_trend_span_days"]
    values = [d["velocity"] for d in series]
    recent = sum(values[-span:])
    previous = sum(values[-2 * span:-span])
    return recent, previous


def trend_pct(recent: float, previous: float) -> float:
    """Percentage change; the no-baseline convention applies when previous is 0."""
    if previous == 0:
        return float(THRESHOLDS["velocity_trend_no_baseline_pct"])
    return (recent - previous) / previous * 100


def velocity_from_records(items: Iterable[WorkItemRecord], today: date) -> dict:
    """Pure velocity computation over already-fetched records."""
    days = THRESHOLDS["velocity_window_days"]
    series = daily_series(items, today, days)
    total = sum(d["velocity"] for d in series)
    recent3, prev3 = trend_sums(series)
    return {
        "series": series,
        "total": total,
        "average": total / days,
        "peak": max(d["velocity"] for d in series),
        "trend": trend_pct(recent3, prev3),
        "recent3": recent3,
        "prev3": prev3,
        "window_start": series[0]["date"],
        "window_end": series[-1]["date"],
    }


def compute_velocity(tenant_id, *, gateway=None, clock=None, snapshot=None) -> dict:
    """Velocity over the trailing window for one tenant.

    Returns:
        {
            "series": [{"date": str, "velocity": float, "count": int}, ...],  # 14, oldest first
            "total": float,
            "average": float,      # total / 14
            "peak": float,
            "trend": float,        # % change recent3 vs prev3
            "recent3": float,
            "prev3": float,
            "window_start": str,
            "window_end": str,
        }

    Raises:
        ConfigurationError: invalid tenant id (before any query).
        GatewayError: the record store query failed.
    """
    ctx = resolve_context(tenant_id, gateway=gateway, clock=clock, snapshot=snapshot)

    if ctx.snapshot is not None:
        items = ctx.snapshot.completed_items
    else:
        start, end = trailing_window(ctx.today, THRESHOLDS["velocity_window_days"])
        items = ctx.gateway.query_work_items(ctx.tenant_id, [STATUS_COMPLETED], start, end)

    result = velocity_from_records(items, ctx.today)
    logger.debug(
        "Velocity computed: total=%.2f trend=%.1f", result["total"], result["trend"],
        extra={"tenant_id": ctx.tenant_id, "calculator": "velocity"},
    )
    return result
