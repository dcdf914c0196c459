"""
Blocker Clusterer

Groups the last 30 days of standup obstructions by the reporter's
organizational unit and ranks the clusters by frequency.

Ordering rules:
  - clusters are sorted by count, descending; Python's sort is stable, so
    equal counts keep the order in which the units were first fetched
  - ``latest`` is the obstruction of the most recently dated submission in
    the cluster; on a date tie the earlier-fetched submission wins
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from opspulse.services.analytics_rules import THRESHOLDS
from opspulse.services.helpers.analytics_context import resolve_context, trailing_window
from opspulse.services.records import ReportRecord

logger = logging.getLogger(__name__)

UNASSIGNED_UNIT = "Unassigned"


def has_obstruction(sub: ReportRecord) -> bool:
    return bool(sub.obstruction and sub.obstruction.strip())


def cluster_blockers(submissions: Iterable[ReportRecord], today: date) -> list[dict]:
    """Pure clustering over already-fetched submissions (in fetch order)."""
    start, end = trailing_window(today, THRESHOLDS["blocker_window_days"])

    clusters: dict[str, dict] = {}
    for sub in submissions:
        if not has_obstruction(sub) or not (start <= sub.report_date <= end):
            continue
        unit = sub.unit_name or UNASSIGNED_UNIT
        cluster = clusters.get(unit)
        if cluster is None:
            clusters[unit] = {
                "unit": unit,
                "count": 1,
                "latest": sub.obstruction,
                "_latest_date": sub.report_date,
            }
            continue
        cluster["count"] += 1
        if sub.report_date > cluster["_latest_date"]:
            cluster["latest"] = sub.obstruction
            cluster["_latest_date"] = sub.report_date

    ranked = sorted(clusters.values(), key=lambda c: c["count"], reverse=True)
    return [{"unit": c["unit"], "count": c["count"], "latest": c["latest"]} for c in ranked]


def compute_blockers(tenant_id, *, gateway=None, clock=None, snapshot=None) -> list[dict]:
    """Blocker clusters ``[{unit, count, latest}]``, most frequent first.

    Returns an empty list when no submission in the window reports an
    obstruction.
    """
    ctx = resolve_context(tenant_id, gateway=gateway, clock=clock, snapshot=snapshot)

    if ctx.snapshot is not None:
        submissions = ctx.snapshot.submissions
    else:
        start, end = trailing_window(ctx.today, THRESHOLDS["blocker_window_days"])
        submissions = ctx.gateway.query_report_submissions(ctx.tenant_id, start, end)

    clusters = cluster_blockers(submissions, ctx.today)
    logger.debug(
        "Blockers clustered: %d units, %d reports",
        len(clusters), sum(c["count"] for c in clusters),
        extra={"tenant_id": ctx.tenant_id, "calculator": "blockers"},
    )
    return clusters
