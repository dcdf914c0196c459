"""
Engagement Scorer

Per member, over the trailing 30-day window:
    consistency = min(submissions / 20 * 100, 100)
    detail      = min(avg words per submission / 50 * 100, 100)

The team view averages both over all members (members who never submitted
count as 0) and returns five named dimensions. Three of them are not
measured yet; they are emitted as PlaceholderMetric values with
``placeholder: True`` rather than disguised as computed scores.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from opspulse.services.analytics_rules import PLACEHOLDER_DIMENSIONS, THRESHOLDS
from opspulse.services.helpers.analytics_context import (
    clamp_pct,
    resolve_context,
    trailing_window,
)
from opspulse.services.records import MemberRecord, ReportRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeasuredMetric:
    subject: str
    value: float
    placeholder = False

    def to_dict(self) -> dict:
        return {"subject": self.subject, "value": self.value, "placeholder": self.placeholder}


@dataclass(frozen=True)
class PlaceholderMetric(MeasuredMetric):
    """A dimension with a fixed stand-in value, not derived from records."""
    placeholder = True


def word_count(text: str | None) -> int:
    return len(text.split()) if text else 0


def member_scores(
    members: Iterable[MemberRecord],
    submissions: Iterable[ReportRecord],
    today: date,
) -> list[dict]:
    """Per-member consistency / detail scores, in member order."""
    start, end = trailing_window(today, THRESHOLDS["engagement_window_days"])
    expected = THRESHOLDS["engagement_expected_submissions"]
    reference_words = THRESHOLDS["engagement_detail_reference_words"]

    counts: dict[int, int] = {}
    words: dict[int, int] = {}
    for sub in submissions:
        if not (start <= sub.report_date <= end):
            continue
        counts[sub.member_id] = counts.get(sub.member_id, 0) + 1
        words[sub.member_id] = words.get(sub.member_id, 0) + sum(
            word_count(text) for text in sub.text_fields
        )

    scores = []
    for member in members:
        submitted = counts.get(member.id, 0)
        total_words = words.get(member.id, 0)
        avg_detail = total_words / submitted if submitted else 0.0
        scores.append({
            "member_id": member.id,
            "name": member.name,
            "submission_count": submitted,
            "detail_word_count": total_words,
            "avg_detail": avg_detail,
            "consistency": clamp_pct(submitted / expected * 100),
            "detail": clamp_pct(avg_detail / reference_words * 100),
        })
    return scores


def team_dimensions(scores: list[dict]) -> list[MeasuredMetric]:
    """Five team-level dimensions from per-member scores."""
    if scores:
        consistency = sum(s["consistency"] for s in scores) / len(scores)
        detail = sum(s["detail"] for s in scores) / len(scores)
    else:
        consistency = detail = 0.0

    return [
        MeasuredMetric("Consistency", clamp_pct(consistency)),
        MeasuredMetric("Detail Level", clamp_pct(detail)),
        *(PlaceholderMetric(name, float(value)) for name, value in PLACEHOLDER_DIMENSIONS),
    ]


def _fetch(ctx) -> tuple[list[MemberRecord], list[ReportRecord]]:
    if ctx.snapshot is not None:
        return ctx.snapshot.members, ctx.snapshot.submissions
    start, end = trailing_window(ctx.today, THRESHOLDS["engagement_window_days"])
    members = ctx.gateway.query_members(ctx.tenant_id)
    submissions = ctx.gateway.query_report_submissions(ctx.tenant_id, start, end)
    return members, submissions


def compute_member_engagement(tenant_id, *, gateway=None, clock=None, snapshot=None) -> list[dict]:
    """Per-member engagement breakdown behind the team dimensions."""
    ctx = resolve_context(tenant_id, gateway=gateway, clock=clock, snapshot=snapshot)
    members, submissions = _fetch(ctx)
    return member_scores(members, submissions, ctx.today)


def compute_engagement(tenant_id, *, gateway=None, clock=None, snapshot=None) -> list[dict]:
    """Team engagement as exactly five ``{subject, value, placeholder}`` entries.

    Order: Consistency, Detail Level, Blocker Clarity, Submission Speed,
    Task Alignment. Values are within [0, 100].
    """
    ctx = resolve_context(tenant_id, gateway=gateway, clock=clock, snapshot=snapshot)
    members, submissions = _fetch(ctx)
    dimensions = team_dimensions(member_scores(members, submissions, ctx.today))
    logger.debug(
        "Engagement computed for %d members", len(members),
        extra={"tenant_id": ctx.tenant_id, "calculator": "engagement"},
    )
    return [d.to_dict() for d in dimensions]
