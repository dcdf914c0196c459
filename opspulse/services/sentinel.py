"""
Sentinel Synthesizer

Runs the four calculators and applies a fixed rule table:

    RV-01  recent3 < prev3 * 0.8            Velocity   High
    AG-03  mean engagement dimension < 70    Alignment  Medium
    RS-09  capacity risk_level == "High"     Capacity   Critical
    FD-05  total blockers > 5                Friction   Low

When nothing fires the result is exactly one SY-00 "Optimal" finding, so
the list is never empty. A single evaluate-and-return pass: any calculator
error aborts the whole synthesis; a partial risk list is never returned.

Without a snapshot every calculator reads the store independently; pass
``snapshot=AnalyticsSnapshot.capture(...)`` for one consistent view.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from opspulse.core.exceptions import AnalyticsError
from opspulse.services.analytics_rules import (
    CLEAR_FINDING,
    THRESHOLDS,
    AnalyticsRules,
    RiskFinding,
)
from opspulse.services.blockers import compute_blockers
from opspulse.services.capacity import RISK_HIGH, compute_capacity
from opspulse.services.clock import FixedClock
from opspulse.services.engagement import compute_engagement
from opspulse.services.helpers.analytics_context import resolve_context
from opspulse.services.velocity import compute_velocity, trend_sums

logger = logging.getLogger(__name__)


def _finding(code: str, message: str, **details) -> RiskFinding:
    rule = AnalyticsRules.rule(code)
    return RiskFinding(
        code=code,
        category=rule["category"],
        severity=rule["severity"],
        message=message,
        details=details,
    )


# ═════════════════════════════════════════════════════════════════════════════
# Rule Definitions
# ═════════════════════════════════════════════════════════════════════════════

def _rule_velocity_decay(inputs: dict) -> RiskFinding | None:
    """RV-01: Velocity Decay."""
    # Recomputed from the series rather than trusting the calculator's fields
    recent3, prev3 = trend_sums(inputs["velocity"]["series"])
    ratio = THRESHOLDS["sentinel_velocity_decay_ratio"]
    if recent3 < prev3 * ratio:
        drop = (prev3 - recent3) / prev3 * 100
        return _finding(
            "RV-01",
            f"Throughput contracted {drop:.0f}% over the last 3 days "
            f"({recent3:g} vs {prev3:g} effort-days).",
            recent3=recent3, prev3=prev3, threshold_ratio=ratio,
        )
    return None


def _rule_alignment_gap(inputs: dict) -> RiskFinding | None:
    """AG-03: Alignment Gap."""
    values = [d["value"] for d in inputs["engagement"]]
    mean_score = sum(values) / len(values) if values else 0.0
    minimum = THRESHOLDS["sentinel_alignment_min_score"]
    if mean_score < minimum:
        return _finding(
            "AG-03",
            f"Team engagement index at {mean_score:.0f}, below the {minimum} baseline.",
            mean_score=mean_score, threshold=minimum,
        )
    return None


def _rule_resource_saturation(inputs: dict) -> RiskFinding | None:
    """RS-09: Resource Saturation."""
    capacity = inputs["capacity"]
    if capacity["risk_level"] == RISK_HIGH:
        return _finding(
            "RS-09",
            f"Active effort of {capacity['current_load']:g} effort-days exceeds "
            f"80% of the {capacity['total_available']} available member-days.",
            current_load=capacity["current_load"],
            total_available=capacity["total_available"],
            threshold_ratio=THRESHOLDS["capacity_saturation_ratio"],
        )
    return None


def _rule_friction_density(inputs: dict) -> RiskFinding | None:
    """FD-05: Friction Density."""
    # TODO: decide with product whether this limit should scale with headcount
    total = sum(c["count"] for c in inputs["blockers"])
    limit = THRESHOLDS["sentinel_friction_max_blockers"]
    if total > limit:
        units = [c["unit"] for c in inputs["blockers"]]
        return _finding(
            "FD-05",
            f"{total} blockers reported across {len(units)} unit(s) in the last 30 days.",
            total_blockers=total, threshold=limit, units=units,
        )
    return None


_SENTINEL_RULES: tuple[Callable[[dict], RiskFinding | None], ...] = (
    _rule_velocity_decay,
    _rule_alignment_gap,
    _rule_resource_saturation,
    _rule_friction_density,
)


# ═════════════════════════════════════════════════════════════════════════════
# Public API
# ═════════════════════════════════════════════════════════════════════════════

def evaluate_findings(velocity: dict, engagement: list[dict],
                      capacity: dict, blockers: list[dict]) -> list[RiskFinding]:
    """Apply the rule table to calculator outputs. Pure; never empty."""
    inputs = {
        "velocity": velocity,
        "engagement": engagement,
        "capacity": capacity,
        "blockers": blockers,
    }
    findings = [f for f in (rule(inputs) for rule in _SENTINEL_RULES) if f is not None]
    return findings or [CLEAR_FINDING]


def compute_sentinel(tenant_id, *, gateway=None, clock=None, snapshot=None) -> list[dict]:
    """Risk findings for one tenant as ``[{code, category, severity, message, details}]``.

    Raises whatever the first failing calculator raised; no partial list.
    """
    ctx = resolve_context(tenant_id, gateway=gateway, clock=clock, snapshot=snapshot)
    # Pin "today" so all four calculators share the same windows
    kwargs = {"gateway": ctx.gateway, "snapshot": snapshot}
    if snapshot is None:
        kwargs["clock"] = FixedClock(ctx.today)

    started = time.perf_counter()
    try:
        velocity = compute_velocity(ctx.tenant_id, **kwargs)
        engagement = compute_engagement(ctx.tenant_id, **kwargs)
        capacity = compute_capacity(ctx.tenant_id, **kwargs)
        blockers = compute_blockers(ctx.tenant_id, **kwargs)
    except AnalyticsError:
        logger.warning(
            "Sentinel aborted: a calculator failed", exc_info=True,
            extra={"tenant_id": ctx.tenant_id, "calculator": "sentinel"},
        )
        raise

    findings = evaluate_findings(velocity, engagement, capacity, blockers)
    logger.info(
        "Sentinel evaluated: %s", ", ".join(f.code for f in findings),
        extra={
            "tenant_id": ctx.tenant_id,
            "calculator": "sentinel",
            "rule_codes": [f.code for f in findings],
            "duration_ms": (time.perf_counter() - started) * 1000,
        },
    )
    return [f.to_dict() for f in findings]
