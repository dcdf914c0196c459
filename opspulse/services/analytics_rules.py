"""
Analytics Rules Registry

Windows, reference points, classification thresholds and the risk-finding
vocabulary shared by every calculator and the sentinel synthesizer.
Read-only at runtime: calculators hold no mutable process-wide state.

Usage:
    from opspulse.services.analytics_rules import AnalyticsRules
    window = AnalyticsRules.get_threshold("velocity_window_days")    # 14
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


# ═════════════════════════════════════════════════════════════════════════════
# Enums & Data Classes
# ═════════════════════════════════════════════════════════════════════════════

class RiskSeverity(str, Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    OPTIMAL = "Optimal"


class RiskCategory(str, Enum):
    VELOCITY = "Velocity"
    ALIGNMENT = "Alignment"
    CAPACITY = "Capacity"
    FRICTION = "Friction"
    SYSTEM = "System"


@dataclass(frozen=True)
class RiskFinding:
    """Single sentinel finding. Derived on every call, never persisted."""
    code: str
    category: RiskCategory
    severity: RiskSeverity
    message: str
    details: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "details": dict(self.details),
        }


# ═════════════════════════════════════════════════════════════════════════════
# Threshold Configuration: managed from a single location
# ═════════════════════════════════════════════════════════════════════════════

THRESHOLDS: MappingProxyType = MappingProxyType({
    # Velocity calculator
    "velocity_window_days": 14,              # trailing window, today inclusive
    "velocity_trend_span_days": 3,           # recent3 vs prev3
    "velocity_trend_no_baseline_pct": 100,   # trend when prev3 == 0

    # Engagement scorer
    "engagement_window_days": 30,
    "engagement_expected_submissions": 20,   # working days in the window
    "engagement_detail_reference_words": 50, # avg words per report = "fully detailed"

    # Capacity forecaster
    "capacity_horizon_days": 14,             # forward, today inclusive
    "capacity_load_reference_days": 10,      # active effort spread for the load line
    "capacity_saturation_ratio": 0.8,        # binary risk policy (sentinel)
    "capacity_load_high_pct": 85,            # display band policy
    "capacity_load_medium_pct": 60,

    # Blocker clusterer
    "blocker_window_days": 30,

    # Leave analyzer
    "leave_analysis_default_days": 90,
    "leave_drop_reference_days": 30,
    "leave_drop_recommend_pct": 20,

    # Sentinel rules
    "sentinel_velocity_decay_ratio": 0.8,    # RV-01: recent3 < prev3 * ratio
    "sentinel_alignment_min_score": 70,      # AG-03: mean dimension score
    "sentinel_friction_max_blockers": 5,     # FD-05: fixed, not headcount-scaled
})

# Engagement dimensions that are not measured yet. Reported with
# placeholder=True so consumers can tell them from computed values.
PLACEHOLDER_DIMENSIONS: tuple[tuple[str, float], ...] = (
    ("Blocker Clarity", 85),
    ("Submission Speed", 70),
    ("Task Alignment", 90),
)

ENGAGEMENT_SUBJECTS: tuple[str, ...] = (
    "Consistency",
    "Detail Level",
    *(name for name, _ in PLACEHOLDER_DIMENSIONS),
)

# Weekday index 0 = Sunday … 6 = Saturday
WEEKEND_DAYS = frozenset({0, 6})


# ═════════════════════════════════════════════════════════════════════════════
# Sentinel rule catalog
# ═════════════════════════════════════════════════════════════════════════════

SENTINEL_RULES: tuple[dict[str, Any], ...] = (
    {
        "code": "RV-01",
        "label": "Velocity Decay",
        "category": RiskCategory.VELOCITY,
        "severity": RiskSeverity.HIGH,
        "description": "Compares the last 3 days of completed effort with the 3 days "
                       "before. Alerts on a contraction of more than 20%.",
    },
    {
        "code": "AG-03",
        "label": "Alignment Gap",
        "category": RiskCategory.ALIGNMENT,
        "severity": RiskSeverity.MEDIUM,
        "description": "Mean of the five engagement dimensions below 70.",
    },
    {
        "code": "RS-09",
        "label": "Resource Saturation",
        "category": RiskCategory.CAPACITY,
        "severity": RiskSeverity.CRITICAL,
        "description": "Active effort exceeds 80% of available member-days "
                       "over the forecast horizon.",
    },
    {
        "code": "FD-05",
        "label": "Friction Density",
        "category": RiskCategory.FRICTION,
        "severity": RiskSeverity.LOW,
        "description": "More than 5 reported blockers across all units in "
                       "the last 30 days.",
    },
)

CLEAR_FINDING = RiskFinding(
    code="SY-00",
    category=RiskCategory.SYSTEM,
    severity=RiskSeverity.OPTIMAL,
    message="All operational parameters within standard deviation.",
)


# ═════════════════════════════════════════════════════════════════════════════
# Public API
# ═════════════════════════════════════════════════════════════════════════════

class AnalyticsRules:
    """Read-only access to analytics thresholds and the sentinel rule catalog."""

    @staticmethod
    def get_threshold(key: str, default=None):
        """Read a single threshold value."""
        return THRESHOLDS.get(key, default)

    @staticmethod
    def get_all_thresholds() -> dict:
        """Return a detached copy of all thresholds."""
        return dict(THRESHOLDS)

    @staticmethod
    def rule_catalog() -> list[dict]:
        """List sentinel rules with their labels and descriptions."""
        return [
            {
                "code": r["code"],
                "label": r["label"],
                "category": r["category"].value,
                "severity": r["severity"].value,
                "description": r["description"],
            }
            for r in SENTINEL_RULES
        ]

    @staticmethod
    def rule(code: str) -> dict | None:
        """Return the catalog entry for one rule code."""
        return next((r for r in SENTINEL_RULES if r["code"] == code), None)
