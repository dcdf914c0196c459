"""
Analytics services — one function per calculator plus the synthesizer.

    compute_velocity(tenant_id)     → {series, total, average, peak, trend, ...}
    compute_engagement(tenant_id)   → [{subject, value, placeholder}] × 5
    compute_capacity(tenant_id)     → {daily, total_available, current_load, risk_level, ...}
    compute_blockers(tenant_id)     → [{unit, count, latest}]
    compute_sentinel(tenant_id)     → [RiskFinding dict, ...]  (never empty)

All accept keyword-only ``gateway=``, ``clock=`` and ``snapshot=``.
"""

from opspulse.services.analytics_rules import AnalyticsRules, RiskFinding
from opspulse.services.blockers import compute_blockers
from opspulse.services.capacity import compute_capacity
from opspulse.services.clock import FixedClock, SystemClock
from opspulse.services.engagement import compute_engagement, compute_member_engagement
from opspulse.services.leave_analysis import compute_leave_analysis
from opspulse.services.sentinel import compute_sentinel
from opspulse.services.snapshot import AnalyticsSnapshot
from opspulse.services.velocity import compute_velocity

__all__ = [
    "AnalyticsRules",
    "AnalyticsSnapshot",
    "FixedClock",
    "RiskFinding",
    "SystemClock",
    "compute_blockers",
    "compute_capacity",
    "compute_engagement",
    "compute_leave_analysis",
    "compute_member_engagement",
    "compute_sentinel",
    "compute_velocity",
]
