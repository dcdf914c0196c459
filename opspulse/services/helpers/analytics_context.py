"""
Shared plumbing for the analytics calculators.

Every public calculator starts with ``resolve_context(...)``, which:
  1. validates the tenant id (ConfigurationError before any query),
  2. picks the record source: an explicit gateway, the shared snapshot,
     or the module-level SQLAlchemy gateway,
  3. fixes "today" from the snapshot, an injected Clock, or the tenant's
     time zone.

Also home to the small numeric helpers the calculators share.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any

from flask import current_app, has_app_context

from opspulse.core.exceptions import ConfigurationError
from opspulse.services.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticsContext:
    tenant_id: int
    gateway: Any
    today: date
    snapshot: Any = None


def validate_tenant_id(tenant_id) -> int:
    """Return the tenant id as int or raise ConfigurationError."""
    if tenant_id is None or (isinstance(tenant_id, str) and not tenant_id.strip()):
        raise ConfigurationError("tenant_id is required", details={"tenant_id": None}, missing=True)
    if isinstance(tenant_id, bool):
        raise ConfigurationError("tenant_id must be an integer", details={"tenant_id": tenant_id})
    if isinstance(tenant_id, str):
        raw = tenant_id.strip()
        # ASCII decimal digits only: int() rejects "²" and "①"
        if not (raw.isascii() and raw.isdecimal()):
            raise ConfigurationError("tenant_id must be an integer", details={"tenant_id": raw})
        tenant_id = int(raw)
    if not isinstance(tenant_id, int):
        raise ConfigurationError("tenant_id must be an integer", details={"tenant_id": repr(tenant_id)})
    if tenant_id <= 0:
        raise ConfigurationError("tenant_id must be positive", details={"tenant_id": tenant_id})
    return tenant_id


def default_gateway():
    # Imported lazily: the SQLAlchemy gateway pulls in the ORM models
    from opspulse.integrations.record_gateway import record_gateway
    return record_gateway


def tenant_clock(tenant_id: int, gateway) -> Clock:
    """SystemClock in the tenant's zone, else the app default, else UTC."""
    tz_name = gateway.tenant_timezone(tenant_id)
    if not tz_name and has_app_context():
        tz_name = current_app.config.get("ANALYTICS_DEFAULT_TIMEZONE")
    return SystemClock(tz_name or "UTC")


def resolve_context(tenant_id, *, gateway=None, clock: Clock | None = None,
                    snapshot=None) -> AnalyticsContext:
    tid = validate_tenant_id(tenant_id)

    if snapshot is not None:
        if snapshot.tenant_id != tid:
            raise ConfigurationError(
                "Snapshot was captured for a different tenant",
                details={"tenant_id": tid, "snapshot_tenant_id": snapshot.tenant_id},
            )
        return AnalyticsContext(tid, gateway or snapshot.gateway, snapshot.today, snapshot)

    gw = gateway if gateway is not None else default_gateway()
    today = (clock or tenant_clock(tid, gw)).today()
    return AnalyticsContext(tid, gw, today)


# ── Windows ──────────────────────────────────────────────────────────────────

def trailing_window(today: date, days: int) -> tuple[date, date]:
    """``days`` calendar days ending today, inclusive."""
    return today - timedelta(days=days - 1), today


def forward_horizon(today: date, days: int) -> list[date]:
    """``days`` calendar days starting today, inclusive."""
    return [today + timedelta(days=i) for i in range(days)]


def weekday_index(day: date) -> int:
    """0 = Sunday … 6 = Saturday."""
    return day.isoweekday() % 7


# ── Numbers ──────────────────────────────────────────────────────────────────

def normalize_effort(value) -> float:
    """Effort as a finite, non-negative float; anything else counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        effort = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(effort) or effort < 0:
        return 0.0
    return effort


def clamp_pct(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def round_half_up(value: float) -> int:
    """Integer rounding with .5 going up (display percentages)."""
    return int(math.floor(value + 0.5))
