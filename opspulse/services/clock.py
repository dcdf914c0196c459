"""
Clock capability — the only source of "today" for the analytics engine.

Window boundaries (trailing 14/30 days, forward 14-day horizon) all hang
off the tenant-local calendar day. Calculators take a Clock instead of
calling date.today(), so tests pin the day with FixedClock.

Usage:
    from opspulse.services.clock import FixedClock, SystemClock
    compute_velocity(tenant_id, clock=FixedClock(date(2025, 3, 14)))
    SystemClock("Europe/Istanbul").today()
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from opspulse.core.exceptions import ConfigurationError


class Clock(Protocol):
    def today(self) -> date: ...


def resolve_zone(tz_name: str | None):
    """Return a tzinfo for an IANA name; None or "UTC" → timezone.utc."""
    if not tz_name or tz_name.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationError(
            f"Unknown time zone {tz_name!r}", details={"timezone": tz_name},
        ) from exc


class SystemClock:
    """Wall-clock date in a given time zone."""

    def __init__(self, tz_name: str | None = "UTC") -> None:
        self.tz_name = tz_name or "UTC"
        self._zone = resolve_zone(tz_name)

    def today(self) -> date:
        return datetime.now(self._zone).date()

    def __repr__(self) -> str:
        return f"SystemClock({self.tz_name!r})"


class FixedClock:
    """Always returns the same day."""

    def __init__(self, day: date) -> None:
        self.day = day

    def today(self) -> date:
        return self.day

    def __repr__(self) -> str:
        return f"FixedClock({self.day.isoformat()})"
