"""
Record value objects handed from the record gateway to the calculators.

They are frozen snapshots of store rows, detached from the ORM session, so
calculators stay pure functions of plain data and tests can build them
directly without a database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any


@dataclass(frozen=True)
class WorkItemRecord:
    id: int
    status: str
    effort: Any = None                 # raw store value; calculators normalize
    completed_on: date | None = None   # tenant-local completion day
    assignee_id: int | None = None


@dataclass(frozen=True)
class ReportRecord:
    id: int
    member_id: int
    report_date: date
    prior_update: str | None = None
    current_update: str | None = None
    obstruction: str | None = None
    unit_name: str | None = None

    @property
    def text_fields(self) -> tuple[str | None, str | None, str | None]:
        return (self.prior_update, self.current_update, self.obstruction)


@dataclass(frozen=True)
class LeaveRecord:
    id: int
    member_id: int
    start_date: date
    end_date: date
    status: str = "approved"
    leave_type: str | None = None

    def covers(self, day: date) -> bool:
        """Inclusive on both ends."""
        return self.start_date <= day <= self.end_date

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class MemberRecord:
    id: int
    name: str
    unit_id: int | None = None
    unit_name: str | None = None
