"""
Record Gateway — read-only access to the record store for analytics.

Every query the calculators need goes through this class; services never
touch the ORM models directly. Rows come back as frozen record objects
(opspulse.services.records) detached from the SQLAlchemy session.

Contract:
  - Reads only. No flush, no commit, no locks held after return.
  - No retries. A SQLAlchemyError is re-raised as GatewayError (with the
    original exception chained) and the caller decides how to degrade.
  - Date bounds are tenant-local calendar days, inclusive on both ends.
    WorkItem.completed_at is stored in UTC; the gateway converts the day
    bounds to UTC for the query and the timestamps back to local days.

Testability: calculators accept any object with the same five query
methods, so tests pass an in-memory fake instead of this class.

Usage:
    from opspulse.integrations.record_gateway import record_gateway
    members = record_gateway.query_members(tenant_id=1)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from opspulse.core.exceptions import GatewayError
from opspulse.models import db
from opspulse.models.standup import LEAVE_APPROVED, LeavePlan, ReportSubmission
from opspulse.models.team import Member, OrgUnit, Tenant
from opspulse.models.work import Project, WorkItem
from opspulse.services.clock import resolve_zone
from opspulse.services.records import (
    LeaveRecord,
    MemberRecord,
    ReportRecord,
    WorkItemRecord,
)

logger = logging.getLogger(__name__)


@contextmanager
def _gateway_call(operation: str, tenant_id: int):
    """Translate store failures into GatewayError, logging once here."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(
            "Record gateway %s failed for tenant=%s: %s", operation, tenant_id, exc,
            extra={"tenant_id": tenant_id, "operation": operation},
        )
        raise GatewayError(operation, tenant_id=tenant_id, cause=exc) from exc


def _utc_naive(day: date, zone) -> datetime:
    """Local midnight of ``day`` expressed as naive UTC (storage format)."""
    local_midnight = datetime.combine(day, time.min, tzinfo=zone)
    return local_midnight.astimezone(timezone.utc).replace(tzinfo=None)


def _local_day(ts: datetime | None, zone) -> date | None:
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(zone).date()


class RecordGateway:
    """SQLAlchemy-backed record gateway.

    Instantiate once at module level (module-level singleton pattern).
    Requires an active Flask application context.
    """

    # ── Tenant ───────────────────────────────────────────────────────────────

    def tenant_timezone(self, tenant_id: int) -> str | None:
        """Return the tenant's IANA zone name, or None if the tenant is unknown."""
        with _gateway_call("tenant_timezone", tenant_id):
            tenant = db.session.get(Tenant, tenant_id)
        return tenant.timezone if tenant else None

    # ── Work items ───────────────────────────────────────────────────────────

    def query_work_items(
        self,
        tenant_id: int,
        statuses: Iterable[str],
        start: date | None = None,
        end: date | None = None,
    ) -> list[WorkItemRecord]:
        """Work items in the given statuses, scoped via project → tenant.

        ``start`` / ``end`` bound the completion day (tenant-local, inclusive);
        leave both None for items regardless of completion time.
        """
        zone = resolve_zone(self.tenant_timezone(tenant_id))
        with _gateway_call("query_work_items", tenant_id):
            q = (
                db.session.query(WorkItem)
                .join(Project, WorkItem.project_id == Project.id)
                .filter(
                    Project.tenant_id == tenant_id,
                    WorkItem.status.in_(list(statuses)),
                )
            )
            if start is not None:
                q = q.filter(WorkItem.completed_at >= _utc_naive(start, zone))
            if end is not None:
                q = q.filter(WorkItem.completed_at < _utc_naive(end + timedelta(days=1), zone))
            rows = q.order_by(WorkItem.id).all()

        return [
            WorkItemRecord(
                id=row.id,
                status=row.status,
                effort=row.effort,
                completed_on=_local_day(row.completed_at, zone),
                assignee_id=row.assignee_id,
            )
            for row in rows
        ]

    # ── Standup submissions ──────────────────────────────────────────────────

    def query_report_submissions(
        self, tenant_id: int, start: date, end: date,
    ) -> list[ReportRecord]:
        """Submissions dated within [start, end], newest first, joined to unit."""
        with _gateway_call("query_report_submissions", tenant_id):
            rows = (
                db.session.query(ReportSubmission, OrgUnit.name)
                .join(Member, ReportSubmission.member_id == Member.id)
                .outerjoin(OrgUnit, Member.org_unit_id == OrgUnit.id)
                .filter(
                    ReportSubmission.tenant_id == tenant_id,
                    ReportSubmission.report_date >= start,
                    ReportSubmission.report_date <= end,
                )
                .order_by(ReportSubmission.report_date.desc(), ReportSubmission.id.desc())
                .all()
            )

        return [
            ReportRecord(
                id=sub.id,
                member_id=sub.member_id,
                report_date=sub.report_date,
                prior_update=sub.prior_update,
                current_update=sub.current_update,
                obstruction=sub.obstruction,
                unit_name=unit_name,
            )
            for sub, unit_name in rows
        ]

    # ── Leave ────────────────────────────────────────────────────────────────

    def query_approved_leave(
        self,
        tenant_id: int,
        start: date,
        end: date,
        *,
        contained: bool = False,
    ) -> list[LeaveRecord]:
        """Approved leave plans of the tenant's members.

        By default returns plans overlapping [start, end]; with
        ``contained=True`` only plans lying entirely inside the range.
        """
        with _gateway_call("query_approved_leave", tenant_id):
            q = (
                db.session.query(LeavePlan)
                .join(Member, LeavePlan.member_id == Member.id)
                .filter(
                    Member.tenant_id == tenant_id,
                    func.lower(LeavePlan.status) == LEAVE_APPROVED,
                )
            )
            if contained:
                q = q.filter(LeavePlan.start_date >= start, LeavePlan.end_date <= end)
            else:
                q = q.filter(LeavePlan.start_date <= end, LeavePlan.end_date >= start)
            rows = q.order_by(LeavePlan.start_date, LeavePlan.id).all()

        return [
            LeaveRecord(
                id=row.id,
                member_id=row.member_id,
                start_date=row.start_date,
                end_date=row.end_date,
                status=row.status,
                leave_type=row.leave_type,
            )
            for row in rows
        ]

    # ── Members ──────────────────────────────────────────────────────────────

    def query_members(self, tenant_id: int) -> list[MemberRecord]:
        """All members of the tenant with their unit name (None if unassigned)."""
        with _gateway_call("query_members", tenant_id):
            rows = (
                db.session.query(Member, OrgUnit.name)
                .outerjoin(OrgUnit, Member.org_unit_id == OrgUnit.id)
                .filter(Member.tenant_id == tenant_id)
                .order_by(Member.id)
                .all()
            )

        return [
            MemberRecord(
                id=member.id,
                name=member.name,
                unit_id=member.org_unit_id,
                unit_name=unit_name,
            )
            for member, unit_name in rows
        ]


record_gateway = RecordGateway()
