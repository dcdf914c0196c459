"""
Shared pytest fixtures for the OpsPulse analytics test suite.

Provides:
    - app: Flask application (session-scoped)
    - session: Per-test table create/drop inside an app context (autouse)
    - client: Flask test client (function-scoped)
    - tenant: Pre-created Tenant entity
    - gateway: In-memory FakeGateway for calculator tests
    - clock: FixedClock pinned to TODAY
"""

from datetime import date, timedelta

import pytest

from opspulse import create_app
from opspulse.core.exceptions import GatewayError
from opspulse.models import db as _db
from opspulse.services.clock import FixedClock
from opspulse.services.records import (
    LeaveRecord,
    MemberRecord,
    ReportRecord,
    WorkItemRecord,
)

# Friday
TODAY = date(2025, 3, 14)
TENANT_ID = 1


def days_ago(n: int) -> date:
    return TODAY - timedelta(days=n)


# ── Fake record gateway ──────────────────────────────────────────────────


class FakeGateway:
    """In-memory record gateway with the same query contract as RecordGateway.

    Set ``fail_on`` to an operation name to make that call raise
    GatewayError. Every call is appended to ``calls``.
    """

    def __init__(self, timezone=None):
        self.timezone = timezone
        self.members: list[MemberRecord] = []
        self.work_items: list[WorkItemRecord] = []
        self.submissions: list[ReportRecord] = []
        self.leave: list[LeaveRecord] = []
        self.fail_on: str | None = None
        self.calls: list[str] = []

    def _enter(self, operation, tenant_id):
        self.calls.append(operation)
        if self.fail_on == operation:
            raise GatewayError(operation, tenant_id=tenant_id, cause=RuntimeError("store down"))

    # builders

    def add_member(self, member_id, name=None, unit_id=None, unit_name=None):
        self.members.append(MemberRecord(member_id, name or f"Member {member_id}", unit_id, unit_name))

    def add_completed(self, day, effort, assignee_id=None):
        self.work_items.append(WorkItemRecord(
            len(self.work_items) + 1, "Completed", effort, day, assignee_id,
        ))

    def add_active(self, effort, status="In Progress", assignee_id=None):
        self.work_items.append(WorkItemRecord(
            len(self.work_items) + 1, status, effort, None, assignee_id,
        ))

    def add_submission(self, member_id, day, prior=None, current=None, obstruction=None,
                       unit_name=None):
        self.submissions.append(ReportRecord(
            len(self.submissions) + 1, member_id, day, prior, current, obstruction, unit_name,
        ))

    def add_leave(self, member_id, start, end, status="approved", leave_type="annual"):
        self.leave.append(LeaveRecord(len(self.leave) + 1, member_id, start, end, status, leave_type))

    # gateway contract

    def tenant_timezone(self, tenant_id):
        self._enter("tenant_timezone", tenant_id)
        return self.timezone

    def query_work_items(self, tenant_id, statuses, start=None, end=None):
        self._enter("query_work_items", tenant_id)
        wanted = set(statuses)
        rows = []
        for item in self.work_items:
            if item.status not in wanted:
                continue
            if start is not None and (item.completed_on is None or item.completed_on < start):
                continue
            if end is not None and (item.completed_on is None or item.completed_on > end):
                continue
            rows.append(item)
        return rows

    def query_report_submissions(self, tenant_id, start, end):
        self._enter("query_report_submissions", tenant_id)
        rows = [s for s in self.submissions if start <= s.report_date <= end]
        return sorted(rows, key=lambda s: (s.report_date, s.id), reverse=True)

    def query_approved_leave(self, tenant_id, start, end, *, contained=False):
        self._enter("query_approved_leave", tenant_id)
        rows = [p for p in self.leave if p.status.lower() == "approved"]
        if contained:
            return [p for p in rows if p.start_date >= start and p.end_date <= end]
        return [p for p in rows if p.start_date <= end and p.end_date >= start]

    def query_members(self, tenant_id):
        self._enter("query_members", tenant_id)
        return list(self.members)


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(autouse=True)
def session(app):
    """Per-test: open app context, create tables, drop them afterwards."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.rollback()
        _db.drop_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def tenant():
    """A committed tenant in UTC."""
    from opspulse.models.team import Tenant
    t = Tenant(name="Test Tenant", slug="test-tenant", timezone="UTC")
    _db.session.add(t)
    _db.session.commit()
    return t


# ── Calculator fixtures ──────────────────────────────────────────────────


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def clock():
    return FixedClock(TODAY)
