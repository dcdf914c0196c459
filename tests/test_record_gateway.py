"""
RecordGateway — SQLAlchemy reads behind the calculators.

Seeds ORM rows for two tenants and checks scoping, filters, ordering,
tenant-local completion days and the GatewayError translation.
"""

from datetime import date, datetime
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

import opspulse.integrations.record_gateway as gw_module
from opspulse.core.exceptions import AggregationError, GatewayError
from opspulse.integrations.record_gateway import RecordGateway
from opspulse.models import db
from opspulse.models.standup import LeavePlan, ReportSubmission
from opspulse.models.team import Member, OrgUnit, Tenant
from opspulse.models.work import ACTIVE_STATUSES, Project, WorkItem


# ═══════════════════════════════════════════════════════════════════════════
# Test helpers
# ═══════════════════════════════════════════════════════════════════════════

def _make_member(tenant_id, name, unit=None):
    member = Member(tenant_id=tenant_id, name=name, org_unit_id=unit.id if unit else None)
    db.session.add(member)
    db.session.flush()
    return member


def _make_item(project, status, effort=None, completed_at=None, assignee=None):
    item = WorkItem(
        project_id=project.id, title=f"{status} task", status=status, effort=effort,
        completed_at=completed_at, assignee_id=assignee.id if assignee else None,
    )
    db.session.add(item)
    return item


@pytest.fixture()
def seeded(tenant):
    """Tenant with two units, three members and one of everything."""
    platform = OrgUnit(tenant_id=tenant.id, name="Platform")
    db.session.add(platform)
    db.session.flush()

    ada = _make_member(tenant.id, "Ada", platform)
    linus = _make_member(tenant.id, "Linus", platform)
    dennis = _make_member(tenant.id, "Dennis")

    project = Project(tenant_id=tenant.id, name="Portal")
    db.session.add(project)
    db.session.flush()
    _make_item(project, "Completed", 3, datetime(2025, 3, 10, 12, 0), ada)
    _make_item(project, "Completed", 2, datetime(2025, 3, 14, 23, 30), linus)
    _make_item(project, "Completed", 9, datetime(2025, 2, 1, 9, 0), ada)
    _make_item(project, "In Progress", 5, assignee=dennis)
    _make_item(project, "Review", None)

    db.session.add_all([
        ReportSubmission(tenant_id=tenant.id, member_id=ada.id, report_date=date(2025, 3, 12),
                         current_update="pairing", obstruction="VPN"),
        ReportSubmission(tenant_id=tenant.id, member_id=dennis.id, report_date=date(2025, 3, 13),
                         current_update="docs"),
        ReportSubmission(tenant_id=tenant.id, member_id=linus.id, report_date=date(2025, 3, 13),
                         current_update="release"),
        ReportSubmission(tenant_id=tenant.id, member_id=ada.id, report_date=date(2025, 1, 2),
                         current_update="old"),
    ])
    db.session.add_all([
        LeavePlan(member_id=ada.id, status="approved", start_date=date(2025, 3, 17),
                  end_date=date(2025, 3, 19)),
        LeavePlan(member_id=linus.id, status="Approved", start_date=date(2025, 3, 1),
                  end_date=date(2025, 3, 20)),
        LeavePlan(member_id=dennis.id, status="pending", start_date=date(2025, 3, 17),
                  end_date=date(2025, 3, 17)),
    ])

    # A second tenant whose rows must never leak
    other = Tenant(name="Other", slug="other")
    db.session.add(other)
    db.session.flush()
    stranger = _make_member(other.id, "Stranger")
    other_project = Project(tenant_id=other.id, name="Elsewhere")
    db.session.add(other_project)
    db.session.flush()
    _make_item(other_project, "Completed", 40, datetime(2025, 3, 12, 8, 0), stranger)
    db.session.add(ReportSubmission(tenant_id=other.id, member_id=stranger.id,
                                    report_date=date(2025, 3, 12), obstruction="theirs"))
    db.session.add(LeavePlan(member_id=stranger.id, status="approved",
                             start_date=date(2025, 3, 17), end_date=date(2025, 3, 18)))
    db.session.commit()
    return tenant


@pytest.fixture()
def gateway():
    return RecordGateway()


# ═══════════════════════════════════════════════════════════════════════════
# Queries
# ═══════════════════════════════════════════════════════════════════════════

class TestWorkItems:
    def test_completed_within_range(self, seeded, gateway):
        rows = gateway.query_work_items(seeded.id, ["Completed"], date(2025, 3, 1), date(2025, 3, 14))
        assert [(r.effort, r.completed_on) for r in rows] == [
            (3, date(2025, 3, 10)),
            (2, date(2025, 3, 14)),
        ]

    def test_active_statuses_without_bounds(self, seeded, gateway):
        rows = gateway.query_work_items(seeded.id, ACTIVE_STATUSES)
        assert sorted(r.status for r in rows) == ["In Progress", "Review"]
        assert all(r.completed_on is None for r in rows)

    def test_completion_day_uses_tenant_timezone(self, seeded, gateway):
        seeded.timezone = "America/New_York"
        db.session.commit()
        # 2025-03-14 23:30 UTC is 19:30 the same day in New York;
        # 2025-03-10 12:00 UTC is 08:00 on the 10th
        rows = gateway.query_work_items(seeded.id, ["Completed"], date(2025, 3, 14), date(2025, 3, 14))
        assert [r.completed_on for r in rows] == [date(2025, 3, 14)]

    def test_late_utc_completion_moves_to_next_local_day(self, seeded, gateway):
        seeded.timezone = "Europe/Istanbul"
        db.session.commit()
        # 23:30 UTC on the 14th is 02:30 on the 15th in Istanbul
        rows = gateway.query_work_items(seeded.id, ["Completed"], date(2025, 3, 15), date(2025, 3, 15))
        assert [r.completed_on for r in rows] == [date(2025, 3, 15)]

    def test_other_tenant_not_visible(self, seeded, gateway):
        rows = gateway.query_work_items(seeded.id, ["Completed"])
        assert 40 not in [r.effort for r in rows]


class TestReportSubmissions:
    def test_newest_first_with_unit(self, seeded, gateway):
        rows = gateway.query_report_submissions(seeded.id, date(2025, 2, 13), date(2025, 3, 14))
        assert [r.current_update for r in rows] == ["release", "docs", "pairing"]
        assert [r.unit_name for r in rows] == ["Platform", None, "Platform"]
        assert rows[2].obstruction == "VPN"


class TestLeave:
    def test_overlapping_approved_case_insensitive(self, seeded, gateway):
        rows = gateway.query_approved_leave(seeded.id, date(2025, 3, 14), date(2025, 3, 27))
        assert [(r.start_date, r.end_date) for r in rows] == [
            (date(2025, 3, 1), date(2025, 3, 20)),
            (date(2025, 3, 17), date(2025, 3, 19)),
        ]

    def test_contained_only(self, seeded, gateway):
        rows = gateway.query_approved_leave(seeded.id, date(2025, 3, 14), date(2025, 3, 27), contained=True)
        assert [r.start_date for r in rows] == [date(2025, 3, 17)]


class TestMembers:
    def test_members_with_units(self, seeded, gateway):
        rows = gateway.query_members(seeded.id)
        assert [(m.name, m.unit_name) for m in rows] == [
            ("Ada", "Platform"), ("Linus", "Platform"), ("Dennis", None),
        ]
        assert len(rows) == Member.query_for_tenant(seeded.id).count()

    def test_unknown_tenant(self, gateway):
        assert gateway.query_members(999) == []
        assert gateway.tenant_timezone(999) is None


# ═══════════════════════════════════════════════════════════════════════════
# Failures
# ═══════════════════════════════════════════════════════════════════════════

def test_store_failure_becomes_gateway_error(seeded, gateway):
    boom = OperationalError("SELECT", {}, Exception("connection lost"))
    with patch.object(db.session, "query", side_effect=boom):
        with pytest.raises(GatewayError) as exc_info:
            gateway.query_members(seeded.id)
    err = exc_info.value
    assert isinstance(err, AggregationError)
    assert err.operation == "query_members"
    assert err.tenant_id == seeded.id
    assert err.__cause__ is boom


def test_module_singleton():
    assert isinstance(gw_module.record_gateway, RecordGateway)
