#!/usr/bin/env python3
"""
OpsPulse — Demo Seed.

Creates one tenant with two teams, a handful of members, a project with
completed and in-flight work items, 30 days of standup submissions and a
few leave plans, so every analytics widget has something to show.

Usage:
    python scripts/seed_demo_data.py                  # seed "demo" tenant
    python scripts/seed_demo_data.py --slug acme      # custom tenant slug
    python scripts/seed_demo_data.py --reset          # drop + recreate tables first
"""

import argparse
import random
import sys
from datetime import date, datetime, time, timedelta, timezone

sys.path.insert(0, ".")

from opspulse import create_app
from opspulse.models import db
from opspulse.models.standup import LeavePlan, ReportSubmission
from opspulse.models.team import Member, OrgUnit, Tenant
from opspulse.models.work import (
    ACTIVE_STATUSES,
    STATUS_COMPLETED,
    Project,
    WorkItem,
)

_BLOCKERS = [
    "Waiting on staging credentials from infra",
    "Design review pending for the billing screen",
    "Flaky CI job on the integration suite",
    "API contract with partner not finalised",
]


def seed_tenant(slug: str) -> Tenant:
    tenant = Tenant(name=f"{slug.title()} Corp", slug=slug, timezone="UTC")
    db.session.add(tenant)
    db.session.flush()
    return tenant


def seed_team(tenant: Tenant) -> list[Member]:
    platform = OrgUnit(tenant_id=tenant.id, name="Platform")
    product = OrgUnit(tenant_id=tenant.id, name="Product")
    db.session.add_all([platform, product])
    db.session.flush()

    people = [
        ("Ada", platform), ("Linus", platform), ("Grace", platform),
        ("Ken", product), ("Barbara", product), ("Dennis", None),
    ]
    members = [
        Member(tenant_id=tenant.id, name=name, email=f"{name.lower()}@example.com",
               org_unit_id=unit.id if unit else None)
        for name, unit in people
    ]
    db.session.add_all(members)
    db.session.flush()
    return members


def seed_work(tenant: Tenant, members: list[Member], today: date, rng: random.Random) -> None:
    project = Project(tenant_id=tenant.id, name="Customer Portal", start_date=today - timedelta(days=60))
    db.session.add(project)
    db.session.flush()

    for offset in range(14):
        day = today - timedelta(days=offset)
        for n in range(rng.randint(0, 3)):
            db.session.add(WorkItem(
                project_id=project.id,
                assignee_id=rng.choice(members).id,
                title=f"Task {day.isoformat()}-{n}",
                status=STATUS_COMPLETED,
                effort=rng.choice([0.5, 1, 2, 3]),
                completed_at=datetime.combine(day, time(15, 0), tzinfo=timezone.utc),
            ))
    for n in range(12):
        db.session.add(WorkItem(
            project_id=project.id,
            assignee_id=rng.choice(members).id,
            title=f"Open task {n}",
            status=rng.choice(ACTIVE_STATUSES),
            effort=rng.choice([1, 2, 3, 5]),
        ))


def seed_standups(tenant: Tenant, members: list[Member], today: date, rng: random.Random) -> None:
    for offset in range(30):
        day = today - timedelta(days=offset)
        if day.isoweekday() >= 6:
            continue
        for member in members:
            if rng.random() < 0.2:
                continue
            db.session.add(ReportSubmission(
                tenant_id=tenant.id,
                member_id=member.id,
                report_date=day,
                prior_update="Finished the pagination work and reviewed two PRs",
                current_update="Picking up the export endpoint and its tests",
                obstruction=rng.choice(_BLOCKERS) if rng.random() < 0.1 else None,
            ))


def seed_leave(members: list[Member], today: date) -> None:
    db.session.add_all([
        LeavePlan(member_id=members[0].id, leave_type="annual", status="approved",
                  start_date=today + timedelta(days=2), end_date=today + timedelta(days=6)),
        LeavePlan(member_id=members[3].id, leave_type="sick", status="approved",
                  start_date=today - timedelta(days=20), end_date=today - timedelta(days=18)),
        LeavePlan(member_id=members[4].id, leave_type="annual", status="pending",
                  start_date=today + timedelta(days=7), end_date=today + timedelta(days=9)),
    ])


def main():
    parser = argparse.ArgumentParser(description="Seed OpsPulse demo data")
    parser.add_argument("--slug", default="demo", help="Tenant slug")
    parser.add_argument("--seed", type=int, default=7, help="Random seed")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        if args.reset:
            db.drop_all()
            db.create_all()
        if Tenant.query.filter_by(slug=args.slug).first():
            app.logger.warning("Tenant %r already exists; nothing to do", args.slug)
            return

        rng = random.Random(args.seed)
        today = date.today()
        tenant = seed_tenant(args.slug)
        members = seed_team(tenant)
        seed_work(tenant, members, today, rng)
        seed_standups(tenant, members, today, rng)
        seed_leave(members, today)
        db.session.commit()
        app.logger.info("Seeded tenant %r (id=%s)", args.slug, tenant.id)


if __name__ == "__main__":
    main()
