"""
Standup Models — daily report submissions and leave plans.

ReportSubmission: one row per member per working day (not enforced).
LeavePlan: a date window a member is away; only approved plans affect
capacity and leave analytics. Leave plans reach their tenant via the member.
"""

from opspulse.models import db
from opspulse.models.base import TenantModel

LEAVE_APPROVED = "approved"


class ReportSubmission(TenantModel):
    __tablename__ = "report_submissions"
    __table_args__ = (
        TenantModel.tenant_index("report_submissions", "report_date"),
    )

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(
        db.Integer,
        db.ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    report_date = db.Column(db.Date, nullable=False, comment="Tenant-local calendar day")
    prior_update = db.Column(db.Text, nullable=True)
    current_update = db.Column(db.Text, nullable=True)
    obstruction = db.Column(db.Text, nullable=True)

    member = db.relationship("Member")

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "member_id": self.member_id,
            "report_date": self.report_date.isoformat() if self.report_date else None,
            "prior_update": self.prior_update,
            "current_update": self.current_update,
            "obstruction": self.obstruction,
        }


class LeavePlan(db.Model):
    __tablename__ = "leave_plans"

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(
        db.Integer,
        db.ForeignKey("members.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    leave_type = db.Column(db.String(50), default="annual")
    status = db.Column(db.String(20), nullable=False, default="pending")  # pending, approved, rejected
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)

    member = db.relationship("Member")

    def to_dict(self):
        return {
            "id": self.id,
            "member_id": self.member_id,
            "leave_type": self.leave_type,
            "status": self.status,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }
