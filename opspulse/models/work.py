"""
Work Models — projects and the work items (tasks) inside them.

A WorkItem has no tenant column of its own: tenant ownership is resolved
through its project, so every tenant-scoped query joins ``projects``.
"""

from datetime import datetime, timezone

from opspulse.models import db
from opspulse.models.base import TenantModel

# Status vocabulary written by the task tracker
STATUS_TODO = "To Do"
STATUS_IN_PROGRESS = "In Progress"
STATUS_REVIEW = "Review"
STATUS_COMPLETED = "Completed"

ACTIVE_STATUSES = (STATUS_TODO, STATUS_IN_PROGRESS, STATUS_REVIEW)


class Project(TenantModel):
    """Container of work items; the tenant boundary for tasks."""

    __tablename__ = "projects"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    status = db.Column(db.String(30), nullable=False, default="active")
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)

    work_items = db.relationship(
        "WorkItem", back_populates="project", lazy="dynamic",
        cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "status": self.status,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


class WorkItem(db.Model):
    """A task with an effort estimate, tracked through a status workflow."""

    __tablename__ = "work_items"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.Integer,
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assignee_id = db.Column(
        db.Integer,
        db.ForeignKey("members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title = db.Column(db.String(300), nullable=False)
    status = db.Column(db.String(30), nullable=False, default=STATUS_TODO, index=True)
    effort = db.Column(db.Float, nullable=True, comment="Estimated effort-days")
    completed_at = db.Column(db.DateTime, nullable=True, comment="UTC completion time")
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    project = db.relationship("Project", back_populates="work_items")

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "assignee_id": self.assignee_id,
            "title": self.title,
            "status": self.status,
            "effort": self.effort,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
