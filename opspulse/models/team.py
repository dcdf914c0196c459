"""
Team Models — tenants, organizational units, members.

Owned and mutated by the dashboard's CRUD layer; the analytics engine only
reads them (member counts, unit names for blocker clustering, the tenant's
time zone for "today").
"""

from datetime import datetime, timezone

from opspulse.models import db
from opspulse.models.base import TenantModel


# ═══════════════════════════════════════════════════════════════
# 1. TENANTS
# ═══════════════════════════════════════════════════════════════
class Tenant(db.Model):
    __tablename__ = "tenants"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False)
    timezone = db.Column(
        db.String(64), nullable=False, default="UTC",
        comment="IANA zone name; defines the tenant-local calendar day",
    )
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    members = db.relationship("Member", back_populates="tenant", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "timezone": self.timezone,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


# ═══════════════════════════════════════════════════════════════
# 2. ORGANIZATIONAL UNITS (teams / departments)
# ═══════════════════════════════════════════════════════════════
class OrgUnit(TenantModel):
    __tablename__ = "org_units"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    kind = db.Column(db.String(30), default="team", comment="team | department")

    members = db.relationship("Member", back_populates="org_unit", lazy="dynamic")

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "kind": self.kind,
        }


# ═══════════════════════════════════════════════════════════════
# 3. MEMBERS
# ═══════════════════════════════════════════════════════════════
class Member(TenantModel):
    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(200))
    role = db.Column(db.String(30), default="member")  # member, manager, admin
    org_unit_id = db.Column(
        db.Integer,
        db.ForeignKey("org_units.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    tenant = db.relationship("Tenant", back_populates="members")
    org_unit = db.relationship("OrgUnit", back_populates="members")

    def to_dict(self):
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "org_unit_id": self.org_unit_id,
            "org_unit": self.org_unit.name if self.org_unit else None,
        }
