"""
TenantModel — abstract base for tables owned directly by a tenant.

Members, org units, projects and standup submissions all carry their own
tenant_id. Work items and leave plans do not; they reach their tenant
through the project / member they hang off.

Subclasses get:
  - tenant_id FK column (indexed, cascades on tenant delete)
  - created_at audit column
  - query_for_tenant(tenant_id) classmethod
  - tenant_index(...) helper for (tenant_id, ...) composite indexes
"""

from datetime import datetime, timezone

from opspulse.models import db


def _utcnow():
    return datetime.now(timezone.utc)


class TenantModel(db.Model):
    """Abstract base for tenant-scoped tables."""
    __abstract__ = True

    tenant_id = db.Column(
        db.Integer,
        db.ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(db.DateTime, default=_utcnow)

    @classmethod
    def query_for_tenant(cls, tenant_id: int):
        """Return a query already narrowed to one tenant."""
        return cls.query.filter_by(tenant_id=tenant_id)

    @staticmethod
    def tenant_index(table_name: str, *extra_cols: str):
        """Build an ``ix_<table>_tenant_<cols>`` index on (tenant_id, *extra_cols).

        Takes the table name explicitly because it is called from
        ``__table_args__`` while the class body is still being built.
        """
        name = f"ix_{table_name}_tenant_{'_'.join(extra_cols)}"
        return db.Index(name, "tenant_id", *extra_cols)
