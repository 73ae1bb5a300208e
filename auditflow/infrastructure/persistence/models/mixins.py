"""Column mixins shared by the RBAC, workflow and notification tables.

Primary keys are CUID2 strings generated client-side, so an id is known
before flush (the notification router logs it next to the recipient).
"""

from datetime import datetime

from cuid2 import cuid_wrapper
from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

_next_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """Return a new CUID2 primary key."""
    return _next_cuid()


class CuidMixin:
    """String primary key defaulting to generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class TenantMixin:
    """tenant_id FK; rows go with their tenant (CASCADE)."""

    @declared_attr
    def tenant_id(cls) -> Mapped[str]:
        return mapped_column(
            String,
            ForeignKey("tenant.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class CreatedAtMixin:
    """created_at only, for append-only rows such as notifications."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )


class TimestampMixin(CreatedAtMixin):
    """created_at plus updated_at for rows edited in place."""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class MultiTenantModel(CuidMixin, TenantMixin, TimestampMixin):
    """Tenant-owned entity: users, roles and departments."""

    __abstract__ = True
