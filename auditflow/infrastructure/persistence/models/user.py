"""User ORM model (tenant-scoped). Authentication lives elsewhere; only what RBAC needs."""

from sqlalchemy import Boolean, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from auditflow.infrastructure.persistence.database import Base
from auditflow.infrastructure.persistence.models.mixins import MultiTenantModel


class User(MultiTenantModel, Base):
    """User model. Table: app_user. Unique (tenant_id, email)."""

    __tablename__ = "app_user"

    email: Mapped[str] = mapped_column(String, nullable=False)
    first_name: Mapped[str | None] = mapped_column(String, nullable=True)
    last_name: Mapped[str | None] = mapped_column(String, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )

    __table_args__ = (UniqueConstraint("tenant_id", "email", name="uq_tenant_email"),)
