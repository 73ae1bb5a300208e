"""Department ORM model. hod_id is a projection of HOD role assignments."""

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from auditflow.infrastructure.persistence.database import Base
from auditflow.infrastructure.persistence.models.mixins import MultiTenantModel


class Department(MultiTenantModel, Base):
    """Department. Table: department. Unique (tenant_id, name)."""

    __tablename__ = "department"

    name: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str | None] = mapped_column(String, nullable=True)
    hod_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("app_user.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_department_tenant_name"),
    )
