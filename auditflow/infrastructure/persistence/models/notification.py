"""Notification ORM model: one row per recipient per workflow transition."""

from typing import Any

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from auditflow.infrastructure.persistence.database import Base
from auditflow.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TenantMixin,
)


class Notification(CuidMixin, TenantMixin, CreatedAtMixin, Base):
    """Notification. Table: notification.

    ``metadata`` is reserved on declarative classes, so the column is mapped
    as ``metadata_``.
    """

    __tablename__ = "notification"

    target_user_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    title: Mapped[str] = mapped_column(String, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str | None] = mapped_column(String, nullable=True)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata", JSONB, nullable=True
    )
    is_read: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false")
    )

    __table_args__ = (
        Index("ix_notification_target_read", "target_user_id", "is_read"),
        Index("ix_notification_target_created", "target_user_id", "created_at"),
    )
