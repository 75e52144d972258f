"""Plan attachment model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sigepp.db import Base, new_id, utcnow
from sigepp.domain.enums import AttachmentType


class PlanAttachment(Base):
    """Typed reference to a stored file; the bytes live in file storage."""

    __tablename__ = "plan_attachments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    plan_id: Mapped[str] = mapped_column(
        ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[AttachmentType] = mapped_column(
        Enum(AttachmentType, native_enum=False, length=32, name="attachment_type"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(300), nullable=False)
    file_key: Mapped[str] = mapped_column(String(500), nullable=False)
    content_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    uploaded_by_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    deleted_by_user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    plan: Mapped["Plan"] = relationship("Plan", back_populates="attachments")

    def __repr__(self) -> str:  # pragma: no cover
        return f"PlanAttachment(id={self.id!r}, type={self.type!r}, name={self.name!r})"
