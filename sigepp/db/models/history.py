"""Append-only audit trail for plans."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint, event
from sqlalchemy.orm import Mapped, mapped_column, object_session, relationship

from sigepp.db import Base, new_id, utcnow
from sigepp.domain.enums import HistoryActionType


class HistoryImmutableError(RuntimeError):
    """Raised when something tries to rewrite or remove an audit entry."""


class PlanHistoryEntry(Base):
    """One recorded change to a plan.

    ``sequence`` numbers entries per plan in insertion order and breaks ties
    between entries written within the same instant.
    """

    __tablename__ = "plan_history"
    __table_args__ = (UniqueConstraint("plan_id", "sequence", name="uq_plan_history_sequence"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    plan_id: Mapped[str] = mapped_column(
        ForeignKey("plans.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    action_type: Mapped[HistoryActionType] = mapped_column(
        Enum(HistoryActionType, native_enum=False, length=48, name="history_action_type"),
        nullable=False,
    )
    performed_by_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    performed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    plan: Mapped["Plan"] = relationship("Plan", back_populates="history")

    def __repr__(self) -> str:  # pragma: no cover
        return f"PlanHistoryEntry(plan_id={self.plan_id!r}, sequence={self.sequence!r}, action={self.action_type!r})"


@event.listens_for(PlanHistoryEntry, "before_update")
def _reject_history_update(mapper, connection, target):
    session = object_session(target)
    if session is None or session.is_modified(target, include_collections=False):
        raise HistoryImmutableError(f"History entry {target.id} cannot be modified")


@event.listens_for(PlanHistoryEntry, "before_delete")
def _reject_history_delete(mapper, connection, target):
    raise HistoryImmutableError(f"History entry {target.id} cannot be deleted")
