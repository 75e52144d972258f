"""Academic plan (PPA) aggregate."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sigepp.db import Base, new_id, utcnow
from sigepp.domain.enums import PlanStatus

plan_teacher_assignments = Table(
    "plan_teacher_assignments",
    Base.metadata,
    Column("plan_id", ForeignKey("plans.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "teacher_assignment_id",
        ForeignKey("teacher_assignments.id", ondelete="RESTRICT"),
        primary_key=True,
    ),
)


class Plan(Base):
    """Academic plan owned by a responsible teacher within one period."""

    __tablename__ = "plans"
    __table_args__ = (
        # A plan can be continued at most once.
        UniqueConstraint("is_continuation_of", name="uq_plans_is_continuation_of"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    general_objective: Mapped[str | None] = mapped_column(Text, nullable=True)
    specific_objectives: Mapped[str | None] = mapped_column(Text, nullable=True)
    academic_period_id: Mapped[str] = mapped_column(
        ForeignKey("academic_periods.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    primary_teacher_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[PlanStatus] = mapped_column(
        Enum(PlanStatus, native_enum=False, length=32, name="plan_status"),
        nullable=False,
        default=PlanStatus.PROPOSAL,
    )
    is_continuation_of: Mapped[str | None] = mapped_column(
        ForeignKey("plans.id", ondelete="RESTRICT"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    academic_period: Mapped["AcademicPeriod"] = relationship("AcademicPeriod")
    assignments: Mapped[list["TeacherAssignment"]] = relationship(
        "TeacherAssignment",
        secondary=plan_teacher_assignments,
        order_by="TeacherAssignment.id",
    )
    students: Mapped[list["PlanStudent"]] = relationship(
        "PlanStudent",
        back_populates="plan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PlanStudent.position",
    )
    source: Mapped["Plan | None"] = relationship(
        "Plan",
        remote_side=[id],
        foreign_keys=[is_continuation_of],
        back_populates="continuation",
    )
    continuation: Mapped["Plan | None"] = relationship(
        "Plan",
        foreign_keys=[is_continuation_of],
        back_populates="source",
        uselist=False,
    )
    attachments: Mapped[list["PlanAttachment"]] = relationship(
        "PlanAttachment",
        back_populates="plan",
        order_by="PlanAttachment.uploaded_at",
    )
    history: Mapped[list["PlanHistoryEntry"]] = relationship(
        "PlanHistoryEntry",
        back_populates="plan",
        order_by="PlanHistoryEntry.sequence",
    )

    @property
    def teacher_assignment_ids(self) -> list[str]:
        return [assignment.id for assignment in self.assignments]

    @property
    def student_names(self) -> list[str]:
        return [student.name for student in self.students]

    @property
    def has_continuation(self) -> bool:
        return self.continuation is not None

    @property
    def is_continuation(self) -> bool:
        return self.is_continuation_of is not None

    def __repr__(self) -> str:  # pragma: no cover
        return f"Plan(id={self.id!r}, title={self.title!r}, status={self.status!r})"


class PlanStudent(Base):
    """Student enrolled in a plan; names are unique per plan ignoring case."""

    __tablename__ = "plan_students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    plan_id: Mapped[str] = mapped_column(
        ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True
    )

    plan: Mapped["Plan"] = relationship("Plan", back_populates="students")

    def __repr__(self) -> str:  # pragma: no cover
        return f"PlanStudent(id={self.id!r}, name={self.name!r})"
