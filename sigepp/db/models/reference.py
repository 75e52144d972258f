"""Reference data owned by the administrative services.

The plan lifecycle only reads these tables; nothing in this package writes to
them outside of development fixtures and tests.
"""
from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sigepp.db import Base, new_id


class AcademicPeriod(Base):
    """A term in which teachers are assigned to subjects."""

    __tablename__ = "academic_periods"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"AcademicPeriod(id={self.id!r}, code={self.code!r})"


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"Subject(id={self.id!r}, code={self.code!r})"


class TeacherAssignment(Base):
    """Binding of a teacher to a subject within one academic period."""

    __tablename__ = "teacher_assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    teacher_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    subject_id: Mapped[str] = mapped_column(
        ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True
    )
    academic_period_id: Mapped[str] = mapped_column(
        ForeignKey("academic_periods.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    subject: Mapped["Subject"] = relationship("Subject")
    academic_period: Mapped["AcademicPeriod"] = relationship("AcademicPeriod")

    def __repr__(self) -> str:  # pragma: no cover
        return f"TeacherAssignment(id={self.id!r}, teacher_id={self.teacher_id!r})"
