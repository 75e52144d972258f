"""Paginated, read-only lookups over reference data."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Generic, Iterable, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..db.models import AcademicPeriod, Subject, TeacherAssignment
from ..domain.errors import NotFoundError

T = TypeVar("T")


@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_items: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size) if self.total_items else 0

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def to_dict(self, item_mapper=None) -> dict[str, Any]:
        items = [item_mapper(item) for item in self.items] if item_mapper else list(self.items)
        return {
            "items": items,
            "page": self.page,
            "page_size": self.page_size,
            "total_items": self.total_items,
            "total_pages": self.total_pages,
            "has_prev": self.has_prev,
            "has_next": self.has_next,
        }


def paginate(session: Session, stmt: Select, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Page:
    page = max(page, 1)
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    total = session.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
    items = session.scalars(stmt.limit(page_size).offset((page - 1) * page_size)).all()
    return Page(items=list(items), page=page, page_size=page_size, total_items=total)


def list_academic_periods(
    session: Session,
    *,
    active: bool | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page[AcademicPeriod]:
    stmt = select(AcademicPeriod).order_by(AcademicPeriod.code)
    if active is not None:
        stmt = stmt.where(AcademicPeriod.is_active == active)
    return paginate(session, stmt, page, page_size)


def list_subjects(
    session: Session,
    *,
    active: bool | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page[Subject]:
    stmt = select(Subject).order_by(Subject.code)
    if active is not None:
        stmt = stmt.where(Subject.is_active == active)
    return paginate(session, stmt, page, page_size)


def list_teacher_assignments(
    session: Session,
    *,
    teacher_id: str | None = None,
    academic_period_id: str | None = None,
    active: bool | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page[TeacherAssignment]:
    stmt = select(TeacherAssignment).order_by(TeacherAssignment.id)
    if teacher_id is not None:
        stmt = stmt.where(TeacherAssignment.teacher_id == teacher_id)
    if academic_period_id is not None:
        stmt = stmt.where(TeacherAssignment.academic_period_id == academic_period_id)
    if active is not None:
        stmt = stmt.where(TeacherAssignment.is_active == active)
    return paginate(session, stmt, page, page_size)


def get_academic_period(session: Session, period_id: str) -> AcademicPeriod:
    period = session.get(AcademicPeriod, period_id)
    if period is None:
        raise NotFoundError(f"Academic period {period_id} not found", field="academic_period_id")
    return period


def get_assignments(session: Session, assignment_ids: Iterable[str], *, field: str) -> Sequence[TeacherAssignment]:
    """Resolve every id or fail naming the first unknown one; input order is kept."""

    ids = list(assignment_ids)
    found = {
        assignment.id: assignment
        for assignment in session.scalars(
            select(TeacherAssignment).where(TeacherAssignment.id.in_(ids))
        )
    }
    missing = [assignment_id for assignment_id in ids if assignment_id not in found]
    if missing:
        raise NotFoundError(f"Teacher assignment {missing[0]} not found", field=field)
    return [found[assignment_id] for assignment_id in ids]


__all__ = [
    "Page",
    "get_academic_period",
    "get_assignments",
    "list_academic_periods",
    "list_subjects",
    "list_teacher_assignments",
    "paginate",
]
