"""Read-only listings of reference data used when building plans."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import DEFAULT_PAGE_SIZE
from ..dependencies import get_current_actor, get_db
from ..domain.permissions import Actor
from ..schemas import (
    AcademicPeriodResponse,
    PageResponse,
    SubjectResponse,
    TeacherAssignmentResponse,
)
from ..services import listing

router = APIRouter(tags=["reference"])


@router.get("/academic-periods", response_model=PageResponse[AcademicPeriodResponse])
def academic_periods(
    active: Optional[bool] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    _: Actor = Depends(get_current_actor),
) -> PageResponse[AcademicPeriodResponse]:
    result = listing.list_academic_periods(db, active=active, page=page, page_size=page_size)
    return PageResponse[AcademicPeriodResponse](
        **result.to_dict(AcademicPeriodResponse.model_validate)
    )


@router.get("/subjects", response_model=PageResponse[SubjectResponse])
def subjects(
    active: Optional[bool] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    _: Actor = Depends(get_current_actor),
) -> PageResponse[SubjectResponse]:
    result = listing.list_subjects(db, active=active, page=page, page_size=page_size)
    return PageResponse[SubjectResponse](**result.to_dict(SubjectResponse.model_validate))


@router.get("/teacher-assignments", response_model=PageResponse[TeacherAssignmentResponse])
def teacher_assignments(
    teacher_id: Optional[str] = Query(default=None),
    academic_period_id: Optional[str] = Query(default=None),
    active: Optional[bool] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    _: Actor = Depends(get_current_actor),
) -> PageResponse[TeacherAssignmentResponse]:
    result = listing.list_teacher_assignments(
        db,
        teacher_id=teacher_id,
        academic_period_id=academic_period_id,
        active=active,
        page=page,
        page_size=page_size,
    )
    return PageResponse[TeacherAssignmentResponse](
        **result.to_dict(TeacherAssignmentResponse.model_validate)
    )


__all__ = ["router"]
