"""Plan lifecycle endpoints."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..config import DEFAULT_PAGE_SIZE
from ..dependencies import get_current_actor, get_db
from ..domain.permissions import Actor
from ..schemas import (
    AdminPlanCreate,
    ContinuationCreate,
    CreatedResponse,
    HistoryEntryResponse,
    PageResponse,
    PlanCapabilitiesResponse,
    PlanCreate,
    PlanDetail,
    PlanSummary,
    PlanUpdate,
    StatusChange,
    StatusOptionsResponse,
)
from ..services import academic_plan
from ..services.academic_plan import PlanChanges, PlanData, StudentData
from ..services.continuation import ContinuationRequest, continue_plan
from ..services.history import list_history

router = APIRouter(prefix="/ppa", tags=["ppa"])


def _plan_data(payload: PlanCreate) -> PlanData:
    return PlanData(
        academic_period_id=payload.academic_period_id,
        title=payload.title,
        teacher_assignment_ids=list(payload.teacher_assignment_ids),
        description=payload.description,
        general_objective=payload.general_objective,
        specific_objectives=payload.specific_objectives,
        student_names=list(payload.student_names),
    )


def _summary_page(page) -> PageResponse[PlanSummary]:
    return PageResponse[PlanSummary](**page.to_dict(academic_plan.summarize_plan))


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_plan(
    payload: PlanCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CreatedResponse:
    plan = academic_plan.create_plan(db, actor, _plan_data(payload))
    return CreatedResponse(id=plan.id, message="Plan created")


@router.post("/admin", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_plan_for_teacher(
    payload: AdminPlanCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CreatedResponse:
    plan = academic_plan.create_plan_with_responsible(
        db, actor, _plan_data(payload), payload.primary_teacher_id
    )
    return CreatedResponse(id=plan.id, message="Plan created")


@router.get("/my", response_model=List[PlanSummary])
def my_plans(
    academic_period_id: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> List[PlanSummary]:
    plans = academic_plan.list_my_plans(db, actor, academic_period_id)
    return [PlanSummary(**academic_plan.summarize_plan(plan)) for plan in plans]


@router.get("/by-period", response_model=PageResponse[PlanSummary])
def plans_by_period(
    academic_period_id: str = Query(..., min_length=1),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> PageResponse[PlanSummary]:
    result = academic_plan.list_plans(
        db, actor, academic_period_id=academic_period_id, page=page, page_size=page_size
    )
    return _summary_page(result)


@router.get("/by-teacher", response_model=PageResponse[PlanSummary])
def plans_by_teacher(
    teacher_id: str = Query(..., min_length=1),
    academic_period_id: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> PageResponse[PlanSummary]:
    result = academic_plan.list_plans(
        db,
        actor,
        academic_period_id=academic_period_id,
        teacher_id=teacher_id,
        page=page,
        page_size=page_size,
    )
    return _summary_page(result)


@router.get("/{plan_id}", response_model=PlanDetail)
def get_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> PlanDetail:
    return PlanDetail.model_validate(academic_plan.get_plan_for_actor(db, actor, plan_id))


@router.put("/{plan_id}", response_model=PlanDetail)
def update_plan(
    plan_id: str,
    payload: PlanUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> PlanDetail:
    students = (
        [StudentData(name=student.name, id=student.id) for student in payload.new_students]
        if payload.new_students is not None
        else None
    )
    changes = PlanChanges(
        title=payload.title,
        description=payload.description,
        general_objective=payload.general_objective,
        specific_objectives=payload.specific_objectives,
        new_responsible_teacher_id=payload.new_responsible_teacher_id,
        new_teacher_assignment_ids=payload.new_teacher_assignment_ids,
        new_students=students,
    )
    plan = academic_plan.update_plan(
        db, actor, plan_id, changes, expected_version=payload.expected_version
    )
    return PlanDetail.model_validate(plan)


@router.post("/{plan_id}/status", response_model=PlanDetail)
def change_status(
    plan_id: str,
    payload: StatusChange,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> PlanDetail:
    plan = academic_plan.change_status(
        db,
        actor,
        plan_id,
        payload.new_status,
        notes=payload.notes,
        expected_version=payload.expected_version,
    )
    return PlanDetail.model_validate(plan)


@router.post(
    "/{plan_id}/continue", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED
)
def continue_existing_plan(
    plan_id: str,
    payload: ContinuationCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> CreatedResponse:
    request = ContinuationRequest(
        source_plan_id=plan_id,
        target_academic_period_id=payload.target_academic_period_id,
        teacher_assignment_ids=list(payload.teacher_assignment_ids),
        new_title=payload.new_title,
        new_responsible_teacher_id=payload.new_responsible_teacher_id,
        student_names=payload.student_names,
        description=payload.description,
        general_objective=payload.general_objective,
        specific_objectives=payload.specific_objectives,
    )
    successor = continue_plan(db, actor, request, expected_version=payload.expected_version)
    return CreatedResponse(id=successor.id, message="Continuation created")


@router.get("/{plan_id}/history", response_model=List[HistoryEntryResponse])
def plan_history(
    plan_id: str,
    newest_first: bool = Query(default=False),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> List[HistoryEntryResponse]:
    entries = list_history(db, actor, plan_id, newest_first=newest_first)
    return [HistoryEntryResponse.model_validate(entry) for entry in entries]


@router.get("/{plan_id}/permissions", response_model=PlanCapabilitiesResponse)
def plan_permissions(
    plan_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> PlanCapabilitiesResponse:
    caps = academic_plan.plan_capabilities(db, actor, plan_id)
    return PlanCapabilitiesResponse(**caps.to_dict())


@router.get("/{plan_id}/transitions", response_model=StatusOptionsResponse)
def plan_transitions(
    plan_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> StatusOptionsResponse:
    return StatusOptionsResponse(**academic_plan.status_options(db, actor, plan_id))


__all__ = ["router"]
