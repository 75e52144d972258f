"""Plan aggregate operations: create, update, status changes and queries.

Every operation validates and authorizes everything up front, then mutates the
aggregate, records one history entry per changed field, and flushes. Nothing
here commits; the surrounding session scope decides.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from sqlalchemy.orm import Session

from ..config import DEFAULT_PAGE_SIZE
from ..db import new_id
from ..db.models import AcademicPeriod, Plan, PlanStudent, TeacherAssignment
from ..domain.enums import PLAN_STATUS_LABELS, HistoryActionType, PlanStatus
from ..domain.errors import ForbiddenError, InvalidStateError, ValidationError
from ..domain.permissions import Actor, PlanCapabilities, can_create_plan, capabilities
from ..domain.plan_policy import diagnose_completion
from ..domain.state_machine import (
    available_transitions,
    can_transition,
    is_terminal,
    suggested_next_status,
)
from ..domain.validation import (
    clean_student_names,
    require_assignment_ids,
    student_key,
    validate_text,
    validate_title,
)
from . import history, plan_store
from .listing import Page, get_academic_period, get_assignments, paginate

LOGGER = logging.getLogger(__name__)

TEXT_FIELD_ACTIONS: tuple[tuple[str, HistoryActionType], ...] = (
    ("description", HistoryActionType.UPDATED_DESCRIPTION),
    ("general_objective", HistoryActionType.UPDATED_GENERAL_OBJECTIVE),
    ("specific_objectives", HistoryActionType.UPDATED_SPECIFIC_OBJECTIVES),
)


@dataclass(slots=True)
class StudentData:
    name: str
    id: str | None = None


@dataclass(slots=True)
class PlanData:
    academic_period_id: str
    title: str
    teacher_assignment_ids: list[str]
    description: str | None = None
    general_objective: str | None = None
    specific_objectives: str | None = None
    student_names: list[str] = field(default_factory=list)


@dataclass(slots=True)
class PlanChanges:
    """Partial update; ``None`` leaves a field untouched."""

    title: str | None = None
    description: str | None = None
    general_objective: str | None = None
    specific_objectives: str | None = None
    new_responsible_teacher_id: str | None = None
    new_teacher_assignment_ids: list[str] | None = None
    new_students: list[StudentData] | None = None


def resolve_assignments(
    session: Session, assignment_ids: Sequence[str] | None, period_id: str, *, field: str
) -> list[TeacherAssignment]:
    ids = require_assignment_ids(assignment_ids, field=field)
    assignments = list(get_assignments(session, ids, field=field))
    outside = [a.id for a in assignments if a.academic_period_id != period_id]
    if outside:
        raise ValidationError(
            f"Teacher assignment {outside[0]} does not belong to academic period {period_id}",
            field=field,
        )
    return assignments


def plan_snapshot(plan: Plan) -> dict[str, Any]:
    return {
        "title": plan.title,
        "academic_period_id": plan.academic_period_id,
        "primary_teacher_id": plan.primary_teacher_id,
        "teacher_assignment_ids": sorted(plan.teacher_assignment_ids),
        "students": plan.student_names,
        "status": plan.status.value,
    }


def build_plan(
    session: Session,
    *,
    performed_by: str,
    primary_teacher_id: str,
    period: AcademicPeriod,
    title: str,
    assignments: Iterable[TeacherAssignment],
    student_names: Iterable[str] = (),
    description: str | None = None,
    general_objective: str | None = None,
    specific_objectives: str | None = None,
    source: Plan | None = None,
) -> Plan:
    """Insert an already-validated plan in ``Proposal`` and record its creation."""

    plan = Plan(
        id=new_id(),
        title=title,
        description=description,
        general_objective=general_objective,
        specific_objectives=specific_objectives,
        academic_period_id=period.id,
        primary_teacher_id=primary_teacher_id,
        status=PlanStatus.PROPOSAL,
    )
    plan.assignments = list(assignments)
    plan.students = [
        PlanStudent(id=new_id(), name=name, position=position)
        for position, name in enumerate(student_names)
    ]
    if source is not None:
        plan.source = source
    plan_store.add_plan(session, plan)
    history.record(
        session,
        plan,
        HistoryActionType.CREATED,
        performed_by,
        new_value=plan_snapshot(plan),
        notes=f"Continuation of plan {source.id}" if source is not None else None,
    )
    return plan


def create_plan(session: Session, actor: Actor, data: PlanData) -> Plan:
    """Create a plan whose responsible teacher is the creator."""

    if not can_create_plan(actor):
        raise ForbiddenError("Only teachers and administrators can create plans")

    title = validate_title(data.title)
    texts = {name: validate_text(name, getattr(data, name)) for name, _ in TEXT_FIELD_ACTIONS}
    period = get_academic_period(session, data.academic_period_id)
    assignments = resolve_assignments(
        session, data.teacher_assignment_ids, period.id, field="teacher_assignment_ids"
    )
    names = clean_student_names(data.student_names, field="student_names")

    plan = build_plan(
        session,
        performed_by=actor.user_id,
        primary_teacher_id=actor.user_id,
        period=period,
        title=title,
        assignments=assignments,
        student_names=names,
        **texts,
    )
    plan_store.flush(session)
    LOGGER.info("Created plan %s in period %s for %s", plan.id, period.code, actor.user_id)
    return plan


def create_plan_with_responsible(
    session: Session, actor: Actor, data: PlanData, primary_teacher_id: str
) -> Plan:
    """Administrator creation naming the responsible teacher in one transaction."""

    if not actor.is_admin:
        raise ForbiddenError("Only administrators can create plans on behalf of a teacher")
    responsible = (primary_teacher_id or "").strip()
    if not responsible:
        raise ValidationError("Responsible teacher is required", field="primary_teacher_id")

    plan = create_plan(session, actor, data)
    if responsible != plan.primary_teacher_id:
        previous = plan.primary_teacher_id
        plan.primary_teacher_id = responsible
        history.record(
            session,
            plan,
            HistoryActionType.CHANGED_RESPONSIBLE_TEACHER,
            actor.user_id,
            old_value=previous,
            new_value=responsible,
        )
        plan_store.flush(session)
    return plan


def _resolve_roster(plan: Plan, students: Sequence[StudentData]) -> list[tuple[str | None, str]]:
    """Pair each incoming name with the id it keeps; new students get ``None``.

    Entries without an id reuse the id of an existing student with the same
    name so resubmitting an unchanged roster is not a change.
    """

    names = clean_student_names((s.name for s in students), field="new_students")
    known_ids = {student.id for student in plan.students}
    claimed: set[str] = set()
    for student in students:
        if student.id is None:
            continue
        if student.id in claimed:
            raise ValidationError(
                f"Student {student.id} appears more than once", field="new_students"
            )
        claimed.add(student.id)
    by_key = {
        student_key(student.name): student.id
        for student in plan.students
        if student.id not in claimed
    }
    roster: list[tuple[str | None, str]] = []
    for student, name in zip(students, names):
        if student.id is not None and student.id not in known_ids:
            raise ValidationError(
                f"Student {student.id} does not belong to plan {plan.id}", field="new_students"
            )
        roster.append((student.id or by_key.get(student_key(name)), name))
    return roster


def _apply_roster(plan: Plan, roster: Sequence[tuple[str | None, str]]) -> None:
    existing = {student.id: student for student in plan.students}
    students: list[PlanStudent] = []
    for position, (student_id, name) in enumerate(roster):
        student = existing.get(student_id) if student_id else None
        if student is None:
            student = PlanStudent(id=new_id())
        student.name = name
        student.position = position
        students.append(student)
    plan.students = students


def update_plan(
    session: Session,
    actor: Actor,
    plan_id: str,
    changes: PlanChanges,
    *,
    expected_version: int | None = None,
) -> Plan:
    plan = plan_store.load_plan_for_update(session, plan_id, expected_version)
    caps = capabilities(actor, plan)
    if not caps.can_edit:
        raise ForbiddenError("You cannot edit this plan", state=plan.status)
    if is_terminal(plan.status):
        raise InvalidStateError("Archived plans cannot be modified", field="status", state=plan.status)
    if changes.new_responsible_teacher_id is not None and not caps.can_change_responsible:
        raise ForbiddenError(
            "You cannot change the responsible teacher in the current status",
            field="new_responsible_teacher_id",
            state=plan.status,
        )
    if changes.new_teacher_assignment_ids is not None and not caps.can_change_assignments:
        raise ForbiddenError(
            "You cannot change teacher assignments in the current status",
            field="new_teacher_assignment_ids",
            state=plan.status,
        )

    # Validate everything before touching the aggregate.
    pending: list[tuple[HistoryActionType, Any, Any]] = []
    title = None
    if changes.title is not None:
        title = validate_title(changes.title)
        if title != plan.title:
            pending.append((HistoryActionType.UPDATED_TITLE, plan.title, title))

    texts: dict[str, str | None] = {}
    for name, action in TEXT_FIELD_ACTIONS:
        raw = getattr(changes, name)
        if raw is None:
            continue
        value = validate_text(name, raw)
        if value != getattr(plan, name):
            texts[name] = value
            pending.append((action, getattr(plan, name), value))

    responsible = None
    if changes.new_responsible_teacher_id is not None:
        responsible = changes.new_responsible_teacher_id.strip()
        if not responsible:
            raise ValidationError("Responsible teacher is required", field="new_responsible_teacher_id")
        if responsible != plan.primary_teacher_id:
            pending.append(
                (HistoryActionType.CHANGED_RESPONSIBLE_TEACHER, plan.primary_teacher_id, responsible)
            )

    assignments = None
    if changes.new_teacher_assignment_ids is not None:
        assignments = resolve_assignments(
            session,
            changes.new_teacher_assignment_ids,
            plan.academic_period_id,
            field="new_teacher_assignment_ids",
        )
        old_ids = sorted(plan.teacher_assignment_ids)
        new_ids = sorted(a.id for a in assignments)
        if new_ids != old_ids:
            pending.append((HistoryActionType.UPDATED_ASSIGNMENTS, old_ids, new_ids))

    roster = None
    if changes.new_students is not None:
        roster = _resolve_roster(plan, changes.new_students)
        if roster != [(s.id, s.name) for s in plan.students]:
            pending.append(
                (HistoryActionType.UPDATED_STUDENTS, plan.student_names, [name for _, name in roster])
            )

    if not pending:
        LOGGER.debug("Update of plan %s by %s changed nothing", plan.id, actor.user_id)
        return plan

    actions = {action for action, _, _ in pending}
    if HistoryActionType.UPDATED_TITLE in actions:
        plan.title = title
    for name, value in texts.items():
        setattr(plan, name, value)
    if HistoryActionType.CHANGED_RESPONSIBLE_TEACHER in actions:
        plan.primary_teacher_id = responsible
    if HistoryActionType.UPDATED_ASSIGNMENTS in actions:
        plan.assignments = assignments
    if HistoryActionType.UPDATED_STUDENTS in actions:
        _apply_roster(plan, roster)

    plan_store.touch(plan)
    for action, old_value, new_value in pending:
        history.record(session, plan, action, actor.user_id, old_value=old_value, new_value=new_value)
    plan_store.flush(session)
    LOGGER.info("Updated plan %s (%d change(s)) by %s", plan.id, len(pending), actor.user_id)
    return plan


def change_status(
    session: Session,
    actor: Actor,
    plan_id: str,
    new_status: PlanStatus,
    *,
    notes: str | None = None,
    expected_version: int | None = None,
) -> Plan:
    plan = plan_store.load_plan_for_update(session, plan_id, expected_version)
    if not capabilities(actor, plan).can_change_status:
        raise ForbiddenError("Only administrators can change a plan's status", state=plan.status)

    current = plan.status
    target = PlanStatus(new_status)
    if not can_transition(current, target, actor.roles):
        raise InvalidStateError(
            f"Cannot change status from {current.value} to {target.value}",
            field="status",
            state=current,
        )
    if current == target:
        LOGGER.debug("Plan %s already in %s; nothing to write", plan.id, current.value)
        return plan

    if target == PlanStatus.COMPLETED:
        for issue in diagnose_completion(plan, plan.attachments).warnings:
            LOGGER.warning("Plan %s marked Completed: %s", plan.id, issue.message)

    plan.status = target
    plan_store.touch(plan)
    history.record(
        session,
        plan,
        HistoryActionType.CHANGED_STATUS,
        actor.user_id,
        old_value=current,
        new_value=target,
        notes=notes,
    )
    plan_store.flush(session)
    LOGGER.info("Plan %s moved %s -> %s by %s", plan.id, current.value, target.value, actor.user_id)
    return plan


def get_plan_for_actor(session: Session, actor: Actor, plan_id: str) -> Plan:
    plan = plan_store.get_plan(session, plan_id)
    if not capabilities(actor, plan).can_view:
        raise ForbiddenError("You cannot view this plan", state=plan.status)
    return plan


def plan_capabilities(session: Session, actor: Actor, plan_id: str) -> PlanCapabilities:
    return capabilities(actor, plan_store.get_plan(session, plan_id))


def status_options(session: Session, actor: Actor, plan_id: str) -> dict[str, Any]:
    plan = get_plan_for_actor(session, actor, plan_id)
    suggested = suggested_next_status(plan.status)
    return {
        "current": plan.status,
        "available": available_transitions(plan.status, actor.roles),
        "suggested_next": suggested,
    }


def list_my_plans(
    session: Session, actor: Actor, academic_period_id: str | None = None
) -> Sequence[Plan]:
    return plan_store.list_plans_for_teacher(session, actor.user_id, academic_period_id)


def list_plans(
    session: Session,
    actor: Actor,
    *,
    academic_period_id: str | None = None,
    teacher_id: str | None = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Page[Plan]:
    stmt = plan_store.visible_plans_statement(
        actor, academic_period_id=academic_period_id, teacher_id=teacher_id
    )
    return paginate(session, stmt, page, page_size)


def summarize_plan(plan: Plan) -> dict[str, Any]:
    return {
        "id": plan.id,
        "title": plan.title,
        "status": plan.status,
        "status_label": PLAN_STATUS_LABELS[plan.status],
        "academic_period_id": plan.academic_period_id,
        "academic_period_code": plan.academic_period.code if plan.academic_period else None,
        "responsible_teacher_id": plan.primary_teacher_id,
        "assignments_count": len(plan.assignments),
        "students_count": len(plan.students),
        "is_continuation": plan.is_continuation,
        "has_continuation": plan.has_continuation,
        "created_at": plan.created_at,
        "updated_at": plan.updated_at,
    }


__all__ = [
    "PlanChanges",
    "PlanData",
    "StudentData",
    "build_plan",
    "change_status",
    "create_plan",
    "create_plan_with_responsible",
    "get_plan_for_actor",
    "list_my_plans",
    "list_plans",
    "plan_capabilities",
    "plan_snapshot",
    "resolve_assignments",
    "status_options",
    "summarize_plan",
    "update_plan",
]
