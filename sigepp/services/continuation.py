"""Carry a completed plan forward into a new academic period."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from ..db.models import Plan
from ..domain.enums import HistoryActionType, PlanStatus
from ..domain.errors import ForbiddenError, InvalidStateError, ValidationError
from ..domain.permissions import Actor, capabilities
from ..domain.validation import clean_student_names, validate_text, validate_title
from . import history, plan_store
from .academic_plan import TEXT_FIELD_ACTIONS, build_plan, resolve_assignments
from .listing import get_academic_period

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ContinuationRequest:
    source_plan_id: str
    target_academic_period_id: str
    teacher_assignment_ids: list[str]
    new_title: str | None = None
    new_responsible_teacher_id: str | None = None
    student_names: list[str] | None = None
    description: str | None = None
    general_objective: str | None = None
    specific_objectives: str | None = None


def continue_plan(
    session: Session,
    actor: Actor,
    request: ContinuationRequest,
    *,
    expected_version: int | None = None,
) -> Plan:
    """Create the successor of a Completed plan.

    The successor restarts at ``Proposal``. Text fields, responsible teacher and
    roster are copied from the source unless overridden; assignments always
    come from the request because they are period-specific. The source row is
    rewritten in the same flush so a concurrent continuation loses.
    """

    source = plan_store.load_plan_for_update(session, request.source_plan_id, expected_version)
    if not capabilities(actor, source).can_continue:
        raise ForbiddenError("You cannot continue this plan", state=source.status)
    if source.status != PlanStatus.COMPLETED:
        raise InvalidStateError(
            "Only Completed plans can be continued", field="status", state=source.status
        )
    if source.has_continuation:
        raise InvalidStateError(
            f"Plan {source.id} already has a continuation", field="has_continuation", state=source.status
        )

    period = get_academic_period(session, request.target_academic_period_id)
    if period.id == source.academic_period_id:
        raise ValidationError(
            "A continuation must target a different academic period",
            field="target_academic_period_id",
        )

    title = (
        validate_title(request.new_title, field="new_title")
        if request.new_title is not None
        else source.title
    )
    texts = {}
    for name, _ in TEXT_FIELD_ACTIONS:
        override = getattr(request, name)
        texts[name] = validate_text(name, override) if override is not None else getattr(source, name)

    responsible = (request.new_responsible_teacher_id or "").strip() or source.primary_teacher_id
    assignments = resolve_assignments(
        session, request.teacher_assignment_ids, period.id, field="teacher_assignment_ids"
    )
    names = clean_student_names(
        request.student_names if request.student_names is not None else source.student_names,
        field="student_names",
    )

    successor = build_plan(
        session,
        performed_by=actor.user_id,
        primary_teacher_id=responsible,
        period=period,
        title=title,
        assignments=assignments,
        student_names=names,
        source=source,
        **texts,
    )
    plan_store.touch(source)
    history.record(
        session,
        source,
        HistoryActionType.CONTINUATION_CREATED,
        actor.user_id,
        new_value=successor.id,
        notes=f"Continued into academic period {period.code}",
    )
    plan_store.flush(session)
    LOGGER.info(
        "Plan %s continued as %s in period %s by %s",
        source.id,
        successor.id,
        period.code,
        actor.user_id,
    )
    return successor


__all__ = ["ContinuationRequest", "continue_plan"]
