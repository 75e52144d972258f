"""Audit trail helpers.

``record`` is called by the mutating services only; there is no public path to
append, edit or remove entries.
"""
from __future__ import annotations

import enum
import json
import logging
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import utcnow
from ..db.models import Plan, PlanHistoryEntry
from ..domain.enums import HistoryActionType
from ..domain.errors import ForbiddenError
from ..domain.permissions import Actor, capabilities
from .plan_store import get_plan

LOGGER = logging.getLogger(__name__)


def serialize_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def record(
    session: Session,
    plan: Plan,
    action_type: HistoryActionType,
    performed_by_user_id: str,
    *,
    old_value: Any = None,
    new_value: Any = None,
    notes: str | None = None,
) -> PlanHistoryEntry:
    next_sequence = max((entry.sequence for entry in plan.history), default=0) + 1
    entry = PlanHistoryEntry(
        sequence=next_sequence,
        action_type=action_type,
        performed_by_user_id=performed_by_user_id,
        performed_at=utcnow(),
        old_value=serialize_value(old_value),
        new_value=serialize_value(new_value),
        notes=notes,
    )
    plan.history.append(entry)
    session.add(entry)
    LOGGER.info(
        "Plan %s: %s by %s", plan.id, action_type.value, performed_by_user_id
    )
    return entry


def list_history(
    session: Session, actor: Actor, plan_id: str, *, newest_first: bool = False
) -> Sequence[PlanHistoryEntry]:
    plan = get_plan(session, plan_id)
    if not capabilities(actor, plan).can_view:
        raise ForbiddenError("You cannot view this plan", state=plan.status)

    order = (
        (PlanHistoryEntry.performed_at.desc(), PlanHistoryEntry.sequence.desc())
        if newest_first
        else (PlanHistoryEntry.performed_at, PlanHistoryEntry.sequence)
    )
    stmt = select(PlanHistoryEntry).where(PlanHistoryEntry.plan_id == plan.id).order_by(*order)
    return session.scalars(stmt).all()


__all__ = ["list_history", "record", "serialize_value"]
