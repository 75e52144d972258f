"""Persistence helpers for plan aggregates.

Every write to a plan row bumps ``Plan.version`` (SQLAlchemy's
``version_id_col``), so two sessions racing on the same plan cannot both
commit. Callers that read a plan before submitting a change may pass the
version they saw as ``expected_version`` to get the same guarantee across
requests.
"""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..db import utcnow
from ..db.models import Plan
from ..domain.errors import ConcurrencyConflictError, NotFoundError
from ..domain.permissions import Actor

LOGGER = logging.getLogger(__name__)


def get_plan(session: Session, plan_id: str) -> Plan:
    plan = session.get(Plan, plan_id)
    if plan is None:
        raise NotFoundError(f"Plan {plan_id} not found", field="plan_id")
    return plan


def load_plan_for_update(session: Session, plan_id: str, expected_version: int | None = None) -> Plan:
    """Fetch a plan for writing, locking the row where the backend supports it."""

    plan = session.scalar(select(Plan).where(Plan.id == plan_id).with_for_update())
    if plan is None:
        raise NotFoundError(f"Plan {plan_id} not found", field="plan_id")
    if expected_version is not None and plan.version != expected_version:
        raise ConcurrencyConflictError(
            f"Plan {plan_id} was modified concurrently (expected version "
            f"{expected_version}, found {plan.version})",
            field="version",
            state=plan.version,
        )
    return plan


def touch(plan: Plan) -> None:
    """Mark the plan row as written so its version advances on flush."""

    plan.updated_at = utcnow()


def add_plan(session: Session, plan: Plan) -> Plan:
    session.add(plan)
    return plan


def flush(session: Session) -> None:
    """Flush pending writes, translating lost races into a conflict error."""

    try:
        session.flush()
    except StaleDataError as exc:
        LOGGER.info("Stale plan version detected: %s", exc)
        raise ConcurrencyConflictError("Plan was modified concurrently; reload and retry") from exc
    except IntegrityError as exc:
        LOGGER.info("Integrity conflict while writing plan: %s", exc.orig)
        raise ConcurrencyConflictError(
            "Plan changed while this request was running; reload and retry"
        ) from exc


def visible_plans_statement(
    actor: Actor,
    *,
    academic_period_id: str | None = None,
    teacher_id: str | None = None,
):
    """Plans ``actor`` may view, optionally narrowed by period or teacher."""

    stmt = select(Plan).order_by(Plan.created_at.desc(), Plan.title)
    if not actor.is_admin:
        stmt = stmt.where(Plan.primary_teacher_id == actor.user_id)
    if academic_period_id is not None:
        stmt = stmt.where(Plan.academic_period_id == academic_period_id)
    if teacher_id is not None:
        stmt = stmt.where(Plan.primary_teacher_id == teacher_id)
    return stmt


def list_plans_for_teacher(
    session: Session, teacher_id: str, academic_period_id: str | None = None
) -> Sequence[Plan]:
    stmt = select(Plan).where(Plan.primary_teacher_id == teacher_id).order_by(Plan.title)
    if academic_period_id is not None:
        stmt = stmt.where(Plan.academic_period_id == academic_period_id)
    return session.scalars(stmt).all()


__all__ = [
    "add_plan",
    "flush",
    "get_plan",
    "list_plans_for_teacher",
    "load_plan_for_update",
    "touch",
    "visible_plans_statement",
]
