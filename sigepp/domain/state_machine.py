"""Status workflow for plans.

Only administrators move a plan between statuses. ``Archived`` is terminal;
every other pair of statuses is reachable in either direction so mistakes can
be corrected. The suggested next status is a hint for clients, nothing more.
"""
from __future__ import annotations

from typing import Iterable

from .enums import PlanStatus, Role

WORKFLOW_ORDER: tuple[PlanStatus, ...] = (
    PlanStatus.PROPOSAL,
    PlanStatus.IN_PROGRESS,
    PlanStatus.COMPLETED,
    PlanStatus.ARCHIVED,
)

_SUGGESTED_NEXT: dict[PlanStatus, PlanStatus | None] = {
    PlanStatus.PROPOSAL: PlanStatus.IN_PROGRESS,
    PlanStatus.IN_PROGRESS: PlanStatus.COMPLETED,
    PlanStatus.COMPLETED: PlanStatus.ARCHIVED,
    PlanStatus.ARCHIVED: None,
}


def is_terminal(status: PlanStatus) -> bool:
    return status == PlanStatus.ARCHIVED


def is_editable(status: PlanStatus) -> bool:
    return status in (PlanStatus.PROPOSAL, PlanStatus.IN_PROGRESS)


def can_change_structure(status: PlanStatus, roles: Iterable[Role]) -> bool:
    """Whether responsible teacher and assignments may change in ``status``."""

    if Role.ADMIN in set(roles):
        return not is_terminal(status)
    return is_editable(status)


def can_transition(current: PlanStatus, target: PlanStatus, roles: Iterable[Role]) -> bool:
    if Role.ADMIN not in set(roles):
        return False
    if is_terminal(current):
        return False
    # Same-status requests are accepted and treated as no-ops by the caller.
    return target in WORKFLOW_ORDER


def available_transitions(current: PlanStatus, roles: Iterable[Role]) -> list[PlanStatus]:
    roles = set(roles)
    if Role.ADMIN not in roles or is_terminal(current):
        return []
    return [status for status in WORKFLOW_ORDER if status != current]


def suggested_next_status(current: PlanStatus) -> PlanStatus | None:
    return _SUGGESTED_NEXT.get(current)


__all__ = [
    "WORKFLOW_ORDER",
    "available_transitions",
    "can_change_structure",
    "can_transition",
    "is_editable",
    "is_terminal",
    "suggested_next_status",
]
