from __future__ import annotations

import pytest

from sigepp.domain.enums import PlanStatus, Role
from sigepp.domain.state_machine import (
    available_transitions,
    can_change_structure,
    can_transition,
    suggested_next_status,
)

ADMIN = {Role.ADMIN}
TEACHER = {Role.TEACHER}


def test_only_admins_transition() -> None:
    assert can_transition(PlanStatus.PROPOSAL, PlanStatus.IN_PROGRESS, ADMIN)
    assert not can_transition(PlanStatus.PROPOSAL, PlanStatus.IN_PROGRESS, TEACHER)


@pytest.mark.parametrize("target", list(PlanStatus))
def test_archived_is_terminal(target: PlanStatus) -> None:
    assert not can_transition(PlanStatus.ARCHIVED, target, ADMIN)


def test_regressions_and_same_state_are_allowed() -> None:
    assert can_transition(PlanStatus.COMPLETED, PlanStatus.PROPOSAL, ADMIN)
    assert can_transition(PlanStatus.IN_PROGRESS, PlanStatus.IN_PROGRESS, ADMIN)


def test_available_transitions_exclude_current() -> None:
    assert available_transitions(PlanStatus.IN_PROGRESS, ADMIN) == [
        PlanStatus.PROPOSAL,
        PlanStatus.COMPLETED,
        PlanStatus.ARCHIVED,
    ]
    assert available_transitions(PlanStatus.ARCHIVED, ADMIN) == []
    assert available_transitions(PlanStatus.PROPOSAL, TEACHER) == []


def test_suggested_next_walks_the_workflow() -> None:
    assert suggested_next_status(PlanStatus.PROPOSAL) == PlanStatus.IN_PROGRESS
    assert suggested_next_status(PlanStatus.IN_PROGRESS) == PlanStatus.COMPLETED
    assert suggested_next_status(PlanStatus.COMPLETED) == PlanStatus.ARCHIVED
    assert suggested_next_status(PlanStatus.ARCHIVED) is None


def test_structure_changes_by_role_and_status() -> None:
    assert can_change_structure(PlanStatus.COMPLETED, ADMIN)
    assert not can_change_structure(PlanStatus.ARCHIVED, ADMIN)
    assert can_change_structure(PlanStatus.IN_PROGRESS, TEACHER)
    assert not can_change_structure(PlanStatus.COMPLETED, TEACHER)
