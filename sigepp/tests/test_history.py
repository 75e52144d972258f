from __future__ import annotations

import json

import pytest

from sigepp.db.models import HistoryImmutableError
from sigepp.domain.enums import HistoryActionType, PlanStatus
from sigepp.domain.errors import ForbiddenError
from sigepp.services.academic_plan import PlanChanges, change_status, update_plan
from sigepp.services.history import list_history, serialize_value


def test_entries_are_ordered_and_sequenced(session, plan, teacher, admin) -> None:
    update_plan(session, teacher, plan.id, PlanChanges(title="Renamed plan"))
    change_status(session, admin, plan.id, PlanStatus.IN_PROGRESS)

    entries = list_history(session, teacher, plan.id)
    assert [e.sequence for e in entries] == [1, 2, 3]
    assert [e.action_type for e in entries] == [
        HistoryActionType.CREATED,
        HistoryActionType.UPDATED_TITLE,
        HistoryActionType.CHANGED_STATUS,
    ]
    newest = list_history(session, admin, plan.id, newest_first=True)
    assert [e.sequence for e in newest] == [3, 2, 1]


def test_history_requires_view(session, plan, other_teacher) -> None:
    with pytest.raises(ForbiddenError):
        list_history(session, other_teacher, plan.id)


def test_created_entry_snapshots_the_plan(plan) -> None:
    snapshot = json.loads(plan.history[0].new_value)

    assert snapshot["title"] == plan.title
    assert snapshot["students"] == ["Ana Gómez", "Luis Pérez"]
    assert snapshot["status"] == "Proposal"


def test_entries_cannot_be_rewritten(session, plan) -> None:
    entry = plan.history[0]
    entry.notes = "tampered"

    with pytest.raises(HistoryImmutableError):
        session.flush()


def test_entries_cannot_be_deleted(session, plan) -> None:
    session.delete(plan.history[0])

    with pytest.raises(HistoryImmutableError):
        session.flush()


def test_serialize_value_shapes() -> None:
    assert serialize_value(None) is None
    assert serialize_value(PlanStatus.COMPLETED) == "Completed"
    assert serialize_value("plain") == "plain"
    assert serialize_value(["Ñandú", "b"]) == '["Ñandú", "b"]'
