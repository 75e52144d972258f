from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from sigepp.db import Base
from sigepp.db.models import AcademicPeriod, Plan, Subject, TeacherAssignment
from sigepp.domain.enums import HistoryActionType, PlanStatus
from sigepp.domain.errors import (
    ConcurrencyConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from sigepp.services.academic_plan import PlanData, change_status, create_plan
from sigepp.services.continuation import ContinuationRequest, continue_plan


def _request(plan, reference, **overrides) -> ContinuationRequest:
    values = dict(
        source_plan_id=plan.id,
        target_academic_period_id=reference.next_period.id,
        teacher_assignment_ids=[reference.next_assignment.id],
    )
    values.update(overrides)
    return ContinuationRequest(**values)


def test_continue_requires_completed_source(session, plan, reference, teacher, admin) -> None:
    change_status(session, admin, plan.id, PlanStatus.IN_PROGRESS)
    with pytest.raises(InvalidStateError):
        continue_plan(session, teacher, _request(plan, reference))

    change_status(session, admin, plan.id, PlanStatus.COMPLETED)
    successor = continue_plan(session, teacher, _request(plan, reference))

    assert successor.status == PlanStatus.PROPOSAL
    assert successor.is_continuation_of == plan.id
    assert plan.has_continuation
    assert successor.academic_period_id == reference.next_period.id


def test_successor_copies_source_unless_overridden(session, plan, reference, teacher, admin) -> None:
    change_status(session, admin, plan.id, PlanStatus.COMPLETED)
    successor = continue_plan(
        session,
        teacher,
        _request(plan, reference, new_title="Inventory system, phase two", general_objective="Deploy"),
    )

    assert successor.title == "Inventory system, phase two"
    assert successor.description == plan.description
    assert successor.general_objective == "Deploy"
    assert successor.primary_teacher_id == plan.primary_teacher_id
    assert successor.student_names == plan.student_names
    assert {s.id for s in successor.students}.isdisjoint({s.id for s in plan.students})


def test_history_is_written_on_both_plans(session, plan, reference, teacher, admin) -> None:
    change_status(session, admin, plan.id, PlanStatus.COMPLETED)
    version_before = plan.version
    successor = continue_plan(session, teacher, _request(plan, reference, student_names=[]))

    source_entry = plan.history[-1]
    assert source_entry.action_type == HistoryActionType.CONTINUATION_CREATED
    assert source_entry.new_value == successor.id
    assert [e.action_type for e in successor.history] == [HistoryActionType.CREATED]
    assert plan.id in successor.history[0].notes
    assert plan.version == version_before + 1
    assert successor.students == []


def test_second_continuation_is_rejected(session, plan, reference, teacher, admin) -> None:
    change_status(session, admin, plan.id, PlanStatus.COMPLETED)
    continue_plan(session, teacher, _request(plan, reference))

    with pytest.raises(InvalidStateError):
        continue_plan(session, admin, _request(plan, reference))


def test_target_period_rules(session, plan, reference, teacher, admin) -> None:
    change_status(session, admin, plan.id, PlanStatus.COMPLETED)

    with pytest.raises(ValidationError):
        continue_plan(
            session,
            teacher,
            _request(
                plan,
                reference,
                target_academic_period_id=reference.period.id,
                teacher_assignment_ids=[reference.assignment.id],
            ),
        )
    with pytest.raises(NotFoundError):
        continue_plan(session, teacher, _request(plan, reference, target_academic_period_id="missing"))
    with pytest.raises(ValidationError):
        continue_plan(
            session, teacher, _request(plan, reference, teacher_assignment_ids=[reference.assignment.id])
        )
    with pytest.raises(ValidationError):
        continue_plan(session, teacher, _request(plan, reference, teacher_assignment_ids=[]))
    assert not plan.has_continuation


def test_strangers_cannot_continue(session, plan, reference, other_teacher, admin) -> None:
    change_status(session, admin, plan.id, PlanStatus.COMPLETED)

    with pytest.raises(ForbiddenError):
        continue_plan(session, other_teacher, _request(plan, reference))


@pytest.fixture()
def shared_sessions(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", future=True)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, future=True, expire_on_commit=False)
    engine.dispose()


def test_concurrent_continuations_leave_one_successor(shared_sessions, teacher, admin) -> None:
    with shared_sessions() as setup:
        period = AcademicPeriod(code="2025-1", name="First term", start_date=date(2025, 2, 1))
        next_period = AcademicPeriod(code="2025-2", name="Second term", start_date=date(2025, 8, 1))
        subject = Subject(code="IS-401", name="Software Project")
        setup.add_all([period, next_period, subject])
        setup.flush()
        assignment = TeacherAssignment(teacher_id="teacher-1", subject=subject, academic_period=period)
        next_assignment = TeacherAssignment(teacher_id="teacher-1", subject=subject, academic_period=next_period)
        setup.add_all([assignment, next_assignment])
        setup.flush()
        source = create_plan(
            setup,
            teacher,
            PlanData(academic_period_id=period.id, title="Inventory management system", teacher_assignment_ids=[assignment.id]),
        )
        change_status(setup, admin, source.id, PlanStatus.COMPLETED)
        setup.commit()
        request = ContinuationRequest(
            source_plan_id=source.id,
            target_academic_period_id=next_period.id,
            teacher_assignment_ids=[next_assignment.id],
        )

    first = shared_sessions()
    second = shared_sessions()
    try:
        assert first.get(Plan, source.id).status == PlanStatus.COMPLETED
        assert not second.get(Plan, source.id).has_continuation

        continue_plan(first, teacher, request)
        first.commit()

        with pytest.raises(ConcurrencyConflictError):
            continue_plan(second, admin, request)
            second.commit()
        second.rollback()
    finally:
        first.close()
        second.close()

    with shared_sessions() as check:
        successors = check.scalar(
            select(func.count()).select_from(Plan).where(Plan.is_continuation_of == source.id)
        )
        assert successors == 1
        assert check.get(Plan, source.id).has_continuation
