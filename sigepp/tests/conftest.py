from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from sigepp.db import Base
from sigepp.db import models  # noqa: F401
from sigepp.db.models import AcademicPeriod, Subject, TeacherAssignment
from sigepp.domain.enums import Role
from sigepp.domain.permissions import Actor
from sigepp.services.academic_plan import PlanData, create_plan


@dataclass
class ReferenceData:
    period: AcademicPeriod
    next_period: AcademicPeriod
    assignment: TeacherAssignment
    second_assignment: TeacherAssignment
    next_assignment: TeacherAssignment


@pytest.fixture()
def session() -> Session:
    engine = create_engine("sqlite:///:memory:", future=True)
    TestingSession = sessionmaker(bind=engine, future=True, expire_on_commit=False)
    Base.metadata.create_all(engine)
    with TestingSession() as session:
        yield session
        session.rollback()
    engine.dispose()


@pytest.fixture()
def reference(session: Session) -> ReferenceData:
    period = AcademicPeriod(code="2025-1", name="2025 first term", start_date=date(2025, 2, 1), end_date=date(2025, 6, 30))
    next_period = AcademicPeriod(code="2025-2", name="2025 second term", start_date=date(2025, 8, 1), end_date=date(2025, 12, 15))
    subject = Subject(code="IS-401", name="Software Project")
    other_subject = Subject(code="IS-305", name="Databases")
    session.add_all([period, next_period, subject, other_subject])
    session.flush()

    assignment = TeacherAssignment(teacher_id="teacher-1", subject=subject, academic_period=period)
    second_assignment = TeacherAssignment(teacher_id="teacher-2", subject=other_subject, academic_period=period)
    next_assignment = TeacherAssignment(teacher_id="teacher-1", subject=subject, academic_period=next_period)
    session.add_all([assignment, second_assignment, next_assignment])
    session.flush()
    return ReferenceData(period, next_period, assignment, second_assignment, next_assignment)


@pytest.fixture()
def admin() -> Actor:
    return Actor(user_id="admin-1", roles=frozenset({Role.ADMIN}))


@pytest.fixture()
def teacher() -> Actor:
    return Actor(user_id="teacher-1", roles=frozenset({Role.TEACHER}))


@pytest.fixture()
def other_teacher() -> Actor:
    return Actor(user_id="teacher-2", roles=frozenset({Role.TEACHER}))


@pytest.fixture()
def plan(session: Session, reference: ReferenceData, teacher: Actor):
    return create_plan(
        session,
        teacher,
        PlanData(
            academic_period_id=reference.period.id,
            title="Inventory management system",
            teacher_assignment_ids=[reference.assignment.id],
            description="Cross-course capstone project.",
            student_names=["Ana Gómez", "Luis Pérez"],
        ),
    )
