"""Development fixture helpers."""
from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from sigepp.db.models import AcademicPeriod, Plan, Subject, TeacherAssignment
from sigepp.domain.enums import Role
from sigepp.domain.permissions import Actor
from sigepp.services.academic_plan import PlanData, create_plan

DEMO_TEACHER_ID = "demo-teacher"


def _get_or_create_period(session: Session, code: str, name: str, start: date, end: date) -> AcademicPeriod:
    period = session.scalar(select(AcademicPeriod).where(AcademicPeriod.code == code))
    if period is None:
        period = AcademicPeriod(code=code, name=name, start_date=start, end_date=end, is_active=True)
        session.add(period)
        session.flush()
    return period


def _get_or_create_subject(session: Session, code: str, name: str) -> Subject:
    subject = session.scalar(select(Subject).where(Subject.code == code))
    if subject is None:
        subject = Subject(code=code, name=name)
        session.add(subject)
        session.flush()
    return subject


def _get_or_create_assignment(
    session: Session, teacher_id: str, subject: Subject, period: AcademicPeriod
) -> TeacherAssignment:
    assignment = session.scalar(
        select(TeacherAssignment).where(
            TeacherAssignment.teacher_id == teacher_id,
            TeacherAssignment.subject_id == subject.id,
            TeacherAssignment.academic_period_id == period.id,
        )
    )
    if assignment is None:
        assignment = TeacherAssignment(teacher_id=teacher_id, subject=subject, academic_period=period)
        session.add(assignment)
        session.flush()
    return assignment


def seed_dev_data(session: Session) -> None:
    """Populate the database with two periods, demo assignments and a sample plan."""
    first = _get_or_create_period(session, "2025-1", "Primer semestre 2025", date(2025, 2, 1), date(2025, 6, 30))
    second = _get_or_create_period(session, "2025-2", "Segundo semestre 2025", date(2025, 8, 1), date(2025, 12, 15))
    software = _get_or_create_subject(session, "IS-401", "Proyecto de Software")
    databases = _get_or_create_subject(session, "IS-305", "Bases de Datos")

    assignments = [
        _get_or_create_assignment(session, DEMO_TEACHER_ID, subject, period)
        for period in (first, second)
        for subject in (software, databases)
    ]

    existing = session.scalar(select(Plan.id).where(Plan.primary_teacher_id == DEMO_TEACHER_ID))
    if existing is None:
        teacher = Actor(user_id=DEMO_TEACHER_ID, roles=frozenset({Role.TEACHER}))
        create_plan(
            session,
            teacher,
            PlanData(
                academic_period_id=first.id,
                title="Sistema de gestión de inventarios",
                teacher_assignment_ids=[a.id for a in assignments if a.academic_period_id == first.id],
                description="Proyecto integrador entre Proyecto de Software y Bases de Datos.",
                general_objective="Construir un sistema de inventarios para una PyME local.",
                student_names=["Ana Gómez", "Luis Pérez", "Marta Ruiz"],
            ),
        )
