"""SQLAlchemy model package."""
from sigepp.db.models.attachment import PlanAttachment
from sigepp.db.models.history import HistoryImmutableError, PlanHistoryEntry
from sigepp.db.models.plan import Plan, PlanStudent, plan_teacher_assignments
from sigepp.db.models.reference import AcademicPeriod, Subject, TeacherAssignment

__all__ = [
    "AcademicPeriod",
    "HistoryImmutableError",
    "Plan",
    "PlanAttachment",
    "PlanHistoryEntry",
    "PlanStudent",
    "Subject",
    "TeacherAssignment",
    "plan_teacher_assignments",
]
