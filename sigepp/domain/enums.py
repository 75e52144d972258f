from __future__ import annotations

import enum
import logging
from typing import Iterable

LOGGER = logging.getLogger(__name__)


class Role(str, enum.Enum):
    """Closed set of roles understood by the permission engine."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    INTERNAL_CONSULTANT = "INTERNAL_CONSULTANT"

    @classmethod
    def parse_many(cls, raw_roles: Iterable[str] | None) -> frozenset["Role"]:
        """Map role strings to members, dropping anything unknown."""

        roles: set[Role] = set()
        for raw in raw_roles or ():
            try:
                roles.add(cls(str(raw).strip().upper()))
            except ValueError:
                LOGGER.warning("Ignoring unknown role %r", raw)
        return frozenset(roles)


class PlanStatus(str, enum.Enum):
    """Lifecycle state of a plan. ``ARCHIVED`` is terminal."""

    PROPOSAL = "Proposal"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"


PLAN_STATUS_LABELS: dict[PlanStatus, str] = {
    PlanStatus.PROPOSAL: "Propuesta",
    PlanStatus.IN_PROGRESS: "En Progreso",
    PlanStatus.COMPLETED: "Completado",
    PlanStatus.ARCHIVED: "Archivado",
}


class HistoryActionType(str, enum.Enum):
    CREATED = "Created"
    UPDATED_TITLE = "UpdatedTitle"
    CHANGED_STATUS = "ChangedStatus"
    CHANGED_RESPONSIBLE_TEACHER = "ChangedResponsibleTeacher"
    UPDATED_ASSIGNMENTS = "UpdatedAssignments"
    UPDATED_STUDENTS = "UpdatedStudents"
    UPDATED_CONTINUATION_SETTINGS = "UpdatedContinuationSettings"
    ATTACHMENT_ADDED = "AttachmentAdded"
    ATTACHMENT_REMOVED = "AttachmentRemoved"
    CONTINUATION_CREATED = "ContinuationCreated"
    UPDATED_GENERAL_OBJECTIVE = "UpdatedGeneralObjective"
    UPDATED_SPECIFIC_OBJECTIVES = "UpdatedSpecificObjectives"
    UPDATED_DESCRIPTION = "UpdatedDescription"


HISTORY_ACTION_LABELS: dict[HistoryActionType, str] = {
    HistoryActionType.CREATED: "Creación",
    HistoryActionType.UPDATED_TITLE: "Actualización de título",
    HistoryActionType.CHANGED_STATUS: "Cambio de estado",
    HistoryActionType.CHANGED_RESPONSIBLE_TEACHER: "Cambio de responsable",
    HistoryActionType.UPDATED_ASSIGNMENTS: "Actualización de asignaciones",
    HistoryActionType.UPDATED_STUDENTS: "Actualización de estudiantes",
    HistoryActionType.UPDATED_CONTINUATION_SETTINGS: "Actualización de configuración de continuación",
    HistoryActionType.ATTACHMENT_ADDED: "Anexo agregado",
    HistoryActionType.ATTACHMENT_REMOVED: "Anexo eliminado",
    HistoryActionType.CONTINUATION_CREATED: "Continuación creada",
    HistoryActionType.UPDATED_GENERAL_OBJECTIVE: "Actualización de objetivo general",
    HistoryActionType.UPDATED_SPECIFIC_OBJECTIVES: "Actualización de objetivos específicos",
    HistoryActionType.UPDATED_DESCRIPTION: "Actualización de descripción",
}


class AttachmentType(str, enum.Enum):
    PPA_DOCUMENT = "PpaDocument"
    TEACHER_AUTHORIZATION = "TeacherAuthorization"
    STUDENT_AUTHORIZATION = "StudentAuthorization"
    SOURCE_CODE = "SourceCode"
    PRESENTATION = "Presentation"
    INSTRUMENT = "Instrument"
    EVIDENCE = "Evidence"
    OTHER = "Other"


ATTACHMENT_TYPE_LABELS: dict[AttachmentType, str] = {
    AttachmentType.PPA_DOCUMENT: "Documento PPA",
    AttachmentType.TEACHER_AUTHORIZATION: "Autorización Docente",
    AttachmentType.STUDENT_AUTHORIZATION: "Autorización Estudiantes",
    AttachmentType.SOURCE_CODE: "Código Fuente",
    AttachmentType.PRESENTATION: "Presentación",
    AttachmentType.INSTRUMENT: "Instrumentos",
    AttachmentType.EVIDENCE: "Evidencias",
    AttachmentType.OTHER: "Otros",
}


__all__ = [
    "ATTACHMENT_TYPE_LABELS",
    "AttachmentType",
    "HISTORY_ACTION_LABELS",
    "HistoryActionType",
    "PLAN_STATUS_LABELS",
    "PlanStatus",
    "Role",
]
