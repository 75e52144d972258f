"""Framework-free rules for the plan lifecycle."""
from __future__ import annotations

from .enums import AttachmentType, HistoryActionType, PlanStatus, Role
from .errors import (
    ConcurrencyConflictError,
    DuplicateStudentError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PlanError,
    ValidationError,
)
from .permissions import Actor, PlanCapabilities, can_create_plan, capabilities

__all__ = [
    "Actor",
    "AttachmentType",
    "ConcurrencyConflictError",
    "DuplicateStudentError",
    "ForbiddenError",
    "HistoryActionType",
    "InvalidStateError",
    "NotFoundError",
    "PlanCapabilities",
    "PlanError",
    "PlanStatus",
    "Role",
    "ValidationError",
    "can_create_plan",
    "capabilities",
]
