"""Error taxonomy for plan operations.

Every rule violation is raised before anything is written, so callers can rely
on the enclosing session scope to roll back and surface the error as-is.
"""
from __future__ import annotations

from typing import Any


class PlanError(Exception):
    """Base class carrying enough context to explain a rejection."""

    code = "plan_error"

    def __init__(self, message: str, *, field: str | None = None, state: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.state = state

    def to_dict(self) -> dict[str, Any]:
        state = getattr(self.state, "value", self.state)
        return {"detail": self.message, "error": self.code, "field": self.field, "state": state}


class ValidationError(PlanError):
    code = "validation_error"


class DuplicateStudentError(ValidationError):
    code = "duplicate_student"


class ForbiddenError(PlanError):
    code = "forbidden"


class InvalidStateError(PlanError):
    code = "invalid_state"


class NotFoundError(PlanError):
    code = "not_found"


class ConcurrencyConflictError(PlanError):
    code = "concurrency_conflict"


__all__ = [
    "ConcurrencyConflictError",
    "DuplicateStudentError",
    "ForbiddenError",
    "InvalidStateError",
    "NotFoundError",
    "PlanError",
    "ValidationError",
]
