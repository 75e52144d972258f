"""Field limits and input checks shared by every plan operation."""
from __future__ import annotations

from typing import Final, Iterable, Sequence

from .errors import DuplicateStudentError, ValidationError

TITLE_MIN_LENGTH: Final[int] = 3
TITLE_MAX_LENGTH: Final[int] = 300
TEXT_LIMITS: Final[dict[str, int]] = {
    "description": 3000,
    "general_objective": 1000,
    "specific_objectives": 2000,
}
STUDENT_NAME_MAX_LENGTH: Final[int] = 200
ATTACHMENT_NAME_MAX_LENGTH: Final[int] = 300
FILE_KEY_MAX_LENGTH: Final[int] = 500
CONTENT_TYPE_MAX_LENGTH: Final[int] = 100


def validate_title(title: str | None, *, field: str = "title") -> str:
    value = (title or "").strip()
    if not TITLE_MIN_LENGTH <= len(value) <= TITLE_MAX_LENGTH:
        raise ValidationError(
            f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters",
            field=field,
        )
    return value


def validate_text(field: str, value: str | None) -> str | None:
    """Return the stored form of an optional text field; blank clears it."""

    if value is None:
        return None
    limit = TEXT_LIMITS[field]
    if len(value) > limit:
        raise ValidationError(f"{field} cannot exceed {limit} characters", field=field)
    stripped = value.strip()
    return stripped or None


def student_key(name: str) -> str:
    return name.strip().casefold()


def clean_student_names(names: Iterable[str], *, field: str = "students") -> list[str]:
    """Trim names and reject blanks or case-insensitive duplicates."""

    cleaned: list[str] = []
    seen: dict[str, str] = {}
    for raw in names:
        name = (raw or "").strip()
        if not name:
            raise ValidationError("Student name is required", field=field)
        if len(name) > STUDENT_NAME_MAX_LENGTH:
            raise ValidationError(
                f"Student name cannot exceed {STUDENT_NAME_MAX_LENGTH} characters", field=field
            )
        key = student_key(name)
        if key in seen:
            raise DuplicateStudentError(
                f"Student {name!r} is listed more than once (matches {seen[key]!r})",
                field=field,
            )
        seen[key] = name
        cleaned.append(name)
    return cleaned


def require_assignment_ids(ids: Sequence[str] | None, *, field: str) -> list[str]:
    """Return ids in first-seen order without duplicates; empty is an error."""

    unique = list(dict.fromkeys(i for i in ids or () if i))
    if not unique:
        raise ValidationError("At least one teacher assignment is required", field=field)
    return unique


def validate_attachment_fields(name: str, file_key: str, content_type: str | None) -> tuple[str, str, str | None]:
    name = (name or "").strip()
    file_key = (file_key or "").strip()
    if not 1 <= len(name) <= ATTACHMENT_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Attachment name must be between 1 and {ATTACHMENT_NAME_MAX_LENGTH} characters",
            field="name",
        )
    if not 1 <= len(file_key) <= FILE_KEY_MAX_LENGTH:
        raise ValidationError(
            f"File key must be between 1 and {FILE_KEY_MAX_LENGTH} characters", field="file_key"
        )
    if content_type is not None and len(content_type) > CONTENT_TYPE_MAX_LENGTH:
        raise ValidationError(
            f"Content type cannot exceed {CONTENT_TYPE_MAX_LENGTH} characters",
            field="content_type",
        )
    return name, file_key, content_type or None
