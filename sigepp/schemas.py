"""Pydantic schemas shared across the plan API."""
from __future__ import annotations

from datetime import date, datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .domain.enums import (
    ATTACHMENT_TYPE_LABELS,
    HISTORY_ACTION_LABELS,
    AttachmentType,
    HistoryActionType,
    PlanStatus,
)

T = TypeVar("T")


def _strip_blank_ids(values: Optional[List[str]]) -> Optional[List[str]]:
    if values is None:
        return None
    return [value.strip() for value in values if value and value.strip()]


# ---------------------------------------------------------------------------
# Plan commands
# ---------------------------------------------------------------------------


class PlanCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=300)
    description: Optional[str] = Field(default=None, max_length=3000)
    general_objective: Optional[str] = Field(default=None, max_length=1000)
    specific_objectives: Optional[str] = Field(default=None, max_length=2000)
    academic_period_id: str = Field(..., min_length=1)
    teacher_assignment_ids: List[str] = Field(..., min_length=1)
    student_names: List[str] = Field(default_factory=list)

    @field_validator("teacher_assignment_ids")
    @classmethod
    def strip_assignment_ids(cls, value: List[str]) -> List[str]:
        return _strip_blank_ids(value)


class AdminPlanCreate(PlanCreate):
    primary_teacher_id: str = Field(..., min_length=1)


class StudentPayload(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)


class PlanUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=300)
    description: Optional[str] = Field(default=None, max_length=3000)
    general_objective: Optional[str] = Field(default=None, max_length=1000)
    specific_objectives: Optional[str] = Field(default=None, max_length=2000)
    new_responsible_teacher_id: Optional[str] = None
    new_teacher_assignment_ids: Optional[List[str]] = None
    new_students: Optional[List[StudentPayload]] = None
    expected_version: Optional[int] = Field(default=None, ge=1)

    @field_validator("new_teacher_assignment_ids")
    @classmethod
    def strip_assignment_ids(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _strip_blank_ids(value)


class StatusChange(BaseModel):
    new_status: PlanStatus
    notes: Optional[str] = Field(default=None, max_length=1000)
    expected_version: Optional[int] = Field(default=None, ge=1)


class ContinuationCreate(BaseModel):
    target_academic_period_id: str = Field(..., min_length=1)
    teacher_assignment_ids: List[str] = Field(..., min_length=1)
    new_title: Optional[str] = Field(default=None, min_length=3, max_length=300)
    new_responsible_teacher_id: Optional[str] = None
    student_names: Optional[List[str]] = None
    description: Optional[str] = Field(default=None, max_length=3000)
    general_objective: Optional[str] = Field(default=None, max_length=1000)
    specific_objectives: Optional[str] = Field(default=None, max_length=2000)
    expected_version: Optional[int] = Field(default=None, ge=1)

    @field_validator("teacher_assignment_ids")
    @classmethod
    def strip_assignment_ids(cls, value: List[str]) -> List[str]:
        return _strip_blank_ids(value)


class CreatedResponse(BaseModel):
    id: str
    message: str


# ---------------------------------------------------------------------------
# Plan views
# ---------------------------------------------------------------------------


class StudentResponse(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class PlanDetail(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    general_objective: Optional[str] = None
    specific_objectives: Optional[str] = None
    status: PlanStatus
    academic_period_id: str
    primary_teacher_id: str
    teacher_assignment_ids: List[str]
    students: List[StudentResponse]
    is_continuation_of: Optional[str] = None
    has_continuation: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    version: int

    model_config = ConfigDict(from_attributes=True)


class PlanSummary(BaseModel):
    id: str
    title: str
    status: PlanStatus
    status_label: str
    academic_period_id: str
    academic_period_code: Optional[str] = None
    responsible_teacher_id: str
    assignments_count: int
    students_count: int
    is_continuation: bool
    has_continuation: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class PlanCapabilitiesResponse(BaseModel):
    can_view: bool
    can_edit: bool
    can_change_status: bool
    can_upload_attachment: bool
    can_delete_attachment: bool
    can_continue: bool
    can_change_responsible: bool
    can_change_assignments: bool

    model_config = ConfigDict(from_attributes=True)


class StatusOptionsResponse(BaseModel):
    current: PlanStatus
    available: List[PlanStatus]
    suggested_next: Optional[PlanStatus] = None


class HistoryEntryResponse(BaseModel):
    id: str
    plan_id: str
    sequence: int
    action_type: HistoryActionType
    performed_by_user_id: str
    performed_at: datetime
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def action_label(self) -> str:
        return HISTORY_ACTION_LABELS[self.action_type]


# ---------------------------------------------------------------------------
# Attachments
# ---------------------------------------------------------------------------


class AttachmentCreate(BaseModel):
    type: AttachmentType
    name: str = Field(..., min_length=1, max_length=300)
    file_key: str = Field(..., min_length=1, max_length=500)
    content_type: Optional[str] = Field(default=None, max_length=100)


class AttachmentResponse(BaseModel):
    id: str
    plan_id: str
    type: AttachmentType
    name: str
    file_key: str
    content_type: Optional[str] = None
    uploaded_by_user_id: str
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AttachmentGroup(BaseModel):
    type: AttachmentType
    label: str
    attachments: List[AttachmentResponse]

    @classmethod
    def build(cls, attachment_type: AttachmentType, attachments) -> "AttachmentGroup":
        return cls(
            type=attachment_type,
            label=ATTACHMENT_TYPE_LABELS[attachment_type],
            attachments=[AttachmentResponse.model_validate(a) for a in attachments],
        )


class DownloadUrlResponse(BaseModel):
    url: str


# ---------------------------------------------------------------------------
# Reference data and paging
# ---------------------------------------------------------------------------


class AcademicPeriodResponse(BaseModel):
    id: str
    code: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class SubjectResponse(BaseModel):
    id: str
    code: str
    name: str
    description: Optional[str] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class TeacherAssignmentResponse(BaseModel):
    id: str
    teacher_id: str
    subject_id: str
    academic_period_id: str
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class PageResponse(BaseModel, Generic[T]):
    items: List[T]
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_prev: bool
    has_next: bool
