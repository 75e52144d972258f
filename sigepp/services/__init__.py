"""Convenient re-exports for the plan service layer."""
from __future__ import annotations

from .academic_plan import (
    PlanChanges,
    PlanData,
    StudentData,
    change_status,
    create_plan,
    create_plan_with_responsible,
    get_plan_for_actor,
    list_my_plans,
    list_plans,
    plan_capabilities,
    status_options,
    summarize_plan,
    update_plan,
)
from .attachments import (
    add_attachment,
    get_download_url,
    group_attachments_by_type,
    list_attachments,
    remove_attachment,
    upload_attachment,
)
from .continuation import ContinuationRequest, continue_plan
from .file_storage import FileStorage, LocalFileStorage
from .history import list_history
from .listing import Page, list_academic_periods, list_subjects, list_teacher_assignments

__all__ = [
    "ContinuationRequest",
    "FileStorage",
    "LocalFileStorage",
    "Page",
    "PlanChanges",
    "PlanData",
    "StudentData",
    "add_attachment",
    "change_status",
    "continue_plan",
    "create_plan",
    "create_plan_with_responsible",
    "get_download_url",
    "get_plan_for_actor",
    "group_attachments_by_type",
    "list_academic_periods",
    "list_attachments",
    "list_history",
    "list_my_plans",
    "list_plans",
    "list_subjects",
    "list_teacher_assignments",
    "plan_capabilities",
    "remove_attachment",
    "status_options",
    "summarize_plan",
    "update_plan",
    "upload_attachment",
]
