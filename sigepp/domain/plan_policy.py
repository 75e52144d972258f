from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List

from .enums import AttachmentType


@dataclass(frozen=True)
class PolicyIssue:
    code: str
    message: str


@dataclass
class CompletionDiagnostics:
    warnings: List[PolicyIssue] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return not self.warnings


def diagnose_completion(plan: Any, attachments: Iterable[Any]) -> CompletionDiagnostics:
    """Report what a plan is expected to carry before it is marked Completed.

    Advisory only: status changes never consult the result to block anything.
    """

    diag = CompletionDiagnostics()
    live = [a for a in attachments if not getattr(a, "is_deleted", False)]
    if not any(AttachmentType(a.type) == AttachmentType.PPA_DOCUMENT for a in live):
        diag.warnings.append(
            PolicyIssue("plan.ppa_document.missing", "No PPA document has been attached yet.")
        )
    if not (getattr(plan, "students", None) or []):
        diag.warnings.append(PolicyIssue("plan.students.empty", "The student roster is empty."))
    return diag


__all__ = ["CompletionDiagnostics", "PolicyIssue", "diagnose_completion"]
