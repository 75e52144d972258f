"""Role-, ownership- and status-dependent capabilities for plans."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Iterable, Protocol

from .enums import PlanStatus, Role
from .state_machine import is_editable


@dataclass(frozen=True, slots=True)
class Actor:
    """Identity supplied by the session provider for a single request."""

    user_id: str
    roles: frozenset[Role] = field(default_factory=frozenset)

    @classmethod
    def from_claims(cls, user_id: str, roles: Iterable[str] | None) -> "Actor":
        return cls(user_id=str(user_id), roles=Role.parse_many(roles))

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.roles

    @property
    def is_teacher(self) -> bool:
        return Role.TEACHER in self.roles


class PlanLike(Protocol):
    primary_teacher_id: str
    status: PlanStatus


@dataclass(frozen=True, slots=True)
class PlanCapabilities:
    can_view: bool = False
    can_edit: bool = False
    can_change_status: bool = False
    can_upload_attachment: bool = False
    can_delete_attachment: bool = False
    can_continue: bool = False
    can_change_responsible: bool = False
    can_change_assignments: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


NO_CAPABILITIES = PlanCapabilities()


def capabilities(actor: Actor | None, plan: PlanLike | None) -> PlanCapabilities:
    """Compute what ``actor`` may do with ``plan``; anything unknown gets nothing."""

    if actor is None or plan is None or not actor.roles or not actor.user_id:
        return NO_CAPABILITIES

    is_admin = actor.is_admin
    is_responsible = plan.primary_teacher_id == actor.user_id
    editable = is_editable(PlanStatus(plan.status))
    owns_editable = is_responsible and editable

    return PlanCapabilities(
        can_view=is_admin or is_responsible,
        can_edit=is_admin or owns_editable,
        can_change_status=is_admin,
        can_upload_attachment=is_admin or is_responsible,
        can_delete_attachment=is_admin or is_responsible,
        can_continue=is_admin or is_responsible,
        can_change_responsible=is_admin or owns_editable,
        can_change_assignments=is_admin or owns_editable,
    )


def can_create_plan(actor: Actor | None) -> bool:
    return actor is not None and (actor.is_admin or actor.is_teacher)


__all__ = [
    "Actor",
    "NO_CAPABILITIES",
    "PlanCapabilities",
    "can_create_plan",
    "capabilities",
]
