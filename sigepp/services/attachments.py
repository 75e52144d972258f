"""Attachment registry for plans.

Attachments may be added and removed in any status, including Completed and
Archived, by the responsible teacher or an administrator.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import event, select
from sqlalchemy.orm import Session

from ..db import new_id, utcnow
from ..db.models import PlanAttachment
from ..domain.enums import AttachmentType, HistoryActionType
from ..domain.errors import ForbiddenError, NotFoundError
from ..domain.permissions import Actor, capabilities
from ..domain.validation import validate_attachment_fields
from . import history, plan_store
from .file_storage import FileStorage

LOGGER = logging.getLogger(__name__)

_PENDING_FILE_DELETES = "sigepp.pending_file_deletes"


def _delete_file_after_commit(session: Session, storage: FileStorage, file_key: str) -> None:
    session.info.setdefault(_PENDING_FILE_DELETES, []).append((storage, file_key))


@event.listens_for(Session, "after_commit")
def _purge_pending_files(session: Session) -> None:
    for storage, file_key in session.info.pop(_PENDING_FILE_DELETES, []):
        storage.delete(file_key)


@event.listens_for(Session, "after_soft_rollback")
def _keep_pending_files(session: Session, previous_transaction) -> None:
    dropped = session.info.pop(_PENDING_FILE_DELETES, None)
    if dropped:
        LOGGER.info("Rollback kept %d stored file(s) scheduled for deletion", len(dropped))


def _describe(attachment: PlanAttachment) -> dict[str, str | None]:
    return {
        "id": attachment.id,
        "type": attachment.type.value,
        "name": attachment.name,
        "file_key": attachment.file_key,
        "content_type": attachment.content_type,
    }


def add_attachment(
    session: Session,
    actor: Actor,
    plan_id: str,
    attachment_type: AttachmentType,
    name: str,
    file_key: str,
    content_type: str | None = None,
) -> PlanAttachment:
    plan = plan_store.get_plan(session, plan_id)
    if not capabilities(actor, plan).can_upload_attachment:
        raise ForbiddenError("You cannot add attachments to this plan", state=plan.status)
    name, file_key, content_type = validate_attachment_fields(name, file_key, content_type)

    attachment = PlanAttachment(
        id=new_id(),
        type=AttachmentType(attachment_type),
        name=name,
        file_key=file_key,
        content_type=content_type,
        uploaded_by_user_id=actor.user_id,
        uploaded_at=utcnow(),
    )
    plan.attachments.append(attachment)
    history.record(
        session,
        plan,
        HistoryActionType.ATTACHMENT_ADDED,
        actor.user_id,
        new_value=_describe(attachment),
    )
    plan_store.flush(session)
    return attachment


def upload_attachment(
    session: Session,
    actor: Actor,
    plan_id: str,
    attachment_type: AttachmentType,
    name: str,
    data: bytes,
    content_type: str | None,
    storage: FileStorage,
) -> PlanAttachment:
    """Store the bytes, then register them; permission is checked before storing."""

    plan = plan_store.get_plan(session, plan_id)
    if not capabilities(actor, plan).can_upload_attachment:
        raise ForbiddenError("You cannot add attachments to this plan", state=plan.status)
    file_key = storage.put(data, content_type)
    return add_attachment(session, actor, plan_id, attachment_type, name, file_key, content_type)


def _live_attachment(session: Session, attachment_id: str) -> PlanAttachment:
    attachment = session.get(PlanAttachment, attachment_id)
    if attachment is None or attachment.is_deleted:
        raise NotFoundError(f"Attachment {attachment_id} not found", field="attachment_id")
    return attachment


def remove_attachment(
    session: Session,
    actor: Actor,
    attachment_id: str,
    storage: FileStorage | None = None,
) -> PlanAttachment:
    """Soft-delete an attachment; the earlier ``AttachmentAdded`` entry stays.

    When no live attachment still references the stored file, the file is
    removed once the session commits. A rollback leaves it in place.
    """

    attachment = _live_attachment(session, attachment_id)
    plan = attachment.plan
    if not capabilities(actor, plan).can_delete_attachment:
        raise ForbiddenError("You cannot remove attachments from this plan", state=plan.status)

    attachment.is_deleted = True
    attachment.deleted_at = utcnow()
    attachment.deleted_by_user_id = actor.user_id
    history.record(
        session,
        plan,
        HistoryActionType.ATTACHMENT_REMOVED,
        actor.user_id,
        old_value=_describe(attachment),
    )
    plan_store.flush(session)

    if storage is not None:
        still_used = session.scalar(
            select(PlanAttachment.id).where(
                PlanAttachment.file_key == attachment.file_key,
                PlanAttachment.is_deleted.is_(False),
            )
        )
        if still_used is None:
            _delete_file_after_commit(session, storage, attachment.file_key)
    return attachment


def list_attachments(
    session: Session,
    actor: Actor,
    plan_id: str,
    attachment_type: AttachmentType | None = None,
) -> Sequence[PlanAttachment]:
    plan = plan_store.get_plan(session, plan_id)
    if not capabilities(actor, plan).can_view:
        raise ForbiddenError("You cannot view this plan", state=plan.status)

    stmt = (
        select(PlanAttachment)
        .where(PlanAttachment.plan_id == plan.id, PlanAttachment.is_deleted.is_(False))
        .order_by(PlanAttachment.uploaded_at, PlanAttachment.name)
    )
    if attachment_type is not None:
        stmt = stmt.where(PlanAttachment.type == AttachmentType(attachment_type))
    return session.scalars(stmt).all()


def group_attachments_by_type(
    attachments: Iterable[PlanAttachment],
) -> dict[AttachmentType, list[PlanAttachment]]:
    grouped: dict[AttachmentType, list[PlanAttachment]] = {}
    for attachment in attachments:
        grouped.setdefault(AttachmentType(attachment.type), []).append(attachment)
    order = list(AttachmentType)
    return dict(sorted(grouped.items(), key=lambda item: order.index(item[0])))


def get_download_url(
    session: Session, actor: Actor, attachment_id: str, storage: FileStorage
) -> str:
    attachment = _live_attachment(session, attachment_id)
    if not capabilities(actor, attachment.plan).can_view:
        raise ForbiddenError("You cannot view this plan", state=attachment.plan.status)
    return storage.get_download_url(attachment.file_key)


__all__ = [
    "add_attachment",
    "get_download_url",
    "group_attachments_by_type",
    "list_attachments",
    "remove_attachment",
    "upload_attachment",
]
