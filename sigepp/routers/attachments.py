"""Attachment registry endpoints and signed file downloads."""
from __future__ import annotations

import logging
import mimetypes
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from ..dependencies import get_current_actor, get_db, get_file_storage
from ..domain.enums import AttachmentType
from ..domain.permissions import Actor
from ..schemas import (
    AttachmentCreate,
    AttachmentGroup,
    AttachmentResponse,
    DownloadUrlResponse,
)
from ..services import attachments as attachment_service
from ..services.file_storage import LocalFileStorage

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/ppa-attachments", tags=["ppa-attachments"])
files_router = APIRouter(prefix="/files", tags=["files"])


@router.get("/by-ppa/{plan_id}", response_model=List[AttachmentResponse])
def attachments_for_plan(
    plan_id: str,
    type: Optional[AttachmentType] = Query(default=None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> List[AttachmentResponse]:
    items = attachment_service.list_attachments(db, actor, plan_id, type)
    return [AttachmentResponse.model_validate(item) for item in items]


@router.get("/by-ppa/{plan_id}/grouped", response_model=List[AttachmentGroup])
def grouped_attachments_for_plan(
    plan_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> List[AttachmentGroup]:
    grouped = attachment_service.group_attachments_by_type(
        attachment_service.list_attachments(db, actor, plan_id)
    )
    return [AttachmentGroup.build(kind, items) for kind, items in grouped.items()]


@router.post(
    "/{plan_id}", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED
)
def register_attachment(
    plan_id: str,
    payload: AttachmentCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
) -> AttachmentResponse:
    attachment = attachment_service.add_attachment(
        db, actor, plan_id, payload.type, payload.name, payload.file_key, payload.content_type
    )
    return AttachmentResponse.model_validate(attachment)


@router.post(
    "/{plan_id}/upload", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED
)
async def upload_attachment(
    plan_id: str,
    type: AttachmentType = Form(...),
    name: Optional[str] = Form(default=None),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> AttachmentResponse:
    data = await file.read()
    attachment = attachment_service.upload_attachment(
        db,
        actor,
        plan_id,
        type,
        name or file.filename or "",
        data,
        file.content_type,
        storage,
    )
    return AttachmentResponse.model_validate(attachment)


@router.delete("/{attachment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_attachment(
    attachment_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> Response:
    attachment_service.remove_attachment(db, actor, attachment_id, storage)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{attachment_id}/download-url", response_model=DownloadUrlResponse)
def attachment_download_url(
    attachment_id: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
    storage: LocalFileStorage = Depends(get_file_storage),
) -> DownloadUrlResponse:
    url = attachment_service.get_download_url(db, actor, attachment_id, storage)
    return DownloadUrlResponse(url=url)


@files_router.get("/{token}")
def download_file(
    token: str, storage: LocalFileStorage = Depends(get_file_storage)
) -> Response:
    key = storage.resolve_download_token(token)
    media_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    LOGGER.info("Serving stored file %s", key)
    return Response(content=storage.open(key), media_type=media_type)


__all__ = ["files_router", "router"]
