"""File storage used by the attachment registry.

Only the storage key ever reaches the database. Keys are content addressed, so
uploading the same bytes twice yields the same key.
"""
from __future__ import annotations

import hashlib
import logging
import mimetypes
from pathlib import Path
from typing import Protocol

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..config import (
    ALLOWED_UPLOAD_CONTENT_TYPES,
    DOWNLOAD_URL_MAX_AGE,
    DOWNLOAD_URL_SECRET,
    FILE_STORAGE_ROOT,
    MAX_UPLOAD_BYTES,
)
from ..domain.errors import NotFoundError, ValidationError

LOGGER = logging.getLogger(__name__)

_KEY_PREFIX = "ppa"


class FileStorage(Protocol):
    def put(self, data: bytes, content_type: str | None) -> str: ...

    def get_download_url(self, key: str) -> str: ...

    def delete(self, key: str) -> None: ...

    def open(self, key: str) -> bytes: ...


def validate_upload(data: bytes, content_type: str | None) -> None:
    if not data:
        raise ValidationError("No file content was provided", field="file")
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError(
            f"File exceeds the {MAX_UPLOAD_BYTES // (1024 * 1024)}MB limit", field="file"
        )
    if content_type not in ALLOWED_UPLOAD_CONTENT_TYPES:
        raise ValidationError(
            f"Content type {content_type!r} is not allowed", field="content_type"
        )


class LocalFileStorage:
    """Stores files on disk under ``root`` and hands out signed, expiring URLs."""

    def __init__(
        self,
        root: Path | None = None,
        *,
        secret: str = DOWNLOAD_URL_SECRET,
        max_age: int = DOWNLOAD_URL_MAX_AGE,
        url_prefix: str = "/files",
    ) -> None:
        self.root = root or FILE_STORAGE_ROOT
        self.root.mkdir(parents=True, exist_ok=True)
        self.max_age = max_age
        self.url_prefix = url_prefix.rstrip("/")
        self._serializer = URLSafeTimedSerializer(secret, salt="sigepp-download")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root.resolve() not in path.parents:
            raise NotFoundError(f"File {key} not found", field="file_key")
        return path

    def put(self, data: bytes, content_type: str | None) -> str:
        validate_upload(data, content_type)
        digest = hashlib.sha256(data).hexdigest()
        extension = mimetypes.guess_extension(content_type or "") or ""
        key = f"{_KEY_PREFIX}/{digest[:2]}/{digest}{extension}"
        path = self._path(key)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            LOGGER.info("Stored %d bytes at %s", len(data), key)
        return key

    def get_download_url(self, key: str) -> str:
        if not self._path(key).exists():
            raise NotFoundError(f"File {key} not found", field="file_key")
        return f"{self.url_prefix}/{self._serializer.dumps(key)}"

    def resolve_download_token(self, token: str) -> str:
        try:
            return self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as exc:
            raise ValidationError("Download link has expired", field="token") from exc
        except BadSignature as exc:
            raise NotFoundError("Download link is invalid", field="token") from exc

    def open(self, key: str) -> bytes:
        path = self._path(key)
        if not path.exists():
            raise NotFoundError(f"File {key} not found", field="file_key")
        return path.read_bytes()

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
        LOGGER.info("Deleted stored file %s", key)


__all__ = ["FileStorage", "LocalFileStorage", "validate_upload"]
