"""FastAPI dependencies for sessions, identity and file storage."""
from __future__ import annotations

import logging
from typing import Iterable, Iterator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, URLSafeSerializer
from sqlalchemy.orm import Session

from .config import IDENTITY_TOKEN_SECRET
from .db import get_session
from .domain.permissions import Actor
from .services.file_storage import LocalFileStorage

LOGGER = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)
_identity_serializer = URLSafeSerializer(IDENTITY_TOKEN_SECRET, salt="sigepp-identity")
_file_storage: LocalFileStorage | None = None


def get_db() -> Iterator[Session]:
    """Expose a session that commits on success and rolls back on any error."""

    with get_session() as session:
        yield session


def issue_identity_token(user_id: str, roles: Iterable[str]) -> str:
    """Sign an identity payload the way the identity provider does."""

    return _identity_serializer.dumps(
        {"user_id": user_id, "roles": [getattr(role, "value", role) for role in roles]}
    )


def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Actor:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    try:
        payload = _identity_serializer.loads(credentials.credentials)
    except BadSignature as exc:
        LOGGER.debug("Rejected identity token: %s", exc)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token") from exc
    if not isinstance(payload, dict) or not payload.get("user_id"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return Actor.from_claims(payload["user_id"], payload.get("roles"))


def get_file_storage() -> LocalFileStorage:
    """Return the singleton storage backend, created on first use."""

    global _file_storage
    if _file_storage is None:
        _file_storage = LocalFileStorage()
    return _file_storage


__all__ = ["get_current_actor", "get_db", "get_file_storage", "issue_identity_token"]
