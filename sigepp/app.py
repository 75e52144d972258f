"""FastAPI application exposing the academic plan lifecycle."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import SEED_DEV_DATA
from .db import get_session, init_db
from .db.fixtures import seed_dev_data
from .domain.errors import (
    ConcurrencyConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PlanError,
    ValidationError,
)
from .routers import attachments as attachments_router
from .routers import plans as plans_router
from .routers import reference as reference_router

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

# Checked in MRO order, so DuplicateStudentError falls through to ValidationError.
ERROR_STATUS_CODES: dict[type[PlanError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    InvalidStateError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConcurrencyConflictError: status.HTTP_409_CONFLICT,
}

app = FastAPI(title="SIGEPP Academic Plans", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(plans_router.router)
app.include_router(attachments_router.router)
app.include_router(attachments_router.files_router)
app.include_router(reference_router.router)


def status_code_for(exc: PlanError) -> int:
    for klass in type(exc).__mro__:
        if klass in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[klass]
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(PlanError)
async def plan_error_handler(request: Request, exc: PlanError) -> JSONResponse:
    code = status_code_for(exc)
    LOGGER.debug("%s %s rejected with %s: %s", request.method, request.url.path, code, exc.message)
    return JSONResponse(status_code=code, content=exc.to_dict())


@app.on_event("startup")
def startup_event() -> None:  # pragma: no cover - exercised indirectly
    init_db()
    if SEED_DEV_DATA:
        with get_session() as session:
            seed_dev_data(session)
        LOGGER.info("Seeded development data")


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}


__all__ = ["app", "status_code_for"]
