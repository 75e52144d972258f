"""Application configuration settings."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Final

BASE_DIR: Final[Path] = Path(__file__).resolve().parent.parent
DATA_DIR: Final[Path] = Path(os.getenv("SIGEPP_DATA_DIR", str(BASE_DIR / "data")))
DATABASE_URL: Final[str] = os.getenv(
    "DATABASE_URL", f"sqlite:///{(DATA_DIR / 'sigepp.db').as_posix()}"
)
DEFAULT_FILE_STORAGE_ROOT: Final[Path] = DATA_DIR / "files"
FILE_STORAGE_ROOT: Final[Path] = Path(
    os.getenv("FILE_STORAGE_ROOT", str(DEFAULT_FILE_STORAGE_ROOT))
)

# Shared with the external identity provider that issues bearer tokens.
IDENTITY_TOKEN_SECRET: Final[str] = os.getenv("IDENTITY_TOKEN_SECRET", "local-dev-identity")
DOWNLOAD_URL_SECRET: Final[str] = os.getenv("DOWNLOAD_URL_SECRET", "local-dev-downloads")
DOWNLOAD_URL_MAX_AGE: Final[int] = int(os.getenv("DOWNLOAD_URL_MAX_AGE", 15 * 60))

MAX_UPLOAD_BYTES: Final[int] = int(os.getenv("MAX_UPLOAD_BYTES", 50 * 1024 * 1024))
ALLOWED_UPLOAD_CONTENT_TYPES: Final[frozenset[str]] = frozenset(
    {
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        "application/msword",
        "application/vnd.ms-excel",
        "application/vnd.ms-powerpoint",
        "image/jpeg",
        "image/png",
        "image/jpg",
        "application/zip",
        "application/x-zip-compressed",
        "text/plain",
    }
)

DEFAULT_PAGE_SIZE: Final[int] = int(os.getenv("DEFAULT_PAGE_SIZE", 10))
MAX_PAGE_SIZE: Final[int] = int(os.getenv("MAX_PAGE_SIZE", 100))
SEED_DEV_DATA: Final[bool] = os.getenv("SIGEPP_SEED_DEV_DATA", "0") == "1"

# Ensure important directories exist at import time.
for directory in (DATA_DIR, FILE_STORAGE_ROOT):
    directory.mkdir(parents=True, exist_ok=True)
