"""Blob storage for attachments, backed by a local directory."""

import asyncio
import logging
import re
import uuid
from pathlib import Path

from qadesk.core.config import settings
from qadesk.errors import DomainValidationError, NotFoundError
from qadesk.services.best_effort import run_best_effort

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # Images
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    # Text files
    "text/plain",
    "text/csv",
    "application/json",
    "application/xml",
    "text/xml",
    # Source code
    "text/javascript",
    "application/javascript",
    "text/typescript",
    "text/html",
    "text/css",
    "application/x-python",
    "text/x-python",
    "text/x-csharp",
    "application/x-sql",
    # Archives
    "application/zip",
    "application/x-rar-compressed",
    "application/x-7z-compressed",
})

_INVALID_NAME_CHARS = re.compile(r'[<>:"|?*\\/\x00-\x1f]')
_RESERVED_NAMES = re.compile(r"^(CON|PRN|AUX|NUL|COM[1-9]|LPT[1-9])(\..*)?$", re.IGNORECASE)


def validate_file_name(file_name: str) -> None:
    """
    Reject names that could escape the blob path or break downloads.

    Raises:
        DomainValidationError: If the name is empty, contains "..", invalid
            characters, or is a Windows reserved device name.
    """
    if not file_name or not file_name.strip():
        raise DomainValidationError("File name is required")
    if ".." in file_name:
        raise DomainValidationError(f'File name "{file_name}" must not contain ".."')
    if _INVALID_NAME_CHARS.search(file_name):
        raise DomainValidationError(f'File name "{file_name}" contains invalid characters')
    if _RESERVED_NAMES.match(file_name):
        raise DomainValidationError(f'File name "{file_name}" is a reserved name')
    if len(file_name) > 255:
        raise DomainValidationError("File name must be 255 characters or less")


def validate_content_type(file_name: str, content_type: str | None) -> str:
    """Return the bare content type (parameters stripped) if it is allowed."""
    bare = (content_type or "").split(";", 1)[0].strip().lower()
    if bare not in ALLOWED_CONTENT_TYPES:
        raise DomainValidationError(f'File "{file_name}" has unsupported type')
    return bare


def generate_blob_path(
    question_id: int,
    answer_id: int | None = None,
    comment_id: int | None = None,
) -> str:
    """Directory-style prefix grouping a post's files under its question."""
    if comment_id is not None:
        return f"questions/{question_id}/comments/{comment_id}"
    if answer_id is not None:
        return f"questions/{question_id}/answers/{answer_id}"
    return f"questions/{question_id}/question"


class LocalBlobStorage:
    """Stores blobs as files below ``root``; blob paths are always relative to it."""

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def _resolve(self, blob_path: str) -> Path:
        target = (self.root / blob_path).resolve()
        if target != self.root and self.root not in target.parents:
            raise DomainValidationError("Invalid blob path")
        return target

    def upload(self, prefix: str, file_name: str, data: bytes) -> str:
        """Store ``data`` under a unique name in ``prefix`` and return its blob path."""
        blob_path = f"{prefix}/{uuid.uuid4().hex}_{file_name}"
        target = self._resolve(blob_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored blob %s (%d bytes)", blob_path, len(data))
        return blob_path

    def exists(self, blob_path: str) -> bool:
        return self._resolve(blob_path).is_file()

    def download(self, blob_path: str) -> bytes:
        """
        Raises:
            NotFoundError: If the blob does not exist.
        """
        target = self._resolve(blob_path)
        if not target.is_file():
            raise NotFoundError("File not found")
        return target.read_bytes()

    def delete(self, blob_path: str) -> bool:
        target = self._resolve(blob_path)
        if not target.is_file():
            return False
        target.unlink()
        return True


def get_blob_storage() -> LocalBlobStorage:
    return LocalBlobStorage(settings.storage_dir)


async def remove_blobs(storage: LocalBlobStorage, blob_paths: list[str]) -> None:
    """Delete blobs whose records are already gone. A blob that cannot be removed is only logged."""
    for blob_path in blob_paths:
        await run_best_effort(
            asyncio.to_thread(storage.delete, blob_path),
            description=f"Blob removal of {blob_path}",
            default=False,
        )
