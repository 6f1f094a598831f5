import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import qadesk.repositories.attachment as attachment_repo
from qadesk.core.config import settings
from qadesk.db.models.attachment import Attachment as AttachmentModel
from qadesk.db.models.question import Question as QuestionModel
from qadesk.db.models.user import User
from qadesk.domain.access import GroupAccessPolicy
from qadesk.errors import DomainValidationError, ForbiddenError, NotFoundError
from qadesk.services.question import get_question_for_user
from qadesk.services.storage import (
    LocalBlobStorage,
    generate_blob_path,
    validate_content_type,
    validate_file_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """A file received from a multipart request, already read into memory."""

    file_name: str
    content_type: str | None
    data: bytes


def validate_uploads(files: list[UploadedFile]) -> list[str]:
    """
    Check a batch of files before anything is stored.

    Returns:
        The bare content type of each file, in order.

    Raises:
        DomainValidationError: On an empty batch, too many files, an oversized
            file, an unsupported content type or an unsafe file name.
    """
    if not files:
        raise DomainValidationError("No files provided")
    if len(files) > settings.max_attachments:
        raise DomainValidationError(
            f"Too many files: at most {settings.max_attachments} files per upload"
        )

    content_types = []
    for f in files:
        validate_file_name(f.file_name)
        if len(f.data) > settings.max_upload_bytes:
            raise DomainValidationError(f'File "{f.file_name}" exceeds the maximum upload size')
        content_types.append(validate_content_type(f.file_name, f.content_type))
    return content_types


def store_attachments(
    db: Session,
    storage: LocalBlobStorage,
    files: list[UploadedFile],
    question_id: int,
    uploaded_by: int,
    answer_id: int | None = None,
    comment_id: int | None = None,
) -> list[AttachmentModel]:
    """Validate, store the blobs and record one attachment row per file."""
    content_types = validate_uploads(files)
    prefix = generate_blob_path(question_id, answer_id=answer_id, comment_id=comment_id)

    attachments = []
    for f, content_type in zip(files, content_types):
        blob_path = storage.upload(prefix, f.file_name, f.data)
        try:
            attachment = attachment_repo.create_attachment(
                db,
                question_id=question_id,
                file_name=f.file_name,
                file_size=len(f.data),
                content_type=content_type,
                blob_path=blob_path,
                uploaded_by=uploaded_by,
                answer_id=answer_id,
                comment_id=comment_id,
            )
        except SQLAlchemyError:
            db.rollback()
            storage.delete(blob_path)
            raise
        attachments.append(attachment)
    return attachments


async def link_attachments(
    db: Session,
    storage: LocalBlobStorage,
    files: list[UploadedFile],
    question_id: int,
    uploaded_by: int,
    answer_id: int | None = None,
    comment_id: int | None = None,
) -> list[AttachmentModel]:
    """Run store_attachments in a worker thread, for linking files after a post is created."""
    return await asyncio.to_thread(
        store_attachments,
        db,
        storage,
        files,
        question_id=question_id,
        uploaded_by=uploaded_by,
        answer_id=answer_id,
        comment_id=comment_id,
    )


def upload_question_attachments(
    db: Session,
    storage: LocalBlobStorage,
    question_id: int,
    files: list[UploadedFile],
    current_user: User,
) -> list[AttachmentModel]:
    """
    Attach files to a question.

    Raises:
        NotFoundError: If the question doesn't exist
        ForbiddenError: If the user is neither the author nor an admin
        DomainValidationError: If the batch fails validation
    """
    question = get_question_for_user(db, question_id, current_user)
    if not GroupAccessPolicy.for_user(current_user).can_manage(author_id=question.author_id):
        raise ForbiddenError("Only the question author or admin can add attachments")

    attachments = store_attachments(
        db, storage, files, question_id=question.id, uploaded_by=current_user.id
    )
    logger.info(
        "User %s attached %d files to question %s",
        current_user.id,
        len(attachments),
        question.id,
    )
    return attachments


def get_attachment_for_user(
    db: Session,
    attachment_id: int,
    current_user: User,
) -> tuple[AttachmentModel, QuestionModel]:
    """
    Raises:
        NotFoundError: If the attachment or its question doesn't exist
        ForbiddenError: If the question belongs to another group
    """
    attachment = attachment_repo.get_attachment_by_id(db, attachment_id)
    if not attachment:
        raise NotFoundError("File not found")
    question = get_question_for_user(db, attachment.question_id, current_user)
    return attachment, question


def download_attachment(
    db: Session,
    storage: LocalBlobStorage,
    attachment_id: int,
    current_user: User,
) -> tuple[AttachmentModel, bytes]:
    attachment, _ = get_attachment_for_user(db, attachment_id, current_user)
    return attachment, storage.download(attachment.blob_path)
