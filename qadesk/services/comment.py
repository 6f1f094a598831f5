import logging

from sqlalchemy.orm import Session

import qadesk.repositories.answer as answer_repo
import qadesk.repositories.attachment as attachment_repo
import qadesk.repositories.comment as comment_repo
from qadesk.db.models.comment import Comment as CommentModel
from qadesk.db.models.user import User
from qadesk.domain.access import GroupAccessPolicy
from qadesk.errors import ForbiddenError, NotFoundError
from qadesk.services.attachment import UploadedFile, link_attachments
from qadesk.services.best_effort import run_best_effort
from qadesk.services.email import EmailType
from qadesk.services.question import get_question_for_user, notify_author, validate_content
from qadesk.services.storage import LocalBlobStorage, remove_blobs

logger = logging.getLogger(__name__)

COMMENT_MAX_LENGTH = 1000


def list_comments(db: Session, question_id: int, current_user: User) -> list[CommentModel]:
    question = get_question_for_user(db, question_id, current_user)
    return comment_repo.get_comments_by_question_id(db, question.id)


async def create_comment(
    db: Session,
    storage: LocalBlobStorage,
    question_id: int,
    content: str,
    current_user: User,
    answer_id: int | None = None,
    files: list[UploadedFile] | None = None,
) -> CommentModel:
    """
    Comment on a question, or on one of its answers when answer_id is given.

    Any member of the question's group may comment. The question author is
    emailed when someone else comments.

    Raises:
        NotFoundError: If the question doesn't exist or the answer is not one of its answers
        ForbiddenError: If the question belongs to another group
        DomainValidationError: If content is missing or too long
    """
    question = get_question_for_user(db, question_id, current_user)

    if answer_id is not None:
        answer = answer_repo.get_answer_by_id(db, answer_id)
        if not answer or answer.question_id != question.id:
            raise NotFoundError("Answer not found")

    content = validate_content(content, max_length=COMMENT_MAX_LENGTH)
    comment = comment_repo.create_comment(
        db,
        question_id=question.id,
        content=content,
        author_id=current_user.id,
        answer_id=answer_id,
    )
    logger.info("User %s commented on question %s", current_user.id, question.id)

    if files:
        await run_best_effort(
            link_attachments(
                db,
                storage,
                files,
                question_id=question.id,
                uploaded_by=current_user.id,
                comment_id=comment.id,
            ),
            description=f"Attachment linking for comment {comment.id}",
            default=[],
        )

    await notify_author(db, question, EmailType.COMMENT_POSTED, current_user)
    return comment


async def delete_comment(
    db: Session,
    storage: LocalBlobStorage,
    comment_id: int,
    current_user: User,
) -> None:
    """
    Raises:
        NotFoundError: If the comment doesn't exist
        ForbiddenError: If the user is neither the comment author nor an admin
    """
    comment = comment_repo.get_comment_by_id(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")

    get_question_for_user(db, comment.question_id, current_user)
    if not GroupAccessPolicy.for_user(current_user).can_manage(author_id=comment.author_id):
        raise ForbiddenError("Only the comment author or admin can delete this comment")

    blob_paths = [a.blob_path for a in attachment_repo.get_attachments_by_comment_id(db, comment.id)]
    comment_repo.delete_comment(db, comment.id)
    logger.info("User %s deleted comment %s", current_user.id, comment_id)

    await remove_blobs(storage, blob_paths)
