import logging

from sqlalchemy.orm import Session

import qadesk.repositories.answer as answer_repo
import qadesk.repositories.attachment as attachment_repo
import qadesk.repositories.question as question_repo
from qadesk.db.models.answer import Answer as AnswerModel
from qadesk.db.models.question import QuestionStatus
from qadesk.db.models.user import User
from qadesk.domain.access import GroupAccessPolicy
from qadesk.errors import ForbiddenError, NotFoundError
from qadesk.services.attachment import UploadedFile, link_attachments
from qadesk.services.best_effort import run_best_effort
from qadesk.services.email import EmailType
from qadesk.services.question import get_question_for_user, notify_author, validate_content
from qadesk.services.storage import LocalBlobStorage, remove_blobs

logger = logging.getLogger(__name__)


def list_answers(db: Session, question_id: int, current_user: User) -> list[AnswerModel]:
    question = get_question_for_user(db, question_id, current_user)
    return answer_repo.get_answers_by_question_id(db, question.id)


async def create_answer(
    db: Session,
    storage: LocalBlobStorage,
    question_id: int,
    content: str,
    current_user: User,
    files: list[UploadedFile] | None = None,
) -> AnswerModel:
    """
    Post an answer (admin only).

    An unanswered question becomes answered. Files are linked after the answer
    exists and the question author is emailed; failures of either are logged
    and leave the answer in place.

    Raises:
        NotFoundError: If the question doesn't exist
        ForbiddenError: If the question is in another group or the user is not an admin
        DomainValidationError: If content is missing or too long
    """
    question = get_question_for_user(db, question_id, current_user)
    if not current_user.is_admin:
        raise ForbiddenError("Only administrators can post answers")

    content = validate_content(content)
    answer = answer_repo.create_answer(
        db, question_id=question.id, content=content, author_id=current_user.id
    )
    logger.info("User %s answered question %s", current_user.id, question.id)

    new_status = None
    if question.status == QuestionStatus.UNANSWERED.value:
        new_status = QuestionStatus.ANSWERED.value
    question = question_repo.update_question(db, question.id, status=new_status)

    if files:
        await run_best_effort(
            link_attachments(
                db,
                storage,
                files,
                question_id=question.id,
                uploaded_by=current_user.id,
                answer_id=answer.id,
            ),
            description=f"Attachment linking for answer {answer.id}",
            default=[],
        )

    await notify_author(db, question, EmailType.ANSWER_POSTED, current_user)
    return answer


def _get_managed_answer(db: Session, answer_id: int, current_user: User) -> AnswerModel:
    answer = answer_repo.get_answer_by_id(db, answer_id)
    if not answer:
        raise NotFoundError("Answer not found")

    get_question_for_user(db, answer.question_id, current_user)
    if not GroupAccessPolicy.for_user(current_user).can_manage(author_id=answer.author_id):
        raise ForbiddenError("Only the answer author or admin can modify this answer")
    return answer


def update_answer(db: Session, answer_id: int, content: str, current_user: User) -> AnswerModel:
    """
    Raises:
        NotFoundError: If the answer doesn't exist
        ForbiddenError: If the user is neither the answer author nor an admin
        DomainValidationError: If content is missing or too long
    """
    answer = _get_managed_answer(db, answer_id, current_user)
    return answer_repo.update_answer(db, answer.id, validate_content(content))


async def delete_answer(
    db: Session,
    storage: LocalBlobStorage,
    answer_id: int,
    current_user: User,
) -> None:
    """Delete an answer with its comments. Stored files of both are removed afterwards."""
    answer = _get_managed_answer(db, answer_id, current_user)

    blob_paths = [a.blob_path for a in attachment_repo.get_attachments_under_answer(db, answer.id)]
    answer_repo.delete_answer(db, answer.id)
    logger.info("User %s deleted answer %s", current_user.id, answer_id)

    await remove_blobs(storage, blob_paths)
