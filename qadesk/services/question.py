"""
Question queue: group-scoped listing, creation with AI tags, status changes.
"""

import logging

from sqlalchemy.orm import Session

import qadesk.repositories.attachment as attachment_repo
import qadesk.repositories.question as question_repo
import qadesk.repositories.user as user_repo
from qadesk.core.security import utcnow
from qadesk.db.models.question import Question as QuestionModel
from qadesk.db.models.question import QuestionPriority, QuestionStatus
from qadesk.db.models.user import User
from qadesk.domain.access import GroupAccessPolicy
from qadesk.errors import DomainValidationError, ForbiddenError, NotFoundError
from qadesk.schemas.question import QuestionUpdate
from qadesk.services.best_effort import run_best_effort
from qadesk.services.email import EmailType, send_notification_email
from qadesk.services.storage import LocalBlobStorage, remove_blobs
from qadesk.services.tagging import generate_tags

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
CONTENT_MAX_LENGTH = 10000

_STATUS_EMAILS = {
    QuestionStatus.RESOLVED: EmailType.QUESTION_RESOLVED,
    QuestionStatus.REJECTED: EmailType.QUESTION_REJECTED,
}


def validate_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise DomainValidationError("Title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise DomainValidationError(f"Title must be {TITLE_MAX_LENGTH} characters or less")
    return title


def validate_content(content: str, max_length: int = CONTENT_MAX_LENGTH) -> str:
    content = content.strip()
    if not content:
        raise DomainValidationError("Content is required")
    if len(content) > max_length:
        raise DomainValidationError(f"Content must be {max_length} characters or less")
    return content


def list_questions(
    db: Session,
    current_user: User,
    page: int = 1,
    page_size: int = 10,
    status: QuestionStatus | None = None,
    priority: QuestionPriority | None = None,
    search: str | None = None,
) -> tuple[list[QuestionModel], int]:
    """
    List questions visible to the user, newest first.

    - Admin: questions of every group
    - Others: only questions of their own group
    """
    policy = GroupAccessPolicy.for_user(current_user)
    return question_repo.get_questions_paginated(
        db,
        page=page,
        page_size=page_size,
        group_id=policy.visible_group_id(),
        status=status.value if status else None,
        priority=priority.value if priority else None,
        search=search.strip() if search else None,
    )


def get_question_for_user(db: Session, question_id: int, current_user: User) -> QuestionModel:
    """
    Get a question if the user may see it.

    Raises:
        NotFoundError: If the question doesn't exist
        ForbiddenError: If the question belongs to another group
    """
    question = question_repo.get_question_by_id(db, question_id)
    if not question:
        raise NotFoundError("Question not found")

    if not GroupAccessPolicy.for_user(current_user).can_access_group(question.group_id):
        raise ForbiddenError("Access denied")

    return question


async def _notify(email_type: EmailType, to: str, question: QuestionModel, actor: str) -> None:
    await run_best_effort(
        send_notification_email(email_type, to, question.id, question.title, actor),
        description=f"{email_type.value} email to {to}",
    )


async def notify_admins(db: Session, question: QuestionModel, actor: str) -> None:
    for admin in user_repo.get_admin_users(db):
        await _notify(EmailType.QUESTION_POSTED, admin.email, question, actor)


async def notify_author(
    db: Session,
    question: QuestionModel,
    email_type: EmailType,
    actor: User,
) -> None:
    """Email the question author, unless the author is the one acting."""
    if actor.id == question.author_id:
        return
    author = user_repo.get_user_by_id(db, question.author_id)
    if author:
        await _notify(email_type, author.email, question, actor.username)


async def create_question(
    db: Session,
    current_user: User,
    title: str,
    content: str,
    priority: QuestionPriority = QuestionPriority.MEDIUM,
) -> QuestionModel:
    """
    Post a question to the author's group queue.

    Tags come from AI tagging when it is available and fall back to an empty
    list. Admins are notified by email; neither step can fail the creation.

    Raises:
        DomainValidationError: If title or content is missing or too long
    """
    title = validate_title(title)
    content = validate_content(content)

    tags = await run_best_effort(
        generate_tags(title, content),
        description="AI tag generation",
        default=[],
    )

    question = question_repo.create_question(
        db,
        title=title,
        content=content,
        author_id=current_user.id,
        group_id=current_user.group_id,
        priority=priority.value,
        status=QuestionStatus.UNANSWERED.value,
        tags=tags,
    )
    logger.info("User %s posted question %s", current_user.id, question.id)

    await notify_admins(db, question, current_user.username)
    return question


async def update_question(
    db: Session,
    question_id: int,
    question_data: QuestionUpdate,
    current_user: User,
) -> QuestionModel:
    """
    Update a question (author or admin).

    Moving to resolved stamps resolved_at and any other status clears it.
    Moving to resolved or rejected emails the author.

    Raises:
        NotFoundError: If the question doesn't exist
        ForbiddenError: If the user is not the author nor an admin
        DomainValidationError: If a provided title or content is invalid
    """
    question = get_question_for_user(db, question_id, current_user)
    if not GroupAccessPolicy.for_user(current_user).can_manage(author_id=question.author_id):
        raise ForbiddenError("Only the question author or admin can update this question")

    title = validate_title(question_data.title) if question_data.title is not None else None
    content = validate_content(question_data.content) if question_data.content is not None else None
    new_status = question_data.status
    previous_status = question.status

    updated = question_repo.update_question(
        db,
        question_id,
        title=title,
        content=content,
        priority=question_data.priority.value if question_data.priority else None,
        status=new_status.value if new_status else None,
        resolved_at=utcnow() if new_status == QuestionStatus.RESOLVED else None,
    )

    if new_status in _STATUS_EMAILS and new_status.value != previous_status:
        await notify_author(db, updated, _STATUS_EMAILS[new_status], current_user)
    return updated


async def delete_question(
    db: Session,
    storage: LocalBlobStorage,
    question_id: int,
    current_user: User,
) -> None:
    """
    Delete a question with its answers, comments and attachments (author or admin).

    Stored blobs are removed after the records; a blob that cannot be removed
    is only logged.

    Raises:
        NotFoundError: If the question doesn't exist
        ForbiddenError: If the user is not the author nor an admin
    """
    question = get_question_for_user(db, question_id, current_user)
    if not GroupAccessPolicy.for_user(current_user).can_manage(author_id=question.author_id):
        raise ForbiddenError("Only the question author or admin can delete this question")

    blob_paths = [a.blob_path for a in attachment_repo.get_attachments_by_question_id(db, question_id)]
    question_repo.delete_question(db, question_id)
    logger.info("User %s deleted question %s", current_user.id, question_id)

    await remove_blobs(storage, blob_paths)
