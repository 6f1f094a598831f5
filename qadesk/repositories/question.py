from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from qadesk.core.security import utcnow
from qadesk.db.models.answer import Answer as AnswerModel
from qadesk.db.models.attachment import Attachment as AttachmentModel
from qadesk.db.models.comment import Comment as CommentModel
from qadesk.db.models.question import Question as QuestionModel
from qadesk.errors import NotFoundError


def get_question_by_id(db: Session, question_id: int) -> QuestionModel | None:
    """Get a question by ID."""
    return db.query(QuestionModel).filter(QuestionModel.id == question_id).first()


def count_questions_in_group(db: Session, group_id: int) -> int:
    return db.query(QuestionModel).filter(QuestionModel.group_id == group_id).count()


def get_questions_paginated(
    db: Session,
    page: int = 1,
    page_size: int = 10,
    group_id: int | None = None,
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
) -> tuple[list[QuestionModel], int]:
    """
    Get questions with optional filters, newest first.

    Args:
        group_id: Restrict to one group (None means all groups)
        status: Exact status match
        priority: Exact priority match
        search: Case-insensitive partial match on title or content

    Returns:
        Tuple of (list of questions, total count)
    """
    query = db.query(QuestionModel)
    if group_id is not None:
        query = query.filter(QuestionModel.group_id == group_id)
    if status is not None:
        query = query.filter(QuestionModel.status == status)
    if priority is not None:
        query = query.filter(QuestionModel.priority == priority)
    if search:
        needle = search.lower()
        query = query.filter(
            or_(
                func.lower(QuestionModel.title).contains(needle),
                func.lower(QuestionModel.content).contains(needle),
            )
        )

    total = query.count()
    skip = (page - 1) * page_size
    questions = (
        query.order_by(QuestionModel.created_at.desc(), QuestionModel.id.desc())
        .offset(skip)
        .limit(page_size)
        .all()
    )
    return questions, total


def create_question(
    db: Session,
    title: str,
    content: str,
    author_id: int,
    group_id: int,
    priority: str,
    status: str,
    tags: list[str],
) -> QuestionModel:
    """Create a new question in the database. Pure data access - no business logic."""
    now = utcnow()
    db_question = QuestionModel(
        title=title,
        content=content,
        author_id=author_id,
        group_id=group_id,
        priority=priority,
        status=status,
        tags=list(tags),
        created_at=now,
        updated_at=now,
    )
    db.add(db_question)
    db.commit()
    db.refresh(db_question)
    return db_question


def update_question(
    db: Session,
    question_id: int,
    title: str | None = None,
    content: str | None = None,
    priority: str | None = None,
    status: str | None = None,
    resolved_at: datetime | None = None,
) -> QuestionModel:
    """Update question fields. Only provided fields will be updated; updated_at is always bumped."""
    question = get_question_by_id(db, question_id)
    if not question:
        raise NotFoundError("Question not found")

    if title is not None:
        question.title = title
    if content is not None:
        question.content = content
    if priority is not None:
        question.priority = priority
    if status is not None:
        # resolved_at belongs to the resolved status only
        question.status = status
        question.resolved_at = resolved_at
    question.updated_at = utcnow()

    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, question_id: int) -> None:
    """Delete a question and every answer, comment and attachment record under it."""
    question = get_question_by_id(db, question_id)
    if not question:
        raise NotFoundError("Question not found")

    db.query(AttachmentModel).filter(AttachmentModel.question_id == question_id).delete(
        synchronize_session=False
    )
    db.query(CommentModel).filter(CommentModel.question_id == question_id).delete(
        synchronize_session=False
    )
    db.query(AnswerModel).filter(AnswerModel.question_id == question_id).delete(
        synchronize_session=False
    )
    db.delete(question)
    db.commit()
