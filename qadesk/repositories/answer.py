from sqlalchemy.orm import Session

from qadesk.core.security import utcnow
from qadesk.db.models.answer import Answer as AnswerModel
from qadesk.db.models.attachment import Attachment as AttachmentModel
from qadesk.db.models.comment import Comment as CommentModel
from qadesk.errors import NotFoundError


def get_answer_by_id(db: Session, answer_id: int) -> AnswerModel | None:
    """Get an answer by ID."""
    return db.query(AnswerModel).filter(AnswerModel.id == answer_id).first()


def get_answers_by_question_id(db: Session, question_id: int) -> list[AnswerModel]:
    """Get the answers of a question, oldest first."""
    return (
        db.query(AnswerModel)
        .filter(AnswerModel.question_id == question_id)
        .order_by(AnswerModel.created_at, AnswerModel.id)
        .all()
    )


def create_answer(db: Session, question_id: int, content: str, author_id: int) -> AnswerModel:
    """Create a new answer in the database. Pure data access - no business logic."""
    now = utcnow()
    db_answer = AnswerModel(
        question_id=question_id,
        content=content,
        author_id=author_id,
        created_at=now,
        updated_at=now,
    )
    db.add(db_answer)
    db.commit()
    db.refresh(db_answer)
    return db_answer


def update_answer(db: Session, answer_id: int, content: str) -> AnswerModel:
    answer = get_answer_by_id(db, answer_id)
    if not answer:
        raise NotFoundError("Answer not found")

    answer.content = content
    answer.updated_at = utcnow()
    db.commit()
    db.refresh(answer)
    return answer


def delete_answer(db: Session, answer_id: int) -> None:
    """Delete an answer with the comments and attachment records that hang off it."""
    answer = get_answer_by_id(db, answer_id)
    if not answer:
        raise NotFoundError("Answer not found")

    comment_ids = [
        row.id
        for row in db.query(CommentModel.id).filter(CommentModel.answer_id == answer_id).all()
    ]
    if comment_ids:
        db.query(AttachmentModel).filter(AttachmentModel.comment_id.in_(comment_ids)).delete(
            synchronize_session=False
        )
    db.query(AttachmentModel).filter(AttachmentModel.answer_id == answer_id).delete(
        synchronize_session=False
    )
    db.query(CommentModel).filter(CommentModel.answer_id == answer_id).delete(
        synchronize_session=False
    )
    db.delete(answer)
    db.commit()
