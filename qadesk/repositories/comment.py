from sqlalchemy.orm import Session

from qadesk.core.security import utcnow
from qadesk.db.models.attachment import Attachment as AttachmentModel
from qadesk.db.models.comment import Comment as CommentModel
from qadesk.errors import NotFoundError


def get_comment_by_id(db: Session, comment_id: int) -> CommentModel | None:
    """Get a comment by ID."""
    return db.query(CommentModel).filter(CommentModel.id == comment_id).first()


def get_comments_by_question_id(db: Session, question_id: int) -> list[CommentModel]:
    """Get every comment of a question (including comments on its answers), oldest first."""
    return (
        db.query(CommentModel)
        .filter(CommentModel.question_id == question_id)
        .order_by(CommentModel.created_at, CommentModel.id)
        .all()
    )


def create_comment(
    db: Session,
    question_id: int,
    content: str,
    author_id: int,
    answer_id: int | None = None,
) -> CommentModel:
    """Create a new comment in the database. Pure data access - no business logic."""
    now = utcnow()
    db_comment = CommentModel(
        question_id=question_id,
        answer_id=answer_id,
        content=content,
        author_id=author_id,
        created_at=now,
        updated_at=now,
    )
    db.add(db_comment)
    db.commit()
    db.refresh(db_comment)
    return db_comment


def delete_comment(db: Session, comment_id: int) -> None:
    comment = get_comment_by_id(db, comment_id)
    if not comment:
        raise NotFoundError("Comment not found")

    db.query(AttachmentModel).filter(AttachmentModel.comment_id == comment_id).delete(
        synchronize_session=False
    )
    db.delete(comment)
    db.commit()
