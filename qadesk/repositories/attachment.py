from sqlalchemy import or_
from sqlalchemy.orm import Session

from qadesk.db.models.attachment import Attachment as AttachmentModel
from qadesk.db.models.comment import Comment as CommentModel


def get_attachment_by_id(db: Session, attachment_id: int) -> AttachmentModel | None:
    """Get an attachment record by ID."""
    return db.query(AttachmentModel).filter(AttachmentModel.id == attachment_id).first()


def get_attachments_by_question_id(db: Session, question_id: int) -> list[AttachmentModel]:
    """Get every attachment under a question, including those of its answers and comments."""
    return (
        db.query(AttachmentModel)
        .filter(AttachmentModel.question_id == question_id)
        .order_by(AttachmentModel.id)
        .all()
    )


def get_attachments_by_answer_id(db: Session, answer_id: int) -> list[AttachmentModel]:
    return (
        db.query(AttachmentModel)
        .filter(AttachmentModel.answer_id == answer_id)
        .order_by(AttachmentModel.id)
        .all()
    )


def get_attachments_under_answer(db: Session, answer_id: int) -> list[AttachmentModel]:
    """Attachments of an answer and of the comments posted on it."""
    comment_ids = [
        row.id for row in db.query(CommentModel.id).filter(CommentModel.answer_id == answer_id)
    ]
    return (
        db.query(AttachmentModel)
        .filter(
            or_(
                AttachmentModel.answer_id == answer_id,
                AttachmentModel.comment_id.in_(comment_ids),
            )
        )
        .order_by(AttachmentModel.id)
        .all()
    )


def get_attachments_by_comment_id(db: Session, comment_id: int) -> list[AttachmentModel]:
    return (
        db.query(AttachmentModel)
        .filter(AttachmentModel.comment_id == comment_id)
        .order_by(AttachmentModel.id)
        .all()
    )


def create_attachment(
    db: Session,
    question_id: int,
    file_name: str,
    file_size: int,
    content_type: str,
    blob_path: str,
    uploaded_by: int,
    answer_id: int | None = None,
    comment_id: int | None = None,
) -> AttachmentModel:
    """Create an attachment record in the database. Pure data access - no business logic."""
    db_attachment = AttachmentModel(
        question_id=question_id,
        answer_id=answer_id,
        comment_id=comment_id,
        file_name=file_name,
        file_size=file_size,
        content_type=content_type,
        blob_path=blob_path,
        uploaded_by=uploaded_by,
    )
    db.add(db_attachment)
    db.commit()
    db.refresh(db_attachment)
    return db_attachment
