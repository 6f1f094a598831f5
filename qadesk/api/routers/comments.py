from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

import qadesk.repositories.attachment as attachment_repo
from qadesk.api.deps import get_current_user, get_db, get_storage, read_uploads
from qadesk.db.models.user import User
from qadesk.schemas.attachment import Attachment
from qadesk.schemas.comment import Comment
from qadesk.services import comment as comment_service
from qadesk.services.storage import LocalBlobStorage

router = APIRouter(tags=["comments"])


def _comment_with_attachments(db: Session, comment) -> Comment:
    attachments = [
        Attachment.model_validate(a)
        for a in attachment_repo.get_attachments_by_comment_id(db, comment.id)
    ]
    return Comment.model_validate(comment).model_copy(update={"attachments": attachments})


@router.get("/questions/{question_id}/comments", response_model=list[Comment])
def get_comments(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Comments on the question and on its answers, oldest first."""
    comments = comment_service.list_comments(db, question_id, current_user)
    return [_comment_with_attachments(db, c) for c in comments]


@router.post(
    "/questions/{question_id}/comments",
    response_model=Comment,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    question_id: int,
    content: str = Form(...),
    answer_id: int | None = Form(None, alias="answerId"),
    files: list[UploadFile] | None = File(None),
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """
    Comment on a question, or on one of its answers with answerId.
    Any member of the question's group can comment.
    """
    uploads = await read_uploads(files)
    comment = await comment_service.create_comment(
        db,
        storage,
        question_id,
        content,
        current_user,
        answer_id=answer_id,
        files=uploads,
    )
    return _comment_with_attachments(db, comment)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    await comment_service.delete_comment(db, storage, comment_id, current_user)
