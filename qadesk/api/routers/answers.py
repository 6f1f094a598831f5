from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session

import qadesk.repositories.attachment as attachment_repo
from qadesk.api.deps import get_current_user, get_db, get_storage, read_uploads
from qadesk.db.models.user import User
from qadesk.schemas.answer import Answer, AnswerUpdate
from qadesk.schemas.attachment import Attachment
from qadesk.services import answer as answer_service
from qadesk.services.storage import LocalBlobStorage

router = APIRouter(tags=["answers"])


def _answer_with_attachments(db: Session, answer) -> Answer:
    attachments = [
        Attachment.model_validate(a)
        for a in attachment_repo.get_attachments_by_answer_id(db, answer.id)
    ]
    return Answer.model_validate(answer).model_copy(update={"attachments": attachments})


@router.get("/questions/{question_id}/answers", response_model=list[Answer])
def get_answers(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    answers = answer_service.list_answers(db, question_id, current_user)
    return [_answer_with_attachments(db, a) for a in answers]


@router.post(
    "/questions/{question_id}/answers",
    response_model=Answer,
    status_code=status.HTTP_201_CREATED,
)
async def create_answer(
    question_id: int,
    content: str = Form(...),
    files: list[UploadFile] | None = File(None),
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """
    Post an answer. Only admin users can answer.

    Accepts multipart form data with optional files; files that cannot be
    stored do not fail the answer.
    """
    uploads = await read_uploads(files)
    answer = await answer_service.create_answer(
        db, storage, question_id, content, current_user, files=uploads
    )
    return _answer_with_attachments(db, answer)


@router.put("/answers/{answer_id}", response_model=Answer)
def update_answer(
    answer_id: int,
    answer_data: AnswerUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    answer = answer_service.update_answer(db, answer_id, answer_data.content, current_user)
    return _answer_with_attachments(db, answer)


@router.delete("/answers/{answer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_answer(
    answer_id: int,
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Delete an answer with its comments and their stored files."""
    await answer_service.delete_answer(db, storage, answer_id, current_user)
