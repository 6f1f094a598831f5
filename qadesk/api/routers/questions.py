from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.orm import Session

import qadesk.repositories.attachment as attachment_repo
from qadesk.api.deps import get_current_user, get_db, get_storage, read_uploads
from qadesk.db.models.question import QuestionPriority, QuestionStatus
from qadesk.db.models.user import User
from qadesk.schemas.attachment import Attachment
from qadesk.schemas.pagination import PaginatedResponse
from qadesk.schemas.question import Question, QuestionCreate, QuestionDetail, QuestionUpdate
from qadesk.services import attachment as attachment_service
from qadesk.services import question as question_service
from qadesk.services.storage import LocalBlobStorage

router = APIRouter(prefix="/questions", tags=["questions"])


def _question_detail(db: Session, question) -> QuestionDetail:
    attachments = [
        Attachment.model_validate(a)
        for a in attachment_repo.get_attachments_by_question_id(db, question.id)
        if a.answer_id is None and a.comment_id is None
    ]
    return QuestionDetail.model_validate(question).model_copy(update={"attachments": attachments})


@router.get("", response_model=PaginatedResponse[Question])
def get_questions(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(10, ge=1, le=100, description="Number of items per page"),
    status_filter: QuestionStatus | None = Query(None, alias="status"),
    priority: QuestionPriority | None = Query(None),
    search: str | None = Query(None, description="Partial match on title or content"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    List questions, newest first.
    - Admin: questions of every group
    - Others: only questions of their own group
    """
    questions, total = question_service.list_questions(
        db,
        current_user,
        page=page,
        page_size=limit,
        status=status_filter,
        priority=priority,
        search=search,
    )
    return PaginatedResponse(
        items=[Question.model_validate(q) for q in questions],
        total=total,
        page=page,
        page_size=limit,
    )


@router.post("", response_model=Question, status_code=status.HTTP_201_CREATED)
async def create_question(
    question_data: QuestionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Post a question to the queue of the author's group."""
    question = await question_service.create_question(
        db,
        current_user,
        title=question_data.title,
        content=question_data.content,
        priority=question_data.priority,
    )
    return Question.model_validate(question)


@router.get("/{question_id}", response_model=QuestionDetail)
def get_question(
    question_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    question = question_service.get_question_for_user(db, question_id, current_user)
    return _question_detail(db, question)


@router.put("/{question_id}", response_model=QuestionDetail)
async def update_question(
    question_id: int,
    question_data: QuestionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Update a question. Only the author or an admin can update it.

    Fields not included in the request are not updated.
    """
    question = await question_service.update_question(db, question_id, question_data, current_user)
    return _question_detail(db, question)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: int,
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Delete a question with its answers, comments and files. Author or admin only."""
    await question_service.delete_question(db, storage, question_id, current_user)


@router.post(
    "/{question_id}/attachments",
    response_model=list[Attachment],
    status_code=status.HTTP_201_CREATED,
)
async def upload_attachments(
    question_id: int,
    files: list[UploadFile] = File(...),
    db: Session = Depends(get_db),
    storage: LocalBlobStorage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Attach up to the configured number of files to a question. Author or admin only."""
    uploads = await read_uploads(files)
    attachments = attachment_service.upload_question_attachments(
        db, storage, question_id, uploads, current_user
    )
    return [Attachment.model_validate(a) for a in attachments]
