from datetime import datetime

from qadesk.db.models.question import QuestionPriority, QuestionStatus
from qadesk.schemas.attachment import Attachment
from qadesk.schemas.base import CamelModel


class Question(CamelModel):
    id: int
    title: str
    content: str
    author_id: int
    group_id: int
    status: QuestionStatus
    priority: QuestionPriority
    tags: list[str] = []
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None


class QuestionDetail(Question):
    attachments: list[Attachment] = []


class QuestionCreate(CamelModel):
    title: str
    content: str
    priority: QuestionPriority = QuestionPriority.MEDIUM


class QuestionUpdate(CamelModel):
    title: str | None = None
    content: str | None = None
    priority: QuestionPriority | None = None
    status: QuestionStatus | None = None
