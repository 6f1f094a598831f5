from datetime import datetime

from qadesk.schemas.attachment import Attachment
from qadesk.schemas.base import CamelModel


class Answer(CamelModel):
    id: int
    question_id: int
    content: str
    author_id: int
    created_at: datetime
    updated_at: datetime
    attachments: list[Attachment] = []


class AnswerUpdate(CamelModel):
    content: str
