from datetime import datetime

from qadesk.schemas.attachment import Attachment
from qadesk.schemas.base import CamelModel


class Comment(CamelModel):
    id: int
    question_id: int
    answer_id: int | None = None
    content: str
    author_id: int
    created_at: datetime
    updated_at: datetime
    attachments: list[Attachment] = []
