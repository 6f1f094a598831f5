from datetime import datetime

from qadesk.schemas.base import CamelModel


class Attachment(CamelModel):
    id: int
    question_id: int
    answer_id: int | None = None
    comment_id: int | None = None
    file_name: str
    file_size: int
    content_type: str
    uploaded_by: int
    created_at: datetime
