from qadesk.db.models.group import Group
from qadesk.db.models.user import User
from qadesk.db.models.session import SessionToken
from qadesk.db.models.password_reset_token import PasswordResetToken
from qadesk.db.models.question import Question, QuestionPriority, QuestionStatus
from qadesk.db.models.answer import Answer
from qadesk.db.models.comment import Comment
from qadesk.db.models.attachment import Attachment

__all__ = [
    "Group",
    "User",
    "SessionToken",
    "PasswordResetToken",
    "Question",
    "QuestionPriority",
    "QuestionStatus",
    "Answer",
    "Comment",
    "Attachment",
]
