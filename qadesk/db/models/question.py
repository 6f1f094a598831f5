import enum

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from qadesk.core.security import utcnow
from qadesk.db.base import Base


class QuestionStatus(str, enum.Enum):
    UNANSWERED = "unanswered"
    ANSWERED = "answered"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    CLOSED = "closed"


class QuestionPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=QuestionStatus.UNANSWERED.value)
    priority = Column(String(10), nullable=False, default=QuestionPriority.MEDIUM.value)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
    resolved_at = Column(DateTime, nullable=True)

    # Relationships
    author = relationship("User")
