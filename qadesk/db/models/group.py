from sqlalchemy import Column, DateTime, Integer, String

from qadesk.core.security import utcnow
from qadesk.db.base import Base


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
