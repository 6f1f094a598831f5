from datetime import datetime

from pydantic import Field

from qadesk.schemas.base import CamelModel


class Group(CamelModel):
    id: int
    name: str
    description: str
    created_at: datetime


class GroupCreate(CamelModel):
    name: str = Field(..., max_length=255)
    description: str


class GroupUpdate(CamelModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
