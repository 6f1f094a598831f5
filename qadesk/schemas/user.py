from datetime import datetime

from pydantic import EmailStr, Field

from qadesk.schemas.base import CamelModel


class User(CamelModel):
    id: int
    username: str
    email: str
    group_id: int
    is_admin: bool
    created_at: datetime
    last_login_at: datetime | None = None


class UserIdentity(CamelModel):
    """The only user fields echoed by the password reset endpoints."""

    id: int
    username: str
    email: str


class UserPublic(CamelModel):
    id: int
    username: str
    group_id: int
    is_admin: bool


class UserCreate(CamelModel):
    username: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1)
    group_id: int
    is_admin: bool = False


class UserUpdate(CamelModel):
    username: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    group_id: int | None = None
    is_admin: bool | None = None
