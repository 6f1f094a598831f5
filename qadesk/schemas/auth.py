from pydantic import Field

from qadesk.schemas.base import CamelModel
from qadesk.schemas.user import User, UserIdentity

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class LoginRequest(CamelModel):
    username: str
    password: str


class LoginResponse(CamelModel):
    success: bool = True
    user: User
    session_token: str


class MeResponse(CamelModel):
    user: User


class LogoutResponse(CamelModel):
    success: bool = True


class PasswordResetRequest(CamelModel):
    # Plain pattern rather than EmailStr: lookups are exact, so no normalization.
    email: str = Field(..., pattern=EMAIL_PATTERN)


class PasswordReset(CamelModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ResetPasswordResponse(CamelModel):
    success: bool = True
    message: str
    user: UserIdentity


class ValidateResetTokenResponse(CamelModel):
    valid: bool
    user: UserIdentity | None = None
