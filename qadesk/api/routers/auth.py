import logging

from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from qadesk.api.deps import SESSION_COOKIE_NAME, get_current_user, get_db, get_session_token
from qadesk.core.config import settings
from qadesk.errors import (
    INVALID_TOKEN,
    USER_NOT_FOUND,
    DomainValidationError,
    PasswordResetError,
    UnauthorizedError,
)
from qadesk.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    MeResponse,
    MessageResponse,
    PasswordReset,
    PasswordResetRequest,
    ResetPasswordResponse,
    ValidateResetTokenResponse,
)
from qadesk.schemas.user import User, UserIdentity
from qadesk.services import password_reset as password_reset_service
from qadesk.services import session as session_service
from qadesk.services.best_effort import run_best_effort
from qadesk.services.email import send_password_reset_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

RESET_REQUESTED_MESSAGE = (
    "If the email is registered, a password reset link has been sent. Please check your inbox."
)


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_ttl_hours * 3600,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
):
    """
    Login with username and password.

    Returns the user and the session token, and sets the token as an HTTP-only
    session cookie.
    """
    if not credentials.username.strip() or not credentials.password:
        raise DomainValidationError("Username and password are required")

    result = session_service.login(db, credentials.username, credentials.password)
    _set_session_cookie(response, result.session_token)

    return LoginResponse(user=User.model_validate(result.user), session_token=result.session_token)


@router.get("/me", response_model=MeResponse)
def get_current_user_info(current_user=Depends(get_current_user)):
    """Get current authenticated user information."""
    return MeResponse(user=User.model_validate(current_user))


@router.post("/logout", response_model=LogoutResponse)
def logout(
    response: Response,
    token: str = Depends(get_session_token),
    db: Session = Depends(get_db),
):
    """Revoke the current session and clear the cookie."""
    if not session_service.logout(db, token):
        raise UnauthorizedError("Invalid session")

    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return LogoutResponse()


@router.post("/request-password-reset", response_model=MessageResponse)
async def request_password_reset(
    request: PasswordResetRequest,
    db: Session = Depends(get_db),
):
    """
    Request a password reset email.

    The response is the same whether or not the email belongs to an account.
    """
    try:
        result = password_reset_service.request_password_reset(db, request.email)
    except PasswordResetError as e:
        if e.code != USER_NOT_FOUND:
            raise
        logger.info("Password reset requested for an unknown email")
        return MessageResponse(message=RESET_REQUESTED_MESSAGE)

    await run_best_effort(
        send_password_reset_email(result.user.email, result.token),
        description=f"Password reset email for user {result.user.id}",
    )
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.get("/validate-reset-token", response_model=ValidateResetTokenResponse)
def validate_reset_token(
    token: str | None = Query(None, description="Password reset token from the email link"),
    db: Session = Depends(get_db),
):
    """
    Check a reset token without consuming it.

    Unknown, expired and used tokens answer 200 with valid=false and the reason.
    """
    if not token:
        raise DomainValidationError("Token parameter is required")

    if not password_reset_service.is_valid_reset_token_format(token):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "valid": False,
                "error": {"code": INVALID_TOKEN, "message": "Invalid token format"},
            },
        )

    try:
        user = password_reset_service.validate_reset_token(db, token)
    except PasswordResetError as e:
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"valid": False, "error": {"code": e.code, "message": str(e)}},
        )

    return ValidateResetTokenResponse(valid=True, user=UserIdentity.model_validate(user))


@router.post("/reset-password", response_model=ResetPasswordResponse)
def reset_password(reset_data: PasswordReset, db: Session = Depends(get_db)):
    """Set a new password using the token from the reset email."""
    if not password_reset_service.is_valid_reset_token_format(reset_data.token):
        raise PasswordResetError(INVALID_TOKEN, "Invalid token format")

    user = password_reset_service.reset_password(db, reset_data.token, reset_data.new_password)

    return ResetPasswordResponse(
        message="Password has been reset successfully",
        user=UserIdentity.model_validate(user),
    )
