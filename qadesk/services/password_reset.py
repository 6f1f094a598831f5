"""
Password reset lifecycle.

A reset token moves from REQUESTED (unused, unexpired) to CONSUMED exactly once.
Expired or used tokens are dead ends; their rows are kept until purged.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

import qadesk.repositories.password_reset_token as reset_token_repo
import qadesk.repositories.user as user_repo
from qadesk.core.config import settings
from qadesk.core.security import (
    RESET_TOKEN_PATTERN,
    generate_password_reset_token,
    get_password_hash,
    utcnow,
    validate_password,
)
from qadesk.db.models.password_reset_token import PasswordResetToken as PasswordResetTokenModel
from qadesk.db.models.user import User as UserModel
from qadesk.domain.token_expiry import TokenExpiryPolicy
from qadesk.errors import (
    TOKEN_ALREADY_USED,
    TOKEN_EXPIRED,
    TOKEN_NOT_FOUND,
    USER_NOT_FOUND,
    WEAK_PASSWORD,
    PasswordResetError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PasswordResetRequestResult:
    token: str
    user: UserModel


def is_valid_reset_token_format(token: str | None) -> bool:
    """Reset tokens are exactly 32 lowercase hex characters."""
    return isinstance(token, str) and RESET_TOKEN_PATTERN.fullmatch(token) is not None


def request_password_reset(db: Session, email: str) -> PasswordResetRequestResult:
    """
    Issue a new reset token for the account with this email.

    Earlier outstanding tokens of the same user stay valid.

    Raises:
        PasswordResetError(USER_NOT_FOUND): If no user has this email. Callers
            facing the outside world must answer exactly as on success.
    """
    user = user_repo.get_user_by_email(db, email)
    if not user:
        raise PasswordResetError(USER_NOT_FOUND, "User not found")

    token = generate_password_reset_token()
    expires_at = utcnow() + timedelta(hours=settings.password_reset_token_expire_hours)
    reset_token_repo.create_reset_token(db, user.id, token, expires_at)

    logger.info("Issued password reset token for user %s", user.id)
    return PasswordResetRequestResult(token=token, user=user)


def _check_token(db: Session, token: str) -> tuple[PasswordResetTokenModel, UserModel]:
    """Existence, then used flag, then expiry, then the owning user."""
    record = reset_token_repo.get_reset_token(db, token)
    if record is None:
        raise PasswordResetError(TOKEN_NOT_FOUND, "Token not found")

    if record.used:
        raise PasswordResetError(TOKEN_ALREADY_USED, "Token has already been used")

    if TokenExpiryPolicy(as_of=utcnow()).is_expired(record.expires_at):
        raise PasswordResetError(TOKEN_EXPIRED, "Token has expired")

    user = user_repo.get_user_by_id(db, record.user_id)
    if user is None:
        raise PasswordResetError(USER_NOT_FOUND, "User not found")

    return record, user


def validate_reset_token(db: Session, token: str) -> UserModel:
    """
    Check a presented token without consuming it.

    The token format is checked by the caller before this is reached.

    Raises:
        PasswordResetError: TOKEN_NOT_FOUND, TOKEN_ALREADY_USED, TOKEN_EXPIRED
            or USER_NOT_FOUND.
    """
    _, user = _check_token(db, token)
    return user


def reset_password(db: Session, token: str, new_password: str) -> UserModel:
    """
    Consume a reset token and replace the owner's password.

    The token is re-checked here; a prior validate_reset_token call is not trusted.
    Marking the token used and writing the new hash share one transaction, and
    the mark is a conditional update, so two concurrent requests with the same
    token cannot both succeed.

    Raises:
        PasswordResetError: WEAK_PASSWORD, TOKEN_NOT_FOUND, TOKEN_ALREADY_USED,
            TOKEN_EXPIRED or USER_NOT_FOUND.
    """
    is_valid, error_message = validate_password(new_password)
    if not is_valid:
        raise PasswordResetError(WEAK_PASSWORD, error_message)

    record, user = _check_token(db, token)
    password_hash = get_password_hash(new_password)

    if not reset_token_repo.mark_reset_token_used(db, record.id):
        db.rollback()
        raise PasswordResetError(TOKEN_ALREADY_USED, "Token has already been used")

    user.password_hash = password_hash
    db.commit()
    db.refresh(user)

    logger.info("Password reset completed for user %s", user.id)
    return user


def purge_expired_reset_tokens(db: Session) -> int:
    deleted = reset_token_repo.delete_expired_reset_tokens(
        db, TokenExpiryPolicy(as_of=utcnow())
    )
    logger.info("Purged %d expired password reset tokens", deleted)
    return deleted
