"""Session manager: login, per-request session validation, logout."""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

import qadesk.repositories.session as session_repo
import qadesk.repositories.user as user_repo
from qadesk.core.config import settings
from qadesk.core.security import generate_session_token, utcnow, verify_password
from qadesk.db.models.user import User as UserModel
from qadesk.domain.token_expiry import TokenExpiryPolicy
from qadesk.errors import InvalidCredentialsError

logger = logging.getLogger(__name__)

# Same message for unknown username and wrong password (no user enumeration).
INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


@dataclass(frozen=True)
class LoginResult:
    user: UserModel
    session_token: str


def login(db: Session, username: str, password: str) -> LoginResult:
    """
    Authenticate by username and password and open a new session.

    Raises:
        InvalidCredentialsError: If the username is unknown or the password is wrong.
    """
    user = user_repo.get_user_by_username(db, username.strip())
    if not user or not verify_password(password, user.password_hash):
        logger.info("Failed login attempt for username '%s'", username.strip())
        raise InvalidCredentialsError(INVALID_CREDENTIALS_MESSAGE)

    token = generate_session_token()
    expires_at = utcnow() + timedelta(hours=settings.session_ttl_hours)
    session_repo.create_session(db, user.id, token, expires_at)
    user = user_repo.update_last_login(db, user.id)

    logger.info("User %s logged in", user.id)
    return LoginResult(user=user, session_token=token)


def validate_session(db: Session, token: str | None) -> UserModel | None:
    """
    Resolve a session token to its user.

    Returns None for a missing, unknown or expired token, or when the user no
    longer exists. Read-only: the expiry is never extended and expired rows are
    left for purge_expired_sessions.
    """
    if not token:
        return None

    session = session_repo.get_session_by_token(db, token)
    if session is None:
        return None

    if TokenExpiryPolicy(as_of=utcnow()).is_expired(session.expires_at):
        return None

    return user_repo.get_user_by_id(db, session.user_id)


def logout(db: Session, token: str) -> bool:
    """
    Revoke a session.

    Returns False, without raising, when the token is not (or no longer) a session.
    """
    revoked = session_repo.delete_session_by_token(db, token)
    if not revoked:
        logger.info("Logout with an unknown session token")
    return revoked


def purge_expired_sessions(db: Session) -> int:
    deleted = session_repo.delete_expired_sessions(db, TokenExpiryPolicy(as_of=utcnow()))
    logger.info("Purged %d expired sessions", deleted)
    return deleted
