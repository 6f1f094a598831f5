import re
import secrets
from datetime import datetime, timezone

from passlib.context import CryptContext

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARACTERS = r"!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?"

RESET_TOKEN_PATTERN = re.compile(r"^[a-f0-9]{32}$")


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def validate_password(password: str) -> tuple[bool, str | None]:
    """
    Validate password meets requirements, checked in this order:
    - Minimum 8 characters
    - At least one letter
    - At least one number
    - At least one special character

    Returns: (is_valid, error_message)
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        return False, f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"

    if not re.search(r"[a-zA-Z]", password):
        return False, "Password must contain at least one letter"

    if not re.search(r"\d", password):
        return False, "Password must contain at least one number"

    if not re.search(f"[{PASSWORD_SPECIAL_CHARACTERS}]", password):
        return False, "Password must contain at least one special character"

    return True, None


def generate_session_token() -> str:
    """Opaque session token: 32 random bytes, hex encoded."""
    return secrets.token_hex(32)


def generate_password_reset_token() -> str:
    """Single-use reset token: 16 random bytes, 32 lowercase hex characters."""
    return secrets.token_hex(16)
