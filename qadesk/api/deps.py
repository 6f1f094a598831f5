from fastapi import Cookie, Depends, UploadFile
from sqlalchemy.orm import Session

from qadesk.db import SessionLocal
from qadesk.db.models.user import User
from qadesk.errors import ForbiddenError, UnauthorizedError
from qadesk.services.attachment import UploadedFile
from qadesk.services.session import validate_session
from qadesk.services.storage import LocalBlobStorage, get_blob_storage

SESSION_COOKIE_NAME = "session"


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_token(session: str | None = Cookie(None)) -> str:
    """The raw session cookie; absent or empty means the caller is not logged in."""
    if not session:
        raise UnauthorizedError("Authentication required")
    return session


def get_current_user(
    token: str = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the session cookie to its user, or refuse with 401."""
    user = validate_session(db, token)
    if user is None:
        raise UnauthorizedError("Invalid session")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Authenticated and an administrator, in that order."""
    if not current_user.is_admin:
        raise ForbiddenError("Admin access required")
    return current_user


def get_storage() -> LocalBlobStorage:
    return get_blob_storage()


async def read_uploads(files: list[UploadFile] | None) -> list[UploadedFile]:
    """Read multipart uploads into memory, skipping empty file fields."""
    uploads = []
    for f in files or []:
        if not f.filename:
            continue
        uploads.append(
            UploadedFile(file_name=f.filename, content_type=f.content_type, data=await f.read())
        )
    return uploads
