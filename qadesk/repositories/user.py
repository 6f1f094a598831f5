from sqlalchemy import func
from sqlalchemy.orm import Session

from qadesk.core.security import utcnow
from qadesk.db.models.answer import Answer as AnswerModel
from qadesk.db.models.attachment import Attachment as AttachmentModel
from qadesk.db.models.comment import Comment as CommentModel
from qadesk.db.models.password_reset_token import PasswordResetToken as PasswordResetTokenModel
from qadesk.db.models.question import Question as QuestionModel
from qadesk.db.models.session import SessionToken as SessionTokenModel
from qadesk.db.models.user import User as UserModel
from qadesk.errors import NotFoundError


def get_user_by_email(db: Session, email: str) -> UserModel | None:
    """Get a user by email (exact, case-sensitive match)."""
    return db.query(UserModel).filter(UserModel.email == email).first()


def get_user_by_username(db: Session, username: str) -> UserModel | None:
    """Get a user by username."""
    return db.query(UserModel).filter(UserModel.username == username).first()


def get_user_by_id(db: Session, user_id: int) -> UserModel | None:
    """Get a user by ID."""
    return db.query(UserModel).filter(UserModel.id == user_id).first()


def get_admin_users(db: Session) -> list[UserModel]:
    """Get every administrator."""
    return db.query(UserModel).filter(UserModel.is_admin.is_(True)).all()


def count_users_in_group(db: Session, group_id: int) -> int:
    return db.query(UserModel).filter(UserModel.group_id == group_id).count()


def count_content_by_user(db: Session, user_id: int) -> int:
    """Questions, answers, comments and attachments whose author or uploader is this user."""
    return (
        db.query(QuestionModel).filter(QuestionModel.author_id == user_id).count()
        + db.query(AnswerModel).filter(AnswerModel.author_id == user_id).count()
        + db.query(CommentModel).filter(CommentModel.author_id == user_id).count()
        + db.query(AttachmentModel).filter(AttachmentModel.uploaded_by == user_id).count()
    )


def create_user(
    db: Session,
    username: str,
    email: str,
    password_hash: str,
    group_id: int,
    is_admin: bool = False,
) -> UserModel:
    """Create a new user in the database. Pure data access - no business logic."""
    db_user = UserModel(
        username=username,
        email=email,
        password_hash=password_hash,
        group_id=group_id,
        is_admin=is_admin,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_last_login(db: Session, user_id: int) -> UserModel:
    """Stamp the user's last successful login."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)
    return user


def update_user(
    db: Session,
    user_id: int,
    username: str | None = None,
    email: str | None = None,
    group_id: int | None = None,
    is_admin: bool | None = None,
) -> UserModel:
    """Update user fields. Only provided fields will be updated."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    if username is not None:
        user.username = username
    if email is not None:
        user.email = email
    if group_id is not None:
        user.group_id = group_id
    if is_admin is not None:
        user.is_admin = is_admin

    db.commit()
    db.refresh(user)
    return user


def get_users(
    db: Session,
    group_id: int | None = None,
    is_admin: bool | None = None,
    search: str | None = None,
) -> list[UserModel]:
    """
    Get users, newest first.

    Args:
        group_id: Only users of this group
        is_admin: Only admins (True) or only non-admins (False)
        search: Case-insensitive partial match on username
    """
    query = db.query(UserModel)
    if group_id is not None:
        query = query.filter(UserModel.group_id == group_id)
    if is_admin is not None:
        query = query.filter(UserModel.is_admin.is_(is_admin))
    if search:
        query = query.filter(func.lower(UserModel.username).contains(search.lower()))
    return query.order_by(UserModel.created_at.desc(), UserModel.id.desc()).all()


def delete_user(db: Session, user_id: int) -> None:
    """Delete a user together with the sessions and reset tokens they own."""
    user = get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")

    db.query(SessionTokenModel).filter(SessionTokenModel.user_id == user_id).delete(
        synchronize_session=False
    )
    db.query(PasswordResetTokenModel).filter(
        PasswordResetTokenModel.user_id == user_id
    ).delete(synchronize_session=False)
    db.delete(user)
    db.commit()
