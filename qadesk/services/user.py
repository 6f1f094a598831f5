from sqlalchemy.orm import Session

import qadesk.repositories.group as group_repo
import qadesk.repositories.user as user_repo
from qadesk.core.security import get_password_hash, validate_password
from qadesk.db.models.user import User as UserModel
from qadesk.errors import DomainValidationError, DuplicateResourceError, NotFoundError
from qadesk.schemas.user import UserCreate, UserUpdate


def _ensure_group_exists(db: Session, group_id: int) -> None:
    if not group_repo.get_group_by_id(db, group_id):
        raise DomainValidationError(f"Group with id {group_id} not found")


def create_user(db: Session, user_data: UserCreate) -> UserModel:
    """
    Create a new user with business logic validation.

    - Validates username and email uniqueness
    - Validates password requirements
    - Validates group_id exists
    """
    username = user_data.username.strip()
    if not username:
        raise DomainValidationError("Username is required")

    if user_repo.get_user_by_username(db, username):
        raise DuplicateResourceError("Username already exists")

    if user_repo.get_user_by_email(db, user_data.email):
        raise DuplicateResourceError("Email already registered")

    is_valid, error_message = validate_password(user_data.password)
    if not is_valid:
        raise DomainValidationError(error_message)

    _ensure_group_exists(db, user_data.group_id)

    return user_repo.create_user(
        db,
        username=username,
        email=user_data.email,
        password_hash=get_password_hash(user_data.password),
        group_id=user_data.group_id,
        is_admin=user_data.is_admin,
    )


def get_user(db: Session, user_id: int) -> UserModel:
    """
    Raises:
        NotFoundError: If user doesn't exist
    """
    user = user_repo.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_user(
    db: Session,
    user_id: int,
    user_data: UserUpdate,
    current_user: UserModel,
) -> UserModel:
    """
    Update a user (admin only, enforced at the controller level).

    - Username and email stay unique
    - The target group must exist
    - Admins cannot revoke their own admin flag

    Raises:
        NotFoundError: If user doesn't exist
        DuplicateResourceError: If username or email is taken by another user
        DomainValidationError: If the group is unknown or an admin demotes themselves
    """
    user = get_user(db, user_id)

    username = user_data.username.strip() if user_data.username is not None else None
    if username is not None and not username:
        raise DomainValidationError("Username is required")

    if username is not None and username != user.username:
        if user_repo.get_user_by_username(db, username):
            raise DuplicateResourceError("Username already exists")

    if user_data.email is not None and user_data.email != user.email:
        if user_repo.get_user_by_email(db, user_data.email):
            raise DuplicateResourceError("Email already registered")

    if user_data.group_id is not None:
        _ensure_group_exists(db, user_data.group_id)

    if current_user.id == user_id and user_data.is_admin is False:
        raise DomainValidationError("You cannot revoke your own admin access")

    return user_repo.update_user(
        db,
        user_id=user_id,
        username=username,
        email=user_data.email,
        group_id=user_data.group_id,
        is_admin=user_data.is_admin,
    )


def get_users(
    db: Session,
    group_id: int | None = None,
    is_admin: bool | None = None,
    search: str | None = None,
) -> list[UserModel]:
    """
    Get users with optional filters.

    This is admin-only functionality, so no authorization checks are needed here
    (authorization is handled at the controller level).
    """
    return user_repo.get_users(db, group_id=group_id, is_admin=is_admin, search=search)


def delete_user(db: Session, user_id: int, current_user: UserModel) -> None:
    """
    Delete a user with business logic validation.

    Raises:
        NotFoundError: If user doesn't exist
        DomainValidationError: If an admin tries to delete their own account, or the
            user still authors questions, answers or comments or uploaded attachments
    """
    get_user(db, user_id)

    if current_user.id == user_id:
        raise DomainValidationError("You cannot delete your own account")

    if user_repo.count_content_by_user(db, user_id) > 0:
        raise DomainValidationError("Cannot delete user: user still has posted content")

    user_repo.delete_user(db, user_id)
