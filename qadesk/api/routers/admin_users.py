from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from qadesk.api.deps import get_db, require_admin
from qadesk.db.models.user import User as UserModel
from qadesk.schemas.user import User, UserCreate, UserUpdate
from qadesk.services.user import create_user, delete_user, get_user, get_users, update_user

router = APIRouter(prefix="/admin/users", tags=["admin"])


@router.get("", response_model=list[User])
def list_users(
    group_id: int | None = Query(None, alias="groupId", description="Filter by group"),
    is_admin: bool | None = Query(None, alias="isAdmin", description="Filter by admin flag"),
    search: str | None = Query(None, description="Filter by username (partial match)"),
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """List users, newest first. Only admin users can access this endpoint."""
    users = get_users(db, group_id=group_id, is_admin=is_admin, search=search)
    return [User.model_validate(user) for user in users]


@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
def create_new_user(
    user_data: UserCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """
    Create a new user. Only admin users can create users.

    The password must satisfy the password policy and the group must exist.
    """
    user = create_user(db, user_data)
    return User.model_validate(user)


@router.get("/{user_id}", response_model=User)
def get_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    return User.model_validate(get_user(db, user_id))


@router.put("/{user_id}", response_model=User)
def update_user_by_id(
    user_id: int,
    user_data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """
    Update a user by ID.

    Fields not included in the request are not updated. Admins cannot revoke
    their own admin flag.
    """
    user = update_user(db, user_id, user_data, current_user)
    return User.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user_by_id(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """
    Delete a user with their sessions and reset tokens.

    Admins cannot delete themselves, and users who still have posted content are kept.
    """
    delete_user(db, user_id, current_user)
