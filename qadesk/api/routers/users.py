from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from qadesk.api.deps import get_current_user, get_db
from qadesk.db.models.user import User as UserModel
from qadesk.schemas.user import UserPublic
from qadesk.services.user import get_user

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=UserPublic)
def get_user_profile(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    """Public profile of any user, for showing post authors."""
    return UserPublic.model_validate(get_user(db, user_id))
