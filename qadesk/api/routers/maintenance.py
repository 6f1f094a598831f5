from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from qadesk.api.deps import get_db, require_admin
from qadesk.db.models.user import User as UserModel
from qadesk.schemas.maintenance import PurgeResult
from qadesk.services.password_reset import purge_expired_reset_tokens
from qadesk.services.session import purge_expired_sessions

router = APIRouter(prefix="/admin/maintenance", tags=["admin"])


@router.post("/purge-expired-tokens", response_model=PurgeResult)
def purge_expired_tokens(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """Delete expired sessions and expired password reset tokens."""
    return PurgeResult(
        sessions_deleted=purge_expired_sessions(db),
        reset_tokens_deleted=purge_expired_reset_tokens(db),
    )
