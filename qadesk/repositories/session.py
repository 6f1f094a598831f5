"""Session token store. Pure data access - expiry rules live in the service layer."""

from datetime import datetime

from sqlalchemy.orm import Session

from qadesk.db.models.session import SessionToken as SessionTokenModel
from qadesk.domain.token_expiry import TokenExpiryPolicy


def get_session_by_token(db: Session, token: str) -> SessionTokenModel | None:
    """Get a session row by its token, expired or not."""
    return db.query(SessionTokenModel).filter(SessionTokenModel.token == token).first()


def create_session(
    db: Session, user_id: int, token: str, expires_at: datetime
) -> SessionTokenModel:
    db_session = SessionTokenModel(token=token, user_id=user_id, expires_at=expires_at)
    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session


def delete_session_by_token(db: Session, token: str) -> bool:
    """Delete the session with this token. Returns False when there was none."""
    deleted = (
        db.query(SessionTokenModel)
        .filter(SessionTokenModel.token == token)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted > 0


def delete_expired_sessions(db: Session, policy: TokenExpiryPolicy) -> int:
    deleted = (
        db.query(SessionTokenModel)
        .filter(policy.sqlalchemy_expired_predicate(expires_col=SessionTokenModel.expires_at))
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
