"""Password reset token store. Pure data access - lifecycle rules live in the service layer."""

from datetime import datetime

from sqlalchemy.orm import Session

from qadesk.db.models.password_reset_token import PasswordResetToken as PasswordResetTokenModel
from qadesk.domain.token_expiry import TokenExpiryPolicy


def get_reset_token(db: Session, token: str) -> PasswordResetTokenModel | None:
    """Get a reset token row by its token string, whatever its state."""
    return (
        db.query(PasswordResetTokenModel)
        .filter(PasswordResetTokenModel.token == token)
        .first()
    )


def create_reset_token(
    db: Session, user_id: int, token: str, expires_at: datetime
) -> PasswordResetTokenModel:
    db_token = PasswordResetTokenModel(
        token=token,
        user_id=user_id,
        expires_at=expires_at,
        used=False,
    )
    db.add(db_token)
    db.commit()
    db.refresh(db_token)
    return db_token


def get_reset_tokens_by_user_id(db: Session, user_id: int) -> list[PasswordResetTokenModel]:
    return (
        db.query(PasswordResetTokenModel)
        .filter(PasswordResetTokenModel.user_id == user_id)
        .order_by(PasswordResetTokenModel.issued_at)
        .all()
    )


def mark_reset_token_used(db: Session, token_id: int) -> bool:
    """
    Flip ``used`` from False to True with a conditional UPDATE.

    Does not commit: the caller commits it together with the password change.
    Returns False when another request already consumed the token.
    """
    updated = (
        db.query(PasswordResetTokenModel)
        .filter(
            PasswordResetTokenModel.id == token_id,
            PasswordResetTokenModel.used.is_(False),
        )
        .update({PasswordResetTokenModel.used: True}, synchronize_session=False)
    )
    return updated == 1


def delete_expired_reset_tokens(db: Session, policy: TokenExpiryPolicy) -> int:
    deleted = (
        db.query(PasswordResetTokenModel)
        .filter(
            policy.sqlalchemy_expired_predicate(
                expires_col=PasswordResetTokenModel.expires_at
            )
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
