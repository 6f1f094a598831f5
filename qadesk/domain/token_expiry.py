from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class TokenExpiryPolicy:
    """Defines what it means for a session or reset token to be expired "as of" an instant.

    Semantics (intentionally centralized):
    - A token is live while as_of <= expires_at
    - A token is expired once as_of > expires_at

    Both session and password reset tokens follow this rule, so the boundary
    instant itself still counts as live.
    """

    as_of: datetime

    def is_expired(self, expires_at: datetime) -> bool:
        return self.as_of > expires_at

    def sqlalchemy_expired_predicate(self, *, expires_col):
        """Build a SQLAlchemy predicate implementing the expired rule.

        Kept here so repositories can translate the policy into SQL without
        redefining the boundary condition.
        """
        return expires_col < self.as_of
