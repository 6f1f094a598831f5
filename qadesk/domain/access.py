from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GroupAccessPolicy:
    """Who may see and act on group-scoped resources.

    - Admins can access every group.
    - Other users can access only resources of their own group.
    - Authors (or admins) manage what they wrote: edit, delete, change status.
    """

    user_id: int
    group_id: int
    is_admin: bool

    @classmethod
    def for_user(cls, user) -> "GroupAccessPolicy":
        return cls(user_id=user.id, group_id=user.group_id, is_admin=bool(user.is_admin))

    def can_access_group(self, group_id: int | None) -> bool:
        if self.is_admin:
            return True
        return group_id is not None and group_id == self.group_id

    def can_manage(self, *, author_id: int) -> bool:
        return self.is_admin or author_id == self.user_id

    def visible_group_id(self) -> int | None:
        """Group filter for list queries, None meaning every group."""
        return None if self.is_admin else self.group_id
