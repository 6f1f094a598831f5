from sqlalchemy.orm import Session

import qadesk.repositories.group as group_repo
import qadesk.repositories.question as question_repo
import qadesk.repositories.user as user_repo
from qadesk.db.models.group import Group as GroupModel
from qadesk.errors import DomainValidationError, DuplicateResourceError, NotFoundError

GROUP_NAME_MIN_LENGTH = 2
GROUP_DESCRIPTION_MAX_LENGTH = 500


def _validate_name(name: str) -> str:
    name = name.strip()
    if not name:
        raise DomainValidationError("Group name is required")
    if len(name) < GROUP_NAME_MIN_LENGTH:
        raise DomainValidationError(
            f"Group name must be at least {GROUP_NAME_MIN_LENGTH} characters long"
        )
    return name


def _validate_description(description: str) -> str:
    description = description.strip()
    if not description:
        raise DomainValidationError("Group description is required")
    if len(description) > GROUP_DESCRIPTION_MAX_LENGTH:
        raise DomainValidationError(
            f"Group description must be {GROUP_DESCRIPTION_MAX_LENGTH} characters or less"
        )
    return description


def create_group(db: Session, name: str, description: str) -> GroupModel:
    """
    Create a group.

    Raises:
        DomainValidationError: If name or description is missing or out of bounds
        DuplicateResourceError: If the name is taken
    """
    name = _validate_name(name)
    description = _validate_description(description)

    if group_repo.get_group_by_name(db, name):
        raise DuplicateResourceError("Group name already exists")

    return group_repo.create_group(db, name=name, description=description)


def get_group(db: Session, group_id: int) -> GroupModel:
    group = group_repo.get_group_by_id(db, group_id)
    if not group:
        raise NotFoundError("Group not found")
    return group


def update_group(
    db: Session,
    group_id: int,
    name: str | None = None,
    description: str | None = None,
) -> GroupModel:
    get_group(db, group_id)

    if name is not None:
        name = _validate_name(name)
        if group_repo.get_group_by_name(db, name, exclude_id=group_id):
            raise DuplicateResourceError("Group name already exists")
    if description is not None:
        description = _validate_description(description)

    return group_repo.update_group(db, group_id, name=name, description=description)


def delete_group(db: Session, group_id: int) -> None:
    """
    Delete a group.

    Raises:
        NotFoundError: If the group doesn't exist
        DomainValidationError: If users or questions still belong to it
    """
    get_group(db, group_id)

    if user_repo.count_users_in_group(db, group_id) > 0:
        raise DomainValidationError("Cannot delete group: group still has users")
    if question_repo.count_questions_in_group(db, group_id) > 0:
        raise DomainValidationError("Cannot delete group: group still has questions")

    group_repo.delete_group(db, group_id)
