from sqlalchemy.orm import Session

from qadesk.db.models.group import Group as GroupModel
from qadesk.errors import NotFoundError


def get_group_by_id(db: Session, group_id: int) -> GroupModel | None:
    """Get a group by ID."""
    return db.query(GroupModel).filter(GroupModel.id == group_id).first()


def get_group_by_name(
    db: Session, name: str, exclude_id: int | None = None
) -> GroupModel | None:
    """Get a group by its (unique) name."""
    query = db.query(GroupModel).filter(GroupModel.name == name)
    if exclude_id is not None:
        query = query.filter(GroupModel.id != exclude_id)
    return query.first()


def get_all_groups(db: Session) -> list[GroupModel]:
    """Get all groups in creation order."""
    return db.query(GroupModel).order_by(GroupModel.created_at, GroupModel.id).all()


def create_group(db: Session, name: str, description: str) -> GroupModel:
    """Create a new group in the database. Pure data access - no business logic."""
    db_group = GroupModel(name=name, description=description)
    db.add(db_group)
    db.commit()
    db.refresh(db_group)
    return db_group


def update_group(
    db: Session,
    group_id: int,
    name: str | None = None,
    description: str | None = None,
) -> GroupModel:
    """Update a group. Only provided fields will be updated."""
    group = get_group_by_id(db, group_id)
    if not group:
        raise NotFoundError("Group not found")

    if name is not None:
        group.name = name
    if description is not None:
        group.description = description

    db.commit()
    db.refresh(group)
    return group


def delete_group(db: Session, group_id: int) -> None:
    group = get_group_by_id(db, group_id)
    if not group:
        raise NotFoundError("Group not found")
    db.delete(group)
    db.commit()
