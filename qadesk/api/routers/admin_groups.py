from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

import qadesk.repositories.group as group_repo
from qadesk.api.deps import get_db, require_admin
from qadesk.db.models.user import User as UserModel
from qadesk.schemas.group import Group, GroupCreate, GroupUpdate
from qadesk.services import group as group_service

router = APIRouter(prefix="/admin/groups", tags=["admin"])


@router.get("", response_model=list[Group])
def list_groups(
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """List groups in creation order."""
    return [Group.model_validate(g) for g in group_repo.get_all_groups(db)]


@router.post("", response_model=Group, status_code=status.HTTP_201_CREATED)
def create_group(
    group_data: GroupCreate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    group = group_service.create_group(db, group_data.name, group_data.description)
    return Group.model_validate(group)


@router.get("/{group_id}", response_model=Group)
def get_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    return Group.model_validate(group_service.get_group(db, group_id))


@router.put("/{group_id}", response_model=Group)
def update_group(
    group_id: int,
    group_data: GroupUpdate,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """Fields not included in the request are not updated."""
    group = group_service.update_group(
        db, group_id, name=group_data.name, description=group_data.description
    )
    return Group.model_validate(group)


@router.delete("/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: UserModel = Depends(require_admin),
):
    """Delete a group. Refused while users still belong to it."""
    group_service.delete_group(db, group_id)
