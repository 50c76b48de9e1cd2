# tasktrack/routers/user.py
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from tasktrack.database import get_db, unit_of_work
from tasktrack.models.user import User, UserRole
from tasktrack.schemas.user import Actor, UserOut, UserUpdate
from tasktrack.utils.auth import get_current_actor, require_roles
from tasktrack.utils.errors import ForbiddenError, NotFoundError, ValidationError
from tasktrack.utils.hierarchy import HierarchyManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/", response_model=List[UserOut])
def get_all_users(
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(UserRole.ADMIN))
):
    """Get all users - admin only"""
    return db.query(User).order_by(User.id).all()

@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(UserRole.ADMIN))
):
    """Change a user's role and/or manager - admin only"""
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    update_data = user_update.model_dump(exclude_unset=True)

    if "manager_id" in update_data and update_data["manager_id"] is not None:
        manager_id = update_data["manager_id"]
        if manager_id == user.id:
            raise ValidationError("User cannot be their own manager")
        if db.get(User, manager_id) is None:
            raise NotFoundError("Manager not found")
        if HierarchyManager(db).would_create_cycle(user.id, manager_id):
            raise ValidationError("Manager assignment would create a cycle in the hierarchy")

    if update_data.get("role") is None:
        update_data.pop("role", None)

    with unit_of_work(db):
        for field, value in update_data.items():
            setattr(user, field, value)
    db.refresh(user)

    logger.info(f"User {user.id} updated by admin {current_actor.id}: {update_data}")
    return user

@router.get("/{user_id}/subordinates", response_model=List[UserOut])
def get_subordinates(
    user_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    """Every user reporting to user_id, directly or indirectly"""
    if current_actor.role != UserRole.ADMIN and current_actor.id != user_id:
        raise ForbiddenError("You can only view your own reports")
    if db.get(User, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    subordinate_ids = HierarchyManager(db).resolve_subordinates(user_id)
    if not subordinate_ids:
        return []
    return db.query(User).filter(User.id.in_(subordinate_ids)).order_by(User.id).all()
