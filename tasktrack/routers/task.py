# tasktrack/routers/task.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from tasktrack.database import get_db
from tasktrack.models.user import UserRole
from tasktrack.schemas.task import TaskCreate, TaskUpdate, TaskDecision, TaskOut, TaskAuditOut, TaskPermissions
from tasktrack.schemas.user import Actor
from tasktrack.services.task_service import TaskService
from tasktrack.utils.auth import get_current_actor, require_roles

router = APIRouter(prefix="/tasks", tags=["tasks"])

@router.post("/", response_model=TaskOut)
def create_task(
    task: TaskCreate,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(require_roles(UserRole.ADMIN, UserRole.MANAGER))
):
    """Create a task. Status starts at created, or assigned when an assignee is given."""
    return TaskService(db).create_task(current_actor, task)

@router.get("/", response_model=List[TaskOut])
def get_all_tasks(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    """Get tasks visible to the current user

    - admin: every task
    - manager: own tasks plus tasks created by or assigned to anyone below them
    - member: tasks they created or are assigned to
    """
    tasks = TaskService(db).list_tasks(current_actor)
    if status:
        tasks = [task for task in tasks if task.status.value == status]
    return tasks

@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    return TaskService(db).get_task(task_id, current_actor)

@router.get("/{task_id}/can-edit", response_model=TaskPermissions)
def can_edit_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    """Check what the current user can do with a specific task"""
    return TaskService(db).describe_permissions(task_id, current_actor)

@router.get("/{task_id}/audit", response_model=List[TaskAuditOut])
def get_task_audit(
    task_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    service = TaskService(db)
    task = service.get_task(task_id, current_actor)
    return service.audit.list_for_task(task.id)

@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    """Update a task. Members may only move progress and status on tasks assigned to them."""
    changes = task_update.model_dump(exclude_unset=True)
    return TaskService(db).update_task(task_id, current_actor, changes)

@router.post("/{task_id}/approve", response_model=TaskOut)
def approve_task(
    task_id: int,
    decision: Optional[TaskDecision] = None,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    comments = decision.comments if decision else ""
    return TaskService(db).approve_task(task_id, current_actor, comments)

@router.post("/{task_id}/reject", response_model=TaskOut)
def reject_task(
    task_id: int,
    decision: TaskDecision,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    return TaskService(db).reject_task(task_id, current_actor, decision.reason, decision.comments)

@router.delete("/{task_id}", status_code=status.HTTP_200_OK)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_actor: Actor = Depends(get_current_actor)
):
    TaskService(db).delete_task(task_id, current_actor)
    return {"message": "Deleted"}
