# tasktrack/services/task_service.py
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from tasktrack.database import unit_of_work
from tasktrack.models.task import Task, TaskStatus
from tasktrack.models.task_audit import AuditAction
from tasktrack.models.user import UserRole
from tasktrack.schemas.task import TaskCreate
from tasktrack.schemas.user import Actor
from tasktrack.services.audit import AuditRecorder
from tasktrack.utils.errors import (
    ForbiddenError,
    InternalFailureError,
    LockedError,
    NotFoundError,
    ValidationError,
)
from tasktrack.utils.permissions import TaskPolicy

logger = logging.getLogger(__name__)

# Legacy status names accepted on update
STATUS_ALIASES = {
    "completed": TaskStatus.PENDING_APPROVAL.value,
}

ALLOWED_TRANSITIONS = {
    TaskStatus.CREATED: {TaskStatus.ASSIGNED},
    TaskStatus.ASSIGNED: {TaskStatus.IN_PROGRESS},
    TaskStatus.IN_PROGRESS: {TaskStatus.PENDING_APPROVAL},
    TaskStatus.PENDING_APPROVAL: {TaskStatus.APPROVED, TaskStatus.REJECTED},
    TaskStatus.REJECTED: {TaskStatus.IN_PROGRESS},
    TaskStatus.APPROVED: set(),
}

# Fields a member may change on a task assigned to them
MEMBER_EDITABLE_FIELDS = {"status", "progress_percentage"}

DECISION_ROLES = (UserRole.ADMIN, UserRole.MANAGER)


def normalize_status(value: str) -> str:
    return STATUS_ALIASES.get(value, value)


def is_valid_status(value: str) -> bool:
    return value in {s.value for s in TaskStatus}


def is_allowed_transition(current: TaskStatus, target: TaskStatus) -> bool:
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, set())


def validate_progress(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0 or value > 100:
        raise ValidationError("progress_percentage must be between 0 and 100")
    return value


class TaskService:
    """Task lifecycle: creation, guarded updates and approval decisions.

    Every public method checks access and validates the whole request before
    writing anything. Writes go through a single unit of work so a failure
    leaves the task exactly as it was.
    """

    def __init__(self, db: Session, policy: Optional[TaskPolicy] = None):
        self.db = db
        self.policy = policy or TaskPolicy(db)
        self.audit = AuditRecorder(db)

    def _load_task(self, task_id: int) -> Task:
        try:
            task = self.db.get(Task, task_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load task {task_id}: {e}")
            raise InternalFailureError("Failed to load task") from e
        if task is None:
            raise NotFoundError("Task not found")
        return task

    def create_task(self, actor: Actor, data: TaskCreate) -> Task:
        if actor.role not in (UserRole.ADMIN, UserRole.MANAGER):
            raise ForbiddenError("You do not have permission to create tasks")

        progress = validate_progress(data.progress_percentage)
        self.policy.ensure_can_assign(actor.id, actor.role, data.assigned_to_id)

        task = Task(
            title=data.title,
            description=data.description,
            created_by_id=actor.id,
            assigned_to_id=data.assigned_to_id,
            progress_percentage=progress,
            deadline=data.deadline,
            status=TaskStatus.CREATED if data.assigned_to_id is None else TaskStatus.ASSIGNED,
            completion_locked=False
        )

        with unit_of_work(self.db):
            self.db.add(task)
        self.db.refresh(task)

        logger.info(f"Task {task.id} created by user {actor.id} with status {task.status.value}")
        return task

    def get_task(self, task_id: int, actor: Actor) -> Task:
        task = self._load_task(task_id)
        self.policy.ensure_can_access(task, actor.id, actor.role)
        return task

    def list_tasks(self, actor: Actor) -> List[Task]:
        """Tasks visible to the actor, using the same rules as can_access_task"""
        query = self.db.query(Task).options(selectinload(Task.audit_trail))

        if actor.role == UserRole.ADMIN:
            pass
        elif actor.role == UserRole.MANAGER:
            visible_ids = self.policy.subordinates_of(actor.id) | {actor.id}
            query = query.filter(
                or_(
                    Task.created_by_id.in_(visible_ids),
                    Task.assigned_to_id.in_(visible_ids)
                )
            )
        elif actor.role == UserRole.MEMBER:
            query = query.filter(
                or_(
                    Task.created_by_id == actor.id,
                    Task.assigned_to_id == actor.id
                )
            )
        else:
            raise ForbiddenError("Unauthorized role")

        try:
            return query.order_by(Task.id).all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to list tasks for user {actor.id}: {e}")
            raise InternalFailureError("Failed to load tasks") from e

    def update_task(self, task_id: int, actor: Actor, changes: Dict[str, Any]) -> Task:
        """Apply a partial update to a task.

        changes holds only the fields present in the request. The last write
        wins when two updates race; there is no version check.
        """
        task = self._load_task(task_id)
        self.policy.ensure_can_access(task, actor.id, actor.role)

        if actor.role == UserRole.MEMBER:
            if task.assigned_to_id != actor.id:
                raise ForbiddenError("Members can only update tasks assigned to themselves")
            if set(changes) - MEMBER_EDITABLE_FIELDS:
                raise ForbiddenError("Members can only update progress and status on their own tasks")

        if "assigned_to_id" in changes:
            self.policy.ensure_can_assign(actor.id, actor.role, changes["assigned_to_id"])

        if task.completion_locked:
            if "progress_percentage" in changes and changes["progress_percentage"] != task.progress_percentage:
                raise LockedError("Progress is locked for approved tasks")

        progress = task.progress_percentage
        if "progress_percentage" in changes:
            progress = validate_progress(changes["progress_percentage"])

        if "title" in changes and not changes["title"]:
            raise ValidationError("Title cannot be empty")

        status = task.status
        if "assigned_to_id" in changes:
            if status == TaskStatus.CREATED and changes["assigned_to_id"] is not None:
                status = TaskStatus.ASSIGNED

        entering_pending = False
        retrying = False
        if "status" in changes:
            requested = changes["status"]
            mapped = normalize_status(requested) if isinstance(requested, str) else requested

            if task.completion_locked and mapped != TaskStatus.APPROVED.value:
                raise LockedError("Completion is locked for approved tasks")
            if task.status == TaskStatus.APPROVED and mapped != TaskStatus.APPROVED.value:
                raise LockedError()
            if mapped in (TaskStatus.APPROVED.value, TaskStatus.REJECTED.value):
                raise ValidationError("Use the approve or reject operations for approval decisions")
            if not isinstance(mapped, str) or not is_valid_status(mapped):
                raise ValidationError("Invalid task status")

            target = TaskStatus(mapped)
            if not is_allowed_transition(status, target):
                raise ValidationError(f"Invalid status transition from {status.value} to {target.value}")
            if target == TaskStatus.PENDING_APPROVAL and progress != 100:
                raise ValidationError("progress_percentage must be 100 before moving to pending_approval")

            entering_pending = target == TaskStatus.PENDING_APPROVAL and status != target
            retrying = target == TaskStatus.IN_PROGRESS and status == TaskStatus.REJECTED
            status = target

        with unit_of_work(self.db):
            if "progress_percentage" in changes:
                task.progress_percentage = progress
            if "title" in changes:
                task.title = changes["title"]
            if "description" in changes:
                task.description = changes["description"] or ""
            if "deadline" in changes:
                task.deadline = changes["deadline"]
            if "assigned_to_id" in changes:
                task.assigned_to_id = changes["assigned_to_id"]

            now = datetime.utcnow()
            if entering_pending:
                if task.completed_at is None:
                    task.completed_at = now
                task.pending_approval_notified_at = now
            if retrying:
                task.rejection_reason = None
                task.rejected_by_id = None
                task.rejected_at = None
            task.status = status
            task.updated_at = now
        self.db.refresh(task)

        logger.info(f"Task {task.id} updated by user {actor.id}; status {task.status.value}")
        return task

    def _ensure_decision_allowed(self, task_id: int, actor: Actor, verb: str) -> Task:
        if actor.role not in DECISION_ROLES:
            raise ForbiddenError(f"Only manager/admin can {verb} tasks")
        task = self._load_task(task_id)
        self.policy.ensure_can_access(task, actor.id, actor.role)
        if task.status != TaskStatus.PENDING_APPROVAL:
            raise ValidationError(f"Only pending_approval tasks can be {verb}d")
        return task

    def approve_task(self, task_id: int, actor: Actor, comments: str = "") -> Task:
        task = self._ensure_decision_allowed(task_id, actor, "approve")

        with unit_of_work(self.db):
            now = datetime.utcnow()
            task.status = TaskStatus.APPROVED
            task.approved_by_id = actor.id
            task.approved_at = now
            task.rejected_by_id = None
            task.rejected_at = None
            task.completion_locked = True
            if task.completed_at is None:
                task.completed_at = now
            task.updated_at = now
            self.audit.record(task, AuditAction.APPROVED, actor.id, comments)
        self.db.refresh(task)

        logger.info(f"Task {task.id} approved by user {actor.id}")
        return task

    def reject_task(self, task_id: int, actor: Actor, reason: str, comments: str = "") -> Task:
        task = self._ensure_decision_allowed(task_id, actor, "reject")
        if not reason or not reason.strip():
            raise ValidationError("rejection reason is required")

        with unit_of_work(self.db):
            now = datetime.utcnow()
            task.status = TaskStatus.REJECTED
            task.rejected_by_id = actor.id
            task.rejected_at = now
            task.rejection_reason = reason
            task.completion_locked = False
            task.approved_by_id = None
            task.approved_at = None
            task.updated_at = now
            self.audit.record(task, AuditAction.REJECTED, actor.id, comments or reason)
        self.db.refresh(task)

        logger.info(f"Task {task.id} rejected by user {actor.id}: {reason}")
        return task

    def delete_task(self, task_id: int, actor: Actor) -> None:
        task = self._load_task(task_id)
        self.policy.ensure_can_access(task, actor.id, actor.role)

        with unit_of_work(self.db):
            self.db.delete(task)
        logger.info(f"Task {task_id} deleted by user {actor.id}")

    def describe_permissions(self, task_id: int, actor: Actor) -> Dict[str, Any]:
        """Summarize what the actor may do with a task, for UI hints"""
        task = self._load_task(task_id)
        can_access = self.policy.can_access_task(task, actor.id, actor.role)
        is_decider = actor.role in DECISION_ROLES
        return {
            "task_id": task.id,
            "user_id": actor.id,
            "user_role": actor.role.value,
            "can_access": can_access,
            "can_update_details": can_access and is_decider and not task.completion_locked,
            "can_decide": can_access and is_decider and task.status == TaskStatus.PENDING_APPROVAL,
        }
