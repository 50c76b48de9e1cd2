# tasktrack/utils/permissions.py
import logging
from typing import Dict, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tasktrack.models.task import Task
from tasktrack.models.user import User, UserRole
from tasktrack.utils.errors import ForbiddenError, InternalFailureError, NotFoundError
from tasktrack.utils.hierarchy import HierarchyManager

logger = logging.getLogger(__name__)


def parse_role(value) -> UserRole:
    """Turn a role claim into a UserRole, refusing anything outside the closed set"""
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(str(value).lower())
    except ValueError:
        raise ForbiddenError("Unauthorized role")


class TaskPolicy:
    """Access and assignment decisions for tasks.

    Create one per request. Subordinate sets resolved while answering are kept
    for the lifetime of the instance, so several checks inside one operation
    share a single hierarchy read.
    """

    def __init__(self, db: Session, hierarchy: Optional[HierarchyManager] = None):
        self.db = db
        self.hierarchy = hierarchy or HierarchyManager(db)
        self._subordinates: Dict[int, Set[int]] = {}

    def subordinates_of(self, manager_id: int) -> Set[int]:
        if manager_id not in self._subordinates:
            self._subordinates[manager_id] = self.hierarchy.resolve_subordinates(manager_id)
        return self._subordinates[manager_id]

    def can_access_task(self, task: Task, actor_id: int, actor_role: UserRole) -> bool:
        """Check if the actor may view or act on a task"""
        involved = {task.created_by_id, task.assigned_to_id} - {None}

        if actor_role == UserRole.ADMIN:
            return True
        elif actor_role == UserRole.MEMBER:
            return actor_id in involved
        elif actor_role == UserRole.MANAGER:
            if actor_id in involved:
                return True
            return bool(involved & self.subordinates_of(actor_id))
        return False

    def can_assign_task(self, assigner_id: int, assigner_role: UserRole, assignee_id: Optional[int]) -> bool:
        """Check if the assigner may assign a task to assignee_id.

        assignee_id of None means leaving the task unassigned. A missing
        assignee raises NotFoundError rather than producing a deny.
        """
        if assignee_id is None:
            return assigner_role in (UserRole.ADMIN, UserRole.MANAGER)

        if assigner_role == UserRole.ADMIN:
            return True

        try:
            assignee = self.db.get(User, assignee_id)
        except SQLAlchemyError as e:
            logger.error(f"Failed to load assignee {assignee_id}: {e}")
            raise InternalFailureError("Failed to verify assignment permissions") from e
        if assignee is None:
            raise NotFoundError("Assigned user not found")

        # No non-admin can assign to an admin
        if assignee.role == UserRole.ADMIN:
            return False

        if assigner_role == UserRole.MANAGER:
            if assignee_id == assigner_id:
                return True
            return assignee_id in self.subordinates_of(assigner_id)
        elif assigner_role == UserRole.MEMBER:
            return assignee_id == assigner_id
        return False

    def ensure_can_access(self, task: Task, actor_id: int, actor_role: UserRole) -> None:
        if not self.can_access_task(task, actor_id, actor_role):
            logger.info(f"User {actor_id} ({actor_role.value}) denied access to task {task.id}")
            raise ForbiddenError("Unauthorized access")

    def ensure_can_assign(self, assigner_id: int, assigner_role: UserRole, assignee_id: Optional[int]) -> None:
        if not self.can_assign_task(assigner_id, assigner_role, assignee_id):
            logger.info(f"User {assigner_id} ({assigner_role.value}) denied assigning to {assignee_id}")
            raise ForbiddenError("You do not have permission to assign a task to this user")
