# tasktrack/utils/hierarchy.py
import logging
from typing import List, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tasktrack.models.user import User
from tasktrack.utils.errors import HierarchyCycleError, InternalFailureError

logger = logging.getLogger(__name__)


class HierarchyManager:
    """Utility class for resolving the manager/report hierarchy.

    Nothing is cached here: every call re-reads the current manager links, so a
    concurrent reassignment may or may not be reflected in a given answer.
    """

    def __init__(self, db: Session):
        self.db = db

    def resolve_subordinates(self, manager_id: int) -> Set[int]:
        """Get the ids of every user reporting to manager_id, directly or indirectly.

        The tree is expanded one level at a time with a single query per level.
        Reaching a user twice means the manager graph has a cycle, which is
        reported as HierarchyCycleError instead of being walked forever.
        """
        subordinates: Set[int] = set()
        frontier = [manager_id]

        while frontier:
            try:
                rows = self.db.query(User.id).filter(User.manager_id.in_(frontier)).all()
            except SQLAlchemyError as e:
                logger.error(f"Failed to resolve subordinates of user {manager_id}: {e}")
                raise InternalFailureError("Failed to load organizational hierarchy") from e

            next_frontier = []
            for (report_id,) in rows:
                if report_id == manager_id or report_id in subordinates:
                    logger.error(f"Cycle detected in manager hierarchy under user {manager_id} at user {report_id}")
                    raise HierarchyCycleError(report_id)
                subordinates.add(report_id)
                next_frontier.append(report_id)
            frontier = next_frontier

        return subordinates

    def get_supervisory_chain(self, user_id: int) -> List[User]:
        """Get the chain of managers from user up to the top level"""
        chain = []
        seen = {user_id}
        current_user = self.db.get(User, user_id)

        while current_user and current_user.manager_id is not None:
            if current_user.manager_id in seen:
                raise HierarchyCycleError(current_user.manager_id)
            seen.add(current_user.manager_id)

            manager = self.db.get(User, current_user.manager_id)
            if manager is None:
                break
            chain.append(manager)
            current_user = manager

        return chain

    def would_create_cycle(self, user_id: int, manager_id: int) -> bool:
        """Check if making manager_id the manager of user_id would close a loop"""
        if user_id == manager_id:
            return True
        return any(manager.id == user_id for manager in self.get_supervisory_chain(manager_id))
