import logging
from typing import List

from sqlalchemy.orm import Session

from tasktrack.models.task import Task
from tasktrack.models.task_audit import TaskAudit, AuditAction

logger = logging.getLogger(__name__)


class AuditRecorder:
    """Append-only log of approval and rejection decisions.

    record() only stages the row on the caller's session. It becomes visible
    when the surrounding unit of work commits together with the task change,
    and disappears with it on rollback.
    """

    def __init__(self, db: Session):
        self.db = db

    def record(self, task: Task, action: AuditAction, actor_id: int, comments: str = "") -> TaskAudit:
        audit = TaskAudit(
            task_id=task.id,
            action=action,
            actor_id=actor_id,
            comments=comments or ""
        )
        self.db.add(audit)
        logger.info(f"Audit {action.value} staged for task {task.id} by user {actor_id}")
        return audit

    def list_for_task(self, task_id: int) -> List[TaskAudit]:
        return (
            self.db.query(TaskAudit)
            .filter(TaskAudit.task_id == task_id)
            .order_by(TaskAudit.id)
            .all()
        )
