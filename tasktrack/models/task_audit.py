# tasktrack/models/task_audit.py
from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from tasktrack.database import Base


class AuditAction(str, enum.Enum):
    APPROVED = "approved"
    REJECTED = "rejected"


class TaskAudit(Base):
    """One approval or rejection decision. Rows are only ever inserted."""

    __tablename__ = "task_audits"

    id = Column(Integer, primary_key=True, index=True)
    # No FK to tasks: the row keeps its task id after the task is deleted
    task_id = Column(Integer, nullable=False, index=True)
    action = Column(Enum(AuditAction, values_callable=lambda e: [m.value for m in e]), nullable=False)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    comments = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    task = relationship("Task", primaryjoin="foreign(TaskAudit.task_id) == Task.id", viewonly=True)
    actor = relationship("User", foreign_keys=[actor_id])
