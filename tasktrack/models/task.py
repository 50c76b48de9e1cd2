from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text, Boolean, CheckConstraint
from sqlalchemy.orm import relationship
from tasktrack.database import Base
import enum
from datetime import datetime

class TaskStatus(str, enum.Enum):
    CREATED = "created"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"

def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="ck_tasks_progress_range"
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")

    # Relationships
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)  # None means unassigned

    # Task properties
    status = Column(Enum(TaskStatus, values_callable=_enum_values), default=TaskStatus.CREATED, nullable=False)
    progress_percentage = Column(Integer, default=0, nullable=False)
    deadline = Column(DateTime, nullable=True)

    # Approval workflow
    completion_locked = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    pending_approval_notified_at = Column(DateTime, nullable=True)
    approved_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    rejected_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # System dates
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by_id], back_populates="created_tasks")
    assignee = relationship("User", foreign_keys=[assigned_to_id], back_populates="assigned_tasks")
    # Audit rows outlive the task; deleting a task never touches them
    audit_trail = relationship(
        "TaskAudit",
        primaryjoin="Task.id == foreign(TaskAudit.task_id)",
        order_by="TaskAudit.id",
        viewonly=True
    )
