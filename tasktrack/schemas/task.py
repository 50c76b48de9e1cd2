# tasktrack/schemas/task.py
from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Optional, List

from tasktrack.models.task import TaskStatus
from tasktrack.models.task_audit import AuditAction

class TaskCreate(BaseModel):
    title: str
    description: str = ""
    assigned_to_id: Optional[int] = None
    progress_percentage: int = 0
    deadline: Optional[datetime] = None

    @field_validator('title')
    @classmethod
    def title_must_not_be_blank(cls, v):
        if not v.strip():
            raise ValueError('Title is required')
        return v

class TaskUpdate(BaseModel):
    """Partial update. Only fields present in the request are applied.

    status stays a plain string so legacy aliases and unknown literals reach
    the lifecycle checks instead of failing request parsing.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to_id: Optional[int] = None
    status: Optional[str] = None
    progress_percentage: Optional[int] = None
    deadline: Optional[datetime] = None

class TaskDecision(BaseModel):
    comments: str = ""
    reason: str = ""

class TaskAuditOut(BaseModel):
    id: int
    task_id: int
    action: AuditAction
    actor_id: int
    comments: str
    created_at: datetime

    class Config:
        from_attributes = True

class TaskOut(BaseModel):
    id: int
    title: str
    description: str
    status: TaskStatus
    progress_percentage: int
    deadline: Optional[datetime] = None
    created_by_id: int
    assigned_to_id: Optional[int] = None
    completion_locked: bool
    completed_at: Optional[datetime] = None
    pending_approval_notified_at: Optional[datetime] = None
    approved_by_id: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejected_by_id: Optional[int] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    audit_trail: List[TaskAuditOut] = []

    class Config:
        from_attributes = True

class TaskPermissions(BaseModel):
    task_id: int
    user_id: int
    user_role: str
    can_access: bool
    can_update_details: bool
    can_decide: bool
