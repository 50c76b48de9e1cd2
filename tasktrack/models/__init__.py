from .user import User, UserRole
from .task import Task, TaskStatus
from .task_audit import TaskAudit, AuditAction
