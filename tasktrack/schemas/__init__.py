from .user import Actor, UserCreate, UserLogin, UserOut, UserUpdate
from .tokens import Token
from .task import TaskCreate, TaskUpdate, TaskDecision, TaskOut, TaskAuditOut, TaskPermissions
