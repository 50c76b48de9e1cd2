from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime

from tasktrack.models.user import UserRole

class Actor(BaseModel):
    """An already authenticated caller: who is acting and in which role"""
    id: int
    role: UserRole

    model_config = {
        "frozen": True
    }

class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    manager_id: Optional[int] = None

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: UserRole
    manager_id: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True

class UserUpdate(BaseModel):
    role: Optional[UserRole] = None
    manager_id: Optional[int] = None

    model_config = {
        "from_attributes": True
    }
