import logging

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.orm import Session

from tasktrack.database import get_db, unit_of_work
from tasktrack.models.user import User, UserRole
from tasktrack.schemas.user import UserCreate, UserLogin
from tasktrack.schemas.tokens import Token
from tasktrack.utils.security import hash_password, verify_password, create_token_for_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=Token)
def register(user: UserCreate, db: Session = Depends(get_db)):
    existing_user = db.query(User).filter(User.email == user.email).first()
    if existing_user:
        raise HTTPException(status_code=400, detail="Email already registered")

    if user.manager_id is not None and db.get(User, user.manager_id) is None:
        raise HTTPException(status_code=400, detail="Manager not found")

    new_user = User(
        name=user.name,
        email=user.email,
        hashed_password=hash_password(user.password),
        role=UserRole.MEMBER,  # roles are granted by an admin through PUT /users/{id}
        manager_id=user.manager_id,
    )

    with unit_of_work(db):
        db.add(new_user)
    db.refresh(new_user)
    logger.info(f"Registered user {new_user.id} with role {new_user.role.value}")

    return {
        "access_token": create_token_for_user(new_user),
        "token_type": "bearer",
        "user": new_user,
    }

@router.post("/login", response_model=Token)
def login(user: UserLogin, db: Session = Depends(get_db)):
    db_user = db.query(User).filter(User.email == user.email).first()
    if not db_user or not verify_password(user.password, db_user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return {
        "access_token": create_token_for_user(db_user),
        "token_type": "bearer",
        "user": db_user,
    }
