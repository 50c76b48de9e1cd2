import itertools

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tasktrack.database import Base, get_db
from tasktrack.models import Task, TaskStatus, User, UserRole
from tasktrack.schemas.user import Actor
from tasktrack.utils.security import create_token_for_user


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def make_user(db):
    counter = itertools.count(1)

    def _make_user(role: UserRole = UserRole.MEMBER, manager: User = None, name: str = None) -> User:
        n = next(counter)
        user = User(
            name=name or f"User {n}",
            email=f"user{n}@example.com",
            hashed_password="not-a-real-hash",
            role=role,
            manager_id=manager.id if manager else None,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_task(db):
    def _make_task(creator: User, assignee: User = None, status: TaskStatus = None, progress: int = 0, **fields) -> Task:
        if status is None:
            status = TaskStatus.ASSIGNED if assignee else TaskStatus.CREATED
        task = Task(
            title=fields.pop("title", "Write report"),
            description=fields.pop("description", "Quarterly numbers"),
            created_by_id=creator.id,
            assigned_to_id=assignee.id if assignee else None,
            status=status,
            progress_percentage=progress,
            **fields,
        )
        db.add(task)
        db.commit()
        db.refresh(task)
        return task

    return _make_task


@pytest.fixture()
def actor_for():
    def _actor_for(user: User) -> Actor:
        return Actor(id=user.id, role=user.role)

    return _actor_for


@pytest.fixture()
def client(session_factory):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_header():
    def _auth_header(user: User) -> dict:
        return {"Authorization": f"Bearer {create_token_for_user(user)}"}

    return _auth_header
