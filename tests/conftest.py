import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("TRACKER_TIMEZONE", "UTC")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.constants import ROLE_SUPER_ADMIN, ROLE_USER
from app.db import get_db
from app.main import app
from app.models import Base, Project, TimeSession, User
from app.routers.auth import get_current_principal
from tests.helpers import principal_of


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    """Session bound to a fresh in-memory SQLite database."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(role: str = ROLE_USER, email: str | None = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"user{counter['n']}@example.com",
            full_name=f"User {counter['n']}",
            password_hash="not-a-real-hash",
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_project(db_session):
    def _make(owner: User, name: str = "Client work", hourly_rate="50", weekly_hours="20", **fields) -> Project:
        project = Project(
            owner_id=owner.id,
            name=name,
            hourly_rate=Decimal(str(hourly_rate)),
            rate_currency=fields.pop("rate_currency", "USD"),
            committed_weekly_hours=Decimal(str(weekly_hours)),
            total_time=fields.pop("total_time", 0),
            is_running=fields.pop("is_running", False),
            start_time=fields.pop("start_time", None),
        )
        db_session.add(project)
        db_session.commit()
        return project

    return _make


@pytest.fixture
def add_session(db_session):
    """Insert a session row directly, keeping the project aggregate in step for closed ones."""

    def _add(project: Project, start: int, end: int | None = None, sync_total: bool = True) -> TimeSession:
        duration = (end - start) // 1000 if end is not None else 0
        session = TimeSession(project_id=project.id, start_time=start, end_time=end, duration=duration)
        db_session.add(session)
        if end is not None and sync_total:
            project.total_time = (project.total_time or 0) + duration
        db_session.commit()
        return session

    return _add


@pytest.fixture
def owner(make_user):
    return make_user(ROLE_USER, "owner@example.com")


@pytest.fixture
def stranger(make_user):
    return make_user(ROLE_USER, "stranger@example.com")


@pytest.fixture
def admin(make_user):
    return make_user(ROLE_SUPER_ADMIN, "admin@example.com")


@pytest.fixture
def client(db_session):
    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def act_as(client):
    def _act(user: User | None) -> None:
        if user is None:
            app.dependency_overrides.pop(get_current_principal, None)
            return
        principal = principal_of(user)
        app.dependency_overrides[get_current_principal] = lambda: principal

    return _act
