import os

# Settings are read at import time, so they must be in place before eventease is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["SECRET_KEY"] = "test-secret"

from datetime import date, timedelta

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from eventease.core.celery_config import celery_app
from eventease.core.security import create_access_token
from eventease.database.db import Base, get_db
from eventease.main import app
from eventease.models.events import Event, EventStatus
from eventease.models.users import Role
from eventease.services import accounts
from eventease.services.accounts import Actor
from eventease.services.notifications import NotificationDispatcher

# Use an in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

celery_app.conf.task_always_eager = True


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def db_engine() -> Engine:
    return engine


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_redis():
    server = fakeredis.FakeServer()
    return fakeredis.FakeStrictRedis(server=server, decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(fake_redis, monkeypatch: pytest.MonkeyPatch):
    """Route every lock through fakeredis."""
    monkeypatch.setattr("eventease.core.locks.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch: pytest.MonkeyPatch):
    """Capture email function calls instead of posting them."""
    sent = []

    def fake_send(self, function_name, payload):
        sent.append((function_name, payload))
        return {"id": f"email-{len(sent)}"}

    monkeypatch.setattr(NotificationDispatcher, "send", fake_send)
    return sent


@pytest.fixture
def make_user(db_session: Session):
    counter = {"n": 0}

    def _make_user(email: str | None = None, role: str = Role.USER.value) -> Actor:
        counter["n"] += 1
        user = accounts.signup(
            db_session,
            email=email or f"user{counter['n']}@mail.com",
            password="secret123",
            full_name=f"User {counter['n']}",
        )
        if role != Role.USER.value:
            accounts.grant_role(db_session, user_id=user.id, role=role)
        return Actor(user_id=user.id, email=user.email, role=role)

    return _make_user


@pytest.fixture
def user(make_user) -> Actor:
    return make_user("jane@mail.com")


@pytest.fixture
def admin(make_user) -> Actor:
    return make_user("admin@mail.com", role=Role.ADMIN.value)


def headers_for(actor: Actor) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(data={'sub': actor.user_id})}"}


@pytest.fixture
def make_headers():
    return headers_for


@pytest.fixture
def auth_headers(user) -> dict[str, str]:
    return headers_for(user)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return headers_for(admin)


@pytest.fixture
def make_event(db_session: Session):
    def _make_event(**overrides) -> Event:
        fields = {
            "name": "Summer Music Festival",
            "category": "music",
            "description": "Three stages of live music.",
            "short_description": "Live music all weekend",
            "venue": "Lakeside Park",
            "city": "Chicago",
            "event_date": date.today() + timedelta(days=30),
            "event_time": "6:00 PM",
            "booking_opening_date": date.today(),
            "total_capacity": 100,
            "registered_count": 0,
            "free_event": False,
            "price_standard": 50,
            "price_vip": 120,
            "price_group": 40,
            "status": EventStatus.APPROVED.value,
            "organizer_name": "EventEase Live",
            "tags": ["music", "outdoor"],
        }
        fields.update(overrides)
        event = Event(**fields)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event
