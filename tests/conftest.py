"""Shared fixtures for wellness calendar tests."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_SECRET"] = "test-secret"
os.environ.setdefault("CALENDAR_TIMEZONE", "UTC")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from wellness_calendar.db.config import engine  # noqa: E402
from wellness_calendar.db.init import init_db  # noqa: E402
from wellness_calendar.events.dispatcher import ActivityEventDispatcher  # noqa: E402
from wellness_calendar.main import app  # noqa: E402
from wellness_calendar.utils.metrics import metrics_collector  # noqa: E402

USER_ID = "user-1"
OTHER_USER_ID = "user-2"


def make_token(user_id: str, email: str = None) -> str:
    """Mint a token the way the external auth provider would."""
    return jwt.encode({"sub": user_id, "email": email}, "test-secret", algorithm="HS256")


@pytest.fixture(autouse=True)
def fresh_database():
    """Recreate every table (and the system templates) for each test."""
    SQLModel.metadata.drop_all(engine)
    init_db(engine)
    metrics_collector.reset()
    yield
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session():
    with Session(engine) as db_session:
        yield db_session


@pytest.fixture
def dispatcher():
    return ActivityEventDispatcher()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token(USER_ID, 'user1@example.com')}"}


@pytest.fixture
def other_auth_headers():
    return {"Authorization": f"Bearer {make_token(OTHER_USER_ID)}"}
