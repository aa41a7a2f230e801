"""Shared fixtures: a fresh in-memory SQLite database per test, a fixed clock,
and a repository/service pair bound to the test session.

Invariants:
    - Every test gets its own database; nothing leaks between tests
    - The clock is frozen at NOW unless a test moves it
    - The partition size is tiny (3) so chunking is exercised with a handful of users
"""

from datetime import datetime

import pytest

from identity.config import Settings
from identity.db.session import create_engine, create_schema, create_session_factory
from identity.models import User
from identity.repositories import UserRepository
from identity.services import UserService

NOW = datetime(2026, 3, 1, 12, 0, 0)


class FixedClock:
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current


@pytest.fixture
async def test_engine():
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
async def test_db(test_engine):
    async with create_session_factory(test_engine)() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def settings():
    return Settings(max_bind_parameters=3)


@pytest.fixture
def user_repo(test_db, clock, settings):
    return UserRepository(test_db, clock=clock, settings=settings)


@pytest.fixture
def user_service(test_db, user_repo):
    return UserService(test_db, user_repo)


@pytest.fixture
def make_user(test_db, user_repo):
    """Insert and commit a user; keyword arguments override the defaults."""

    async def _make(login: str, **fields) -> User:
        fields.setdefault("name", login.capitalize())
        fields.setdefault("email", f"{login}@example.com")
        user = await user_repo.insert(User(login=login, **fields))
        await test_db.commit()
        return user

    return _make
