"""
Shared pytest fixtures: a throwaway SQLite database per test.
"""

from datetime import date

import pytest
from sqlalchemy import event

from core.config import Settings
from core.database import DatabaseManager
from core.models import User
from services.user_service import UserService


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'library.db'}",
        LOG_LEVEL="DEBUG",
        _env_file=None,
    )


@pytest.fixture
def db(settings):
    manager = DatabaseManager(settings=settings)
    manager.init()
    manager.create_tables()
    yield manager
    manager.close()


@pytest.fixture
def service(db):
    svc = UserService(db=db)
    yield svc
    if not svc.is_closed:
        svc.shutdown()


@pytest.fixture
def make_user():
    def _make(name="Alice", email="alice@x.com", registration_date=date(2024, 1, 1)):
        return User.build(name, email, registration_date)

    return _make


class StorageFailure:
    """
    Makes every flush on sessions from the factory raise once enabled.

    ``stage="after_flush"`` fails after the SQL has been sent to the database.
    """

    def __init__(self, session_factory):
        self._factory = session_factory
        self._stage = None

    @property
    def enabled(self) -> bool:
        return self._stage is not None

    def _raise(self, session, flush_context, *args):
        raise RuntimeError("simulated storage failure")

    def enable(self, stage: str = "before_flush") -> None:
        event.listen(self._factory, stage, self._raise)
        self._stage = stage

    def disable(self) -> None:
        if self._stage is not None:
            event.remove(self._factory, self._stage, self._raise)
            self._stage = None


@pytest.fixture
def storage_failure(db):
    failure = StorageFailure(db.session_factory)
    yield failure
    failure.disable()
