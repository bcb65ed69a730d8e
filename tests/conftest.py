"""
Shared test fixtures.

End-to-end tests run against an in-memory SQLite database (aiosqlite) with
the real event handlers subscribed. Unit tests use the mock session.
"""

import os

# Settings are read at import time
os.environ.setdefault("PYTHON_ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("REQUIRE_REJECTION_REMARKS", "false")

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from admissions.core.auth import Principal, PrincipalRole  # noqa: E402
from admissions.core.database import Base  # noqa: E402
from admissions.core.events import dispatcher  # noqa: E402
from admissions.core.rate_limit import reset_memory_store  # noqa: E402
from admissions.modules.applications import register_history_handlers  # noqa: E402
from admissions.modules.applications.models import (  # noqa: E402
    ApplicationStatus,
    StudentApplication,
)
from admissions.modules.calendar import models as _calendar_models  # noqa: E402, F401
from admissions.modules.notifications import register_notification_handlers  # noqa: E402


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.flush = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()

    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    # Propagate exceptions raised inside the savepoint block
    savepoint.__aexit__ = AsyncMock(return_value=False)
    db.begin_nested = MagicMock(return_value=savepoint)
    return db


@pytest.fixture
def admin_principal():
    return Principal(
        id="admin-1",
        email="registrar@school.edu",
        role=PrincipalRole.ADMIN,
        name="Maria Santos",
    )


@pytest.fixture
def unnamed_admin_principal():
    return Principal(id="admin-2", email="deputy@school.edu", role=PrincipalRole.ADMIN)


@pytest.fixture
def student_for():
    """Build the student principal that owns an application."""

    def _student(application_id: int) -> Principal:
        return Principal(
            id=str(application_id),
            email=f"student{application_id}@mail.com",
            role=PrincipalRole.STUDENT,
        )

    return _student


@pytest.fixture(autouse=True)
def event_handlers():
    """Subscribe the real handlers for every test and reset afterwards."""
    dispatcher.clear()
    register_history_handlers()
    register_notification_handlers()
    yield dispatcher
    dispatcher.clear()


@pytest.fixture(autouse=True)
def clear_rate_limits():
    reset_memory_store()
    yield
    reset_memory_store()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_application(db_session):
    """Factory inserting an application directly in the given status."""
    counter = {"n": 0}

    async def _make(
        status: ApplicationStatus = ApplicationStatus.PENDING,
        first_name: str = "juan",
        last_name: str = "dela cruz",
        **fields,
    ) -> StudentApplication:
        counter["n"] += 1
        application = StudentApplication(
            first_name=first_name,
            last_name=last_name,
            email=fields.pop("email", f"applicant{counter['n']}@mail.com"),
            status=status,
            temp_password_active=fields.pop("temp_password_active", False),
            **fields,
        )
        db_session.add(application)
        await db_session.commit()
        await db_session.refresh(application)
        return application

    return _make


@pytest.fixture
def reload(db_session):
    """Fetch a fresh copy of a row, bypassing the identity map."""

    async def _reload(model, id):
        return await db_session.get(model, id, populate_existing=True)

    return _reload
