"""
Pytest configuration and fixtures.
"""

import sys
from pathlib import Path
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from PySide6.QtCore import QCoreApplication

from app.domain.models import UserPreferences
from app.i18n import set_language
from app.infra import changes
from app.infra.db import Base
from app.infra.local_storage import LocalStorage
from app.services.sync_service import SyncService
from app.services.task_store import TaskStore

TEST_USER = "test-user"


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create a new session for a test"""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture(scope="session")
def qapp():
    """Qt core application, needed wherever a QTimer is started"""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture(autouse=True)
def clean_globals():
    """Reset the change feed and the UI language around every test"""
    set_language("en")
    yield
    changes.clear_subscribers()
    set_language("en")


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "local_storage")


@pytest.fixture
def backend(db_session, storage):
    return SyncService(TEST_USER, session=db_session, storage=storage)


@pytest.fixture
def preferences():
    """No waiting between retries and no resync, so rollbacks are observable"""
    return UserPreferences(max_retries=1, retry_delay_seconds=0, resync_on_failure=False)


@pytest.fixture
def store(backend, preferences, qapp):
    return TaskStore(backend, preferences)
