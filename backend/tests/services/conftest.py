"""Service test fixtures — record stores and a fixed clock.

Invariants:
    - Every test gets fresh stores (no state shared across tests)
    - sql_db is a file-backed SQLite database under tmp_path, so concurrent
      sessions use separate connections like a real server

Design Decisions:
    - File SQLite over :memory:: in-memory SQLite shares one connection, which
      would hide the per-connection locking the race tests rely on
"""

import pytest

from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.memory_record_store import InMemoryRecordStore
from app.infrastructure.sql_record_store import (
    SqlProjectStore, SqlSignupCodeStore, SqlUniversalLicenseStore,
)
from tests.services.store_doubles import FixedClock


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def signup_store():
    return InMemoryRecordStore(key_field="code")


@pytest.fixture
def project_store():
    return InMemoryRecordStore(key_field="id")


@pytest.fixture
def universal_store():
    return InMemoryRecordStore(key_field="key")


@pytest.fixture
async def sql_db(tmp_path):
    manager = DatabaseSessionManager(
        f"sqlite+aiosqlite:///{tmp_path / 'store.db'}",
        pool_size=5,
        max_overflow=5,
    )
    await manager.create_schema()
    yield manager
    await manager.dispose()


@pytest.fixture
def sql_signup_store(sql_db):
    return SqlSignupCodeStore(sql_db)


@pytest.fixture
def sql_project_store(sql_db):
    return SqlProjectStore(sql_db)


@pytest.fixture
def sql_universal_store(sql_db):
    return SqlUniversalLicenseStore(sql_db)


@pytest.fixture
async def unmigrated_db(tmp_path):
    """SQLite file with no tables: every store query fails in the driver."""
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    yield manager
    await manager.dispose()
