"""API test fixtures — FastAPI client over in-memory record stores.

Invariants:
    - Every test gets fresh stores on app.state (lifespan does not run under ASGITransport)
    - get_settings overridden so the universal license key is known to tests
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.config import Settings, get_settings
from app.infrastructure.record_stores import memory_stores
from app.main import app

UNIVERSAL_KEY = "UNIVERSAL-TEST-KEY"


@pytest.fixture
def stores():
    return memory_stores()


@pytest.fixture
def test_settings():
    return Settings(
        record_store_backend="memory",
        universal_license_key=UNIVERSAL_KEY,
        phase_advance_max_attempts=3,
    )


@pytest.fixture
async def client(stores, test_settings):
    app.state.stores = stores
    app.dependency_overrides[get_settings] = lambda: test_settings

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    del app.state.stores
