"""Record Store Wiring — builds the per-collection stores for the configured backend.

Invariants:
    - One RecordStores bundle per application instance (kept on app.state)
    - Services receive individual stores, never the bundle or the DB manager

Design Decisions:
    - Backend chosen by Settings.record_store_backend ("sql" | "memory")
"""

import logging
from dataclasses import dataclass

from app.config import Settings
from app.core.repository_protocols import HealthCheckable, RecordStore
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.memory_record_store import InMemoryRecordStore
from app.infrastructure.sql_record_store import (
    SqlProjectStore, SqlSignupCodeStore, SqlUniversalLicenseStore,
)

logger = logging.getLogger(__name__)


@dataclass
class RecordStores:
    signup_codes: RecordStore
    projects: RecordStore
    universal_licenses: RecordStore
    db_manager: DatabaseSessionManager | None = None

    def _health_targets(self) -> list[HealthCheckable]:
        # SQL stores share one engine; checking it once covers all three
        if self.db_manager is not None:
            return [self.db_manager]
        return [self.signup_codes, self.projects, self.universal_licenses]

    async def health_check(self) -> bool:
        for target in self._health_targets():
            if not await target.health_check():
                return False
        return True

    async def close(self) -> None:
        if self.db_manager is not None:
            await self.db_manager.dispose()


def memory_stores() -> RecordStores:
    return RecordStores(
        signup_codes=InMemoryRecordStore(key_field="code"),
        projects=InMemoryRecordStore(key_field="id"),
        universal_licenses=InMemoryRecordStore(key_field="key"),
    )


def sql_stores(db_manager: DatabaseSessionManager) -> RecordStores:
    return RecordStores(
        signup_codes=SqlSignupCodeStore(db_manager),
        projects=SqlProjectStore(db_manager),
        universal_licenses=SqlUniversalLicenseStore(db_manager),
        db_manager=db_manager,
    )


async def build_stores(settings: Settings) -> RecordStores:
    """Create stores for settings.record_store_backend."""
    if settings.record_store_backend == "memory":
        logger.warning("Using in-memory record store; data is not durable")
        return memory_stores()

    db_manager = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    if settings.database_auto_create:
        await db_manager.create_schema()
    return sql_stores(db_manager)
