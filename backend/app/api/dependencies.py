"""Route Dependencies — build services from the stores on app.state.

Invariants:
    - Stores come from request.app.state.stores (set in the lifespan)
    - Services are cheap, stateless, and built per request
    - Tests override get_record_stores via app.dependency_overrides

Design Decisions:
    - Depends() chain over module globals: each app instance carries its own stores
"""

from fastapi import Depends, Request

from app.config import Settings, get_settings
from app.core.errors import StoreUnavailableError
from app.infrastructure.record_stores import RecordStores
from app.services.license_redemption import LicenseRedemptionService
from app.services.phase_progression import PhaseProgressionEngine
from app.services.universal_license import UniversalLicenseService


def get_record_stores(request: Request) -> RecordStores:
    stores = getattr(request.app.state, "stores", None)
    if stores is None:
        raise StoreUnavailableError("record stores not initialized", "connect")
    return stores


def get_license_service(
    stores: RecordStores = Depends(get_record_stores),
) -> LicenseRedemptionService:
    return LicenseRedemptionService(stores.signup_codes)


def get_universal_license_service(
    stores: RecordStores = Depends(get_record_stores),
    settings: Settings = Depends(get_settings),
) -> UniversalLicenseService:
    return UniversalLicenseService(
        stores.universal_licenses,
        settings.universal_license_key,
        max_attempts=settings.universal_license_max_attempts,
    )


def get_phase_engine(
    stores: RecordStores = Depends(get_record_stores),
) -> PhaseProgressionEngine:
    return PhaseProgressionEngine(stores.projects)
