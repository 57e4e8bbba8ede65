"""License Routes — code redemption, admin listing, universal license activation and admin.

Invariants:
    - 200 redeem -> {success, email, paymentId}; 400 invalid; 404 unknown; 409 used
    - Admin universal license: GET lists emails, POST adds (409 duplicate),
      DELETE removes (404 absent); none of them need the shared key
    - Errors are raised as DigipodError and rendered by the global handler

Design Decisions:
    - Paths kept flat (/redeem-license, /admin-license-codes) to match existing clients
"""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import get_license_service, get_universal_license_service
from app.schemas.license import (
    AuthorizedEmailList, AuthorizedEmailRequest, LicenseCodeList, LicenseCodeView,
    RedeemRequest, RedeemResponse, UniversalLicenseRequest, UniversalLicenseResponse,
)
from app.services.license_redemption import LicenseRedemptionService
from app.services.universal_license import UniversalLicenseService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["licenses"])


@router.post("/redeem-license", response_model=RedeemResponse)
async def redeem_license(
    body: RedeemRequest,
    service: LicenseRedemptionService = Depends(get_license_service),
):
    """Redeem a single-use license code."""
    result = await service.redeem(body.code)
    return RedeemResponse(email=result.email, payment_id=result.payment_id)


@router.get("/admin-license-codes", response_model=LicenseCodeList)
async def list_license_codes(
    service: LicenseRedemptionService = Depends(get_license_service),
):
    """All issued codes, newest first."""
    codes = await service.list_codes()
    return LicenseCodeList(codes=[LicenseCodeView.from_record(c) for c in codes])


@router.post("/universal-license", response_model=UniversalLicenseResponse)
async def activate_universal_license(
    body: UniversalLicenseRequest,
    service: UniversalLicenseService = Depends(get_universal_license_service),
):
    """Authorize an email under the shared universal license key."""
    result = await service.activate(body.code, body.email)
    return UniversalLicenseResponse(message=result.message)


# ─── Universal license administration ──────────────────────────

@router.get("/admin/universal-license", response_model=AuthorizedEmailList)
async def list_authorized_emails(
    service: UniversalLicenseService = Depends(get_universal_license_service),
):
    return AuthorizedEmailList(authorized_emails=await service.authorized_emails())


@router.post("/admin/universal-license", response_model=UniversalLicenseResponse)
async def grant_universal_license(
    body: AuthorizedEmailRequest,
    service: UniversalLicenseService = Depends(get_universal_license_service),
):
    """Add an email; 409 if it is already authorized."""
    await service.grant(body.email)
    return UniversalLicenseResponse(message="Email added to universal license")


@router.delete("/admin/universal-license", response_model=UniversalLicenseResponse)
async def revoke_universal_license(
    body: AuthorizedEmailRequest,
    service: UniversalLicenseService = Depends(get_universal_license_service),
):
    """Remove an email; 404 if it is not authorized."""
    await service.revoke(body.email)
    return UniversalLicenseResponse(message="Email removed from universal license")
