"""License Schemas — redemption, admin listing and universal license payloads.

Invariants:
    - `code` is accepted as any JSON value: the service owns the "non-empty string"
      rule so that wrong types and empty strings map to the same INVALID_INPUT error
    - Missing `code` is rejected by Pydantic (400 VALIDATION_ERROR)
    - Admin payloads carry an email only; normalization happens in the service
"""

from datetime import datetime
from typing import Any

from app.core.records import SignupCode
from app.schemas.common import CamelModel


class RedeemRequest(CamelModel):
    code: Any


class RedeemResponse(CamelModel):
    success: bool = True
    email: str | None = None
    payment_id: str | None = None


class LicenseCodeView(CamelModel):
    code: str
    payment_id: str | None = None
    email: str | None = None
    used: bool
    created_at: datetime | None = None
    used_at: datetime | None = None

    @classmethod
    def from_record(cls, record: SignupCode) -> "LicenseCodeView":
        return cls(
            code=record.code,
            payment_id=record.payment_id,
            email=record.email,
            used=record.used,
            created_at=record.created_at,
            used_at=record.used_at,
        )


class LicenseCodeList(CamelModel):
    codes: list[LicenseCodeView]


class UniversalLicenseRequest(CamelModel):
    code: Any
    email: Any = None


class UniversalLicenseResponse(CamelModel):
    success: bool = True
    message: str


class AuthorizedEmailRequest(CamelModel):
    email: Any = None


class AuthorizedEmailList(CamelModel):
    authorized_emails: list[str]
