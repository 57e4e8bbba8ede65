"""License Rules — validation and compare-and-set builders for single-use codes.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - `used` only ever goes False -> True, and used_at is set in the same write
    - Redemption never touches email, payment_id or created_at

Design Decisions:
    - The predicate is `used == False` rather than a version token: the flag
      itself is monotone, so it is a sufficient compare-and-set guard
"""

from datetime import datetime

from app.core.domain_types import LicenseCode
from app.core.errors import InvalidInputError
from app.core.repository_protocols import Mutation


def validate_code(code: object) -> LicenseCode:
    """Reject non-string or empty codes."""
    if not isinstance(code, str) or not code:
        raise InvalidInputError("Missing or invalid code", field="code")
    return LicenseCode(code)


def is_redeemed(document: dict) -> bool:
    return bool(document.get("used"))


def redemption_predicate() -> dict:
    return {"used": False}


def redemption_mutation(now: datetime) -> Mutation:
    return Mutation(set_fields={"used": True, "used_at": now})


def validate_email(email: object) -> str:
    """Light sanity check — the identity provider owns real verification."""
    if not isinstance(email, str) or not email.strip() or "@" not in email:
        raise InvalidInputError("Missing or invalid email", field="email")
    return email.strip().lower()
