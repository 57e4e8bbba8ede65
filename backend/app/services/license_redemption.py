"""License Redemption — exchanges a single-use code for its issuance data.

Invariants:
    - For any code, across any number of concurrent redeem() calls, exactly one
      call returns RedemptionSuccess; every other call raises LicenseAlreadyUsedError
    - A lost compare-and-set race is reported exactly like a code used long ago
    - PREDICATE_FAILED is never retried: a consumed code stays consumed
    - Service holds no mutable state; one instance may serve concurrent callers

Design Decisions:
    - Early read (step 2) only short-circuits the common case; the guarded write
      is the real decision point, so the read/write gap cannot double-redeem
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from app.core.domain_types import UpdateOutcome
from app.core.errors import (
    LicenseAlreadyUsedError, LicenseNotFoundError, ErrorContext,
)
from app.core.license_rules import (
    validate_code, is_redeemed, redemption_predicate, redemption_mutation,
)
from app.core.records import SignupCode
from app.core.repository_protocols import RecordStore
from app.infrastructure.clock import utc_now
from app.infrastructure.observability import redact_code

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionSuccess:
    """Issuance data carried through to the caller (not secrets)."""
    email: str | None
    payment_id: str | None


class LicenseRedemptionService:
    """Redeems signup codes against a conditional-write store."""

    def __init__(
        self, store: RecordStore, clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._clock = clock

    async def redeem(self, code: object) -> RedemptionSuccess:
        code = validate_code(code)
        hint = redact_code(code)

        document = await self._store.get(code)
        if document is None:
            logger.info("Redeem rejected: unknown code", extra={"code_hint": hint})
            raise LicenseNotFoundError()
        if is_redeemed(document):
            logger.info("Redeem rejected: already used", extra={"code_hint": hint})
            raise LicenseAlreadyUsedError()

        outcome = await self._store.conditional_update(
            code, redemption_predicate(), redemption_mutation(self._clock()),
        )
        if outcome == UpdateOutcome.PREDICATE_FAILED:
            logger.warning(
                "Redeem lost race: code consumed concurrently",
                extra={"code_hint": hint, "outcome": outcome.value},
            )
            raise LicenseAlreadyUsedError()
        if outcome == UpdateOutcome.NOT_FOUND:
            raise LicenseNotFoundError(
                ErrorContext(debug_info={"stage": "conditional_update"}),
            )

        record = SignupCode.from_document(document)
        logger.info(
            "License code redeemed",
            extra={"code_hint": hint, "outcome": outcome.value},
        )
        return RedemptionSuccess(email=record.email, payment_id=record.payment_id)

    async def list_codes(self) -> list[SignupCode]:
        """All codes, newest first (administrative listing)."""
        documents = await self._store.list_documents("created_at", descending=True)
        return [SignupCode.from_document(doc) for doc in documents]
