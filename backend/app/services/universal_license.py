"""Universal License — one shared key that authorizes any number of emails.

Invariants:
    - Activation is a set-add: an email appears at most once in authorized_emails
    - Revocation removes exactly the named email; an absent email is NotFound
    - Every write is a version-token compare-and-set; a lost race re-reads and retries
    - Retries are bounded by max_attempts, then ConcurrencyError
    - Activating an already-authorized email succeeds without writing;
      an admin grant of the same email is a conflict instead

Design Decisions:
    - Unlike single-use redemption, a conflict here IS transient: recomputing the
      set-add (or set-remove) on fresh state is always safe, so the service retries itself
    - The key is compared with hmac.compare_digest (no timing side channel)
    - Admin grant/revoke skip the key check: they are administrative, not redemption
"""

import hmac
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from app.core.domain_types import UpdateOutcome
from app.core.errors import (
    AuthorizedEmailNotFoundError, ConcurrencyError, EmailAlreadyAuthorizedError,
    ErrorContext, FeatureDisabledError, LicenseNotFoundError,
)
from app.core.license_rules import validate_code, validate_email
from app.core.repository_protocols import Mutation, RecordStore

logger = logging.getLogger(__name__)

UNIVERSAL_LICENSE_DOC = "main"

T = TypeVar("T")


@dataclass(frozen=True)
class ActivationResult:
    email: str
    already_authorized: bool

    @property
    def message(self) -> str:
        if self.already_authorized:
            return "Email already authorized"
        return "Universal license activated"


class UniversalLicenseService:
    def __init__(
        self,
        store: RecordStore,
        license_key: str | None,
        max_attempts: int = 5,
    ):
        self._store = store
        self._license_key = license_key or None
        self._max_attempts = max_attempts

    async def activate(self, code: object, email: object) -> ActivationResult:
        code = validate_code(code)
        if self._license_key is None:
            raise FeatureDisabledError("Universal license")
        if not hmac.compare_digest(code.encode(), self._license_key.encode()):
            raise LicenseNotFoundError()
        email = validate_email(email)
        return await self._retrying("activate", lambda: self._try_add(email))

    async def grant(self, email: object) -> ActivationResult:
        """Admin add. Raises EmailAlreadyAuthorizedError for a duplicate."""
        email = validate_email(email)
        result = await self._retrying("grant", lambda: self._try_add(email))
        if result.already_authorized:
            raise EmailAlreadyAuthorizedError(email)
        return result

    async def revoke(self, email: object) -> str:
        """Admin remove. Raises AuthorizedEmailNotFoundError if absent."""
        email = validate_email(email)
        return await self._retrying("revoke", lambda: self._try_remove(email))

    async def authorized_emails(self) -> list[str]:
        doc = await self._store.get(UNIVERSAL_LICENSE_DOC)
        return list(doc["authorized_emails"]) if doc else []

    async def _retrying(
        self, operation: str, attempt_once: Callable[[], Awaitable[T | None]],
    ) -> T:
        for attempt in range(1, self._max_attempts + 1):
            result = await attempt_once()
            if result is not None:
                return result
            logger.info(
                f"Universal license {operation} conflict, retrying",
                extra={"attempt": attempt},
            )

        raise ConcurrencyError(
            "Universal license is being modified concurrently",
            ErrorContext(attempt=self._max_attempts),
        )

    async def _try_add(self, email: str) -> ActivationResult | None:
        """One read + compare-and-set. None means the write lost a race."""
        doc = await self._store.get(UNIVERSAL_LICENSE_DOC)
        if doc is None:
            created = await self._store.create(
                UNIVERSAL_LICENSE_DOC,
                {"authorized_emails": [email], "version": 1},
            )
            if not created:
                return None
            logger.info("Universal license created with first email")
            return ActivationResult(email=email, already_authorized=False)

        emails = list(doc.get("authorized_emails") or [])
        if email in emails:
            return ActivationResult(email=email, already_authorized=True)

        if not await self._replace_emails(doc, emails + [email]):
            return None
        logger.info("Email added to universal license")
        return ActivationResult(email=email, already_authorized=False)

    async def _try_remove(self, email: str) -> str | None:
        doc = await self._store.get(UNIVERSAL_LICENSE_DOC)
        emails = list(doc.get("authorized_emails") or []) if doc else []
        if email not in emails:
            raise AuthorizedEmailNotFoundError(email)

        if not await self._replace_emails(doc, [e for e in emails if e != email]):
            return None
        logger.info("Email removed from universal license")
        return email

    async def _replace_emails(self, doc: dict, emails: list[str]) -> bool:
        version = doc.get("version", 1)
        outcome = await self._store.conditional_update(
            UNIVERSAL_LICENSE_DOC,
            {"version": version},
            Mutation(set_fields={
                "authorized_emails": emails,
                "version": version + 1,
            }),
        )
        return outcome == UpdateOutcome.COMMITTED
