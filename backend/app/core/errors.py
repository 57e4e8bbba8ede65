"""Error Hierarchy — typed, categorized exceptions for all Digipod failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are never retried by the server
    - Store errors (500-level) leave no partial state, so the whole call may be retried
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with DigipodError base: FastAPI global handler catches all (ADR: uniform error shape)
    - AlreadyUsed and ConcurrentModification are distinct classes even though both are 409:
      the first is permanent, the second is transient and safe to retry
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    resource_id: str | None = None
    attempt: int | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class DigipodError(Exception):
    """Base exception for all Digipod errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def retryable(self) -> bool:
        return False

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "retryable": self.retryable,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "resource_id": self.context.resource_id,
                    "attempt": self.context.attempt,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class InvalidInputError(DigipodError):
    """Malformed caller input (e.g. empty license code)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class ResourceNotFoundError(DigipodError):
    """Requested resource does not exist."""
    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        context: ErrorContext | None = None,
        message: str | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.resource_id = resource_id
        super().__init__(
            message or f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class LicenseNotFoundError(ResourceNotFoundError):
    """License code is unknown. The code itself is never echoed back."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "LicenseCode", "<redacted>", context, message="Invalid license key",
        )
        self.code = "LICENSE_NOT_FOUND"


class ProjectNotFoundError(ResourceNotFoundError):
    def __init__(self, project_id: str, context: ErrorContext | None = None):
        super().__init__("Project", project_id, context)
        self.code = "PROJECT_NOT_FOUND"


class AuthorizedEmailNotFoundError(ResourceNotFoundError):
    def __init__(self, email: str, context: ErrorContext | None = None):
        super().__init__(
            "AuthorizedEmail", email, context,
            message="Email not found in universal license",
        )
        self.code = "AUTHORIZED_EMAIL_NOT_FOUND"


class LicenseAlreadyUsedError(DigipodError):
    """Single-use code was consumed, before this call or by a concurrent one."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "License key already used",
            "LICENSE_ALREADY_USED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 409,
        )


class EmailAlreadyAuthorizedError(DigipodError):
    """Admin grant for an email the universal license already covers."""
    def __init__(self, email: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.resource_id = email
        super().__init__(
            "Email already authorized",
            "EMAIL_ALREADY_AUTHORIZED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 409,
        )


class ConcurrencyError(DigipodError):
    """Concurrent modification detected. Re-read and retry."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENT_MODIFICATION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )

    @property
    def retryable(self) -> bool:
        return True


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreUnavailableError(DigipodError):
    """Record store operation failed (timeout, connectivity, driver)."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Record store {operation} failed: {message}",
            "STORE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation

    @property
    def retryable(self) -> bool:
        return True


class CorruptRecordError(StoreUnavailableError):
    """Stored document holds a value outside its declared domain."""
    def __init__(
        self, field_name: str, value: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"invalid stored value for '{field_name}': {value!r}", "read", context,
        )
        self.code = "CORRUPT_RECORD"
        self.field_name = field_name

    @property
    def retryable(self) -> bool:
        return False


class FeatureDisabledError(DigipodError):
    """Feature requires configuration that is not set."""
    def __init__(self, feature: str, context: ErrorContext | None = None):
        super().__init__(
            f"{feature} is not configured",
            "FEATURE_DISABLED", ErrorCategory.CONFIGURATION,
            ErrorSeverity.ERROR, context, 503,
        )
        self.feature = feature
