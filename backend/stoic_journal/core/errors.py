"""Error Hierarchy: typed, categorized exceptions for every Stoic Journal failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope used by every route
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with StoicJournalError base: one FastAPI handler catches all
    - ErrorContext as dataclass: carries user/track/payment ids for log records
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
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    PAYMENT = "payment"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    track: str | None = None
    day: int | None = None
    payment_id: str | None = None
    debug_info: dict[str, Any] | None = None


class StoicJournalError(Exception):
    """Base exception for all Stoic Journal errors."""

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

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ValidationError(StoicJournalError):
    """Request data failed a domain validation rule."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class InvalidTrackError(StoicJournalError):
    """Track name is not one of the known programs."""
    def __init__(self, track_name: object, context: ErrorContext | None = None):
        super().__init__(
            "Invalid track name", "INVALID_TRACK", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.track_name = track_name


class ProgressionError(StoicJournalError):
    """Profile state machine refused a transition."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class PaymentError(StoicJournalError):
    """Processor transaction does not justify an entitlement."""
    def __init__(self, message: str, code: str, context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.PAYMENT,
            ErrorSeverity.ERROR, context, 400,
        )


class AuthenticationError(StoicJournalError):
    """Bearer token missing, malformed, or rejected by the identity provider."""
    def __init__(
        self, message: str = "Authentication required", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "AUTHENTICATION_REQUIRED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class AdminAuthorizationError(StoicJournalError):
    """Admin token missing or wrong."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Admin credentials required", "ADMIN_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class EmailAlreadyRegisteredError(StoicJournalError):
    """Signup attempted with an email the identity provider already knows."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Account already exists with this email address. Please try logging in instead.",
            "EMAIL_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 422,
        )


class ResourceNotFoundError(StoicJournalError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(StoicJournalError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


class PaymentProcessorError(StoicJournalError):
    """Payment processor call failed after retries."""
    def __init__(
        self, message: str, api_error_type: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Payment processor error ({api_error_type}): {message}",
            "PAYMENT_PROCESSOR_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.api_error_type = api_error_type


class IdentityProviderError(StoicJournalError):
    """Identity provider call failed for reasons other than a bad token."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Identity provider error: {message}",
            "IDENTITY_PROVIDER_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 503,
        )


class ConfigurationError(StoicJournalError):
    """A required setting is missing at request time."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "NOT_CONFIGURED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
