"""Error Hierarchy — typed, categorized exceptions for all EZWallet failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are recoverable and leave the store untouched;
      infrastructure errors (500-level) are critical
    - Session verification failures are all 401 (Unauthorized status class)
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with EZWalletError base: FastAPI global handler catches all
    - Pure core functions never raise these — they return rejection dicts which
      error_from_rejection() converts at the shell boundary
    - Not-found and conflict are 400 (ClientError), matching the public API contract;
      only concurrent-modification conflicts get 409
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone

from ezwallet.core.domain_types import AuthCause, StatusClass


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """When the error was raised; rendered by to_response()."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EZWalletError(Exception):
    """Base exception for all EZWallet errors."""

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
    def status_class(self) -> StatusClass:
        return StatusClass.from_http_status(self.http_status)

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "status_class": self.status_class.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class ValidationError(EZWalletError):
    """Malformed, missing or empty input. Nothing was changed."""
    def __init__(
        self, message: str, field: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.field = field


class NotFoundError(EZWalletError):
    """Referenced entity is absent."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, context, 400,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(EZWalletError):
    """Invariant violation: duplicate name, would-be-empty group, last category."""
    def __init__(
        self, message: str, code: str = "CONFLICT", context: ErrorContext | None = None,
    ):
        super().__init__(
            message, code, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 400,
        )


# ─── Session Errors (401) ───────────────────────────────────────

class SessionError(EZWalletError):
    """Base for session verification failures; callers treat as unauthenticated."""
    def __init__(
        self,
        cause: AuthCause,
        category: ErrorCategory = ErrorCategory.AUTHENTICATION,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            cause.message, cause.name, category,
            ErrorSeverity.WARNING, context, 401,
        )
        self.cause = cause


class AuthDecodeError(SessionError):
    """Token missing, malformed, badly signed or missing claims."""


class MismatchedIdentityError(SessionError):
    """Access and refresh tokens describe different identities."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(AuthCause.MISMATCHED_IDENTITY, context=context)


class ReauthenticationRequiredError(SessionError):
    """Refresh token expired: the caller must log in again."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(AuthCause.REAUTHENTICATION_REQUIRED, context=context)


class CapabilityDeniedError(SessionError):
    """Authenticated, but the identity does not satisfy the requirement."""
    def __init__(self, cause: AuthCause, context: ErrorContext | None = None):
        super().__init__(cause, ErrorCategory.AUTHORIZATION, context)


# ─── Infrastructure Errors ──────────────────────────────────────

class ConcurrencyError(EZWalletError):
    """Concurrent modification of the same aggregate detected."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONCURRENCY_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class DatabaseError(EZWalletError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation


# ─── Conversions ────────────────────────────────────────────────

_CAPABILITY_CAUSES = {
    AuthCause.USERNAME_MISMATCH, AuthCause.NOT_ADMIN, AuthCause.NOT_IN_GROUP,
}


def error_from_cause(cause: AuthCause) -> SessionError:
    """Map a verifier denial cause to the matching typed error."""
    if cause == AuthCause.MISMATCHED_IDENTITY:
        return MismatchedIdentityError()
    if cause == AuthCause.REAUTHENTICATION_REQUIRED:
        return ReauthenticationRequiredError()
    if cause in _CAPABILITY_CAUSES:
        return CapabilityDeniedError(cause)
    return AuthDecodeError(cause)


def error_from_rejection(rejection: dict) -> EZWalletError:
    """Convert a rejection dict returned by a pure core check into a typed error."""
    category = rejection.get("category")
    message = rejection["message"]
    if category == ErrorCategory.VALIDATION.value:
        return ValidationError(message, field=rejection.get("field"))
    if category == ErrorCategory.RESOURCE_NOT_FOUND.value:
        return NotFoundError(rejection["resource_type"], rejection["resource_id"])
    if category == ErrorCategory.CONFLICT.value:
        return ConflictError(message, code=rejection["error_code"])
    return EZWalletError(
        message, rejection.get("error_code", "INTERNAL_ERROR"), ErrorCategory.INTERNAL,
    )
