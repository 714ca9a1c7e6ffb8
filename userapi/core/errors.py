"""Error Hierarchy — the three-tier taxonomy shared by repository, service and routes.

Invariants:
    - Storage-level errors (RepositoryError family) never carry an HTTP status;
      they are translated by the service or surface as a generic 500
    - Service-level errors (UserApiError family) carry code, category,
      severity and http_status; the global handler renders them verbatim
    - Driver errors and timeouts are not wrapped anywhere: they propagate as-is
    - No internal details leaked in user-facing messages

Design Decisions:
    - Two disjoint base classes: storage errors never render as 4xx
    - ErrorContext as dataclass: observability fields without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


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
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to service errors for logs and responses."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    user_id: str | None = None
    field: str | None = None


# ─── Storage Errors ──────────────────────────────────────────────

class RepositoryError(Exception):
    """Base class for errors the repository recognises from the driver."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(RepositoryError):
    """The statement matched no rows."""

    def __init__(self, entity: str, key: str):
        super().__init__(f"{entity} '{key}' not found")
        self.entity = entity
        self.key = key


class DuplicateKeyError(RepositoryError):
    """A unique constraint rejected the write."""

    def __init__(self, entity: str, field: str):
        super().__init__(f"{entity} with this {field} already exists")
        self.entity = entity
        self.field = field


# ─── Service Errors ──────────────────────────────────────────────

class UserApiError(Exception):
    """Base exception for all errors the API renders to clients."""

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
        body = {
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.field:
            body["field"] = self.context.field
        return {"error": body}


class InvalidInputError(UserApiError):
    """Request data failed a business validation rule."""
    def __init__(self, message: str, field: str | None = None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = field
        super().__init__(
            message, "INVALID_INPUT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.field = field


class UserNotFoundError(UserApiError):
    """No user exists with the requested id."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        super().__init__(
            "User not found", "USER_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.user_id = user_id


class DuplicateEmailError(UserApiError):
    """Another user already registered this email."""
    def __init__(self, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.field = "email"
        super().__init__(
            "Email already exists", "DUPLICATE_EMAIL", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


class DuplicateUserIdError(UserApiError):
    """The client supplied an id that is already taken."""
    def __init__(self, user_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.user_id = user_id
        ctx.field = "id"
        super().__init__(
            "User id already exists", "DUPLICATE_USER_ID", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )
        self.user_id = user_id
