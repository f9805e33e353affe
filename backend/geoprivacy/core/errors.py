"""Error Hierarchy: typed, categorized errors for all location pipeline failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation errors are raised into a Failure before any store call
    - StoreError keeps the original collaborator exception as `cause`
    - to_response() never includes coordinates

Design Decisions:
    - Single hierarchy with GeoPrivacyError base: callers match on one type
    - Errors are values inside Failure, not raised across the pipeline boundary
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from geoprivacy.core.domain_types import ItemId, PrivacyLevel, ValidationReason


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
    EXTERNAL_STORE = "external_store"
    TIMEOUT = "timeout"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    item_id: ItemId | None = None
    privacy_level: PrivacyLevel | None = None
    debug_info: dict[str, Any] | None = None


class GeoPrivacyError(Exception):
    """Base exception for all location pipeline errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to a JSON-safe error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "item_id": (
                        str(self.context.item_id)
                        if self.context.item_id is not None else None
                    ),
                    "privacy_level": (
                        self.context.privacy_level.value
                        if self.context.privacy_level is not None else None
                    ),
                },
            }
        }


# ─── Validation Errors ──────────────────────────────────────────

class InvalidLocationError(GeoPrivacyError):
    """Incoming location failed local validation."""
    def __init__(
        self,
        reason: ValidationReason,
        message: str,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INVALID_LOCATION", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )
        self.reason = reason


class InvalidSearchError(GeoPrivacyError):
    """Nearby search parameters are outside their domain."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_SEARCH", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context,
        )


class LocationNotFoundError(GeoPrivacyError):
    """Store holds no location for the requested item."""
    def __init__(self, item_id: ItemId, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.item_id = item_id
        super().__init__(
            f"No location stored for item '{item_id}'",
            "LOCATION_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx,
        )


# ─── Collaborator Errors ────────────────────────────────────────

class StoreError(GeoPrivacyError):
    """Location store call failed. Opaque to the pipeline, never retried by it."""
    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        context: ErrorContext | None = None,
    ):
        category = (
            ErrorCategory.TIMEOUT if message == "timeout"
            else ErrorCategory.EXTERNAL_STORE
        )
        super().__init__(
            message, "STORE_ERROR", category, ErrorSeverity.CRITICAL, context,
        )
        self.cause = cause

    @classmethod
    def wrap(cls, exc: Exception) -> "StoreError":
        """Wrap an arbitrary collaborator exception, keeping it as cause."""
        message = str(exc) or type(exc).__name__
        return cls(message, cause=exc)
