"""
Domain error hierarchy.

Services raise these; exception_handlers maps them onto HTTP responses.
UpstreamUnavailable wraps AI provider failures; callers catch it, so it is never rendered to a client.
"""
from datetime import datetime
from typing import Any, Optional


class TasteTrailError(Exception):
    """Base exception for all Taste Trail errors."""

    status_code = 500

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class AuthenticationRequired(TasteTrailError):
    status_code = 401

    def __init__(self, message: str = "Authentication required", details=None):
        super().__init__(message, details)


class PermissionDenied(TasteTrailError):
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions", details=None):
        super().__init__(message, details)


class UserBanned(PermissionDenied):
    def __init__(self, reason: str, ban_type: str, expires_at: Optional[datetime]):
        self.reason = reason
        self.ban_type = ban_type
        self.expires_at = expires_at
        message = "Account permanently banned" if expires_at is None else "Account temporarily suspended"
        super().__init__(
            message,
            {
                "ban": {
                    "reason": reason,
                    "type": ban_type,
                    "expiresAt": expires_at.isoformat() if expires_at else None,
                }
            },
        )


class NotFound(TasteTrailError):
    status_code = 404

    def __init__(self, resource: str = "Resource", details=None):
        self.resource = resource
        super().__init__(f"{resource} not found", details)


class Conflict(TasteTrailError):
    status_code = 409


class ValidationFailed(TasteTrailError):
    status_code = 400


class UpstreamUnavailable(TasteTrailError):
    status_code = 503

    def __init__(self, service: str, message: str, details=None):
        self.service = service
        super().__init__(f"[{service}] {message}", details)
