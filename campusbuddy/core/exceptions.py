"""
Custom Exceptions for CampusBuddy
=================================

Every error raised by services and dependencies derives from CampusBuddyError
and carries the HTTP status it maps to. The API layer turns them into the
standard envelope; the realtime gateway turns them into `error` events.

Usage:
    from campusbuddy.core.exceptions import ResourceNotFoundError

    if message is None:
        raise ResourceNotFoundError("Message", message_id)
"""

from typing import Optional, Any, Dict


class CampusBuddyError(Exception):
    """Base exception for all CampusBuddy errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(CampusBuddyError):
    """Bearer token missing or rejected by the identity verifier"""

    status_code = 401
    reason = "unknown"

    def __init__(self, message: str = "Authentication failed", reason: Optional[str] = None):
        super().__init__(message, code="AUTH_FAILED")
        if reason:
            self.reason = reason
        self.details["reason"] = self.reason


class TokenMissingError(AuthenticationError):
    reason = "missing"

    def __init__(self):
        super().__init__("Access token required")
        self.code = "TOKEN_MISSING"


class TokenExpiredError(AuthenticationError):
    reason = "expired"

    def __init__(self):
        super().__init__("Token expired")
        self.code = "TOKEN_EXPIRED"


class TokenRevokedError(AuthenticationError):
    reason = "revoked"

    def __init__(self):
        super().__init__("Token revoked")
        self.code = "TOKEN_REVOKED"


class MalformedTokenError(AuthenticationError):
    reason = "malformed"

    def __init__(self):
        super().__init__("Invalid token format")
        self.code = "INVALID_TOKEN"


class AuthorizationError(CampusBuddyError):
    """Caller lacks the role or ownership for this action"""

    status_code = 403

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(CampusBuddyError):
    status_code = 404

    def __init__(self, resource_type: str, resource_id: str = ""):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(CampusBuddyError):
    """Input validation failed"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details)


# ============================================
# Dependency Errors (503-type)
# ============================================

class DependencyUnavailableError(CampusBuddyError):
    """Document store unreachable on a path that cannot degrade"""

    status_code = 503

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(message, code="DEPENDENCY_UNAVAILABLE")


def error_response(error: CampusBuddyError) -> Dict[str, Any]:
    """Convert exception to the API envelope"""
    return {
        "success": False,
        "error": error.message
    }
