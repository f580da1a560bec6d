"""
SchoolFees Exception Hierarchy
Provides structured error handling across the application
"""
from typing import Optional, Dict, Any


class SchoolFeesException(Exception):
    """
    Base exception for all SchoolFees errors.

    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details
            }
        }


# ============================================================================
# Configuration Exceptions
# ============================================================================

class ConfigurationError(SchoolFeesException):
    """Base exception for missing or invalid server configuration"""

    def __init__(
        self,
        message: str = "Server configuration error.",
        code: str = "CONFIGURATION_ERROR",
        missing: Optional[list[str]] = None
    ):
        super().__init__(message, code)
        # Kept off to_dict(): variable names are for server logs only
        self.missing = missing or []


class ServerConfigurationError(ConfigurationError):
    """Raised when the superadmin settings are not all present"""

    def __init__(self, missing: Optional[list[str]] = None):
        super().__init__(
            message="Server configuration error.",
            code="SERVER_CONFIGURATION_ERROR",
            missing=missing,
        )


# ============================================================================
# Authentication Exceptions
# ============================================================================

class AuthenticationError(SchoolFeesException):
    """Base exception for authentication errors"""

    def __init__(
        self,
        message: str = "Authentication required",
        code: str = "AUTH_ERROR"
    ):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when the superadmin username/password pair does not match"""

    def __init__(self, message: str = "Invalid credentials."):
        super().__init__(message, "INVALID_CREDENTIALS")


class AuthNetworkError(AuthenticationError):
    """Raised when a status, login or logout call cannot reach the server"""

    def __init__(self, operation: str, message: str = "Network error."):
        super().__init__(message, "NETWORK_ERROR")
        self.operation = operation
        self.details["operation"] = operation


class IdentityProviderError(AuthenticationError):
    """Raised when the identity provider rejects a session operation"""

    def __init__(self, message: str = "Identity provider error"):
        super().__init__(message, "IDENTITY_PROVIDER_ERROR")


# ============================================================================
# Tenant Exceptions
# ============================================================================

class TenantResolutionError(SchoolFeesException):
    """Raised when a school_administrators or schools lookup fails"""

    def __init__(self, reason: str, user_id: Optional[str] = None, school_id: Optional[str] = None):
        super().__init__(
            message="Failed to load school information for your account.",
            code="TENANT_RESOLUTION_ERROR",
            details={"user_id": user_id, "school_id": school_id, "reason": reason}
        )
        self.user_id = user_id
        self.school_id = school_id
        self.reason = reason

