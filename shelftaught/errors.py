"""
Error types raised by the gateway and the search controller
"""

from typing import Optional


class GatewayError(Exception):
    """An upstream call failed and was not degraded to fallback data"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationExpired(GatewayError):
    """The backend answered 401; the session has already been cleared"""

    def __init__(self, message: str = "Authentication required", redirect_to: str = "/login"):
        super().__init__(message, status_code=401)
        self.redirect_to = redirect_to


class ValidationFailed(ValueError):
    """Client-side validation rejected input before any network call"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field
