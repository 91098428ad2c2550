"""Custom exceptions for the Minbar content backend"""

from typing import Optional


class MinbarError(Exception):
    """Base exception for Minbar"""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        if status_code is not None:
            self.status_code = status_code
        self.message = message
        super().__init__(message)


class ValidationError(MinbarError):
    """Missing or empty required field"""

    status_code = 400


class PayloadTooLargeError(ValidationError):
    """Uploaded file exceeds the configured byte ceiling"""

    status_code = 413


class AuthenticationError(MinbarError):
    """No credential, or a credential that does not match"""

    status_code = 401


class ForbiddenError(MinbarError):
    """Authenticated, but not allowed to do this"""

    status_code = 403


class NotFoundError(MinbarError):
    """Unknown identifier"""

    status_code = 404


class ConflictError(MinbarError):
    """Unique constraint violated (e.g. duplicate username)"""

    status_code = 409


class UpstreamError(MinbarError):
    """Media host or feed source unreachable or failing"""

    status_code = 502


class StorageError(MinbarError):
    """Persistence layer failure"""
    pass


class ConfigError(MinbarError):
    """Configuration error"""
    pass
