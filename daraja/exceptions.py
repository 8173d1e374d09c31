"""
Custom exceptions for M-Pesa Daraja operations.

Gateway-level failures (non-2xx responses) are not exceptions; they come back
as ``daraja.results.Failure`` values so callers can branch on the gateway's
own result codes.
"""


class DarajaException(Exception):
    """Base exception for all Daraja-related errors."""

    def __init__(self, message, error_code=None, response_data=None):
        self.message = message
        self.error_code = error_code
        self.response_data = response_data
        super().__init__(self.message)


class ValidationError(DarajaException):
    """Raised when caller input or a configured URL fails validation."""

    def __init__(self, message, field=None, **kwargs):
        self.field = field
        super().__init__(message, **kwargs)


class CryptoError(DarajaException):
    """Raised when the certificate cannot be used or encryption fails."""
    pass


class AuthenticationError(DarajaException):
    """Raised when the token endpoint rejects the consumer credentials."""
    pass


AuthError = AuthenticationError


class APIError(DarajaException):
    """Raised when the request could not be delivered (connection, timeout)."""
    pass


class ConfigurationError(DarajaException):
    """Raised when there's a configuration issue."""
    pass
