"""
Custom exception classes for better error handling
"""
from typing import Optional, Dict, Any


class ComiteException(Exception):
    """Base exception for all custom exceptions"""
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class DocumentStoreException(ComiteException):
    """Raised when document store operations fail"""
    pass


class StorageException(ComiteException):
    """Raised when object storage operations (URL signing) fail"""
    pass


class ConfigurationException(ComiteException):
    """Raised when a required setting is missing"""
    pass


class ValidationException(ComiteException):
    """Raised when input validation fails"""
    status_code = 400


class AuthenticationException(ComiteException):
    """Raised when authentication fails"""
    status_code = 401


class AuthorizationException(ComiteException):
    """Raised when user is not authorized"""
    status_code = 403


class ResourceNotFoundException(ComiteException):
    """Raised when a requested resource is not found"""
    status_code = 404


class MethodNotAllowedException(ComiteException):
    """Raised when an endpoint is called with an unsupported method"""
    status_code = 405


class RateLimitException(ComiteException):
    """Raised when a client exceeds its request window"""
    status_code = 429

    def __init__(self, message: str, retry_after: int, details: Optional[Dict[str, Any]] = None):
        self.retry_after = retry_after
        super().__init__(message, details)
