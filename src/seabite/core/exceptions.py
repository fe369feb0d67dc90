from typing import Optional, Dict, Any, List
import traceback
import sys


class BaseAPIException(Exception):
    def __init__(self,
        message: str,
        status_code: int = 500,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        internal_message: Optional[str] = None):
        self.message = message  # User-facing message
        self.internal_message = internal_message or message  # Internal/debug message
        self.status_code = status_code
        self.error_code = error_code or self.__class__.__name__.replace('Error', '').upper()
        self.details = details or {}

        # Capture stack trace for debugging
        self.traceback = traceback.format_exc() if sys.exc_info()[0] else None

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response"""
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(BaseAPIException):
    """Raised when request validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[List[Dict[str, str]]] = None
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, 400, "VALIDATION_ERROR", details)


class NotFoundError(BaseAPIException):
    """Raised when a requested resource is not found"""

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        message = f"{resource} not found"
        if resource_id:
            message += f" with ID: {resource_id}"
        super().__init__(message, 404, "NOT_FOUND")


class UnauthorizedError(BaseAPIException):
    """Raised when the caller does not identify its storage profile"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401, "UNAUTHORIZED")


class CartParseError(BaseAPIException):
    """
    Raised when the persisted cart cannot be decoded.

    Recoverable: the synchronizer catches it, falls back to an empty cart
    and hands it to the caller for logging.
    """

    def __init__(self, message: str = "Persisted cart is malformed", raw_value: Optional[str] = None):
        details = {"raw_length": len(raw_value)} if raw_value is not None else {}
        super().__init__(message, 422, "CART_PARSE_ERROR", details)
        self.raw_value = raw_value


class ExternalServiceError(BaseAPIException):
    """Raised when external service calls fail"""

    def __init__(self, service_name: str, message: str = "External service unavailable"):
        details = {"service": service_name}
        super().__init__(message, 503, "EXTERNAL_SERVICE_ERROR", details)


class StorageError(BaseAPIException):
    """Raised when the key/value backend cannot be read or written"""

    def __init__(self, message: str = "Storage operation failed", operation: Optional[str] = None):
        # Don't expose backend details to users
        user_message = "An internal error occurred. Please try again later."
        details = {"operation": operation} if operation else {}
        super().__init__(
            user_message,
            500,
            "STORAGE_ERROR",
            details,
            internal_message=message  # Keep original message for logging
        )
