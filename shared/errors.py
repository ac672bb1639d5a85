"""
Exceptions raised by services and upload helpers and mapped to HTTP
responses by the route handlers.
"""

from typing import Optional


class NotFoundError(Exception):
    """Raised when a resource is not found."""
    pass


class ValidationError(Exception):
    """Raised when request input is missing or malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def as_error_list(self) -> list:
        return [{"field": self.field, "message": str(self)}] if self.field else []


class PayloadTooLargeError(Exception):
    """Raised when a request body exceeds the configured upload limit."""
    pass
