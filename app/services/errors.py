"""
Domain errors raised by the service layer
"""

from typing import Any, Optional
from fastapi import status

class ServiceError(Exception):
    """Base class for failures that map onto an API error envelope"""
    kind = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

class Forbidden(ServiceError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"

class Unauthorized(ServiceError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"

class NotFound(ServiceError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"

class InvalidArgument(ServiceError):
    kind = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid argument"

class InvalidState(ServiceError):
    kind = "invalid_state"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"

class Conflict(ServiceError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"
