"""
Domain errors raised by the service layer.
Each error carries the HTTP status code used by the exception handler in main.py.
"""
from typing import Dict, List, Optional


class ServiceError(Exception):
    """Base class for errors the API reports to clients as-is."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error, "detail": self.message}


class ValidationError(ServiceError):
    """Malformed or missing input. errors maps a field name to its messages."""

    status_code = 400
    error = "Validation error"

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class UnauthorizedError(ServiceError):
    status_code = 401
    error = "Unauthorized"


class ForbiddenError(ServiceError):
    status_code = 403
    error = "Forbidden"


class NotFoundError(ServiceError):
    status_code = 404
    error = "Not found"


class ConflictError(ServiceError):
    """The request would break an invariant, e.g. deleting the main gallery."""

    status_code = 409
    error = "Conflict"
