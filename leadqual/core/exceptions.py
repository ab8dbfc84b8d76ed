"""
Custom exceptions for the Lead Qualification API.
Each exception carries the HTTP status it renders as; the handlers in
main.py turn them into {"error": ..., "details": ...} bodies.
"""
import logging
from typing import Any, List, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LeadQualException(Exception):
    """Base exception for the API"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class NotFoundError(LeadQualException):
    """Resource not found"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class UnauthorizedError(LeadQualException):
    """Authentication failed"""
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class TenantNotFoundError(LeadQualException):
    """Authenticated session has no tenant profile"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "User profile not found"):
        super().__init__(message)


class PartialAccessDeniedError(LeadQualException):
    """Some requested leads are missing or belong to another tenant"""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, requested: int = 0, found: int = 0):
        self.requested = requested
        self.found = found
        super().__init__("Some leads not found or access denied")


class InvalidActionError(LeadQualException):
    """Unknown action discriminator"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, action: Any = None):
        self.action = action
        super().__init__('Invalid action. Must be "enrich" or "score"')


class ValidationError(LeadQualException):
    """Validation failed; details lists every offending field"""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Invalid request data", details: Optional[List[dict]] = None):
        self.details = details or []
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class PersistenceError(LeadQualException):
    """Writing a single lead failed"""

    def __init__(self, lead_id: Any = None, message: str = None):
        self.lead_id = lead_id
        msg = "Failed to persist lead"
        if lead_id:
            msg = f"Failed to persist lead '{lead_id}'"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


async def lead_qual_exception_handler(request: Request, exc: LeadQualException) -> JSONResponse:
    """Render a LeadQualException as JSON."""
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def database_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Database failures outside the per-lead loop surface as 500."""
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
