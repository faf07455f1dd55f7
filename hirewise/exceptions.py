"""
Domain exceptions and the HTTP status each one maps to.
"""

from typing import Any, Optional


class HireWiseError(Exception):
    """Base class for errors raised by HireWise services."""

    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidRequestError(HireWiseError):
    """Request is well-formed JSON but semantically invalid."""
    status_code = 400


class UnauthorizedError(HireWiseError):
    status_code = 401


class PermissionDeniedError(HireWiseError):
    status_code = 403


class NotFoundError(HireWiseError):
    status_code = 404


class DuplicateApplicationError(InvalidRequestError):
    """Candidate already applied to this job."""


class JobClosedError(InvalidRequestError):
    """Job is closed (or not published) and cannot take this change."""


class InvalidStatusTransitionError(InvalidRequestError):
    pass


class ResumeNotFoundError(InvalidRequestError):
    """No usable resume for an application."""


class UnsupportedFileError(InvalidRequestError):
    pass


class AIServiceError(HireWiseError):
    """LLM provider failed or is not configured."""


class AIUnavailableError(AIServiceError):
    pass


class AIResponseError(AIServiceError):
    """LLM answered, but not in the shape we asked for."""
