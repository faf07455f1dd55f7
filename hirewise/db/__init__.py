"""Relational storage."""

from .tables import (
    Base,
    CompanyRecord,
    JobApplicationRecord,
    JobPostingRecord,
    JSONType,
    ResumeRecord,
    UserRecord,
)
from .session import create_session_factory

__all__ = [
    "Base",
    "CompanyRecord",
    "JobApplicationRecord",
    "JobPostingRecord",
    "JSONType",
    "ResumeRecord",
    "UserRecord",
    "create_session_factory",
]
