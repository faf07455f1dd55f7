"""Data models for the application."""

from .candidate import CandidateProfile, Education, Experience, PersonalInfo, Skill, SkillLevel
from .job import (
    JOB_STATUS_TRANSITIONS,
    ApplicationStatus,
    JobApplication,
    JobMatch,
    JobPosting,
    JobStatus,
    JobType,
)
from .document import (
    DOCX_MIMETYPE,
    CoverLetterContent,
    DocumentType,
    ExportRequest,
    GeneratedDocument,
    JobInfo,
)

__all__ = [
    "CandidateProfile",
    "Education",
    "Experience",
    "PersonalInfo",
    "Skill",
    "SkillLevel",
    "JOB_STATUS_TRANSITIONS",
    "ApplicationStatus",
    "JobApplication",
    "JobMatch",
    "JobPosting",
    "JobStatus",
    "JobType",
    "DOCX_MIMETYPE",
    "CoverLetterContent",
    "DocumentType",
    "ExportRequest",
    "GeneratedDocument",
    "JobInfo",
]
