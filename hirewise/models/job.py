"""Job posting and application related data models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, field_validator

from .candidate import ContentModel


class JobType(str, Enum):
    """Employment types."""
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"

    @property
    def display(self) -> str:
        """'FULL_TIME' -> 'full-time'."""
        return self.value.replace('_', '-').lower()


class JobStatus(str, Enum):
    """Job posting lifecycle."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CLOSED = "CLOSED"


# Allowed lifecycle moves; CLOSED is terminal without an admin override
JOB_STATUS_TRANSITIONS = {
    JobStatus.DRAFT: {JobStatus.PUBLISHED, JobStatus.CLOSED},
    JobStatus.PUBLISHED: {JobStatus.DRAFT, JobStatus.CLOSED},
    JobStatus.CLOSED: set(),
}


class ApplicationStatus(str, Enum):
    """Application review states set by the hiring company."""
    NEW = "NEW"
    SHORTLISTED = "SHORTLISTED"
    WAITLIST = "WAITLIST"
    REJECTED = "REJECTED"
    HIRED = "HIRED"


class JobPosting(ContentModel):
    """Represents a job posting."""
    id: Optional[str] = None
    title: str = ""
    description: str = ""
    required_skills: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("required_skills", "requiredSkills", "requirements"),
    )
    location: Optional[str] = None
    job_type: JobType = Field(
        default=JobType.FULL_TIME,
        validation_alias=AliasChoices("job_type", "jobType", "type"),
    )
    salary_range: Optional[str] = None
    company_id: Optional[str] = None
    company_name: Optional[str] = None
    status: JobStatus = JobStatus.DRAFT
    created_at: Optional[datetime] = None

    @field_validator("required_skills", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("job_type", "status", mode="before")
    @classmethod
    def _normalize_enum_text(cls, value):
        # 'full-time' -> 'FULL_TIME', 'published' -> 'PUBLISHED'
        if isinstance(value, str):
            return value.strip().upper().replace("-", "_")
        return value

    def to_response(self) -> Dict[str, Any]:
        """Shape used by the job listing endpoints."""
        company = self.company_name or "Unknown Company"
        return {
            "id": self.id,
            "title": self.title,
            "company": company,
            "company_name": company,
            "company_id": self.company_id,
            "location": self.location,
            "salary_range": self.salary_range or "Competitive",
            "type": self.job_type.display,
            "description": self.description,
            "requirements": list(self.required_skills),
            "posted": self.created_at.date().isoformat() if self.created_at else "",
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "status": self.status.value,
        }


class JobApplication(ContentModel):
    """Represents a candidate's application to a job."""
    id: Optional[str] = None
    job_id: str
    applicant_id: str
    resume_url: Optional[str] = None
    cover_letter_url: Optional[str] = None
    status: ApplicationStatus = ApplicationStatus.NEW
    matching_score: Optional[int] = Field(default=None, ge=0, le=100)
    candidate_name: Optional[str] = None
    resume_id: Optional[str] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json')


class JobMatch(ContentModel):
    """A job scored against a candidate profile."""
    job: JobPosting
    match_score: int = Field(ge=0, le=100)
    match_reasons: List[str] = Field(default_factory=list)
    improvement_suggestions: List[str] = Field(default_factory=list)
    can_apply: bool = True

    def to_response(self) -> Dict[str, Any]:
        return {
            **self.job.to_response(),
            "matchScore": self.match_score,
            "matchReasons": self.match_reasons,
            "improvementSuggestions": self.improvement_suggestions,
            "canApply": self.can_apply,
        }
