"""
Job board persistence: companies, users, job postings, applications and
saved resumes.

Every public method opens its own session and returns pydantic models or
plain dicts, never ORM records.
"""

import re
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from hirewise.db import (
    CompanyRecord,
    JobApplicationRecord,
    JobPostingRecord,
    ResumeRecord,
    UserRecord,
)
from hirewise.exceptions import (
    DuplicateApplicationError,
    InvalidRequestError,
    InvalidStatusTransitionError,
    JobClosedError,
    NotFoundError,
    PermissionDeniedError,
    ResumeNotFoundError,
)
from hirewise.models import (
    ApplicationStatus,
    JOB_STATUS_TRANSITIONS,
    JobApplication,
    JobPosting,
    JobStatus,
)
from hirewise.utils.logger import get_logger

logger = get_logger(__name__)

RESUME_URL_TEMPLATE = "/api/resumes/{}"
RESUME_URL_PATTERN = re.compile(r"/api/resumes/([^?]+)")

UNKNOWN_JOB = "Unknown Job"
UNKNOWN_COMPANY = "Unknown Company"

COMPANY_PROFILE_FIELDS = ("website", "industry", "size", "location", "description")

# Job fields a company may edit, with the request keys accepted for each
EDITABLE_JOB_FIELDS = {
    "title": ("title",),
    "description": ("description",),
    "required_skills": ("required_skills", "requiredSkills", "requirements"),
    "location": ("location",),
    "job_type": ("job_type", "jobType", "type"),
    "salary_range": ("salary_range", "salaryRange"),
}


def resume_id_from_url(url: Optional[str]) -> Optional[str]:
    """'/api/resumes/abc?download=true' -> 'abc'."""
    if not url:
        return None
    match = RESUME_URL_PATTERN.search(url)
    return match.group(1) if match else None


def _job_from_record(record: JobPostingRecord) -> JobPosting:
    return JobPosting(
        id=record.id,
        title=record.title,
        description=record.description or "",
        required_skills=record.required_skills or [],
        location=record.location,
        job_type=record.job_type,
        salary_range=record.salary_range,
        company_id=record.company_id,
        company_name=record.company.name if record.company else None,
        status=record.status,
        created_at=record.created_at,
    )


def _application_from_record(record: JobApplicationRecord, **extra) -> JobApplication:
    return JobApplication(
        id=record.id,
        job_id=record.job_id,
        applicant_id=record.applicant_id,
        resume_url=record.resume_url,
        cover_letter_url=record.cover_letter_url,
        status=record.status,
        matching_score=record.matching_score,
        created_at=record.created_at,
        updated_at=record.updated_at,
        **extra,
    )


def _resume_to_dict(record: ResumeRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "content": record.content,
        "feedback": record.feedback,
        "file_url": record.file_url,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }


def _require_full_name(content: Dict[str, Any]):
    if not isinstance(content, dict):
        raise InvalidRequestError("Resume content must be an object")
    personal_info = content.get("personalInfo") or {}
    if not isinstance(personal_info, dict) or not personal_info.get("fullName"):
        raise InvalidRequestError("Personal information is required")


def _parse_enum(enum_cls, value):
    try:
        return enum_cls(value.upper() if isinstance(value, str) else value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidRequestError(f"Invalid status '{value}'. Expected one of: {allowed}")


def _editable_fields(updates: Dict[str, Any]) -> Dict[str, Any]:
    fields = {}
    for name, keys in EDITABLE_JOB_FIELDS.items():
        for key in keys:
            if key in updates:
                fields[name] = updates[key]
                break
    return fields


class JobBoardRepository:
    """CRUD over the job board tables."""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize repository.

        Args:
            session_factory: Factory from ``create_session_factory``
        """
        self.Session = session_factory

    # ------------------------------------------------------------------
    # Companies and users
    # ------------------------------------------------------------------

    def create_company(self, name: str, owner_id: Optional[str] = None, **fields) -> Dict[str, Any]:
        """
        Create a company and return {id, name}.

        Args:
            name: Company name
            owner_id: User who registers the company; becomes a company user
            **fields: Optional profile columns (website, industry, size,
                location, description); other keys are ignored

        Raises:
            InvalidRequestError: Missing name, or the owner already belongs
                to another company
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidRequestError("Company name is required")
        profile = {key: fields[key] for key in COMPANY_PROFILE_FIELDS if fields.get(key)}

        with self.Session() as s:
            company = CompanyRecord(name=name.strip(), **profile)
            s.add(company)
            s.flush()
            if owner_id:
                owner = self._ensure_user(s, owner_id, user_type="company", company_id=company.id)
                if owner.company_id not in (None, company.id):
                    raise InvalidRequestError("User already belongs to another company")
                owner.user_type = "company"
                owner.company_id = company.id
            s.commit()
            logger.info(f"Created company {company.id} ({company.name})")
            return {"id": company.id, "name": company.name}

    def register_user(
        self,
        user_id: str,
        email: str = "",
        user_type: str = "individual",
        company_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create the user row if missing and return it."""
        with self.Session() as s:
            user = self._ensure_user(s, user_id, email, user_type, company_id)
            s.commit()
            return {
                "id": user.id,
                "email": user.email,
                "user_type": user.user_type,
                "company_id": user.company_id,
            }

    def _ensure_user(
        self,
        s,
        user_id: str,
        email: str = "",
        user_type: str = "individual",
        company_id: Optional[str] = None,
    ) -> UserRecord:
        user = s.get(UserRecord, user_id)
        if user is None:
            user = UserRecord(id=user_id, email=email or "", user_type=user_type, company_id=company_id)
            s.add(user)
            s.flush()
            logger.info(f"Created {user_type} user {user_id}")
        return user

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def create_job(self, company_id: str, job: JobPosting) -> JobPosting:
        """
        Post a job for a company.

        Raises:
            NotFoundError: Unknown company
        """
        with self.Session() as s:
            if s.get(CompanyRecord, company_id) is None:
                raise NotFoundError("Company not found")

            record = JobPostingRecord(
                title=job.title,
                description=job.description,
                required_skills=list(job.required_skills),
                location=job.location,
                job_type=job.job_type.value,
                salary_range=job.salary_range,
                company_id=company_id,
                status=job.status.value,
            )
            s.add(record)
            s.commit()
            s.refresh(record)
            logger.info(f"Created job {record.id}: {record.title} [{record.status}]")
            return _job_from_record(record)

    def get_job(self, job_id: str) -> Optional[JobPosting]:
        with self.Session() as s:
            record = s.get(JobPostingRecord, job_id)
            return _job_from_record(record) if record else None

    def list_jobs(
        self,
        status: Optional[JobStatus] = None,
        limit: Optional[int] = 10,
        company_id: Optional[str] = None,
    ) -> List[JobPosting]:
        """Jobs newest first, optionally filtered by status and company."""
        with self.Session() as s:
            query = s.query(JobPostingRecord)
            if status is not None:
                query = query.filter(JobPostingRecord.status == JobStatus(status).value)
            if company_id:
                query = query.filter(JobPostingRecord.company_id == company_id)
            query = query.order_by(JobPostingRecord.created_at.desc())
            if limit:
                query = query.limit(limit)
            return [_job_from_record(r) for r in query.all()]

    def _owned_job(self, s, job_id: str, company_id: Optional[str]) -> JobPostingRecord:
        record = s.get(JobPostingRecord, job_id)
        if record is None:
            raise NotFoundError("Job not found")
        if company_id is not None and record.company_id != company_id:
            raise PermissionDeniedError("Only the posting company can modify this job")
        return record

    @staticmethod
    def _transition(record: JobPostingRecord, target: JobStatus, admin_override: bool):
        current = JobStatus(record.status)
        if current == target:
            return
        if current == JobStatus.CLOSED and not admin_override:
            raise JobClosedError("Closed jobs cannot be changed")
        if target not in JOB_STATUS_TRANSITIONS[current] and not admin_override:
            raise InvalidStatusTransitionError(
                f"Cannot move job from {current.value} to {target.value}"
            )
        record.status = target.value

    def update_job(
        self,
        job_id: str,
        updates: Dict[str, Any],
        company_id: Optional[str] = None,
        admin_override: bool = False,
    ) -> JobPosting:
        """
        Edit a job's fields and optionally its status.

        Args:
            job_id: Job to edit
            updates: Field values by name; ``status`` is routed through the
                lifecycle rules
            company_id: Caller's company (ownership is checked when given)
            admin_override: Allow edits to closed jobs

        Raises:
            NotFoundError, PermissionDeniedError, JobClosedError,
            InvalidStatusTransitionError
        """
        with self.Session() as s:
            record = self._owned_job(s, job_id, company_id)
            if JobStatus(record.status) == JobStatus.CLOSED and not admin_override:
                raise JobClosedError("Closed jobs cannot be changed")

            # Validate through the model so enum and list fields are coerced
            current = _job_from_record(record)
            fields = _editable_fields(updates)
            edited = JobPosting.model_validate({**current.model_dump(), **fields})

            for name in fields:
                value = getattr(edited, name)
                setattr(record, name, value.value if name == "job_type" else value)

            if updates.get("status") is not None:
                self._transition(record, _parse_enum(JobStatus, updates["status"]), admin_override)

            s.commit()
            s.refresh(record)
            logger.info(f"Updated job {job_id}: {sorted(fields)} [{record.status}]")
            return _job_from_record(record)

    def set_job_status(
        self,
        job_id: str,
        status: Union[JobStatus, str],
        company_id: Optional[str] = None,
        admin_override: bool = False,
    ) -> JobPosting:
        """Move a job through DRAFT / PUBLISHED / CLOSED."""
        with self.Session() as s:
            record = self._owned_job(s, job_id, company_id)
            self._transition(record, _parse_enum(JobStatus, status), admin_override)
            s.commit()
            s.refresh(record)
            logger.info(f"Job {job_id} is now {record.status}")
            return _job_from_record(record)

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    def apply(
        self,
        job_id: str,
        applicant_id: str,
        resume_id: Optional[str] = None,
        resume_url: Optional[str] = None,
        cover_letter_url: Optional[str] = None,
    ) -> JobApplication:
        """
        Submit an application.

        The resume is, in order of preference: ``resume_id`` (must belong to
        the applicant), ``resume_url`` (a saved resume URL must also belong
        to the applicant), or the applicant's latest saved resume.

        Raises:
            NotFoundError: Unknown job
            DuplicateApplicationError: Already applied to this job
            JobClosedError: Job is not published
            ResumeNotFoundError: No usable resume
        """
        with self.Session() as s:
            job = s.get(JobPostingRecord, job_id)
            if job is None:
                raise NotFoundError("Job not found")

            existing = (
                s.query(JobApplicationRecord)
                .filter_by(job_id=job_id, applicant_id=applicant_id)
                .first()
            )
            if existing is not None:
                raise DuplicateApplicationError("You have already applied to this job")

            if job.status != JobStatus.PUBLISHED.value:
                raise JobClosedError("This job is not accepting applications")

            final_resume_url = self._resolve_resume_url(s, applicant_id, resume_id, resume_url)

            self._ensure_user(s, applicant_id)
            record = JobApplicationRecord(
                job_id=job_id,
                applicant_id=applicant_id,
                resume_url=final_resume_url,
                cover_letter_url=cover_letter_url or None,
                status=ApplicationStatus.NEW.value,
            )
            s.add(record)
            try:
                s.commit()
            except IntegrityError as e:
                s.rollback()
                raise DuplicateApplicationError("You have already applied to this job") from e

            logger.info(f"✅ Application {record.id}: user {applicant_id} -> job {job_id}")
            return _application_from_record(
                record, resume_id=resume_id_from_url(final_resume_url)
            )

    @staticmethod
    def _resolve_resume_url(s, applicant_id: str, resume_id: Optional[str], resume_url: Optional[str]) -> str:
        # A saved resume referenced by URL gets the same ownership check as by id
        resume_id = resume_id or resume_id_from_url(resume_url)
        if resume_id:
            owned = s.query(ResumeRecord).filter_by(id=resume_id, user_id=applicant_id).first()
            if owned is None:
                raise ResumeNotFoundError("Selected resume not found or access denied")
            return RESUME_URL_TEMPLATE.format(resume_id)

        if resume_url:
            return resume_url

        latest = (
            s.query(ResumeRecord)
            .filter_by(user_id=applicant_id)
            .order_by(ResumeRecord.created_at.desc())
            .first()
        )
        if latest is None:
            raise ResumeNotFoundError("Please create a resume before applying to jobs")
        return RESUME_URL_TEMPLATE.format(latest.id)

    def list_applications(
        self,
        company_id: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> List[JobApplication]:
        """
        Applications newest first, with candidate display names.

        The candidate name is the resume's full name, else the applicant's
        email, else ``Applicant N`` (N is the 1-based position in the list).
        """
        with self.Session() as s:
            query = s.query(JobApplicationRecord).join(JobPostingRecord)
            if job_id:
                query = query.filter(JobApplicationRecord.job_id == job_id)
            if company_id:
                query = query.filter(JobPostingRecord.company_id == company_id)
            records = query.order_by(JobApplicationRecord.created_at.desc()).all()

            applications = []
            for index, record in enumerate(records):
                resume_id = resume_id_from_url(record.resume_url)
                name = record.applicant.email if record.applicant else None
                if resume_id:
                    resume = s.get(ResumeRecord, resume_id)
                    full_name = ((resume.content or {}).get("personalInfo") or {}).get("fullName") if resume else None
                    name = full_name or name

                job = record.job
                applications.append(_application_from_record(
                    record,
                    candidate_name=name or f"Applicant {index + 1}",
                    resume_id=resume_id,
                    job_title=job.title if job else None,
                    company_name=job.company.name if job and job.company else None,
                ))

            logger.debug(f"Listed {len(applications)} applications (company={company_id}, job={job_id})")
            return applications

    def list_user_applications(self, user_id: str) -> List[Dict[str, Any]]:
        """A candidate's applications, newest first."""
        with self.Session() as s:
            records = (
                s.query(JobApplicationRecord)
                .filter_by(applicant_id=user_id)
                .order_by(JobApplicationRecord.created_at.desc())
                .all()
            )
            results = []
            for record in records:
                job = record.job
                results.append({
                    "id": record.id,
                    "job_id": record.job_id,
                    "job_title": job.title if job else UNKNOWN_JOB,
                    "company_name": job.company.name if job and job.company else UNKNOWN_COMPANY,
                    "applied_at": record.created_at.isoformat() if record.created_at else None,
                    "status": record.status.lower(),
                    "matching_score": record.matching_score,
                })
            return results

    def update_application_status(
        self,
        application_id: str,
        status: Union[ApplicationStatus, str],
        company_id: Optional[str],
    ) -> JobApplication:
        """
        Review decision by the company that owns the job.

        Raises:
            NotFoundError: Unknown application
            PermissionDeniedError: Caller's company does not own the job
        """
        status = _parse_enum(ApplicationStatus, status)
        with self.Session() as s:
            record = s.get(JobApplicationRecord, application_id)
            if record is None:
                raise NotFoundError("Application not found")
            if not company_id or record.job is None or record.job.company_id != company_id:
                raise PermissionDeniedError("Only the hiring company can update this application")

            record.status = status.value
            s.commit()
            s.refresh(record)
            logger.info(f"Application {application_id} -> {status.value}")
            return _application_from_record(record, resume_id=resume_id_from_url(record.resume_url))

    def set_matching_score(self, application_id: str, score: int) -> JobApplication:
        with self.Session() as s:
            record = s.get(JobApplicationRecord, application_id)
            if record is None:
                raise NotFoundError("Application not found")
            record.matching_score = max(0, min(100, int(score)))
            s.commit()
            s.refresh(record)
            return _application_from_record(record, resume_id=resume_id_from_url(record.resume_url))

    # ------------------------------------------------------------------
    # Resumes
    # ------------------------------------------------------------------

    def save_resume(
        self,
        user_id: str,
        content: Dict[str, Any],
        feedback: Optional[Any] = None,
        file_url: Optional[str] = None,
        email: str = "",
    ) -> Dict[str, Any]:
        """
        Store resume content for a user (creating the user row if needed).

        Raises:
            InvalidRequestError: ``personalInfo.fullName`` is missing
        """
        _require_full_name(content)
        with self.Session() as s:
            self._ensure_user(s, user_id, email)
            record = ResumeRecord(user_id=user_id, content=content, feedback=feedback, file_url=file_url)
            s.add(record)
            s.commit()
            s.refresh(record)
            logger.info(f"💾 Saved resume {record.id} for user {user_id}")
            return _resume_to_dict(record)

    def list_resumes(self, user_id: str) -> List[Dict[str, Any]]:
        with self.Session() as s:
            records = (
                s.query(ResumeRecord)
                .filter_by(user_id=user_id)
                .order_by(ResumeRecord.created_at.desc())
                .all()
            )
            return [_resume_to_dict(r) for r in records]

    def get_resume_content(self, resume_id: str) -> Optional[Dict[str, Any]]:
        """Raw resume content without access checks (internal use)."""
        with self.Session() as s:
            record = s.get(ResumeRecord, resume_id)
            return record.content if record else None

    def get_resume(self, resume_id: str, requester_id: str) -> Dict[str, Any]:
        """
        Fetch a resume the requester may see.

        Owners see their own resumes. Company users see resumes attached to
        applications for their company's jobs.

        Raises:
            NotFoundError: Missing, or not visible to the requester
        """
        with self.Session() as s:
            record = s.get(ResumeRecord, resume_id)
            if record is None:
                raise NotFoundError("Resume not found")
            if record.user_id == requester_id:
                return _resume_to_dict(record)

            requester = s.get(UserRecord, requester_id)
            if requester is not None and requester.user_type == "company" and requester.company_id:
                linked = (
                    s.query(JobApplicationRecord)
                    .join(JobPostingRecord)
                    .filter(JobPostingRecord.company_id == requester.company_id)
                    .filter(JobApplicationRecord.applicant_id == record.user_id)
                    .filter(JobApplicationRecord.resume_url == RESUME_URL_TEMPLATE.format(resume_id))
                    .first()
                )
                if linked is not None:
                    return _resume_to_dict(record)

            raise NotFoundError("Resume not found or access denied")

    def _owned_resume(self, s, resume_id: str, user_id: str) -> ResumeRecord:
        record = s.query(ResumeRecord).filter_by(id=resume_id, user_id=user_id).first()
        if record is None:
            raise NotFoundError("Resume not found or access denied")
        return record

    def update_resume(
        self,
        resume_id: str,
        user_id: str,
        content: Dict[str, Any],
        feedback: Optional[Any] = None,
    ) -> Dict[str, Any]:
        """Replace the content (and feedback, when given) of an owned resume."""
        _require_full_name(content)
        with self.Session() as s:
            record = self._owned_resume(s, resume_id, user_id)
            record.content = content
            if feedback is not None:
                record.feedback = feedback
            s.commit()
            s.refresh(record)
            logger.info(f"💾 Updated resume {resume_id}")
            return _resume_to_dict(record)

    def delete_resume(self, resume_id: str, user_id: str):
        with self.Session() as s:
            record = self._owned_resume(s, resume_id, user_id)
            s.delete(record)
            s.commit()
            logger.info(f"🗑️  Deleted resume {resume_id}")
