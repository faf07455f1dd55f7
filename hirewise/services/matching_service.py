"""
Job / candidate matching.

``calculate_basic_match_score`` and ``get_match_reasons`` are the deterministic
keyword heuristic used whenever the AI ranking is unavailable or unusable.
They are pure: same inputs, same outputs, no logging.

Heuristic (0-100):
- Skills (max 50): share of required skills overlapping a candidate skill,
  where either lower-cased string containing the other counts as overlap
- Experience (max 30): +30 for each position sharing a role-family keyword
  with the job title
- Education (max 20): +20 for each field of study related to the job title
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from hirewise.exceptions import AIServiceError, NotFoundError, PermissionDeniedError
from hirewise.models import (
    CandidateProfile,
    Experience,
    JobApplication,
    JobMatch,
    JobPosting,
)
from hirewise.utils.logger import get_logger

logger = get_logger(__name__)

SKILL_WEIGHT = 50
EXPERIENCE_POINTS = 30
EXPERIENCE_CAP = 30
EDUCATION_POINTS = 20
EDUCATION_CAP = 20
MAX_SCORE = 100

ROLE_FAMILIES = ("developer", "engineer", "manager", "designer", "analyst")

# (field-of-study keywords, job title keywords); first rule whose field
# keywords hit decides, later rules are not consulted
EDUCATION_RULES: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (("computer", "software", "engineering"), ("developer", "engineer")),
    (("design",), ("designer",)),
    (("business",), ("manager",)),
    (("data", "statistics"), ("analyst", "data")),
)

MAX_REASON_SKILLS = 3


def _lower(value: Optional[str]) -> str:
    return (value or "").lower()


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def matching_skills(profile: CandidateProfile, job: JobPosting) -> List[str]:
    """Lower-cased candidate skills that overlap any required skill."""
    requirements = [_lower(req) for req in job.required_skills]
    overlap = []
    for skill in profile.skills:
        name = _lower(skill.name)
        if any(req in name or name in req for req in requirements):
            overlap.append(name)
    return overlap


def _shares_role_family(position: str, job_title: str) -> bool:
    return any(word in position and word in job_title for word in ROLE_FAMILIES)


def _education_matches(field: str, job_title: str) -> bool:
    for field_words, title_words in EDUCATION_RULES:
        if any(word in field for word in field_words):
            return any(word in job_title for word in title_words)
    return False


def relevant_experience(profile: CandidateProfile, job: JobPosting) -> Optional[Experience]:
    """First experience whose position shares a role family with the job title."""
    job_title = _lower(job.title)
    for exp in profile.experiences:
        if _shares_role_family(_lower(exp.position), job_title):
            return exp
    return None


def score_breakdown(profile: CandidateProfile, job: JobPosting) -> Dict[str, float]:
    """Per-category contributions before the final rounding."""
    job_title = _lower(job.title)

    if job.required_skills:
        overlap = len(matching_skills(profile, job))
        skills = min(SKILL_WEIGHT * overlap / len(job.required_skills), SKILL_WEIGHT)
    else:
        skills = 0.0

    experience = sum(
        EXPERIENCE_POINTS
        for exp in profile.experiences
        if _shares_role_family(_lower(exp.position), job_title)
    )
    education = sum(
        EDUCATION_POINTS
        for edu in profile.education
        if _education_matches(_lower(edu.field), job_title)
    )

    return {
        "skills": float(skills),
        "experience": float(min(experience, EXPERIENCE_CAP)),
        "education": float(min(education, EDUCATION_CAP)),
    }


def calculate_basic_match_score(profile: CandidateProfile, job: JobPosting) -> int:
    """
    Estimate candidate/job compatibility without an LLM.

    Args:
        profile: Candidate resume content
        job: Job posting

    Returns:
        Integer score in [0, 100]
    """
    total = sum(score_breakdown(profile, job).values())
    return round_half_up(min(total, MAX_SCORE))


def get_match_reasons(profile: CandidateProfile, job: JobPosting) -> List[str]:
    """Short human-readable reasons behind the heuristic score."""
    reasons = []

    overlap = matching_skills(profile, job)
    if overlap:
        reasons.append(f"Skills match: {', '.join(overlap[:MAX_REASON_SKILLS])}")

    experience = relevant_experience(profile, job)
    if experience is not None:
        reasons.append(f"Relevant experience as {experience.position}")

    return reasons


def profile_to_text(profile: CandidateProfile) -> str:
    """Plain-text rendering of a profile for prompts."""
    info = profile.personal_info
    lines = [
        f"Name: {info.full_name or 'Not provided'}",
        f"Summary: {info.summary or 'Not provided'}",
        "",
        "Work Experience:",
    ]
    for i, exp in enumerate(profile.experiences, 1):
        end = "Present" if exp.current else (exp.end_date or "")
        lines.append(f"{i}. {exp.position or ''} at {exp.company or ''}")
        lines.append(f"   Duration: {exp.start_date or ''} - {end}")
        lines.append(f"   Description: {exp.description or 'Not provided'}")
    lines += ["", "Education:"]
    for i, edu in enumerate(profile.education, 1):
        lines.append(f"{i}. {edu.degree or ''} in {edu.field or ''} from {edu.school or ''}")
        lines.append(f"   Graduation: {edu.graduation_date or ''}")
    lines += ["", "Skills:", ", ".join(f"{s.name} ({s.level.value})" for s in profile.skills)]
    return "\n".join(lines)


class MatchingService:
    """Rank jobs for candidates and candidates for jobs."""

    def __init__(self, ai_service, repository=None, resume_service=None,
                 min_fallback_score: int = 20, max_fallback_results: int = 10):
        """
        Initialize matching service.

        Args:
            ai_service: AIService used for the primary scoring path
            repository: JobBoardRepository (needed for match_candidates)
            resume_service: ResumeService used to read uploaded files
            min_fallback_score: Heuristic matches must score above this
            max_fallback_results: Heuristic result cap
        """
        self.ai_service = ai_service
        self.repository = repository
        self.resume_service = resume_service
        self.min_fallback_score = min_fallback_score
        self.max_fallback_results = max_fallback_results

    def basic_matches(self, profile: CandidateProfile, jobs: Sequence[JobPosting]) -> List[JobMatch]:
        """Heuristic ranking: keep scores above the threshold, best first."""
        matches = [
            JobMatch(
                job=job,
                match_score=calculate_basic_match_score(profile, job),
                match_reasons=get_match_reasons(profile, job),
            )
            for job in jobs
        ]
        matches = [m for m in matches if m.match_score > self.min_fallback_score]
        matches.sort(key=lambda m: m.match_score, reverse=True)
        return matches[:self.max_fallback_results]

    def match_jobs(self, profile: CandidateProfile, jobs: Sequence[JobPosting]) -> List[JobMatch]:
        """
        Rank jobs for a candidate.

        Uses the AI ranking when the AI service is available and answers with
        usable JSON, the keyword heuristic otherwise.
        """
        if not jobs or not self.ai_service.available:
            logger.info(f"Using basic matching for {len(jobs)} jobs")
            return self.basic_matches(profile, jobs)

        try:
            ranked = self.ai_service.rank_jobs(profile, jobs)
        except AIServiceError as e:
            logger.warning(f"⚠️  AI job ranking failed, using basic matching: {e}")
            return self.basic_matches(profile, jobs)

        return self._join_ai_matches(ranked, jobs)

    def _join_ai_matches(self, ranked: List[Dict[str, Any]], jobs: Sequence[JobPosting]) -> List[JobMatch]:
        by_id = {job.id: job for job in jobs}
        matches = []
        for item in ranked:
            job = by_id.get(str(item.get("jobId")))
            if job is None:
                logger.debug(f"AI returned unknown job id: {item.get('jobId')}")
                continue
            matches.append(JobMatch(
                job=job,
                match_score=clamp_score(item.get("matchScore")),
                match_reasons=list(item.get("matchReasons") or []),
                improvement_suggestions=list(item.get("improvementSuggestions") or []),
            ))
        matches.sort(key=lambda m: m.match_score, reverse=True)
        return matches

    def score_application(
        self,
        job: JobPosting,
        resume_text: str,
        cover_letter_text: str = "",
        profile: Optional[CandidateProfile] = None,
    ) -> int:
        """
        Score one application against its job.

        Falls back to the heuristic when a structured profile is at hand,
        otherwise to 0.
        """
        if self.ai_service.available:
            try:
                return self.ai_service.score_candidate(job, resume_text, cover_letter_text)
            except AIServiceError as e:
                logger.warning(f"⚠️  AI candidate scoring failed: {e}")

        if profile is not None:
            return calculate_basic_match_score(profile, job)
        return 0

    def match_candidates(
        self,
        job_id: str,
        description: Optional[str] = None,
        required_skills: Optional[List[str]] = None,
        company_id: Optional[str] = None,
    ) -> List[JobApplication]:
        """
        Score every application of a job and store the scores.

        ``description`` and ``required_skills`` override the stored job
        fields when given. When ``company_id`` is given the job must belong
        to that company. An application that fails to score is logged and
        returned unchanged.

        Raises:
            NotFoundError: Unknown job
            PermissionDeniedError: Job belongs to another company
        """
        if self.repository is None:
            raise RuntimeError("MatchingService needs a repository to match candidates")

        job = self.repository.get_job(job_id)
        if job is None:
            raise NotFoundError("Job not found")
        if company_id is not None and job.company_id != company_id:
            raise PermissionDeniedError("Only the posting company can match candidates for this job")
        overrides = {}
        if description:
            overrides["description"] = description
        if required_skills is not None:
            overrides["required_skills"] = list(required_skills)
        if overrides:
            job = job.model_copy(update=overrides)

        results = []
        applications = self.repository.list_applications(job_id=job_id)
        logger.info(f"Scoring {len(applications)} applications for job {job_id}")
        for application in applications:
            try:
                profile, resume_text = self._load_resume(application)
                cover_letter_text = self._read_upload(application.cover_letter_url)
                score = self.score_application(job, resume_text, cover_letter_text, profile)
                results.append(self.repository.set_matching_score(application.id, score))
            except Exception as e:
                logger.error(f"Error processing application {application.id}: {e}")
                results.append(application)
        return results

    def _load_resume(self, application: JobApplication) -> Tuple[Optional[CandidateProfile], str]:
        if application.resume_id:
            record = self.repository.get_resume_content(application.resume_id)
            if record is not None:
                profile = CandidateProfile.model_validate(record)
                return profile, profile_to_text(profile)
        return None, self._read_upload(application.resume_url)

    def _read_upload(self, url: Optional[str]) -> str:
        if not url or self.resume_service is None:
            return ""
        return self.resume_service.read_stored_text(url)


def clamp_score(value: Any) -> int:
    """Coerce a model-supplied score to an int in [0, 100] (0 if not numeric)."""
    try:
        score = round_half_up(float(value))
    except (TypeError, ValueError):
        return 0
    return max(0, min(MAX_SCORE, score))
