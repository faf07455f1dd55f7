"""
AI Service for interacting with Ollama LLM, Claude (Anthropic), and GPT (OpenAI).
"""

import json
import os
import re
from typing import Any, Dict, List, Optional, Sequence

import ollama
from anthropic import Anthropic
from openai import OpenAI

from hirewise.config import Settings
from hirewise.exceptions import (
    AIResponseError,
    AIServiceError,
    AIUnavailableError,
    InvalidRequestError,
)
from hirewise.models import CandidateProfile, JobInfo, JobPosting, PersonalInfo
from hirewise.services import prompts
from hirewise.services.matching_service import clamp_score, profile_to_text
from hirewise.utils.logger import get_logger


logger = get_logger(__name__)

FALLBACK_MODEL = "llama3.1"
DEFAULT_SYSTEM_PROMPT = "You are a professional resume writer."

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _job_context(job_info: Optional[JobInfo]) -> str:
    """' for a Engineer position at Acme', leaving out missing parts."""
    if job_info is None:
        return ""
    context = ""
    if job_info.position:
        context += f" for a {job_info.position} position"
    if job_info.company:
        context += f" at {job_info.company}"
    return context


class AIService:
    """Service for AI/LLM interactions using Ollama, Claude, or GPT."""

    def __init__(self, settings: Settings):
        """
        Initialize AI Service.

        Args:
            settings: Application settings
        """
        self.settings = settings
        self.enabled = settings.ai_settings.enabled
        self.model = settings.ai_settings.model
        self.temperature = settings.ai_settings.temperature
        self.max_tokens = settings.ai_settings.max_tokens

        # Check which AI provider to use based on model name
        self.provider = self._determine_provider(self.model)

        self.anthropic_client = None
        self.openai_client = None

        if not self.enabled:
            logger.info("AI features disabled; heuristic fallbacks will be used")
        elif self.provider == "anthropic":
            api_key = os.getenv("ANTHROPIC_API_KEY")
            if not api_key:
                self._fall_back_to_ollama("ANTHROPIC_API_KEY")
            else:
                self.anthropic_client = Anthropic(api_key=api_key)
                logger.info(f"✅ Initialized Claude API with model: {self.model}")
        elif self.provider == "openai":
            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                self._fall_back_to_ollama("OPENAI_API_KEY")
            else:
                self.openai_client = OpenAI(api_key=api_key)
                logger.info(f"✅ Initialized OpenAI API with model: {self.model}")
        else:
            logger.info(f"✅ Initialized Ollama with model: {self.model}")

    def _fall_back_to_ollama(self, missing_key: str):
        logger.warning(f"⚠️ {missing_key} not found. Add it to .env file.")
        logger.warning("   Falling back to Ollama...")
        self.provider = "ollama"
        self.model = FALLBACK_MODEL

    def _determine_provider(self, model: str) -> str:
        """Determine which AI provider to use based on model name."""
        if model.startswith("claude"):
            return "anthropic"
        elif model.startswith("gpt-"):
            return "openai"
        else:
            return "ollama"

    @property
    def available(self) -> bool:
        """Whether completions may be requested at all."""
        return self.enabled

    def generate_completion(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> str:
        """
        Generate completion using configured AI provider.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            temperature: Optional temperature override
            max_tokens: Maximum tokens to generate

        Returns:
            Generated text response

        Raises:
            AIUnavailableError: AI features are disabled
            AIServiceError: The provider call failed
        """
        if not self.enabled:
            raise AIUnavailableError("AI features are disabled")

        temp = self.temperature if temperature is None else temperature
        tokens = max_tokens or self.max_tokens

        try:
            if self.provider == "anthropic":
                text = self._generate_anthropic(prompt, system_prompt, temp, tokens)
            elif self.provider == "openai":
                text = self._generate_openai(prompt, system_prompt, temp, tokens)
            else:
                text = self._generate_ollama(prompt, system_prompt, temp)
        except Exception as e:
            logger.error(f"❌ AI generation error: {str(e)}")
            raise AIServiceError("AI generation failed", details=str(e)) from e

        if not text:
            raise AIResponseError("No response from AI")
        return text

    def _generate_ollama(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7
    ) -> str:
        """Generate completion using Ollama."""
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = ollama.chat(
            model=self.model,
            messages=messages,
            options={"temperature": temperature}
        )

        return response['message']['content'].strip()

    def _generate_anthropic(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1500
    ) -> str:
        """Generate completion using Claude (Anthropic)."""
        if not self.anthropic_client:
            raise RuntimeError("Anthropic client not initialized")

        messages = [{"role": "user", "content": prompt}]

        response = self.anthropic_client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt if system_prompt else DEFAULT_SYSTEM_PROMPT,
            messages=messages
        )

        return response.content[0].text.strip()

    def _generate_openai(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1500
    ) -> str:
        """Generate completion using OpenAI GPT."""
        if not self.openai_client:
            raise RuntimeError("OpenAI client not initialized")

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        response = self.openai_client.chat.completions.create(
            model=self.model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens
        )

        return (response.choices[0].message.content or "").strip()

    @staticmethod
    def parse_json_response(text: str) -> Any:
        """
        Parse a model answer as JSON.

        Markdown code fences are stripped first. When the answer wraps the
        JSON in prose, the outermost array or object is tried.

        Raises:
            AIResponseError: No JSON could be recovered
        """
        cleaned = _CODE_FENCE.sub("", text.strip())
        try:
            return json.loads(cleaned)
        except json.JSONDecodeError:
            pass

        for opener, closer in (("[", "]"), ("{", "}")):
            start, end = cleaned.find(opener), cleaned.rfind(closer)
            if start != -1 and end > start:
                try:
                    return json.loads(cleaned[start:end + 1])
                except json.JSONDecodeError:
                    continue

        raise AIResponseError("AI response was not valid JSON", details=text[:200])

    def generate_json(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Any:
        """Completion parsed as JSON (see :meth:`parse_json_response`)."""
        return self.parse_json_response(
            self.generate_completion(prompt, system_prompt, temperature, max_tokens)
        )

    def rank_jobs(self, profile: CandidateProfile, jobs: Sequence[JobPosting]) -> List[Dict[str, Any]]:
        """
        Ask the model to score every job for the candidate.

        Returns:
            List of {jobId, matchScore, matchReasons, improvementSuggestions}
        """
        logger.info(f"🤖 Ranking {len(jobs)} jobs with {self.model}...")
        entries = "\n".join(
            prompts.JOB_ENTRY_TEMPLATE.format(
                index=i,
                id=job.id,
                title=job.title,
                company=job.company_name or "Unknown Company",
                location=job.location or "Not specified",
                salary=job.salary_range or "Competitive",
                description=job.description,
                requirements=", ".join(job.required_skills),
            )
            for i, job in enumerate(jobs, 1)
        )
        prompt = prompts.MATCH_JOBS_TEMPLATE.format(profile=profile_to_text(profile), jobs=entries)

        result = self.generate_json(prompt, prompts.MATCH_JOBS_SYSTEM, temperature=0.3)

        # Some models wrap the array in an object
        if isinstance(result, dict):
            result = result.get("jobs") or result.get("matches")
        if not isinstance(result, list):
            raise AIResponseError("AI job ranking was not a JSON array")

        ranked = [item for item in result if isinstance(item, dict)]
        logger.info(f"🤖 AI ranked {len(ranked)} jobs")
        return ranked

    def score_candidate(self, job: JobPosting, resume_text: str, cover_letter_text: str = "") -> int:
        """
        Weighted 0-100 fit of a candidate's documents to a job.

        Returns:
            ``finalScore`` from the model, rounded and clamped
        """
        prompt = prompts.SCORE_CANDIDATE_TEMPLATE.format(
            description=job.description,
            skills=", ".join(job.required_skills),
            resume=resume_text,
            cover_letter=f"Cover Letter:\n{cover_letter_text}" if cover_letter_text else "",
        )
        result = self.generate_json(prompt, prompts.SCORE_CANDIDATE_SYSTEM, temperature=0.3)
        if not isinstance(result, dict):
            raise AIResponseError("AI candidate score was not a JSON object")
        return clamp_score(result.get("finalScore") or 0)

    def generate_cover_letter(
        self,
        personal_info: PersonalInfo,
        job_info: JobInfo,
        background: str = ""
    ) -> Dict[str, str]:
        """
        Draft the four cover letter paragraphs.

        A reply that is not JSON is replaced by template paragraphs built
        from the job info; provider failures propagate.
        """
        logger.info(f"🤖 Generating cover letter for {job_info.position} at {job_info.company}...")
        prompt = prompts.COVER_LETTER_TEMPLATE.format(
            full_name=personal_info.full_name,
            email=personal_info.email,
            phone=personal_info.phone,
            address=personal_info.address,
            position=job_info.position,
            company=job_info.company,
            hiring_manager=job_info.hiring_manager or "Hiring Manager",
            job_source=job_info.job_source or "job search",
            background=background,
        )
        fallback = prompts.fallback_cover_letter(
            personal_info.full_name or "",
            job_info.position or "",
            job_info.company or "",
            job_info.job_source or "",
        )

        try:
            letter = self.generate_json(prompt, prompts.COVER_LETTER_SYSTEM)
        except AIResponseError:
            logger.warning("⚠️  Cover letter JSON parsing failed, using template paragraphs")
            return fallback

        if not isinstance(letter, dict):
            return fallback
        return {key: str(letter.get(key) or "") for key in fallback}

    def enhance_paragraph(self, text: str, paragraph_type: str, job_info: Optional[JobInfo] = None) -> str:
        """Polish one cover letter paragraph."""
        context = _job_context(job_info)
        instruction = prompts.ENHANCE_PARAGRAPH_INSTRUCTIONS.get(
            paragraph_type, prompts.ENHANCE_PARAGRAPH_DEFAULT
        ).format(context=context)
        prompt = prompts.ENHANCE_PARAGRAPH_TEMPLATE.format(instruction=instruction, text=text)

        logger.info(f"🤖 Enhancing {paragraph_type} paragraph ({len(text)} chars)")
        return self.generate_completion(prompt, prompts.ENHANCE_PARAGRAPH_SYSTEM, max_tokens=500)

    def enhance_section(self, section: str, content: str, context: Optional[Dict[str, Any]] = None) -> str:
        """
        Polish one resume section.

        Args:
            section: One of summary, experience, education, skills
            content: Current section text
            context: Extra facts shown to the model (keys depend on section)

        Raises:
            InvalidRequestError: Unknown section
        """
        if section not in prompts.SECTION_CONTEXT:
            raise InvalidRequestError("Invalid section specified")

        instruction, fields = prompts.SECTION_CONTEXT[section]
        context = context or {}
        context_lines = "\n".join(
            f"- {label}: {context.get(key) or default}" for label, key, default in fields
        )
        prompt = prompts.ENHANCE_SECTION_TEMPLATE.format(
            instruction=instruction, content=content, context=context_lines
        )

        logger.info(f"🤖 Enhancing {section} section")
        return self.generate_completion(prompt, prompts.ENHANCE_SECTION_SYSTEM, max_tokens=500)

    def enhance_resume(self, profile: CandidateProfile) -> Dict[str, Any]:
        """Suggestions and rewritten sections for a whole resume."""
        prompt = prompts.ENHANCE_RESUME_TEMPLATE.format(
            profile=profile_to_text(profile),
            skills_description=profile.skills_description or "Not provided",
        )
        try:
            result = self.generate_json(prompt, prompts.ENHANCE_RESUME_SYSTEM, max_tokens=2000)
        except AIResponseError:
            logger.warning("⚠️  Resume enhancement JSON parsing failed, using generic suggestions")
            return prompts.fallback_resume_enhancement(profile)

        if not isinstance(result, dict):
            return prompts.fallback_resume_enhancement(profile)
        return result

    def generate_resume(
        self,
        resume_data: Dict[str, Any],
        target_role: Optional[str] = None,
        level: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Rewrite resume content for ATS friendliness.

        Returns the model's JSON in the input's shape. A non-JSON answer is
        returned alongside the original data as ``enhancedContent``.
        """
        target = ""
        if target_role:
            target = f"Target role: {target_role}" + (f" ({level} level)" if level else "") + "\n"
        prompt = prompts.GENERATE_RESUME_TEMPLATE.format(
            target=target,
            resume_json=json.dumps(resume_data, indent=2),
        )

        text = self.generate_completion(prompt, prompts.GENERATE_RESUME_SYSTEM, max_tokens=2000)
        try:
            result = self.parse_json_response(text)
        except AIResponseError:
            result = None

        if not isinstance(result, dict):
            logger.warning("⚠️  Generated resume was not JSON, returning it as text")
            return {**resume_data, "aiEnhanced": True, "enhancedContent": text}
        return result

    def analyze_resume(self, resume_text: str) -> Dict[str, Any]:
        """Structured review of an uploaded resume's text."""
        logger.info(f"🤖 Analyzing resume ({len(resume_text)} chars)...")
        prompt = prompts.RESUME_ANALYSIS_TEMPLATE.format(resume=resume_text)
        try:
            feedback = self.generate_json(
                prompt, prompts.RESUME_ANALYSIS_SYSTEM, temperature=0.3, max_tokens=2500
            )
        except AIResponseError:
            logger.warning("⚠️  Resume analysis JSON parsing failed, using default feedback")
            return prompts.default_resume_feedback()

        if not isinstance(feedback, dict):
            return prompts.default_resume_feedback()
        return feedback
