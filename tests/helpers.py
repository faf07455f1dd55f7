"""
Shared fixtures for the test suite: sample resumes and jobs, and an AI
service whose completions are scripted instead of calling a provider.
"""

import copy
from pathlib import Path
from typing import Optional

from hirewise.config import AISettings, Settings, StorageSettings
from hirewise.exceptions import AIServiceError, AIUnavailableError
from hirewise.models import CandidateProfile, JobPosting
from hirewise.services.ai_service import AIService


SAMPLE_RESUME = {
    "personalInfo": {
        "fullName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "555-0100",
        "location": "Austin, TX",
        "website": "",
        "summary": "Frontend developer focused on accessible interfaces.",
    },
    "experiences": [
        {
            "id": "exp-1",
            "company": "Acme",
            "position": "Frontend Developer",
            "startDate": "Jan 2020",
            "endDate": "",
            "current": True,
            "description": "Built the design system\nLed the React migration",
        }
    ],
    "education": [
        {
            "id": "edu-1",
            "school": "State University",
            "degree": "BSc",
            "field": "Psychology",
            "graduationDate": "2019",
            "gpa": "3.8",
        }
    ],
    "skills": [
        {"name": "React", "level": "Expert"},
        {"name": "CSS", "level": "Advanced"},
    ],
    "skillsDescription": "",
}


def sample_resume(**overrides) -> dict:
    """Deep copy of SAMPLE_RESUME with top-level keys replaced."""
    content = copy.deepcopy(SAMPLE_RESUME)
    content.update(overrides)
    return content


def make_profile(**overrides) -> CandidateProfile:
    return CandidateProfile.model_validate(sample_resume(**overrides))


def make_job(title="Frontend Developer", required_skills=None, **fields) -> JobPosting:
    return JobPosting(
        id=fields.pop("id", title.lower().replace(" ", "-")),
        title=title,
        description=fields.pop("description", f"We are hiring a {title}."),
        required_skills=["React", "Node.js"] if required_skills is None else required_skills,
        **fields,
    )


def make_settings(uploads_dir: Optional[str] = None, ai_enabled: bool = False) -> Settings:
    """Settings for an in-memory database and a scratch uploads directory."""
    return Settings(
        ai_settings=AISettings(enabled=ai_enabled, model="llama3.1"),
        storage=StorageSettings(
            database_url="sqlite://",
            uploads_dir=Path(uploads_dir or "uploads"),
        ),
    )


class ScriptedAIService(AIService):
    """
    AIService whose completions come from a queue.

    Queue items are returned in order; an Exception item is raised instead.
    Prompts are recorded for assertions.
    """

    def __init__(self, responses=None, enabled: bool = True, settings: Optional[Settings] = None):
        super().__init__(settings or make_settings(ai_enabled=enabled))
        self.enabled = enabled
        self.responses = list(responses or [])
        self.prompts = []

    def generate_completion(self, prompt, system_prompt=None, temperature=None, max_tokens=None):
        if not self.enabled:
            raise AIUnavailableError("AI features are disabled")
        self.prompts.append((prompt, system_prompt))
        if not self.responses:
            raise AIServiceError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def capture_paragraph_format(paragraph) -> dict:
    """Text, style, alignment and per-run formatting of a paragraph."""
    runs = []
    for run in paragraph.runs:
        color = run.font.color.rgb if run.font.color and run.font.color.type else None
        runs.append({
            'text': run.text,
            'bold': run.font.bold,
            'italic': run.font.italic,
            'size': run.font.size.pt if run.font.size else None,
            'color': str(color) if color is not None else None,
        })
    return {
        'text': paragraph.text,
        'style': paragraph.style.name if paragraph.style is not None else None,
        'alignment': paragraph.alignment,
        'runs': runs,
    }
