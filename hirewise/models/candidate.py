"""Candidate profile (resume content) models."""

from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ContentModel(BaseModel):
    """Base for records exchanged with the web client in camelCase."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class SkillLevel(str, Enum):
    """Skill proficiency levels."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class PersonalInfo(ContentModel):
    """Name and contact details."""
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    summary: Optional[str] = None

    def merged_with(self, override: Optional["PersonalInfo"]) -> "PersonalInfo":
        """Return a copy where every field set on ``override`` wins."""
        if override is None:
            return self
        updates = {k: v for k, v in override.model_dump().items() if v}
        return self.model_copy(update=updates)


class Experience(ContentModel):
    """Represents a work experience entry."""
    id: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("position", "title")
    )
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


class Education(ContentModel):
    """Represents an education entry."""
    id: Optional[str] = None
    school: Optional[str] = None
    degree: Optional[str] = None
    field: Optional[str] = None
    start_date: Optional[str] = None
    graduation_date: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("graduationDate", "graduation_date", "endDate"),
    )
    gpa: Optional[str] = None
    description: Optional[str] = None

    @field_validator("gpa", mode="before")
    @classmethod
    def _gpa_as_text(cls, value):
        if value is None or isinstance(value, str):
            return value
        return str(value)


class Skill(ContentModel):
    """A named skill with a proficiency level."""
    name: str
    level: SkillLevel = SkillLevel.INTERMEDIATE

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, value):
        if value is None or value == "":
            return SkillLevel.INTERMEDIATE
        if isinstance(value, str):
            for level in SkillLevel:
                if level.value.lower() == value.strip().lower():
                    return level
        return value


class CandidateProfile(ContentModel):
    """Structured resume: personal info, experience, education and skills."""
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    experiences: List[Experience] = Field(
        default_factory=list,
        validation_alias=AliasChoices("experiences", "experience"),
    )
    education: List[Education] = Field(default_factory=list)
    skills: List[Skill] = Field(default_factory=list)
    skills_description: Optional[str] = None

    @field_validator("skills", mode="before")
    @classmethod
    def _coerce_skill_names(cls, value):
        if value is None:
            return []
        return [{"name": item} if isinstance(item, str) else item for item in value]

    @field_validator("personal_info", mode="before")
    @classmethod
    def _empty_personal_info(cls, value):
        return {} if value is None else value

    @field_validator("experiences", "education", mode="before")
    @classmethod
    def _none_as_empty_list(cls, value):
        return [] if value is None else value
