"""Export request and generated document models."""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator

from .candidate import CandidateProfile, ContentModel, PersonalInfo

DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

COVER_LETTER_PARAGRAPHS = ("introduction", "bodyParagraph1", "bodyParagraph2", "closing")


class DocumentType(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover-letter"


class JobInfo(ContentModel):
    """Target position for a cover letter."""
    position: Optional[str] = None
    company: Optional[str] = None
    hiring_manager: Optional[str] = None
    job_source: Optional[str] = None


class CoverLetterContent(ContentModel):
    """Sender, addressee and the four narrative paragraphs of a cover letter."""
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    job_info: JobInfo = Field(default_factory=JobInfo)
    introduction: Optional[str] = None
    body_paragraph1: Optional[str] = None
    body_paragraph2: Optional[str] = None
    closing: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_nested_paragraphs(cls, data: Any) -> Any:
        # Paragraphs may arrive as {"content": {"introduction": ...}}
        if not isinstance(data, dict):
            return data
        nested = data.get("content")
        data = {k: v for k, v in data.items() if k != "content"}
        if isinstance(nested, dict):
            for key in COVER_LETTER_PARAGRAPHS:
                if nested.get(key):
                    data[key] = nested[key]
        for key in ("personalInfo", "jobInfo"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    def paragraphs(self) -> list:
        """Non-empty paragraphs in reading order."""
        ordered = [self.introduction, self.body_paragraph1, self.body_paragraph2, self.closing]
        return [p for p in ordered if p]


class ExportRequest(ContentModel):
    """Tagged export payload: ``type`` selects how ``content`` is read."""
    type: DocumentType
    content: Dict[str, Any]
    personal_info: Optional[PersonalInfo] = None

    def resume(self) -> CandidateProfile:
        profile = CandidateProfile.model_validate(self.content)
        merged = profile.personal_info.merged_with(self.personal_info)
        return profile.model_copy(update={"personal_info": merged})

    def cover_letter(self) -> CoverLetterContent:
        letter = CoverLetterContent.model_validate(self.content)
        merged = letter.personal_info.merged_with(self.personal_info)
        return letter.model_copy(update={"personal_info": merged})


class GeneratedDocument(BaseModel):
    """Serialized document ready to be sent as an attachment."""
    filename: str
    content: bytes
    mimetype: str = DOCX_MIMETYPE

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'
