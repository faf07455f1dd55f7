"""
Resume upload service: validation, storage, text extraction and AI review.
"""

from io import BytesIO
from pathlib import Path
from typing import Any, Dict

from docx import Document
from pypdf import PdfReader

from hirewise.config.settings import Settings
from hirewise.exceptions import InvalidRequestError, UnsupportedFileError
from hirewise.services.ai_service import AIService
from hirewise.utils.file_utils import (
    file_extension,
    load_bytes,
    save_bytes,
    timestamped_filename,
)
from hirewise.utils.logger import get_logger

logger = get_logger(__name__)

UPLOADS_URL_PREFIX = "/uploads/"


class ResumeService:
    """Handle uploaded resume files."""

    def __init__(self, settings: Settings, ai_service: AIService):
        """
        Initialize resume service.

        Args:
            settings: Application settings
            ai_service: AI service used for resume analysis
        """
        self.settings = settings
        self.ai_service = ai_service
        self.uploads_dir = Path(settings.storage.uploads_dir)
        self.max_upload_bytes = settings.storage.max_upload_bytes
        self.allowed_extensions = [ext.lower() for ext in settings.storage.allowed_extensions]

        logger.info(f"Resume service initialized (uploads: {self.uploads_dir})")

    def validate_upload(self, filename: str, size: int) -> str:
        """
        Check an upload's type and size.

        Returns:
            The lower-cased extension

        Raises:
            InvalidRequestError: Wrong type or too large
        """
        extension = file_extension(filename or "")
        if extension not in self.allowed_extensions:
            raise InvalidRequestError("Invalid file type. Please upload a PDF, DOC, or DOCX file")
        if size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise InvalidRequestError(f"File size too large. Please upload a file smaller than {limit_mb}MB")
        return extension

    def extract_text(self, filename: str, data: bytes) -> str:
        """
        Extract plain text from a resume file.

        Raises:
            UnsupportedFileError: Legacy .doc or unknown type
        """
        extension = file_extension(filename)

        if extension == "docx":
            doc = Document(BytesIO(data))
            return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
        if extension == "pdf":
            reader = PdfReader(BytesIO(data))
            return "\n".join(page.extract_text() or "" for page in reader.pages).strip()

        raise UnsupportedFileError(f"Text extraction is not supported for .{extension or '?'} files")

    def store_upload(self, filename: str, data: bytes) -> str:
        """
        Save an upload under the uploads directory.

        Returns:
            URL path the file is served from
        """
        stored_name = timestamped_filename(filename)
        save_bytes(data, self.uploads_dir, stored_name)
        logger.info(f"💾 Stored upload: {stored_name} ({len(data)} bytes)")
        return f"{UPLOADS_URL_PREFIX}{stored_name}"

    def resolve_url(self, url: str) -> Path:
        """Map an uploads URL back to its file path."""
        if not url.startswith(UPLOADS_URL_PREFIX):
            raise UnsupportedFileError(f"Not a stored upload: {url}")
        name = Path(url[len(UPLOADS_URL_PREFIX):]).name
        return self.uploads_dir / name

    def read_stored_text(self, url: str) -> str:
        """
        Text of a previously stored upload.

        Unreadable files yield an empty string; the reason is logged.
        """
        try:
            path = self.resolve_url(url)
            return self.extract_text(path.name, load_bytes(path))
        except Exception as e:
            logger.error(f"Error extracting text from {url}: {e}")
            return ""

    def analyze_upload(self, filename: str, data: bytes) -> Dict[str, Any]:
        """
        Validate, review and store an uploaded resume.

        The file is stored only once the review succeeds.

        Returns:
            {"feedback": ..., "fileUrl": ...}
        """
        extension = self.validate_upload(filename, len(data))

        try:
            resume_text = self.extract_text(filename, data)
        except Exception as e:
            logger.warning(f"⚠️  Could not parse {filename}: {e}")
            resume_text = ""
        if not resume_text:
            resume_text = f"Resume file: {filename} ({extension} format, {len(data) / 1024:.2f} KB)"

        logger.info("=" * 70)
        logger.info(f"🤖 Reviewing uploaded resume: {filename}")
        logger.info("=" * 70)
        feedback = self.ai_service.analyze_resume(resume_text)
        file_url = self.store_upload(filename, data)

        return {"feedback": feedback, "fileUrl": file_url}
