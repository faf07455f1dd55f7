"""Utility modules."""

from .logger import get_logger, setup_logging
from .file_utils import (
    ensure_directory,
    file_extension,
    load_bytes,
    safe_stem,
    save_bytes,
    timestamped_filename,
)
from .docx_formatter import DocxFormatter

__all__ = [
    "get_logger",
    "setup_logging",
    "ensure_directory",
    "file_extension",
    "load_bytes",
    "safe_stem",
    "save_bytes",
    "timestamped_filename",
    "DocxFormatter",
]
