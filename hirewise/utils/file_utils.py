"""
File utility functions.
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .logger import get_logger

logger = get_logger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9]")
UNSAFE_UPLOAD_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def ensure_directory(directory: Union[Path, str]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        directory: Path to the directory

    Returns:
        Path object for the directory
    """
    path = Path(directory) if isinstance(directory, str) else directory
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_stem(name: Optional[str], default: str) -> str:
    """Replace every non-alphanumeric character of ``name`` with ``_``."""
    return UNSAFE_FILENAME_CHARS.sub("_", name or default)


def file_extension(filename: str) -> str:
    """Lower-cased extension without the dot ('' when there is none)."""
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def timestamped_filename(original: str, now: Optional[datetime] = None) -> str:
    """
    Build a storage name like ``1718900000000_my_resume.pdf``.

    Args:
        original: Filename supplied by the client
        now: Clock override

    Returns:
        Filename safe to write under the uploads directory
    """
    now = now or datetime.now()
    base = UNSAFE_UPLOAD_CHARS.sub("_", Path(original).name) or "upload"
    return f"{int(now.timestamp() * 1000)}_{base}"


def save_bytes(data: bytes, directory: Union[Path, str], filename: str) -> Path:
    """
    Write raw bytes to ``directory/filename``.

    Args:
        data: File content
        directory: Target directory (created if missing)
        filename: Target filename

    Returns:
        Path of the written file
    """
    path = ensure_directory(directory) / filename

    with open(path, 'wb') as f:
        f.write(data)

    logger.debug(f"Saved {len(data)} bytes to {path}")
    return path


def load_bytes(filepath: Union[Path, str]) -> bytes:
    """
    Read a file written by :func:`save_bytes`.

    Args:
        filepath: Path to the file

    Returns:
        File content
    """
    path = Path(filepath)

    if not path.exists():
        logger.error(f"File not found: {path}")
        raise FileNotFoundError(f"File not found: {path}")

    with open(path, 'rb') as f:
        data = f.read()

    logger.debug(f"Loaded {len(data)} bytes from {path}")
    return data
