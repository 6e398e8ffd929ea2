"""
Helper utilities for sharemedia.

Common functions used across domains.
"""

import mimetypes
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse
from uuid import uuid4

DEFAULT_MIME_TYPE = "application/octet-stream"


def generate_uuid() -> str:
    """Generate a unique identifier."""
    return str(uuid4()).upper()


def absolute_path(path: Path) -> str:
    """Absolute string form of ``path``."""
    return str(path.absolute())


def file_url_to_path(value: str) -> Optional[Path]:
    """
    Convert a ``file://`` URL into a Path.

    Returns:
        Path, or None if ``value`` is not a file URL
    """
    parsed = urlparse(value)
    if parsed.scheme != 'file':
        return None
    return Path(unquote(parsed.path))


def mime_type_for(path: Path) -> str:
    """Guess MIME type from the file extension."""
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_MIME_TYPE

