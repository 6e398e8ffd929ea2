"""
Artifact writing into shared storage.

Every write replaces whatever is already at the destination; a hand-off
is never additive, so stale files from an earlier run must not survive.
Failures are reported as ``False`` and logged, never raised.
"""

import io
import shutil
from pathlib import Path

from loguru import logger
from PIL import Image


def _remove_existing(destination: Path) -> None:
    if destination.exists() or destination.is_symlink():
        destination.unlink()


def write_bytes(data: bytes, destination: Path) -> bool:
    """
    Write raw bytes to ``destination``, replacing any existing file.

    Returns:
        True on success, False otherwise
    """
    try:
        _remove_existing(destination)
        destination.write_bytes(data)
        return True
    except OSError as e:
        logger.warning(f"Failed to write artifact {destination}: {e}")
        return False


def copy_file(source: Path, destination: Path) -> bool:
    """
    Copy ``source`` to ``destination``, replacing any existing file.

    Returns:
        True on success, False otherwise
    """
    if source.resolve() == destination.resolve():
        logger.debug(f"{source} is already in place")
        return True

    try:
        _remove_existing(destination)
        shutil.copyfile(source, destination)
        return True
    except (OSError, shutil.Error) as e:
        logger.warning(f"Failed to copy {source} -> {destination}: {e}")
        return False


def write_image(image: Image.Image, destination: Path, format: str = "PNG") -> bool:
    """
    Encode ``image`` and write it to ``destination``.

    Returns:
        True on success, False otherwise
    """
    if format.upper() == "JPEG" and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to encode image for {destination}: {e}")
        return False

    return write_bytes(buffer.getvalue(), destination)
