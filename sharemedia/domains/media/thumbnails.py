"""
Video thumbnail and duration extraction.

Uses ffprobe for the container duration and ffmpeg to grab a single frame,
then Pillow to fit the frame into the thumbnail bounding box. Thumbnails are
cached by a name derived from the source file name; durations never are.
"""

import base64
import io
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from loguru import logger
from PIL import Image

from sharemedia.domains.media.artifacts import write_image
from sharemedia.errors import ThumbnailError
from sharemedia.utils.config import Settings, get_settings


@dataclass(frozen=True)
class VideoInfo:
    """Thumbnail location and duration for one video."""

    thumbnail_path: Path
    duration_ms: int


def thumbnail_name(source: Path) -> str:
    """Deterministic thumbnail file name for ``source``."""
    encoded = base64.b64encode(source.name.encode("utf-8")).decode("ascii")
    return encoded.replace("==", "") + ".jpg"


class ThumbnailGenerator:
    """Extracts a representative frame and the duration of a video."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def _binary(self, name: str) -> str:
        exe = shutil.which(name)
        if not exe:
            raise ThumbnailError(f"{name} not found on PATH")
        return exe

    def _run(self, args: List[str]) -> bytes:
        proc = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=30,
            check=False,
        )
        if proc.returncode != 0 or not proc.stdout:
            err = (proc.stderr or b"").decode(errors="ignore")[:300]
            raise ThumbnailError(f"{Path(args[0]).name} failed: {err}")
        return proc.stdout

    def probe_duration_ms(self, source: Path) -> int:
        """
        Read the container duration.

        Returns:
            Duration in milliseconds, rounded to the nearest integer
        """
        output = self._run([
            self._binary(self.settings.ffprobe_bin),
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(source),
        ])
        try:
            seconds = float(output.decode().strip())
        except ValueError as e:
            raise ThumbnailError(f"Unreadable duration for {source}: {e}") from e
        return int(round(seconds * 1000))

    def extract_frame(self, source: Path) -> Image.Image:
        """Grab one frame at the configured offset, fitted to the bounding box."""
        # ffmpeg applies rotation metadata by default
        output = self._run([
            self._binary(self.settings.ffmpeg_bin),
            "-nostdin", "-hide_banner", "-loglevel", "error",
            "-ss", str(self.settings.thumbnail_offset_seconds),
            "-i", str(source),
            "-frames:v", "1",
            "-f", "image2pipe", "-vcodec", "png", "pipe:1",
        ])
        try:
            frame = Image.open(io.BytesIO(output))
            frame.load()
        except OSError as e:
            raise ThumbnailError(f"Undecodable frame from {source}: {e}") from e

        size = self.settings.thumbnail_max_size
        frame.thumbnail((size, size))
        return frame

    def generate(self, source: Path, storage_root: Path) -> Optional[VideoInfo]:
        """
        Produce the thumbnail and duration for ``source``.

        Args:
            source: Video file
            storage_root: Shared storage directory receiving the thumbnail

        Returns:
            VideoInfo, or None if any extraction step failed
        """
        destination = storage_root / thumbnail_name(source)

        try:
            duration_ms = self.probe_duration_ms(source)

            if destination.exists():
                logger.debug(f"Reusing thumbnail {destination}")
                return VideoInfo(thumbnail_path=destination, duration_ms=duration_ms)

            frame = self.extract_frame(source)
        except (ThumbnailError, OSError, subprocess.SubprocessError) as e:
            logger.warning(f"Thumbnail extraction failed for {source}: {e}")
            return None

        if not write_image(frame, destination, "JPEG"):
            return None

        logger.debug(f"Thumbnail written: {destination}")
        return VideoInfo(thumbnail_path=destination, duration_ms=duration_ms)
