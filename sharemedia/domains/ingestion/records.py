"""
Record building.

Turns one loaded attachment representation into a MediaRecord, writing
whatever artifacts the host needs into shared storage on the way.
"""

import asyncio
from pathlib import Path
from typing import Optional

from loguru import logger
from PIL import Image

from sharemedia.domains.ingestion.attachments import LoadedItem
from sharemedia.domains.media.artifacts import copy_file, write_image
from sharemedia.domains.media.thumbnails import ThumbnailGenerator
from sharemedia.errors import MaterializationError
from sharemedia.models.schemas import ContentKind, MediaRecord
from sharemedia.utils.helpers import absolute_path, file_url_to_path, generate_uuid, mime_type_for

# Every in-memory bitmap of one invocation lands here; later ones win.
BITMAP_FILENAME = "TempImage.png"


class RecordBuilder:
    """Materializes loaded attachments into shared storage."""

    def __init__(self, storage_root: Path, thumbnails: Optional[ThumbnailGenerator] = None):
        self.storage_root = storage_root
        self.thumbnails = thumbnails or ThumbnailGenerator()

    async def build(self, item: LoadedItem, kind: ContentKind) -> MediaRecord:
        """
        Build the record for one attachment.

        Args:
            item: Representation returned by the attachment loader
            kind: Classified content kind

        Returns:
            MediaRecord

        Raises:
            MaterializationError: If the item cannot be materialized
        """
        if kind is ContentKind.TEXT:
            if not isinstance(item, str) or not item:
                raise MaterializationError(f"Expected text, got {type(item).__name__}")
            return MediaRecord(path=item, mime_type="text/plain", kind=kind)

        if kind is ContentKind.URL:
            if isinstance(item, Path):
                item = item.absolute().as_uri()
            if not isinstance(item, str) or not item:
                raise MaterializationError(f"Expected URL, got {type(item).__name__}")
            return MediaRecord(path=item, kind=kind)

        if isinstance(item, Image.Image):
            return await self._from_bitmap(item, kind)

        if isinstance(item, str):
            item = file_url_to_path(item)
        if isinstance(item, Path):
            return await self._from_file(item, kind)

        raise MaterializationError(f"Unsupported representation for {kind.value}")

    async def _from_bitmap(self, image: Image.Image, kind: ContentKind) -> MediaRecord:
        destination = self.storage_root / BITMAP_FILENAME
        written = await asyncio.to_thread(write_image, image, destination, "PNG")
        if not written:
            raise MaterializationError(f"Could not write bitmap to {destination}")

        return MediaRecord(
            path=absolute_path(destination),
            mime_type="image/png" if kind is ContentKind.IMAGE else None,
            kind=kind,
        )

    async def _from_file(self, source: Path, kind: ContentKind) -> MediaRecord:
        destination = self.storage_root / destination_name(source, kind)
        copied = await asyncio.to_thread(copy_file, source, destination)
        if not copied:
            raise MaterializationError(f"Could not copy {source}")

        record = MediaRecord(
            path=absolute_path(destination),
            mime_type=mime_type_for(source),
            kind=kind,
        )
        if kind is not ContentKind.VIDEO:
            return record

        info = await asyncio.to_thread(self.thumbnails.generate, source, self.storage_root)
        if info is None:
            logger.info(f"Sharing {source.name} without thumbnail")
            return record

        return record.model_copy(update={
            "thumbnail_path": absolute_path(info.thumbnail_path),
            "duration_ms": info.duration_ms,
        })


def destination_name(source: Path, kind: ContentKind) -> str:
    """Source file name, or a generated one when the source has none."""
    return source.name or generate_uuid() + kind.fallback_extension
