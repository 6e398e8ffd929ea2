"""
Attachment descriptors.

An attachment is one unit of shared content as delivered by the invoking
environment: a set of declared type identifiers and an asynchronous loader
that yields a representation for one of them. Loaders return a literal
``str``, a file reference (``Path``) or an in-memory ``PIL.Image.Image``,
and raise ``AttachmentLoadError`` when the transport itself fails.
"""

import asyncio
import mimetypes
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Union

from PIL import Image

from sharemedia.errors import AttachmentLoadError
from sharemedia.models.schemas import ContentKind

LoadedItem = Union[str, Path, Image.Image]


class Attachment(ABC):
    """Shared content prior to classification."""

    type_identifiers: frozenset = frozenset()

    def has_item_conforming_to(self, type_identifier: str) -> bool:
        """Check whether the attachment declares ``type_identifier``."""
        return type_identifier in self.type_identifiers

    @abstractmethod
    async def load_item(self, type_identifier: str) -> LoadedItem:
        """Load the representation for ``type_identifier``."""

    def _require(self, type_identifier: str) -> None:
        if not self.has_item_conforming_to(type_identifier):
            raise AttachmentLoadError(
                f"{type(self).__name__} cannot provide {type_identifier}"
            )


class TextAttachment(Attachment):
    """Plain text snippet."""

    type_identifiers = frozenset({ContentKind.TEXT.type_identifier})

    def __init__(self, text: str):
        self.text = text

    async def load_item(self, type_identifier: str) -> LoadedItem:
        self._require(type_identifier)
        return self.text


class UrlAttachment(Attachment):
    """Web URL."""

    type_identifiers = frozenset({ContentKind.URL.type_identifier})

    def __init__(self, url: str):
        self.url = url

    async def load_item(self, type_identifier: str) -> LoadedItem:
        self._require(type_identifier)
        return self.url


class FileAttachment(Attachment):
    """
    File on disk.

    Declares ``public.file-url`` plus the image or movie identifier when the
    guessed MIME type says so, so images and videos classify ahead of the
    generic file kind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        identifiers = {ContentKind.FILE.type_identifier}
        guessed, _ = mimetypes.guess_type(self.path.name)
        if guessed and guessed.startswith("image/"):
            identifiers.add(ContentKind.IMAGE.type_identifier)
        elif guessed and guessed.startswith("video/"):
            identifiers.add(ContentKind.VIDEO.type_identifier)
        self.type_identifiers = frozenset(identifiers)

    async def load_item(self, type_identifier: str) -> LoadedItem:
        self._require(type_identifier)
        exists = await asyncio.to_thread(self.path.exists)
        if not exists:
            raise AttachmentLoadError(f"File is no longer available: {self.path}")
        return self.path


class ImageAttachment(Attachment):
    """In-memory bitmap, e.g. a screenshot handed over without a file."""

    type_identifiers = frozenset({ContentKind.IMAGE.type_identifier})

    def __init__(self, image: Image.Image):
        self.image = image

    async def load_item(self, type_identifier: str) -> LoadedItem:
        self._require(type_identifier)
        return self.image
