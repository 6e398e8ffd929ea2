"""Exception hierarchy for the share ingestion pipeline."""


class ShareError(Exception):
    """Base class for sharemedia errors."""


class AttachmentLoadError(ShareError):
    """The attachment source failed to deliver content (transport error)."""


class MaterializationError(ShareError):
    """A single attachment could not be turned into a durable artifact."""


class ThumbnailError(MaterializationError):
    """Frame or duration extraction failed for a video."""

