"""Content classification by type-identifier probing."""

from typing import List, Optional, Tuple

from loguru import logger

from sharemedia.domains.ingestion.attachments import Attachment
from sharemedia.models.schemas import ContentKind

# First match wins; order is priority, not alphabetical.
PROBE_ORDER: List[Tuple[ContentKind, str]] = [
    (kind, kind.type_identifier) for kind in ContentKind
]


def classify(attachment: Attachment) -> Optional[ContentKind]:
    """
    Classify an attachment into a content kind.

    Args:
        attachment: Attachment descriptor

    Returns:
        First kind whose identifier the attachment declares, or None
    """
    for kind, type_identifier in PROBE_ORDER:
        try:
            if attachment.has_item_conforming_to(type_identifier):
                return kind
        except Exception as e:
            logger.debug(f"Conformance check failed for {type_identifier}: {e}")
    return None
