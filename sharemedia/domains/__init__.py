"""
Pipeline domains

- ingestion - Attachment descriptors, classification, record building, orchestration
- media - Artifact writing and video thumbnails
- handoff - Shared preferences store and host notification
"""

__all__ = ["ingestion", "media", "handoff"]
