import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

from sharemedia.domains.handoff.notifier import HostNotifier
from sharemedia.domains.handoff.store import HandoffStore
from sharemedia.domains.ingestion.attachments import Attachment, LoadedItem
from sharemedia.domains.ingestion.pipeline import IngestionPipeline
from sharemedia.domains.ingestion.records import RecordBuilder
from sharemedia.domains.media.thumbnails import VideoInfo
from sharemedia.errors import AttachmentLoadError
from sharemedia.utils.config import Settings


class RecordingSender:
    """Notification sender that remembers every URI it was asked to deliver."""

    def __init__(self, accept: bool = True):
        self.accept = accept
        self.uris: List[str] = []

    def send(self, uri: str) -> bool:
        self.uris.append(uri)
        return self.accept


class RecordingContext:
    def __init__(self):
        self.completions = 0
        self.errors: List[Tuple[str, str]] = []

    def complete_request(self) -> None:
        self.completions += 1

    def present_error(self, title: str, message: str) -> None:
        self.errors.append((title, message))


class StubThumbnails:
    def __init__(self, info: Optional[VideoInfo]):
        self.info = info
        self.calls: List[Path] = []

    def generate(self, source: Path, storage_root: Path) -> Optional[VideoInfo]:
        self.calls.append(source)
        return self.info


class ScriptedAttachment(Attachment):
    """Attachment with explicit identifiers, payload, delay and failure."""

    def __init__(
        self,
        identifiers,
        payload: LoadedItem = None,
        delay: float = 0.0,
        gate: Optional[asyncio.Event] = None,
        fail: bool = False,
    ):
        self.type_identifiers = frozenset(identifiers)
        self.payload = payload
        self.delay = delay
        self.gate = gate
        self.fail = fail
        self.requested: List[str] = []

    async def load_item(self, type_identifier: str) -> LoadedItem:
        self.requested.append(type_identifier)
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise AttachmentLoadError("permission revoked")
        return self.payload


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        extension_identifier="com.example.app.ShareExtension",
        host_identifier=None,
        app_group_id=None,
        shared_root=tmp_path / "shared",
        preferences_dir=tmp_path / "prefs",
        auto_redirect=True,
        completion_policy="last_index",
    )


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def context():
    return RecordingContext()


@pytest.fixture
def store(settings):
    return HandoffStore(settings.preferences_file())


@pytest.fixture
def make_pipeline(settings, sender, context):
    def make(thumbnails=None, **overrides) -> IngestionPipeline:
        configured = settings.model_copy(update=overrides)
        builder = RecordBuilder(
            configured.shared_container(),
            thumbnails or StubThumbnails(None),
        )
        return IngestionPipeline(
            store=HandoffStore(configured.preferences_file()),
            notifier=HostNotifier(configured.scheme_prefix, [sender]),
            builder=builder,
            context=context,
            settings=configured,
        )
    return make
