"""
Ingestion pipeline.

Fans out over a snapshot of attachments, materializes each one
concurrently, then commits the collected records to the shared store and
wakes the host, exactly once per invocation.

With the default ``last_index`` completion policy the commit fires as soon
as the attachment with the highest index resolves, even if earlier ones are
still loading; those are left out of the envelope. The ``all`` policy waits
for every attachment instead.
"""

import asyncio
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Protocol, Sequence

from loguru import logger

from sharemedia.domains.handoff.notifier import HostNotifier, NotificationSender
from sharemedia.domains.handoff.store import HandoffStore
from sharemedia.domains.ingestion.attachments import Attachment
from sharemedia.domains.ingestion.classifier import classify
from sharemedia.domains.ingestion.records import RecordBuilder
from sharemedia.domains.media.thumbnails import ThumbnailGenerator
from sharemedia.errors import AttachmentLoadError, MaterializationError
from sharemedia.models.schemas import HandoffEnvelope, MediaRecord
from sharemedia.utils.config import Settings, get_settings

ERROR_TITLE = "Error"
ERROR_MESSAGE = "Error loading data"


class PipelineState(str, Enum):
    IDLE = "idle"
    ENUMERATING = "enumerating"
    AWAITING_ATTACHMENTS = "awaiting_attachments"
    COMMITTING = "committing"
    DONE = "done"
    ERROR = "error"


class InvocationContext(Protocol):
    """The environment that invoked the extension."""

    def complete_request(self) -> None:
        """Signal that the request is finished."""
        ...

    def present_error(self, title: str, message: str) -> None:
        """Show a minimal error acknowledgment to the user."""
        ...


@dataclass
class PipelineOutcome:
    """Result of one invocation."""

    state: PipelineState
    envelope: Optional[HandoffEnvelope] = None
    committed: bool = False


class RecordAccumulator:
    """Lock-guarded record buffer keyed by attachment index."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: Dict[int, MediaRecord] = {}

    def add(self, index: int, record: MediaRecord) -> None:
        with self._lock:
            self._records[index] = record

    def snapshot(self) -> List[MediaRecord]:
        """Records in attachment enumeration order."""
        with self._lock:
            return [self._records[i] for i in sorted(self._records)]


class IngestionPipeline:
    """Single-use orchestrator for one share invocation."""

    def __init__(
        self,
        store: HandoffStore,
        notifier: HostNotifier,
        builder: RecordBuilder,
        context: InvocationContext,
        settings: Optional[Settings] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.builder = builder
        self.context = context
        self.settings = settings or get_settings()

        self.state = PipelineState.IDLE
        self.records = RecordAccumulator()
        self._lock = threading.Lock()
        self._total = 0
        self._completed = 0
        self._message: Optional[str] = None
        self._envelope: Optional[HandoffEnvelope] = None
        self._committed = False
        self._commit_requested = False
        self._finished: Optional[asyncio.Future] = None

    async def run(
        self,
        attachments: Iterable[Attachment],
        message: Optional[str] = None,
    ) -> PipelineOutcome:
        """
        Ingest ``attachments`` and hand them off.

        Args:
            attachments: Attachment descriptors, read once
            message: Free text accompanying the share

        Returns:
            PipelineOutcome describing where the invocation ended
        """
        if self.state is not PipelineState.IDLE:
            raise RuntimeError("IngestionPipeline instances are single-use")

        self.state = PipelineState.ENUMERATING
        snapshot = list(attachments)
        self._total = len(snapshot)
        self._message = message
        self._finished = asyncio.get_running_loop().create_future()
        logger.info(f"Ingesting {self._total} attachment(s)")

        self.state = PipelineState.AWAITING_ATTACHMENTS
        if not snapshot:
            if self.settings.auto_redirect:
                await asyncio.to_thread(self._commit, message)
            return self._outcome()

        tasks = [
            asyncio.create_task(self._ingest(index, attachment))
            for index, attachment in enumerate(snapshot)
        ]
        all_done = asyncio.gather(*tasks, return_exceptions=True)
        await asyncio.wait({all_done, self._finished}, return_when=asyncio.FIRST_COMPLETED)

        for task in tasks:
            if not task.done():
                task.cancel()
        for result in await all_done:
            if isinstance(result, Exception):
                logger.opt(exception=result).error(f"Attachment task crashed: {result}")

        if self.settings.auto_redirect and self.state is PipelineState.AWAITING_ATTACHMENTS:
            await asyncio.to_thread(self._commit, message)

        return self._outcome()

    def post(self, message: Optional[str] = None) -> PipelineOutcome:
        """Commit on explicit user confirmation."""
        if self.state is not PipelineState.AWAITING_ATTACHMENTS:
            logger.warning(f"Ignoring post in state {self.state.value}")
            return self._outcome()

        self._commit(message if message is not None else self._message)
        return self._outcome()

    async def _ingest(self, index: int, attachment: Attachment) -> None:
        try:
            kind = classify(attachment)
            if kind is None:
                logger.warning(f"Attachment {index} matches no supported content kind")
                return

            try:
                item = await attachment.load_item(kind.type_identifier)
            except AttachmentLoadError as e:
                self._fail(e)
                return

            try:
                record = await self.builder.build(item, kind)
            except MaterializationError as e:
                logger.warning(f"Dropping attachment {index} ({kind.value}): {e}")
                return

            self.records.add(index, record)
            logger.debug(f"Attachment {index} ready: {record.kind.value} {record.path}")
        finally:
            self._resolved(index)

    def _resolved(self, index: int) -> None:
        with self._lock:
            self._completed += 1
            completed = self._completed

        if not self.settings.auto_redirect:
            return

        if self.settings.completion_policy == "all":
            trigger = completed == self._total
        else:
            trigger = index == self._total - 1

        if trigger:
            with self._lock:
                self._commit_requested = True
            self._set_finished()

    def _begin_terminal(self, state: PipelineState) -> bool:
        with self._lock:
            if self.state is not PipelineState.AWAITING_ATTACHMENTS:
                return False
            self.state = state
            return True

    def _commit(self, message: Optional[str]) -> None:
        if not self._begin_terminal(PipelineState.COMMITTING):
            return

        envelope = HandoffEnvelope(records=self.records.snapshot(), message=message)
        self._committed = self.store.commit(envelope)
        self._envelope = envelope
        self.notifier.notify(self.settings.resolve_host_identifier())
        self.context.complete_request()

        self.state = PipelineState.DONE
        self._set_finished()

    def _fail(self, error: Exception) -> None:
        if self._commit_requested or not self._begin_terminal(PipelineState.ERROR):
            return

        logger.error(f"Attachment loading failed: {error}")
        self.context.present_error(ERROR_TITLE, ERROR_MESSAGE)
        self.context.complete_request()
        self._set_finished()

    def _set_finished(self) -> None:
        if self._finished is not None and not self._finished.done():
            self._finished.set_result(None)

    def _outcome(self) -> PipelineOutcome:
        return PipelineOutcome(
            state=self.state,
            envelope=self._envelope,
            committed=self._committed,
        )


def build_pipeline(
    context: InvocationContext,
    settings: Optional[Settings] = None,
    senders: Optional[Sequence[NotificationSender]] = None,
) -> IngestionPipeline:
    """Wire a pipeline from settings."""
    settings = settings or get_settings()
    builder = RecordBuilder(settings.shared_container(), ThumbnailGenerator(settings))
    return IngestionPipeline(
        store=HandoffStore(settings.preferences_file()),
        notifier=HostNotifier(settings.scheme_prefix, senders),
        builder=builder,
        context=context,
        settings=settings,
    )
