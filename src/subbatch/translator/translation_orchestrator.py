"""Sequential batch translation over a subtitle document."""

import logging
from collections import deque
from dataclasses import dataclass
from typing import AsyncIterator, Deque, List, Optional

import httpx

from subbatch.common.config import settings
from subbatch.common.event_publisher import EventPublisher
from subbatch.common.exceptions import BackendError, OrchestratorStateError
from subbatch.common.schemas import (
    EventType,
    FallbackReason,
    ProgressEvent,
    TranslationState,
)
from subbatch.common.string_utils import describe_line_range
from subbatch.common.subtitle_parser import Batch, SubtitleDocument, plan_batches
from subbatch.translator.stats import Clock, TranslationStats
from subbatch.translator.translation_service import SubtitleTranslator

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome of one dispatched batch."""

    batch: Batch
    translations: List[str]
    fallback: Optional[FallbackReason] = None

    @property
    def fell_back(self) -> bool:
        return self.fallback is not None


class BatchOrchestrator:
    """
    Drives one translation run over a document, one batch at a time.

    State moves IDLE -> RUNNING -> COMPLETE exactly once. Each batch is
    encoded, sent, decoded and written into the document before the next
    one is dispatched. A failing backend call keeps the batch's original
    text and the run continues.
    """

    def __init__(
        self,
        document: SubtitleDocument,
        translator: SubtitleTranslator,
        batch_size: Optional[int] = None,
        publisher: Optional[EventPublisher] = None,
        clock: Optional[Clock] = None,
        activity_limit: Optional[int] = None,
    ):
        """
        Bind an orchestrator to a document.

        Args:
            document: Parsed document; translated text is written in place
            translator: Service performing encode -> generate -> decode
            batch_size: Entries per backend call (defaults to settings)
            publisher: Event publisher for progress notifications
            clock: Monotonic clock for stats (defaults to time.monotonic)
            activity_limit: Number of recent activity messages kept

        Raises:
            OrchestratorStateError: If the document already has a run
            ValueError: If batch_size is less than 1
        """
        if batch_size is None:
            batch_size = settings.translation_batch_size
        self.batches: List[Batch] = plan_batches(len(document), batch_size)
        document.claim()

        self.document = document
        self.translator = translator
        self.batch_size = batch_size
        self.publisher = publisher or EventPublisher()
        self.stats = TranslationStats(clock=clock) if clock else TranslationStats()
        self.state = TranslationState.IDLE
        self.recent_activity: Deque[str] = deque(
            maxlen=activity_limit if activity_limit is not None else settings.recent_activity_limit
        )
        self._next_batch_idx = 0
        self._in_flight = False

    @property
    def total_batches(self) -> int:
        return len(self.batches)

    @property
    def remaining_batches(self) -> int:
        return self.total_batches - self._next_batch_idx

    def _log_activity(self, message: str) -> None:
        """Record a message in the recent activity log (newest first)."""
        self.recent_activity.appendleft(message)
        logger.info(message)

    def _build_event(
        self,
        event_type: EventType,
        batch: Optional[Batch] = None,
        fallback: Optional[FallbackReason] = None,
    ) -> ProgressEvent:
        return ProgressEvent(
            event_type=event_type,
            total_batches=self.total_batches,
            batch_index=batch.index if batch else None,
            start_index=batch.start if batch else None,
            end_index=batch.end if batch else None,
            fallback=fallback,
            stats=self.stats.snapshot(),
        )

    async def start(self) -> None:
        """
        Move from IDLE to RUNNING and record the start time.

        Raises:
            OrchestratorStateError: If the run has already started
        """
        if self.state != TranslationState.IDLE:
            raise OrchestratorStateError(
                f"Cannot start translation in state {self.state.value}"
            )

        self.stats.start(len(self.document))
        self.state = TranslationState.RUNNING
        self._log_activity("Starting translation...")
        logger.info(
            f"🚀 Translating {len(self.document)} entries in "
            f"{self.total_batches} batches of up to {self.batch_size}"
        )
        await self.publisher.publish_event(
            self._build_event(EventType.TRANSLATION_STARTED)
        )

    async def _translate(self, batch: Batch, texts: List[str]) -> BatchResult:
        """Run one batch, absorbing backend failures into an identity fallback."""
        try:
            decoded = await self.translator.translate_batch(texts)
        except (BackendError, httpx.HTTPError) as e:
            logger.error(
                f"❌ Batch {batch.index + 1}/{self.total_batches} failed: {e}. "
                f"Keeping original text."
            )
            return BatchResult(batch, list(texts), FallbackReason.BACKEND_ERROR)

        if decoded.fell_back:
            return BatchResult(
                batch, decoded.segments, FallbackReason.CARDINALITY_MISMATCH
            )
        return BatchResult(batch, decoded.segments)

    async def next_batch(self) -> Optional[BatchResult]:
        """
        Dispatch the next batch, starting the run if needed.

        The run becomes COMPLETE as soon as the final batch is written.

        Returns:
            BatchResult for the translated batch, or None for a document
            with no entries (the run is then COMPLETE)

        Raises:
            OrchestratorStateError: If called after completion or while a
                batch is already in flight
        """
        if self.state == TranslationState.COMPLETE:
            raise OrchestratorStateError("Translation already complete")
        if self._in_flight:
            raise OrchestratorStateError("A batch is already being translated")

        self._in_flight = True
        try:
            return await self._dispatch_next()
        finally:
            self._in_flight = False

    async def _dispatch_next(self) -> Optional[BatchResult]:
        if self.state == TranslationState.IDLE:
            await self.start()

        if self._next_batch_idx >= self.total_batches:
            await self._complete()
            return None

        batch = self.batches[self._next_batch_idx]
        texts = self.document.texts(batch)
        self._log_activity(f"Translating {describe_line_range(batch.start, batch.end)}...")

        result = await self._translate(batch, texts)

        self.document.apply_translations(batch, result.translations)
        self._next_batch_idx += 1
        self.stats.advance(batch.size)
        is_last = self._next_batch_idx == self.total_batches
        if is_last:
            self.stats.finish()

        logger.info(
            f"✅ Completed batch {batch.index + 1}/{self.total_batches} "
            f"({self.stats.processed}/{self.stats.total} entries)"
        )
        await self.publisher.publish_event(
            self._build_event(EventType.BATCH_COMPLETED, batch, result.fallback)
        )
        if is_last:
            await self._complete()
        return result

    async def _complete(self) -> None:
        if self.stats.running:
            self.stats.finish()
        self.state = TranslationState.COMPLETE
        self._log_activity("Translation completed!")
        await self.publisher.publish_event(
            self._build_event(EventType.TRANSLATION_COMPLETED)
        )

    async def iter_batches(self) -> AsyncIterator[BatchResult]:
        """
        Yield each batch result in document order.

        Stopping iteration early leaves the run RUNNING with no further
        batches dispatched.
        """
        while self.state != TranslationState.COMPLETE:
            result = await self.next_batch()
            if result is None:
                return
            yield result

    async def run(self) -> TranslationStats:
        """
        Translate the whole document.

        Returns:
            Final, frozen stats

        Raises:
            OrchestratorStateError: If the run has already started
        """
        if self.state != TranslationState.IDLE:
            raise OrchestratorStateError(
                f"Cannot run translation in state {self.state.value}"
            )

        async for _ in self.iter_batches():
            pass

        logger.info(
            f"✅ Translation completed: {self.stats.processed} entries in "
            f"{self.stats.elapsed_seconds():.1f}s ({self.stats.throughput():.1f} lines/s)"
        )
        return self.stats
