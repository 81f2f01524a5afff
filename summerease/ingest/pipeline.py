"""
SummerEase - Ingestion Pipeline
===============================

One logical operation per submission, strictly sequential:

1. Extract   - normalize text, classify PDFs as textual or visual
2. Synthesize - briefing (failure aborts) then title (failure degrades)
3. Store     - exactly one insert via the RecordAssembler
4. Track     - prepend the record to the session collection

A failure at any stage leaves no partial record and no change to the
session collection. At most one ingestion runs per session; a second
attempt is rejected, not queued.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from summerease.config import IngestConfig
from summerease.core.logging_config import bind_summary
from summerease.ingest.extractor import DocumentExtractor
from summerease.library.assembler import RecordAssembler
from summerease.session import SessionContext
from summerease.shared.exceptions import EmptyInputError, SummerEaseError
from summerease.shared.models import (
    BinaryPart,
    ExtractedDocument,
    RawInput,
    SummaryRecord,
    SynthesisResult,
)
from summerease.synthesis.client import SynthesisClient

logger = logging.getLogger(__name__)


class IngestionStage(Enum):
    """Stages reported to the progress callback."""
    EXTRACTING = "Reading document..."
    NEGOTIATING = "Negotiating with Gemini Flash..."
    SYNTHESIZING = "Crunching Intelligence..."
    MULTIMODAL = "Multimodal Reasoning..."
    TITLING = "Finalizing metadata..."
    STORING = "Securing in vault..."
    COMPLETE = "Complete"


ProgressCallback = Callable[[IngestionStage], None]


@dataclass
class IngestionResult:
    """Outcome of submit(): the record, or a user-facing failure."""
    success: bool
    record: Optional[SummaryRecord] = None
    code: Optional[str] = None
    message: Optional[str] = None
    duration_seconds: float = 0.0


class IngestionPipeline:
    """
    Runs extraction, synthesis and storage for one session.

    Usage:
        pipeline = IngestionPipeline(extractor, client, assembler, config.ingest)
        record = await pipeline.ingest(context, RawInput.from_file(data, "application/pdf", "q3.pdf"))
    """

    def __init__(
        self,
        extractor: DocumentExtractor,
        synthesis_client: SynthesisClient,
        assembler: RecordAssembler,
        config: Optional[IngestConfig] = None,
        on_progress: Optional[ProgressCallback] = None
    ):
        self.extractor = extractor
        self.synthesis_client = synthesis_client
        self.assembler = assembler
        self.config = config or IngestConfig()
        self.on_progress = on_progress

    def _report(self, stage: IngestionStage) -> None:
        if self.on_progress is not None:
            self.on_progress(stage)

    def model_payload(self, extracted: ExtractedDocument) -> Optional[BinaryPart]:
        """Binary payload for the model: always for visual documents, optional otherwise."""
        if extracted.payload is None:
            return None
        if extracted.is_visual or self.config.attach_payload_for_text_pdfs:
            return extracted.payload
        return None

    async def ingest(self, session: SessionContext, raw: RawInput) -> SummaryRecord:
        """
        Ingest one input for the session user.

        Raises:
            IngestionInProgressError: another ingestion is pending in this session
            ExtractionError: oversize, unsupported, corrupt or empty input
            SynthesisError: briefing generation failed
            PersistenceError: the store rejected the insert
        """
        async with session.ingestion():
            session.mark_syncing()
            try:
                record = await self._run(session, raw)
            except Exception:
                session.mark_error()
                raise

            if session.add_record(record):
                session.mark_synced()
            bind_summary(record.id)
            self._report(IngestionStage.COMPLETE)
            return record

    async def _run(self, session: SessionContext, raw: RawInput) -> SummaryRecord:
        self._report(IngestionStage.EXTRACTING)
        extracted = await self.extractor.extract_async(raw)

        payload = self.model_payload(extracted)
        if not extracted.has_text and payload is None:
            raise EmptyInputError()

        self._report(IngestionStage.NEGOTIATING)
        self._report(
            IngestionStage.MULTIMODAL if extracted.is_visual else IngestionStage.SYNTHESIZING
        )
        briefing = await self.synthesis_client.summarize(
            extracted.normalized_text, extracted.category, payload
        )

        self._report(IngestionStage.TITLING)
        title = await self.synthesis_client.generate_title(
            extracted.normalized_text or briefing, payload
        )

        self._report(IngestionStage.STORING)
        return await self.assembler.assemble(
            session.user,
            extracted,
            SynthesisResult(briefing_text=briefing, title=title),
            extracted.category,
        )

    async def submit(self, session: SessionContext, raw: RawInput) -> IngestionResult:
        """ingest() with every SummerEaseError translated into a user-facing result."""
        start = time.time()
        try:
            record = await self.ingest(session, raw)
        except SummerEaseError as e:
            logger.warning(f"Ingestion failed ({e.code}) for user {session.user.id}: {e}")
            return IngestionResult(
                success=False,
                code=e.code,
                message=e.user_message,
                duration_seconds=time.time() - start,
            )

        duration = time.time() - start
        logger.info(f"Ingestion complete: {record.id} in {duration:.2f}s")
        return IngestionResult(success=True, record=record, duration_seconds=duration)
