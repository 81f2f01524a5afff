"""
SummerEase - Record Assembler
=============================

Folds extractor output and synthesis output into a persisted SummaryRecord.
Exactly one insert per call; nothing is written when the caller never
reaches this step.
"""

import logging
from typing import List, Optional, Protocol

from summerease.config import IngestConfig
from summerease.shared.enums import Category
from summerease.shared.exceptions import PersistenceError
from summerease.shared.models import (
    ExtractedDocument,
    NewSummary,
    SummaryRecord,
    SynthesisResult,
    User,
)

logger = logging.getLogger(__name__)


class SummaryStore(Protocol):
    """Persistence capability consumed by the assembler and the session."""

    async def insert(self, summary: NewSummary) -> SummaryRecord: ...

    async def list_by_owner(
        self,
        owner_id: str,
        order_by: str = "created_at DESC",
        limit: Optional[int] = None
    ) -> List[SummaryRecord]: ...

    async def count_by_owner(self, owner_id: str) -> int: ...

    async def delete_by_id(self, id: str, owner_id: str) -> bool: ...


class RecordAssembler:
    """
    Builds the insert payload, stores it and returns the hydrated record.

    Usage:
        assembler = RecordAssembler(repos.summaries, config.ingest)
        record = await assembler.assemble(user, extracted, synthesis, Category.DOCUMENT)
    """

    def __init__(self, repository: SummaryStore, config: Optional[IngestConfig] = None):
        self.repository = repository
        self.config = config or IngestConfig()

    def original_text_for(self, extracted: ExtractedDocument) -> str:
        """Bounded prefix of the normalized text, or the placeholder for visual-only input."""
        if not extracted.has_text:
            return self.config.visual_placeholder
        return extracted.normalized_text[:self.config.original_text_limit]

    def build(
        self,
        user: User,
        extracted: ExtractedDocument,
        synthesis: SynthesisResult,
        category: Category
    ) -> NewSummary:
        return NewSummary(
            owner_id=user.id,
            title=synthesis.title,
            original_text=self.original_text_for(extracted),
            summary=synthesis.briefing_text,
            category=category,
        )

    async def assemble(
        self,
        user: User,
        extracted: ExtractedDocument,
        synthesis: SynthesisResult,
        category: Category
    ) -> SummaryRecord:
        """
        Store one record for the user.

        Raises:
            PersistenceError: the store rejected the insert
        """
        payload = self.build(user, extracted, synthesis, category)

        try:
            record = await self.repository.insert(payload)
        except PersistenceError:
            raise
        except Exception as e:
            logger.error(f"Record insert failed for user {user.id}: {e}")
            raise PersistenceError(f"Insert rejected: {e}") from e

        if record.owner_id != user.id:
            raise PersistenceError(
                f"Store returned record {record.id} owned by {record.owner_id}, expected {user.id}"
            )

        logger.info(f"Record assembled: {record.id} category={category.value}")
        return record
