"""
SummerEase - Summary Repository
===============================

Repository for briefing records. Every query is scoped to one owner.
"""

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from summerease.database.repositories.base import BaseRepository
from summerease.shared.enums import Category
from summerease.shared.models import NewSummary, SummaryRecord

logger = logging.getLogger(__name__)


def as_uuid(value: Any) -> UUID:
    """Coerce an id string to UUID for asyncpg parameters."""
    return value if isinstance(value, UUID) else UUID(str(value))


class SummaryRepository(BaseRepository[SummaryRecord]):
    """
    Repository for the summaries table.

    Rows use flat column names (user_id, original_text, created_at);
    entities are SummaryRecord instances.
    """

    @property
    def table_name(self) -> str:
        return "summaries"

    def _to_entity(self, row: dict) -> SummaryRecord:
        """Convert database row to SummaryRecord."""
        return SummaryRecord(
            id=str(row['id']),
            owner_id=str(row['user_id']),
            title=row['title'],
            original_text=row.get('original_text') or "",
            summary=row['summary'],
            created_at=row['created_at'],
            category=Category(row['category']),
        )

    def _to_record(self, entity: NewSummary) -> Dict[str, Any]:
        """Convert NewSummary to database record. id and created_at are store-assigned."""
        return {
            'user_id': as_uuid(entity.owner_id),
            'title': entity.title,
            'original_text': entity.original_text,
            'summary': entity.summary,
            'category': Category(entity.category).value,
        }

    # =========================================================================
    # Owner-scoped Queries
    # =========================================================================

    async def insert(self, summary: NewSummary) -> SummaryRecord:
        """Insert a record and return it with its assigned id and timestamp."""
        record = await self.create(summary)
        logger.info(f"Summary stored: {record.id} owner={record.owner_id}")
        return record

    async def list_by_owner(
        self,
        owner_id: str,
        order_by: str = "created_at DESC",
        limit: Optional[int] = None
    ) -> List[SummaryRecord]:
        """List records of one owner."""
        return await self.find_by(
            {'user_id': as_uuid(owner_id)},
            limit=limit,
            order_by=order_by,
        )

    async def count_by_owner(self, owner_id: str) -> int:
        return await self.count_by({'user_id': as_uuid(owner_id)})

    async def delete_by_id(self, id: str, owner_id: str) -> bool:
        """
        Delete one record of one owner.

        Returns:
            True if a row was deleted
        """
        deleted = await self.delete_where({
            'id': as_uuid(id),
            'user_id': as_uuid(owner_id),
        })
        if not deleted:
            logger.warning(f"Delete matched no row: {id} owner={owner_id}")
        return deleted > 0
