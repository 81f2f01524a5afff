"""
SummerEase - Base Repository
============================

Abstract base class for the repository pattern with common CRUD operations.
Rows use the store's flat column names; subclasses map them to domain shapes.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Set, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

# Whitelist of allowed ORDER BY columns for SQL injection prevention
ALLOWED_ORDER_COLUMNS: Set[str] = {
    'created_at', 'updated_at', 'id', 'title', 'category', 'plan'
}


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository.

    Subclasses must implement:
    - table_name: str
    - _to_entity(row) -> T
    - _to_record(entity) -> dict
    """

    def __init__(self, connection):
        """
        Args:
            connection: DatabaseConnection instance
        """
        self.db = connection

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Table name for this repository."""
        pass

    @abstractmethod
    def _to_entity(self, row: dict) -> T:
        """Convert database row to entity object."""
        pass

    @abstractmethod
    def _to_record(self, entity: Any) -> Dict[str, Any]:
        """Convert entity object to database record."""
        pass

    def _validate_order_by(self, order_by: str) -> str:
        """Validate and sanitize ORDER BY clause."""
        if not order_by:
            return "created_at DESC"

        parts = order_by.strip().split()
        if len(parts) == 1:
            column, direction = parts[0], "ASC"
        elif len(parts) == 2:
            column, direction = parts
        else:
            logger.warning(f"Invalid order_by format: '{order_by}'. Using fallback.")
            return "created_at DESC"

        if column.lower() not in ALLOWED_ORDER_COLUMNS:
            logger.warning(f"Invalid sort column: '{column}'. Using fallback.")
            return "created_at DESC"

        if direction.upper() not in ('ASC', 'DESC'):
            logger.warning(f"Invalid sort direction: '{direction}'. Defaulting to ASC.")
            return f"{column.lower()} ASC"

        return f"{column.lower()} {direction.upper()}"

    @staticmethod
    def _where(conditions: Dict[str, Any], start: int = 1) -> Tuple[str, List[Any]]:
        parts = []
        values = []
        for i, (key, value) in enumerate(conditions.items(), start=start):
            parts.append(f"{key} = ${i}")
            values.append(value)
        return " AND ".join(parts), values

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def get_by_id(self, id: Any) -> Optional[T]:
        """Get entity by ID."""
        query = f"SELECT * FROM {self.table_name} WHERE id = $1"
        row = await self.db.fetchrow(query, id)
        return self._to_entity(dict(row)) if row else None

    async def find_by(
        self,
        conditions: Dict[str, Any],
        limit: Optional[int] = None,
        order_by: str = "created_at DESC"
    ) -> List[T]:
        """Find entities matching all conditions."""
        safe_order_by = self._validate_order_by(order_by)
        where_clause, values = self._where(conditions)

        query = f"SELECT * FROM {self.table_name}"
        if where_clause:
            query += f" WHERE {where_clause}"
        query += f" ORDER BY {safe_order_by}"
        if limit is not None:
            values.append(limit)
            query += f" LIMIT ${len(values)}"

        rows = await self.db.fetch(query, *values)
        return [self._to_entity(dict(row)) for row in rows]

    async def count_by(self, conditions: Dict[str, Any]) -> int:
        """Count entities matching all conditions."""
        where_clause, values = self._where(conditions)
        query = f"SELECT COUNT(*) FROM {self.table_name}"
        if where_clause:
            query += f" WHERE {where_clause}"
        return int(await self.db.fetchval(query, *values) or 0)

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def create(self, entity: Any) -> T:
        """Insert a new entity and return the stored row."""
        record = self._to_record(entity)
        columns = list(record.keys())
        placeholders = [f"${i+1}" for i in range(len(columns))]

        query = f"""
            INSERT INTO {self.table_name} ({', '.join(columns)})
            VALUES ({', '.join(placeholders)})
            RETURNING *
        """

        row = await self.db.fetchrow(query, *record.values())
        if row is None:
            raise RuntimeError(f"Insert into {self.table_name} returned no row")
        return self._to_entity(dict(row))

    async def update_where(self, conditions: Dict[str, Any], updates: Dict[str, Any]) -> int:
        """Update matching rows. Returns count of updated rows."""
        if not updates:
            return 0

        set_parts = []
        values = []
        for i, (key, value) in enumerate(updates.items(), start=1):
            set_parts.append(f"{key} = ${i}")
            values.append(value)

        where_clause, where_values = self._where(conditions, start=len(values) + 1)
        values.extend(where_values)

        query = f"UPDATE {self.table_name} SET {', '.join(set_parts)}"
        if where_clause:
            query += f" WHERE {where_clause}"

        result = await self.db.execute(query, *values)
        # Parse "UPDATE N" to get count
        return int(result.split()[-1])

    async def delete_where(self, conditions: Dict[str, Any]) -> int:
        """Delete matching rows. Returns count of deleted rows."""
        if not conditions:
            raise ValueError("Refusing to delete without conditions")

        where_clause, values = self._where(conditions)
        query = f"DELETE FROM {self.table_name} WHERE {where_clause}"
        result = await self.db.execute(query, *values)
        # Parse "DELETE N" to get count
        return int(result.split()[-1])
