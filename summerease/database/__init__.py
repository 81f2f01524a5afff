"""
SummerEase - Database Layer
===========================

PostgreSQL persistence for briefing records, profiles and transactions.

Usage:
    from summerease.database import DatabaseConnection, Repositories

    db = DatabaseConnection(connection_string)
    await db.connect()
    repos = Repositories(db)

    records = await repos.summaries.list_by_owner(user.id)
"""

from summerease.database.connection import DatabaseConnection
from summerease.database.schema import SCHEMA_SQL, ensure_schema
from summerease.database.repositories import (
    BaseRepository,
    ProfileRepository,
    SummaryRepository,
    TransactionRepository,
)


class Repositories:
    """Container for all repository instances sharing one connection."""

    def __init__(self, db: DatabaseConnection):
        self.db = db
        self._summaries = None
        self._profiles = None
        self._transactions = None

    @property
    def summaries(self) -> SummaryRepository:
        if self._summaries is None:
            self._summaries = SummaryRepository(self.db)
        return self._summaries

    @property
    def profiles(self) -> ProfileRepository:
        if self._profiles is None:
            self._profiles = ProfileRepository(self.db)
        return self._profiles

    @property
    def transactions(self) -> TransactionRepository:
        if self._transactions is None:
            self._transactions = TransactionRepository(self.db)
        return self._transactions


__all__ = [
    'DatabaseConnection',
    'Repositories',
    'BaseRepository',
    'SummaryRepository',
    'ProfileRepository',
    'TransactionRepository',
    'SCHEMA_SQL',
    'ensure_schema',
]
