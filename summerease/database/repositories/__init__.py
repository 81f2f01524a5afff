"""
SummerEase - Database Repositories
==================================

Repository classes for database operations.
"""

from summerease.database.repositories.base import BaseRepository
from summerease.database.repositories.summary import SummaryRepository
from summerease.database.repositories.account import (
    ProfileRepository,
    TransactionRepository,
)

__all__ = [
    'BaseRepository',
    'SummaryRepository',
    'ProfileRepository',
    'TransactionRepository',
]
