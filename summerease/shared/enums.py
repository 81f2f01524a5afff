"""Shared enumerations for ingestion, library and session state."""

from enum import Enum


class Category(str, Enum):
    """Source category of a stored briefing."""
    TEXT = "Text"
    DOCUMENT = "Document"


class CategoryFilter(str, Enum):
    """Library category filter."""
    ALL = "All"
    TEXT = "Text"
    DOCUMENT = "Document"


class SortOrder(str, Enum):
    """Library sort order."""
    NEWEST = "newest"
    OLDEST = "oldest"
    ALPHABETICAL = "alphabetical"


class SubscriptionTier(str, Enum):
    """Subscription tier of a user."""
    FREE = "free"
    PRO = "pro"


class SyncStatus(str, Enum):
    """State of the last round-trip to the data store."""
    SYNCED = "synced"
    SYNCING = "syncing"
    ERROR = "error"


class RenderKind(str, Enum):
    """Layout kind of a rendered briefing line."""
    BULLET = "bullet"
    PARAGRAPH = "paragraph"
