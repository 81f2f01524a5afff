"""
SummerEase - Intelligence Briefing Vault
========================================

Turns pasted text or uploaded PDFs into short structured briefings and keeps
them in a private per-user library.

- ingest/: extraction, normalization, the ingestion pipeline
- synthesis/: briefing and title generation
- library/: record assembly, search/filter/sort, briefing rendering
- database/: asyncpg repositories
- session.py: per-user session state
"""

__version__ = "5.0.0"
