"""Document extraction and the ingestion pipeline."""

from summerease.ingest.normalizer import normalize
from summerease.ingest.extractor import (
    PAGE_MARKER,
    DocumentExtractor,
    PageAssessment,
    assess_pages,
)
from summerease.ingest.pipeline import (
    IngestionPipeline,
    IngestionResult,
    IngestionStage,
)

__all__ = [
    'normalize',
    'PAGE_MARKER',
    'DocumentExtractor',
    'PageAssessment',
    'assess_pages',
    'IngestionPipeline',
    'IngestionResult',
    'IngestionStage',
]
