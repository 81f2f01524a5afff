"""
SummerEase - Document Extractor
===============================

Turns a pasted text or an uploaded file into an ExtractedDocument.

Supported inputs:
- Inline text and text/plain files: decoded, normalized, never visual
- application/pdf: per-page text with [PAGE n] markers, a page-1 preview
  and a textual/visual classification

A PDF is treated as visual (scanned or image-dominant) when no page yields
meaningful text or when the average extracted characters per processed page
is below the density threshold. Visual documents must be synthesized with the
original bytes attached.
"""

import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from typing import List, Optional, Sequence

import fitz  # PyMuPDF

from summerease.config import IngestConfig
from summerease.ingest.normalizer import normalize
from summerease.shared.enums import Category
from summerease.shared.exceptions import (
    CorruptDocumentError,
    OversizeInputError,
    UnsupportedFormatError,
)
from summerease.shared.models import (
    PDF,
    PLAIN_TEXT,
    BinaryPart,
    ExtractedDocument,
    RawInput,
)

logger = logging.getLogger(__name__)

PAGE_MARKER = "[PAGE {number}]"


# =============================================================================
# Page assessment
# =============================================================================

@dataclass(frozen=True)
class PageAssessment:
    """Text statistics of the processed PDF pages."""
    pages_processed: int
    total_chars: int
    has_text: bool
    text_density: float
    is_visual: bool


def _non_whitespace_count(text: str) -> int:
    return sum(1 for ch in text if not ch.isspace())


def assess_pages(
    page_texts: Sequence[str],
    min_page_chars: int = 5,
    density_threshold: float = 100.0
) -> PageAssessment:
    """
    Classify extracted page texts as textual or visual.

    Args:
        page_texts: Raw text of each processed page (markers excluded)
        min_page_chars: A page counts as text when it has more non-whitespace
            characters than this
        density_threshold: Documents averaging fewer characters per page are visual

    Returns:
        PageAssessment
    """
    pages = len(page_texts)
    total_chars = sum(len(text.strip()) for text in page_texts)
    has_text = any(_non_whitespace_count(text) > min_page_chars for text in page_texts)
    density = total_chars / pages if pages else 0.0
    is_visual = (not has_text) or density < density_threshold

    return PageAssessment(
        pages_processed=pages,
        total_chars=total_chars,
        has_text=has_text,
        text_density=density,
        is_visual=is_visual,
    )


# =============================================================================
# Extractor
# =============================================================================

class DocumentExtractor:
    """
    Extracts normalized text, preview and classification from raw input.

    Usage:
        extractor = DocumentExtractor(IngestConfig())
        extracted = await extractor.extract_async(RawInput.from_file(data, "application/pdf"))
    """

    def __init__(self, config: Optional[IngestConfig] = None):
        self.config = config or IngestConfig()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def extract(self, raw: RawInput) -> ExtractedDocument:
        """
        Extract a document synchronously.

        Raises:
            OversizeInputError: input exceeds max_file_bytes
            UnsupportedFormatError: media type is neither text nor PDF
            CorruptDocumentError: PDF could not be parsed
        """
        size = raw.byte_length
        if size > self.config.max_file_bytes:
            raise OversizeInputError(size, self.config.max_file_bytes)

        if not raw.is_file:
            return self._extract_inline(raw.text or "")

        media_type = self._resolve_media_type(raw)
        if media_type == PLAIN_TEXT:
            return self._extract_text_file(raw)
        if media_type == PDF:
            return self._extract_pdf(raw)

        raise UnsupportedFormatError(raw.media_type)

    async def extract_async(self, raw: RawInput) -> ExtractedDocument:
        """Extract off the event loop; PDF parsing is CPU bound."""
        return await asyncio.to_thread(self.extract, raw)

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def _extract_inline(self, text: str) -> ExtractedDocument:
        return ExtractedDocument(
            normalized_text=normalize(text),
            category=Category.TEXT,
            is_visual=False,
        )

    def _extract_text_file(self, raw: RawInput) -> ExtractedDocument:
        text = raw.data.decode("utf-8", errors="replace")
        return ExtractedDocument(
            normalized_text=normalize(text),
            category=Category.TEXT,
            is_visual=False,
            source_file_name=raw.file_name,
        )

    # -------------------------------------------------------------------------
    # PDF
    # -------------------------------------------------------------------------

    def _extract_pdf(self, raw: RawInput) -> ExtractedDocument:
        try:
            doc = fitz.open(stream=raw.data, filetype="pdf")
        except Exception as e:
            logger.warning(f"PDF open failed for {raw.file_name or '<upload>'}: {e}")
            raise CorruptDocumentError(f"Unable to open PDF: {e}") from e

        try:
            if doc.needs_pass:
                raise CorruptDocumentError(
                    "PDF is encrypted",
                    user_message="Could not read PDF: the document is password protected.",
                )

            page_count = doc.page_count
            page_texts = self._extract_page_texts(doc)
            preview = self._render_preview(doc)
        finally:
            doc.close()

        assessment = assess_pages(
            page_texts,
            min_page_chars=self.config.min_page_chars,
            density_threshold=self.config.visual_density_threshold,
        )

        # Markers alone carry no content
        full_text = ""
        if assessment.has_text:
            full_text = "".join(
                f"{PAGE_MARKER.format(number=i)}\n{text}\n\n"
                for i, text in enumerate(page_texts, start=1)
            )

        logger.info(
            f"PDF extracted: {assessment.pages_processed}/{page_count} pages, "
            f"density={assessment.text_density:.1f}, visual={assessment.is_visual}"
        )

        return ExtractedDocument(
            normalized_text=normalize(full_text),
            category=Category.DOCUMENT,
            is_visual=assessment.is_visual,
            preview_image=preview,
            source_file_name=raw.file_name,
            page_count=page_count,
            payload=BinaryPart(data=raw.data, mime_type=PDF),
            pages_processed=assessment.pages_processed,
            text_density=assessment.text_density,
        )

    def _extract_page_texts(self, doc: "fitz.Document") -> List[str]:
        """Text of each page up to the page cap; any failure discards everything."""
        limit = min(doc.page_count, self.config.max_pdf_pages)
        texts: List[str] = []
        try:
            for index in range(limit):
                texts.append(doc[index].get_text("text") or "")
        except Exception as e:
            raise CorruptDocumentError(f"Text extraction failed on page {len(texts) + 1}: {e}") from e
        return texts

    def _render_preview(self, doc: "fitz.Document") -> Optional[bytes]:
        """Render page 1 at reduced scale as JPEG. Failures only omit the preview."""
        if doc.page_count == 0:
            return None
        try:
            scale = self.config.preview_scale
            pix = doc[0].get_pixmap(matrix=fitz.Matrix(scale, scale))
            return pix.tobytes("jpeg", jpg_quality=self.config.preview_jpeg_quality)
        except Exception as e:
            logger.warning(f"Preview generation failed: {e}")
            return None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _resolve_media_type(raw: RawInput) -> Optional[str]:
        """Declared media type without parameters, guessed from the name if absent."""
        media_type = raw.media_type
        if not media_type and raw.file_name:
            media_type, _ = mimetypes.guess_type(raw.file_name)
        if not media_type:
            return None
        return media_type.split(";", 1)[0].strip().lower()
