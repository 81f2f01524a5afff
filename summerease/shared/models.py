"""
SummerEase Domain Models
========================

Dataclass models shared by the ingestion pipeline, the library and the
session layer.

Lifecycle:
1. RawInput        - transient, one ingestion operation
2. ExtractedDocument - produced by the extractor
3. SynthesisResult - briefing + title, folded into a SummaryRecord
4. SummaryRecord   - durable, owned by exactly one user
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from summerease.shared.enums import (
    Category,
    CategoryFilter,
    RenderKind,
    SortOrder,
    SubscriptionTier,
)


# =============================================================================
# Identity
# =============================================================================

@dataclass(frozen=True)
class User:
    """Authenticated user, read-only input to the core."""
    id: str
    email: str
    name: str
    subscription: SubscriptionTier = SubscriptionTier.FREE

    @property
    def is_pro(self) -> bool:
        return self.subscription == SubscriptionTier.PRO


# =============================================================================
# Ingestion
# =============================================================================

PLAIN_TEXT = "text/plain"
PDF = "application/pdf"


@dataclass(frozen=True)
class BinaryPart:
    """Inline binary document payload handed to a multimodal model."""
    data: bytes
    mime_type: str

    def to_blob(self) -> Dict[str, Any]:
        """Inline blob shape accepted by the generative model SDK."""
        return {"mime_type": self.mime_type, "data": self.data}


@dataclass(frozen=True)
class RawInput:
    """
    Either inline text or a binary file.

    Usage:
        RawInput.from_text("pasted notes")
        RawInput.from_file(data, "application/pdf", file_name="q3.pdf")
    """
    text: Optional[str] = None
    data: Optional[bytes] = None
    media_type: Optional[str] = None
    file_name: Optional[str] = None

    @classmethod
    def from_text(cls, text: str) -> "RawInput":
        return cls(text=text)

    @classmethod
    def from_file(
        cls,
        data: bytes,
        media_type: Optional[str],
        file_name: Optional[str] = None
    ) -> "RawInput":
        return cls(data=data, media_type=media_type, file_name=file_name)

    @property
    def is_file(self) -> bool:
        return self.data is not None

    @property
    def byte_length(self) -> int:
        if self.data is not None:
            return len(self.data)
        return len((self.text or "").encode("utf-8"))


@dataclass
class ExtractedDocument:
    """Output of the document extractor."""
    normalized_text: str
    category: Category
    is_visual: bool = False
    preview_image: Optional[bytes] = None
    source_file_name: Optional[str] = None
    page_count: Optional[int] = None
    payload: Optional[BinaryPart] = None

    # PDF diagnostics
    pages_processed: int = 0
    text_density: float = 0.0

    @property
    def has_text(self) -> bool:
        return bool(self.normalized_text)


@dataclass(frozen=True)
class SynthesisResult:
    """Briefing text and derived title."""
    briefing_text: str
    title: str


# =============================================================================
# Durable record
# =============================================================================

@dataclass(frozen=True)
class SummaryRecord:
    """A persisted briefing. Immutable once created."""
    id: str
    owner_id: str
    title: str
    original_text: str
    summary: str
    created_at: datetime
    category: Category

    @property
    def created_ts(self) -> float:
        """Creation time as epoch seconds."""
        created = self.created_at
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return created.timestamp()


@dataclass(frozen=True)
class NewSummary:
    """Insert payload for a record not yet assigned an id."""
    owner_id: str
    title: str
    original_text: str
    summary: str
    category: Category


# =============================================================================
# Library view
# =============================================================================

@dataclass(frozen=True)
class LibraryViewState:
    """Search/filter/sort state of the library view."""
    search_term: str = ""
    category_filter: CategoryFilter = CategoryFilter.ALL
    sort_order: SortOrder = SortOrder.NEWEST

    def with_search(self, term: str) -> "LibraryViewState":
        return replace(self, search_term=term)

    def with_filter(self, category_filter: CategoryFilter) -> "LibraryViewState":
        return replace(self, category_filter=category_filter)

    def with_sort(self, sort_order: SortOrder) -> "LibraryViewState":
        return replace(self, sort_order=sort_order)


# =============================================================================
# Briefing rendering
# =============================================================================

FONT_SCALES: List[str] = ["text-sm", "text-base", "text-lg", "text-xl"]
LINE_SPACINGS: List[str] = ["leading-tight", "leading-normal", "leading-relaxed", "leading-loose"]


@dataclass(frozen=True)
class TypographyPreference:
    """Reading preference for the detail view (ordinal steps 0-3)."""
    font_scale: int = 1
    line_spacing: int = 2

    def __post_init__(self):
        if not 0 <= self.font_scale < len(FONT_SCALES):
            raise ValueError(f"font_scale must be 0-{len(FONT_SCALES) - 1}")
        if not 0 <= self.line_spacing < len(LINE_SPACINGS):
            raise ValueError(f"line_spacing must be 0-{len(LINE_SPACINGS) - 1}")

    @property
    def font_class(self) -> str:
        return FONT_SCALES[self.font_scale]

    @property
    def spacing_class(self) -> str:
        return LINE_SPACINGS[self.line_spacing]

    def with_font_scale(self, step: int) -> "TypographyPreference":
        return replace(self, font_scale=step)

    def with_line_spacing(self, step: int) -> "TypographyPreference":
        return replace(self, line_spacing=step)


@dataclass(frozen=True)
class Fragment:
    """Span of a rendered line."""
    text: str
    emphasized: bool = False


@dataclass(frozen=True)
class RenderLine:
    """One display line of a briefing."""
    kind: RenderKind
    fragments: List[Fragment] = field(default_factory=list)
    marker: Optional[str] = None
    font_class: str = FONT_SCALES[1]
    spacing_class: str = LINE_SPACINGS[2]

    @property
    def is_bullet(self) -> bool:
        return self.kind == RenderKind.BULLET

    @property
    def plain_text(self) -> str:
        return "".join(f.text for f in self.fragments)


# =============================================================================
# Billing
# =============================================================================

@dataclass(frozen=True)
class Transaction:
    """Logged payment for a subscription upgrade."""
    user_id: str
    email: str
    plan: str
    payment_amount: float
    payment_status: str
    order_id: Optional[str] = None
    payment_id: Optional[str] = None
    signature: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
