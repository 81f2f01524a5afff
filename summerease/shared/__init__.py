"""Shared models, enums and exceptions."""

from .enums import (
    Category,
    CategoryFilter,
    SortOrder,
    SubscriptionTier,
    SyncStatus,
    RenderKind,
)

from .models import (
    User,
    RawInput,
    BinaryPart,
    ExtractedDocument,
    SynthesisResult,
    SummaryRecord,
    NewSummary,
    LibraryViewState,
    TypographyPreference,
    Fragment,
    RenderLine,
    Transaction,
)
