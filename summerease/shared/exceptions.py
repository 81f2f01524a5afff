"""Custom exceptions for SummerEase.

Every exception that can reach a user carries a stable ``code`` and a short,
cause-specific ``user_message``.
"""

from typing import Optional


class SummerEaseError(Exception):
    """Base exception for all SummerEase errors."""

    code: str = "internal_error"
    user_message: str = "An unexpected internal error occurred."

    def __init__(self, message: Optional[str] = None, *, user_message: Optional[str] = None):
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


# Extraction

class ExtractionError(SummerEaseError):
    """Base exception for document extraction errors."""
    code = "extraction_failed"
    user_message = "The document could not be read."


class OversizeInputError(ExtractionError):
    """File exceeds the configured byte limit."""
    code = "oversize_input"
    user_message = "File exceeds the 25MB vault limit."

    def __init__(self, size: int, limit: int):
        if limit >= 1024 * 1024:
            label = f"{limit // (1024 * 1024)}MB"
        else:
            label = f"{limit} byte"
        super().__init__(
            f"Input of {size} bytes exceeds limit of {limit} bytes",
            user_message=f"File exceeds the {label} vault limit.",
        )
        self.size = size
        self.limit = limit


class UnsupportedFormatError(ExtractionError):
    """Declared media type is neither plain text nor PDF."""
    code = "unsupported_format"
    user_message = "Format not supported. Upload a PDF or a plain text file."

    def __init__(self, media_type: Optional[str]):
        super().__init__(f"Unsupported media type: {media_type!r}")
        self.media_type = media_type


class CorruptDocumentError(ExtractionError):
    """PDF structure could not be parsed."""
    code = "corrupt_document"
    user_message = "Could not read PDF: document structure is unreadable."


class EmptyInputError(ExtractionError):
    """Nothing to synthesize: no text and no binary payload."""
    code = "empty_input"
    user_message = "Paste some text or upload a document first."


# Synthesis

class SynthesisError(SummerEaseError):
    """Base exception for model invocation errors."""
    code = "synthesis_failed"
    user_message = "Analysis engine failed. Please try a smaller file or plain text."


class EmptyResponseError(SynthesisError):
    """Model returned no usable text."""
    code = "empty_response"
    user_message = "The analysis engine returned an empty briefing. Please try again."


class RateLimitError(SynthesisError):
    """Upstream reported a rate-limit condition."""
    code = "rate_limited"
    user_message = "Rate limit exceeded. Please wait a moment."


class UpstreamRejectedError(SynthesisError):
    """Any other upstream failure."""
    code = "upstream_rejected"
    user_message = "Analysis engine failed. Please try a smaller file or plain text."


class APIKeyError(SynthesisError):
    """API key missing or invalid."""
    code = "api_key_invalid"
    user_message = "The analysis engine is not configured."


# Persistence

class PersistenceError(SummerEaseError):
    """Store rejected a write."""
    code = "persistence_failed"
    user_message = (
        "Your briefing was generated but could not be saved to the vault. "
        "Please try again."
    )


class DeleteFailedError(PersistenceError):
    """Store rejected a delete."""
    code = "delete_failed"
    user_message = "Delete failed. The briefing is still in your vault, please retry."


# Session

class IngestionInProgressError(SummerEaseError):
    """A second ingestion was attempted while one is pending."""
    code = "ingestion_in_progress"
    user_message = "A briefing is already being generated. Please wait for it to finish."


class NotAuthenticatedError(SummerEaseError):
    """Operation requires an authenticated session."""
    code = "not_authenticated"
    user_message = "Please sign in to continue."


# Billing

class CheckoutError(SummerEaseError):
    """Checkout was dismissed, failed, or could not be finalized."""
    code = "checkout_failed"
    user_message = "Payment could not be completed."


# Configuration

class ConfigurationError(SummerEaseError):
    """Error in configuration."""
    code = "configuration_error"
    user_message = "The application is misconfigured."
