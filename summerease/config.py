"""
SummerEase - Configuration
==========================

Environment-driven configuration for ingestion, synthesis and storage.

Usage:
    config = AppConfig.from_env()
    extractor = DocumentExtractor(config.ingest)
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from summerease.shared.exceptions import ConfigurationError


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass
class IngestConfig:
    """Document extraction and record assembly limits."""
    max_file_bytes: int = 25 * 1024 * 1024
    max_pdf_pages: int = 20
    min_page_chars: int = 5             # non-whitespace chars for a page to count as text
    visual_density_threshold: float = 100.0

    # Preview rendering
    preview_scale: float = 0.5
    preview_jpeg_quality: int = 60

    # Record assembly
    original_text_limit: int = 10_000
    visual_placeholder: str = "Rich Media Document"

    # Send the PDF bytes with text-rich documents too, not only visual ones
    attach_payload_for_text_pdfs: bool = True

    def __post_init__(self):
        if self.max_file_bytes <= 0:
            raise ConfigurationError("max_file_bytes must be positive")
        if self.max_pdf_pages <= 0:
            raise ConfigurationError("max_pdf_pages must be positive")


@dataclass
class SynthesisConfig:
    """Generative model settings."""
    api_key: str = ""
    model: str = "gemini-3-flash-preview"
    temperature: float = 0.1
    top_p: float = 0.9
    title_temperature: float = 0.2
    word_budget: int = 120
    title_input_chars: int = 1000
    fallback_title: str = "New Intel Report"
    untitled_title: str = "Untitled Directory Entry"

    # Circuit breaker
    failure_threshold: int = 5
    reset_timeout: float = 60.0


@dataclass
class DatabaseConfig:
    """Database configuration."""
    connection_string: str = ""
    min_connections: int = 1
    max_connections: int = 5

    @property
    def enabled(self) -> bool:
        return bool(self.connection_string)


@dataclass
class BillingConfig:
    """Checkout widget settings for the Pro upgrade."""
    checkout_key: str = ""
    amount_minor: int = 1900            # paise
    currency: str = "INR"
    plan: str = "Pro Monthly"
    merchant_name: str = "SummerEase AI"
    description: str = "Monthly Pro Subscription"


@dataclass
class AppConfig:
    """Complete application configuration."""
    ingest: IngestConfig = field(default_factory=IngestConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    billing: BillingConfig = field(default_factory=BillingConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "AppConfig":
        """Create config from environment variables (and a local .env file)."""
        load_dotenv(dotenv_path)

        return cls(
            ingest=IngestConfig(
                max_file_bytes=_env_int("MAX_FILE_BYTES", 25 * 1024 * 1024),
                max_pdf_pages=_env_int("MAX_PDF_PAGES", 20),
                original_text_limit=_env_int("ORIGINAL_TEXT_LIMIT", 10_000),
                attach_payload_for_text_pdfs=(
                    os.getenv("ATTACH_PDF_PAYLOAD", "true").lower() == "true"
                ),
            ),
            synthesis=SynthesisConfig(
                api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
                model=os.getenv("SYNTHESIS_MODEL", "gemini-3-flash-preview"),
                temperature=_env_float("SYNTHESIS_TEMPERATURE", 0.1),
                top_p=_env_float("SYNTHESIS_TOP_P", 0.9),
                failure_threshold=_env_int("SYNTHESIS_FAILURE_THRESHOLD", 5),
                reset_timeout=_env_float("SYNTHESIS_RESET_TIMEOUT", 60.0),
            ),
            database=DatabaseConfig(
                connection_string=os.getenv("DATABASE_URL", ""),
                min_connections=_env_int("DB_MIN_CONNECTIONS", 1),
                max_connections=_env_int("DB_MAX_CONNECTIONS", 5),
            ),
            billing=BillingConfig(
                checkout_key=os.getenv("CHECKOUT_KEY", ""),
                amount_minor=_env_int("CHECKOUT_AMOUNT_MINOR", 1900),
                currency=os.getenv("CHECKOUT_CURRENCY", "INR"),
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
