"""
SummerEase - Synthesis Client
=============================

Sends normalized text (and optionally the original document bytes) to the
generative model and returns a bounded, structured briefing plus a title.

Two calls with different failure tolerance:
- summarize(): any failure aborts the ingestion
- generate_title(): never fails outward, a fallback title is substituted

Usage:
    client = SynthesisClient(GeminiBackend(api_key, model), config)
    briefing = await client.summarize(text, Category.DOCUMENT, payload)
    title = await client.generate_title(text or briefing, payload)
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from google.api_core import exceptions as google_exceptions

from summerease.config import SynthesisConfig
from summerease.shared.enums import Category
from summerease.shared.exceptions import APIKeyError
from summerease.shared.models import BinaryPart
from summerease.synthesis.outcomes import (
    EmptyResponse,
    RateLimited,
    SynthesisOk,
    SynthesisOutcome,
    UpstreamRejected,
)
from summerease.synthesis.prompts import (
    TITLE_INSTRUCTION,
    briefing_instruction,
    briefing_request,
)
from summerease.utils.circuit_breaker import CircuitBreaker, CircuitOpenError

logger = logging.getLogger(__name__)

# Markdown emphasis/heading markers and quote characters
_TITLE_NOISE_RE = re.compile(r"[#*_`\"“”]")
_RATE_LIMIT_MARKERS = ("429", "RATE_LIMIT", "RATE LIMIT", "RESOURCE_EXHAUSTED", "QUOTA")


# =============================================================================
# Model backend
# =============================================================================

class ModelBackend(ABC):
    """Single request/response call to a generative model."""

    @abstractmethod
    async def generate(
        self,
        parts: List[Any],
        *,
        system_instruction: str,
        temperature: float,
        top_p: Optional[float] = None
    ) -> Optional[str]:
        """Return generated text, or None when the model produced nothing."""
        raise NotImplementedError


class GeminiBackend(ModelBackend):
    """
    Gemini backend over google-generativeai.

    The SDK client is configured lazily on the first call.
    """

    def __init__(self, api_key: str, model: str = "gemini-3-flash-preview"):
        self.api_key = api_key
        self.model_name = model
        self._genai = None

    def _ensure_initialized(self):
        if self._genai is None:
            if not self.api_key:
                raise APIKeyError("GEMINI_API_KEY is not set")
            import google.generativeai as genai
            genai.configure(api_key=self.api_key)
            self._genai = genai
            logger.info(f"Gemini client initialized: {self.model_name}")
        return self._genai

    async def generate(
        self,
        parts: List[Any],
        *,
        system_instruction: str,
        temperature: float,
        top_p: Optional[float] = None
    ) -> Optional[str]:
        genai = self._ensure_initialized()

        generation_config = {"temperature": temperature}
        if top_p is not None:
            generation_config["top_p"] = top_p

        model = genai.GenerativeModel(
            self.model_name,
            system_instruction=system_instruction,
            generation_config=generation_config,
        )

        response = await asyncio.to_thread(model.generate_content, parts)

        if not response.candidates:
            logger.warning("Gemini returned no candidates")
            return None

        candidate = response.candidates[0]
        if candidate.content is None or not candidate.content.parts:
            return None

        return "".join(
            part.text for part in candidate.content.parts if getattr(part, "text", None)
        )


# =============================================================================
# Synthesis client
# =============================================================================

class SynthesisClient:
    """Briefing and title generation with a fixed instruction contract."""

    def __init__(
        self,
        backend: ModelBackend,
        config: Optional[SynthesisConfig] = None,
        breaker: Optional[CircuitBreaker] = None
    ):
        self.backend = backend
        self.config = config or SynthesisConfig()
        self.breaker = breaker or CircuitBreaker(
            name="synthesis",
            failure_threshold=self.config.failure_threshold,
            reset_timeout=self.config.reset_timeout,
        )
        self._last_failure: Optional[SynthesisOutcome] = None

    @classmethod
    def from_config(cls, config: SynthesisConfig) -> "SynthesisClient":
        return cls(GeminiBackend(config.api_key, config.model), config)

    # -------------------------------------------------------------------------
    # Briefing
    # -------------------------------------------------------------------------

    async def summarize_outcome(
        self,
        text: str,
        category: Category,
        payload: Optional[BinaryPart] = None
    ) -> SynthesisOutcome:
        """Run the briefing call and classify the result."""
        parts: List[Any] = []
        if payload is not None:
            parts.append(payload.to_blob())
        parts.append(briefing_request(text))

        try:
            async with self.breaker:
                raw = await self.backend.generate(
                    parts,
                    system_instruction=briefing_instruction(category, self.config.word_budget),
                    temperature=self.config.temperature,
                    top_p=self.config.top_p,
                )
        except CircuitOpenError as e:
            logger.warning(f"Synthesis rejected, circuit open: {e}")
            # Report the failure kind that opened the circuit
            if isinstance(self._last_failure, RateLimited):
                return RateLimited(detail=str(e))
            return UpstreamRejected(detail=str(e))
        except Exception as e:
            outcome = self._classify(e)
            self._last_failure = outcome
            logger.error(
                f"Synthesis failed ({type(outcome).__name__}) "
                f"model={self.config.model}: {e}"
            )
            return outcome

        self._last_failure = None
        briefing = (raw or "").strip()
        if not briefing:
            logger.warning("Synthesis returned an empty briefing")
            return EmptyResponse()

        words = count_words(briefing)
        if words > self.config.word_budget:
            logger.warning(f"Briefing exceeds word budget: {words} > {self.config.word_budget}")

        return SynthesisOk(text=briefing)

    async def summarize(
        self,
        text: str,
        category: Category,
        payload: Optional[BinaryPart] = None
    ) -> str:
        """
        Generate the briefing.

        Raises:
            EmptyResponseError: model returned no text
            RateLimitError: upstream rate limit
            UpstreamRejectedError: any other upstream failure
        """
        outcome = await self.summarize_outcome(text, category, payload)
        return outcome.unwrap()

    @staticmethod
    def _classify(error: Exception) -> SynthesisOutcome:
        if isinstance(error, (google_exceptions.ResourceExhausted, google_exceptions.TooManyRequests)):
            return RateLimited(detail=str(error))
        message = str(error).upper()
        if any(marker in message for marker in _RATE_LIMIT_MARKERS):
            return RateLimited(detail=str(error))
        return UpstreamRejected(detail=str(error))

    # -------------------------------------------------------------------------
    # Title
    # -------------------------------------------------------------------------

    async def generate_title(
        self,
        content: str,
        payload: Optional[BinaryPart] = None
    ) -> str:
        """Short formal title. Any failure yields the fallback title."""
        parts: List[Any] = []
        if payload is not None:
            parts.append(payload.to_blob())
        parts.append((content or "")[:self.config.title_input_chars])

        try:
            raw = await self.backend.generate(
                parts,
                system_instruction=TITLE_INSTRUCTION,
                temperature=self.config.title_temperature,
            )
        except Exception as e:
            logger.warning(f"Title generation failed, using fallback: {e}")
            return self.config.fallback_title

        return clean_title(raw or "") or self.config.untitled_title


def clean_title(raw: str) -> str:
    """Strip markdown markers and quotes, keep the first line."""
    lines = [line for line in raw.strip().splitlines() if line.strip()]
    if not lines:
        return ""
    title = _TITLE_NOISE_RE.sub("", lines[0])
    return " ".join(title.split())


def count_words(text: str) -> int:
    return len(re.findall(r"[A-Za-z0-9][\w'-]*", text))
