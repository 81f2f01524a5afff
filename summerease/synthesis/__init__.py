"""Briefing and title generation against the generative model."""

from summerease.synthesis.client import (
    GeminiBackend,
    ModelBackend,
    SynthesisClient,
    clean_title,
    count_words,
)
from summerease.synthesis.outcomes import (
    EmptyResponse,
    RateLimited,
    SynthesisOk,
    SynthesisOutcome,
    UpstreamRejected,
)

__all__ = [
    'GeminiBackend',
    'ModelBackend',
    'SynthesisClient',
    'clean_title',
    'count_words',
    'EmptyResponse',
    'RateLimited',
    'SynthesisOk',
    'SynthesisOutcome',
    'UpstreamRejected',
]
