"""
Result type of a synthesis call.

Callers branch on the variant instead of catching exceptions:

    outcome = await client.summarize_outcome(text, Category.TEXT)
    if isinstance(outcome, RateLimited):
        ...

``unwrap()`` returns the text of ``SynthesisOk`` and raises the matching
SynthesisError for every failure variant.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from summerease.shared.exceptions import (
    EmptyResponseError,
    RateLimitError,
    UpstreamRejectedError,
)


@dataclass(frozen=True)
class SynthesisOk:
    text: str
    ok: ClassVar[bool] = True

    def unwrap(self) -> str:
        return self.text


@dataclass(frozen=True)
class RateLimited:
    detail: str = ""
    ok: ClassVar[bool] = False

    def unwrap(self) -> str:
        raise RateLimitError(self.detail or None)


@dataclass(frozen=True)
class UpstreamRejected:
    detail: str = ""
    ok: ClassVar[bool] = False

    def unwrap(self) -> str:
        raise UpstreamRejectedError(self.detail or None)


@dataclass(frozen=True)
class EmptyResponse:
    ok: ClassVar[bool] = False

    def unwrap(self) -> str:
        raise EmptyResponseError()


SynthesisOutcome = Union[SynthesisOk, RateLimited, UpstreamRejected, EmptyResponse]
