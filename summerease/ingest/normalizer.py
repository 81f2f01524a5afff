"""Text cleanup applied to every extracted or pasted input."""

import re

# Anything outside printable ASCII, newline, carriage return and tab
_NOISE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(raw: str) -> str:
    """
    Strip non-printable/non-ASCII noise and collapse whitespace.

    Every noise character becomes a space, every whitespace run becomes a
    single space, and the result is trimmed. Total and idempotent.
    """
    if not raw:
        return ""
    cleaned = _NOISE_RE.sub(" ", raw)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()
