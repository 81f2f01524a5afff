"""
SummerEase - Briefing Renderer
==============================

Line-based display structure for markdown-lite briefing text:
bold spans (``**...**``), bullet lines (``- `` / ``* ``) and paragraphs.
Display only; the stored text is never modified. Malformed markup
(unterminated ``**``, blank lines) renders as literal text.
"""

import re
from typing import List, Optional

from summerease.shared.enums import RenderKind
from summerease.shared.models import Fragment, RenderLine, TypographyPreference

BULLET_GLYPH = "•"

_BOLD_SPLIT_RE = re.compile(r"(\*\*.*?\*\*)")
_BOLD_SPAN_RE = re.compile(r"\*\*(.+?)\*\*")
_BULLET_MARKER_RE = re.compile(r"^[*-]\s+")


def _fragments(line: str) -> List[Fragment]:
    fragments = []
    for part in _BOLD_SPLIT_RE.split(line):
        if len(part) >= 4 and part.startswith("**") and part.endswith("**"):
            fragments.append(Fragment(part[2:-2], emphasized=True))
        else:
            fragments.append(Fragment(part))
    return fragments


def _strip_bullet_marker(fragments: List[Fragment]) -> List[Fragment]:
    if fragments and not fragments[0].emphasized:
        first = _BULLET_MARKER_RE.sub("", fragments[0].text.lstrip(), count=1)
        fragments = [Fragment(first)] + fragments[1:]
    return fragments


def render_line(line: str, preference: Optional[TypographyPreference] = None) -> RenderLine:
    preference = preference or TypographyPreference()
    fragments = _fragments(line)

    stripped = line.strip()
    is_bullet = stripped.startswith("- ") or stripped.startswith("* ")
    if is_bullet:
        fragments = _strip_bullet_marker(fragments)

    fragments = [f for f in fragments if f.text or f.emphasized]

    return RenderLine(
        kind=RenderKind.BULLET if is_bullet else RenderKind.PARAGRAPH,
        fragments=fragments,
        marker=BULLET_GLYPH if is_bullet else None,
        font_class=preference.font_class,
        spacing_class=preference.spacing_class,
    )


def render(text: str, preference: Optional[TypographyPreference] = None) -> List[RenderLine]:
    """
    Render a briefing into display lines.

    Args:
        text: Stored briefing text
        preference: Typography for every line (defaults apply when omitted)

    Returns:
        One RenderLine per input line, blank lines included as empty paragraphs
    """
    if not text:
        return []
    return [render_line(line.rstrip("\r"), preference) for line in text.split("\n")]


def render_plain(text: str) -> str:
    """Briefing without emphasis markers, for clipboard copy."""
    return _BOLD_SPAN_RE.sub(r"\1", text or "")
