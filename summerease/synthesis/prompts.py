"""
SummerEase - Synthesis Instructions
===================================

Fixed instruction contracts sent with every model call. The briefing
contract and the title contract are deliberately separate: they fail
differently and are tuned differently.
"""

from summerease.shared.enums import Category


BRIEFING_INSTRUCTION = """You are a Strategic Intelligence Analyst for a private executive vault.

TASK: Synthesize the provided {source_kind} into a concise, actionable BRIEFING.

OUTPUT STRUCTURE (follow exactly):
1. **EXECUTIVE THESIS**: one bolded sentence stating the core purpose of the source.
2. **PRIMARY INSIGHTS**:
   - [Insight]: [Implication]
   - [Insight]: [Implication]
   - [Insight]: [Implication]
3. **VERDICT**: one sentence with the final strategic takeaway.

RULES:
- Ignore page markers such as "[PAGE 3]", headers, footers, structural artifacts and OCR noise.
- Never reproduce garbled characters, broken formatting or technical meta-tags.
- If the source is fragmented, reconstruct its meaning into a coherent briefing.
- No greetings, no introduction, no conversational filler.
- Use Markdown for hierarchy.
- Hard limit: {word_budget} words.
- Tone: objective, dense, professional."""


TITLE_INSTRUCTION = (
    "Identify the core subject. Return a 3-5 word formal title. "
    "NO punctuation. NO noise."
)

VISUAL_ONLY_PLACEHOLDER = "Document provides visual data only."


def briefing_instruction(category: Category, word_budget: int = 120) -> str:
    """System instruction for the briefing call."""
    source_kind = "document" if category == Category.DOCUMENT else "text"
    return BRIEFING_INSTRUCTION.format(source_kind=source_kind, word_budget=word_budget)


def briefing_request(content: str) -> str:
    """User turn for the briefing call; a placeholder stands in for empty text."""
    source = content or VISUAL_ONLY_PLACEHOLDER
    return f"Analyze this content for strategic value. Ignore noise. Source Content: {source}"
