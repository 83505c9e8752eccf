"""
Small helpers shared by the generation operations.
"""
import re
from typing import NamedTuple

TRUNCATION_MARKER = "...[truncated]"

# Context windows (characters) for text re-fed into prompts
SCRIPT_REFINE_CONTEXT_CHARS = 5000
PROMPT_WRITER_CONTEXT_CHARS = 3000
SEO_CONTEXT_CHARS = 2000
THUMBNAIL_CONTEXT_CHARS = 1000
TTS_MAX_CHARS = 4500

_MARKUP_CHARS = re.compile(r"[*#_]")


class ScriptLengthTarget(NamedTuple):
    min_words: int
    section_count: int


# Checked in order against the selected length label
SCRIPT_LENGTH_PRESETS = [
    ("15+", ScriptLengthTarget(min_words=5000, section_count=10)),
    ("8-10", ScriptLengthTarget(min_words=3000, section_count=7)),
    ("Short", ScriptLengthTarget(min_words=1500, section_count=4)),
]
DEFAULT_SCRIPT_LENGTH = ScriptLengthTarget(min_words=1500, section_count=5)


def resolve_script_length(length: str) -> ScriptLengthTarget:
    """
    Map a length bucket label to a word count target and section count.

    "Long (15+ min)" -> 5000 words / 10 sections
    "Medium (8-10 min)" -> 3000 words / 7 sections
    "Short (Under 5 min)" -> 1500 words / 4 sections
    anything else -> 1500 words / 5 sections
    """
    for needle, target in SCRIPT_LENGTH_PRESETS:
        if needle in (length or ""):
            return target
    return DEFAULT_SCRIPT_LENGTH


def truncate_context(text: str, limit: int, marker: str = TRUNCATION_MARKER) -> str:
    """Cut text to limit characters and append marker; short text is unchanged."""
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def clean_narration(text: str, limit: int = TTS_MAX_CHARS) -> str:
    """Strip markdown emphasis/heading characters and hard-truncate for TTS."""
    return _MARKUP_CHARS.sub("", text)[:limit]


def preview(text: str, length: int = 200) -> str:
    """Shortened text for report_input/report_output."""
    return text[:length] + "..." if len(text) > length else text
