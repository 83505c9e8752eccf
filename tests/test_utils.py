"""
Tests for Helpers

Tests for producer/utils.py
"""

import pytest

from producer.utils import (
    TRUNCATION_MARKER,
    clean_narration,
    preview,
    resolve_script_length,
    truncate_context,
)


class TestResolveScriptLength:
    """Tests for length bucket mapping."""

    @pytest.mark.parametrize("label,min_words,sections", [
        ("Long (15+ min)", 5000, 10),
        ("Medium (8-10 min)", 3000, 7),
        ("8-10 minutes", 3000, 7),
        ("Short (Under 5 min)", 1500, 4),
        ("About twelve minutes", 1500, 5),
        ("", 1500, 5),
    ])
    def test_buckets(self, label, min_words, sections):
        target = resolve_script_length(label)

        assert target.min_words == min_words
        assert target.section_count == sections


class TestTruncateContext:
    """Tests for truncate_context."""

    def test_short_text_unchanged(self):
        assert truncate_context("hello", 10) == "hello"

    def test_exact_limit_unchanged(self):
        assert truncate_context("a" * 10, 10) == "a" * 10

    def test_long_text_cut_with_marker(self):
        result = truncate_context("a" * 6000, 5000)

        assert result == "a" * 5000 + TRUNCATION_MARKER
        assert TRUNCATION_MARKER == "...[truncated]"


class TestCleanNarration:
    """Tests for clean_narration."""

    def test_strips_markup(self):
        assert clean_narration("## Intro\n**Bold** and _soft_") == " Intro\nBold and soft"

    def test_hard_limit(self):
        assert len(clean_narration("x" * 5000)) == 4500

    def test_limit_counts_after_stripping(self):
        assert clean_narration("**" + "y" * 10, limit=5) == "yyyyy"


class TestPreview:

    def test_preview(self):
        assert preview("abc", 5) == "abc"
        assert preview("abcdefgh", 5) == "abcde..."
