"""Tests for persona_briefing/ingestion/formatter.py."""

from __future__ import annotations

from persona_briefing.ingestion.formatter import (
    _format_education,
    _format_overview,
    _format_positions,
    _format_raw,
    format_profile_evidence,
)
from persona_briefing.models.schemas import Education, Position, ScrapedProfile


# ── _format_overview ─────────────────────────────────────────────────


class TestFormatOverview:
    def test_basic_profile(self):
        profile = ScrapedProfile(
            name="Jane Doe",
            headline="Senior PM",
            current_position=Position(title="Senior PM", company="Acme", duration="Present"),
        )
        result = _format_overview(profile)
        assert "## Professional Profile" in result
        assert "Jane Doe" in result
        assert "Senior PM at Acme" in result

    def test_missing_fields_use_defaults(self):
        result = _format_overview(ScrapedProfile())
        assert "Unknown" in result
        assert "No headline" in result
        assert "Not specified" in result


# ── _format_positions ────────────────────────────────────────────────


class TestFormatPositions:
    def test_duration_shown_when_known(self):
        result = _format_positions([
            Position(title="PM", company="Globex", duration="2018 - 2021"),
            Position(title="APM", company="Initech", duration="N/A"),
        ])
        assert "- **PM** at Globex (2018 - 2021)" in result
        assert "- **APM** at Initech" in result
        assert "N/A" not in result

    def test_long_history_is_summarized(self):
        positions = [Position(title=f"Role {i}", company="Co", duration="N/A") for i in range(13)]
        result = _format_positions(positions)
        assert "Role 9" in result
        assert "Role 10" not in result
        assert "+3 earlier roles" in result


# ── _format_education ────────────────────────────────────────────────


class TestFormatEducation:
    def test_skips_placeholder_fields(self):
        result = _format_education([Education(school="MIT", degree="BSc", field="N/A")])
        assert "- MIT: BSc" in result

    def test_school_only(self):
        result = _format_education([Education(school="MIT", degree="N/A", field="N/A")])
        assert result.endswith("- MIT")


# ── _format_raw ──────────────────────────────────────────────────────


class TestFormatRaw:
    def test_short_text_kept(self):
        assert "hello world" in _format_raw("  hello world  ")

    def test_long_text_truncated(self):
        result = _format_raw("x" * 10_000)
        assert "[... truncated]" in result
        assert "x" * 6000 in result
        assert "x" * 6001 not in result


# ── format_profile_evidence ──────────────────────────────────────────


class TestFormatProfileEvidence:
    def test_sections_in_order(self):
        profile = ScrapedProfile(
            name="Jane Doe",
            past_positions=[Position(title="PM", company="Globex", duration="N/A")],
            education=[Education(school="MIT", degree="BSc", field="CS")],
            skills=["SQL", "Python"],
            summary="Builds payment products.",
            raw_markdown="# Jane Doe",
        )
        result = format_profile_evidence(profile)
        order = [
            result.index("## Professional Profile"),
            result.index("## Experience"),
            result.index("## Education"),
            result.index("## Skills"),
            result.index("## About"),
            result.index("## Source Text"),
        ]
        assert order == sorted(order)
        assert "SQL, Python" in result

    def test_empty_profile_only_has_overview(self):
        result = format_profile_evidence(ScrapedProfile())
        assert result.startswith("## Professional Profile")
        assert "## Experience" not in result
        assert "## Source Text" not in result
