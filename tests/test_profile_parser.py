"""Tests for persona_briefing/ingestion/profile_parser.py."""

from __future__ import annotations

import re
import time

import pytest

from persona_briefing.ingestion.profile_parser import (
    MAX_SKILLS,
    MAX_SUMMARY_LENGTH,
    _section_lines,
    parse_profile,
)

FULL_PROFILE = """\
# Jane Doe

Headline: Senior Product Manager | Fintech

Current Position: Senior Product Manager at Acme Payments

## About
I build payment products that people actually enjoy using.

## Experience
- Product Manager at Globex – 2018 - 2021
- Associate PM at Initech
Analyst at Coca-Cola (2014 - 2016)

## Education
- Stanford University, MBA, Business Administration
- MIT; BSc
Not a bullet, University of Nowhere

## Skills
- Product Strategy
- Roadmapping
SQL, Python, A/B Testing
Stakeholder Management
"""


# ── name ─────────────────────────────────────────────────────────────


class TestName:
    def test_level_one_heading(self):
        assert parse_profile(FULL_PROFILE).name == "Jane Doe"

    def test_level_two_heading(self):
        assert parse_profile("intro line\n## John Smith\nrest").name == "John Smith"

    def test_level_three_heading_is_not_a_name(self):
        profile = parse_profile("### Not A Name\nJohn Smith")
        assert profile.name == "Not A Name"

    def test_falls_back_to_first_non_empty_line(self):
        profile = parse_profile("\n\n  Jane Doe  \nSenior PM")
        assert profile.name == "Jane Doe"

    def test_fallback_strips_heading_markers(self):
        assert parse_profile("\n####### Jane Doe\nSenior PM").name == "Jane Doe"

    def test_heading_and_headline_fallback(self):
        profile = parse_profile("# Jane Doe\n\nSenior PM")
        assert profile.name == "Jane Doe"
        assert profile.headline == "Senior PM"


# ── headline ─────────────────────────────────────────────────────────


class TestHeadline:
    def test_labelled_headline(self):
        assert parse_profile(FULL_PROFILE).headline == "Senior Product Manager | Fintech"

    def test_title_label_with_bold(self):
        profile = parse_profile("# Jane\n**Title:** Head of Design\nOther")
        assert profile.headline == "Head of Design"

    def test_level_three_heading(self):
        profile = parse_profile("# Jane\nsomething\n### Staff Engineer at Umbrella")
        assert profile.headline == "Staff Engineer at Umbrella"

    def test_label_wins_over_subheading(self):
        profile = parse_profile("# Jane\n### Subheading\nheadline: The Label")
        assert profile.headline == "The Label"

    def test_single_line_has_no_headline(self):
        assert parse_profile("# Jane Doe").headline == ""


# ── current position ─────────────────────────────────────────────────


class TestCurrentPosition:
    def test_extracts_title_and_company(self):
        current = parse_profile(FULL_PROFILE).current_position
        assert current is not None
        assert current.title == "Senior Product Manager"
        assert current.company == "Acme Payments"

    def test_duration_is_always_present(self):
        current = parse_profile("Present position - CTO @ Hooli (2019 - now)").current_position
        assert current is not None
        assert current.company == "Hooli (2019 - now)"
        assert current.duration == "Present"

    def test_missing_marker_gives_none(self):
        assert parse_profile("# Jane\nWorks at Acme").current_position is None


# ── past positions ───────────────────────────────────────────────────


class TestPastPositions:
    def test_both_patterns_accumulate(self):
        positions = parse_profile(FULL_PROFILE).past_positions
        assert [(p.title, p.company, p.duration) for p in positions] == [
            ("Product Manager", "Globex", "2018 - 2021"),
            ("Associate PM", "Initech", "N/A"),
            ("Analyst", "Coca-Cola", "2014 - 2016"),
        ]

    def test_hyphenated_company_is_not_split(self):
        positions = parse_profile("## Experience\n- Engineer at Hewlett-Packard").past_positions
        assert positions[0].company == "Hewlett-Packard"
        assert positions[0].duration == "N/A"

    def test_bulleted_parenthesized_line_is_duplicated(self):
        positions = parse_profile("## Work History\n- Designer at Studio (2019)").past_positions
        assert len(positions) == 2
        assert positions[0].company == "Studio (2019)"
        assert positions[1].company == "Studio"
        assert positions[1].duration == "2019"

    def test_section_stops_at_skills(self):
        text = "## Experience\n- PM at Acme\n## Skills\n- Designer at Nowhere"
        positions = parse_profile(text).past_positions
        assert [p.company for p in positions] == ["Acme"]

    def test_no_section_no_positions(self):
        assert parse_profile("- PM at Acme").past_positions == []


# ── education ────────────────────────────────────────────────────────


class TestEducation:
    def test_bullets_split_into_fields(self):
        education = parse_profile(FULL_PROFILE).education
        assert len(education) == 2
        assert education[0].school == "Stanford University"
        assert education[0].degree == "MBA"
        assert education[0].field == "Business Administration"

    def test_missing_fields_default(self):
        mit = parse_profile(FULL_PROFILE).education[1]
        assert mit.school == "MIT"
        assert mit.degree == "BSc"
        assert mit.field == "N/A"

    def test_pipe_delimiter(self):
        education = parse_profile("## Education\n* Oxford | DPhil | History").education
        assert (education[0].school, education[0].degree, education[0].field) == (
            "Oxford", "DPhil", "History",
        )


# ── skills ───────────────────────────────────────────────────────────


class TestSkills:
    def test_mixed_line_styles(self):
        assert parse_profile(FULL_PROFILE).skills == [
            "Product Strategy",
            "Roadmapping",
            "SQL",
            "Python",
            "A/B Testing",
            "Stakeholder Management",
        ]

    def test_capped_at_fifty(self):
        bullets = "\n".join(f"- Skill {i}" for i in range(200))
        skills = parse_profile(f"## Skills\n{bullets}").skills
        assert len(skills) == MAX_SKILLS
        assert skills[0] == "Skill 0"
        assert skills[-1] == "Skill 49"

    def test_empty_comma_parts_dropped(self):
        assert parse_profile("## Skills\nGo,, Rust ,").skills == ["Go", "Rust"]

    def test_subheadings_are_not_skills(self):
        skills = parse_profile("## Skills\n### Tools & Technologies\n- Figma").skills
        assert skills == ["Figma"]


# ── summary ──────────────────────────────────────────────────────────


class TestSummary:
    def test_about_section(self):
        summary = parse_profile(FULL_PROFILE).summary
        assert summary == "I build payment products that people actually enjoy using."

    def test_truncated_to_limit(self):
        summary = parse_profile("## About\n" + "x" * 10_000).summary
        assert summary is not None
        assert len(summary) == MAX_SUMMARY_LENGTH

    def test_absent_without_section(self):
        assert parse_profile("# Jane Doe\nSenior PM").summary is None

    def test_empty_section_is_absent(self):
        assert parse_profile("## Summary\n\n## Skills\n- Go").summary is None


# ── totality ─────────────────────────────────────────────────────────


class TestTotality:
    def test_empty_string_gives_defaults(self):
        profile = parse_profile("")
        assert profile.name == ""
        assert profile.headline == ""
        assert profile.current_position is None
        assert profile.past_positions == []
        assert profile.education == []
        assert profile.skills == []
        assert profile.summary is None
        assert profile.raw_markdown == ""

    @pytest.mark.parametrize(
        "text",
        ["#", "##", "- ", "## Experience", "## Skills\n,,,", "\x00\n\t\r", "(((", "at at at"],
    )
    def test_never_raises(self, text):
        parse_profile(text)

    def test_idempotent(self):
        assert parse_profile(FULL_PROFILE) == parse_profile(FULL_PROFILE)

    def test_keeps_raw_markdown(self):
        assert parse_profile(FULL_PROFILE).raw_markdown == FULL_PROFILE


# ── long lines ───────────────────────────────────────────────────────


def _timed_parse(text: str):
    start = time.perf_counter()
    profile = parse_profile(text)
    return profile, time.perf_counter() - start


class TestLongLines:
    """Scraped pages can carry very long lines; parsing must stay linear."""

    def test_heading_with_long_whitespace_run(self):
        profile, elapsed = _timed_parse("# Jane" + " " * 20_000 + "Doe\n## Skills\n- Go")
        assert profile.name.startswith("Jane")
        assert profile.name.endswith("Doe")
        assert profile.skills == ["Go"]
        assert elapsed < 1.0

    def test_trailing_whitespace_on_subheading_and_label(self):
        text = "x\n### Staff" + " " * 20_000 + "!\nTitle:" + " " * 20_000 + "!"
        profile, elapsed = _timed_parse(text)
        assert profile.headline == "!"
        assert elapsed < 1.0

    def test_current_position_without_separator(self):
        profile, elapsed = _timed_parse("Current position: " + " " * 20_000 + "CTO")
        assert profile.current_position is None
        assert elapsed < 1.0

    def test_repeated_role_separators(self):
        profile, elapsed = _timed_parse("## Experience\n- " + "x at " * 10_000)
        assert len(profile.past_positions) == 1
        assert profile.past_positions[0].title == "x"
        assert elapsed < 1.0

    def test_unbalanced_parentheses(self):
        line = "- PM at Acme " + "(" * 20_000 + "2020" + " " * 20_000 + ")"
        profile, elapsed = _timed_parse("## Experience\n" + line)
        assert len(profile.past_positions) == 2
        assert profile.past_positions[1].company == "Acme"
        assert elapsed < 1.0

    def test_education_bullet_with_long_gap(self):
        profile, elapsed = _timed_parse("## Education\n- MIT" + " " * 20_000 + ", BSc")
        assert profile.education[0].school == "MIT"
        assert profile.education[0].degree == "BSc"
        assert elapsed < 1.0


# ── _section_lines ───────────────────────────────────────────────────


class TestSectionLines:
    def test_missing_heading_returns_none(self):
        assert _section_lines(["# A", "b"], re.compile("skills")) is None

    def test_stops_at_any_heading_by_default(self):
        lines = ["## About", "one", "### Sub", "two"]
        assert _section_lines(lines, re.compile("about", re.I)) == ["one"]
