"""Best-effort parser turning scraped profile Markdown into a ScrapedProfile.

Scraped Markdown has no fixed schema, so every field has its own extractor
with ordered fallbacks. Extractors never raise and never depend on each
other: a field that cannot be located keeps its default.
"""

from __future__ import annotations

import logging
import re

from persona_briefing.models.schemas import Education, Position, ScrapedProfile

logger = logging.getLogger(__name__)

MAX_SKILLS = 50
MAX_SUMMARY_LENGTH = 500

# ── Line patterns ────────────────────────────────────────────────────────────
#
# Every pattern is anchored and ends in a greedy ``(.*)$`` or ``(.+)$`` group,
# with trimming done on the captured text. Lines come straight from scraped
# pages, so no pattern may backtrack over long whitespace runs.

_HEADING_RE = re.compile(r"^\s*#{1,6}\s+(.*)$")
_NAME_HEADING_RE = re.compile(r"^\s*#{1,2}\s+(.+)$")
_SUBHEADING_RE = re.compile(r"^\s*###\s+(.+)$")
_LABELLED_HEADLINE_RE = re.compile(
    r"^\s*(?:\*\*)?(?:headline|title)(?:\*\*)?\s*:(.+)$",
    re.IGNORECASE,
)
_CURRENT_POSITION_RE = re.compile(
    r"(?:current|present)\w{0,4}\s+position\s*[:\-–—]",
    re.IGNORECASE,
)
_BULLET_RE = re.compile(r"^\s*[-*•+]\s+(.*)$")
_BULLET_PREFIX_RE = re.compile(r"^\s*[-*•+]\s+")

# "Title at Company" / "Title @ Company"
_ROLE_SEPARATOR_RE = re.compile(r"(?<=\s)(?:at|@)(?=\s)")
_CURRENT_SEPARATOR_RE = re.compile(r"(?<=\s)(?:at|@)(?=\s)", re.IGNORECASE)
# "Company – Duration" (the dash needs spaces so "Coca-Cola" survives)
_DURATION_DASH_RE = re.compile(r"(?<=\s)[–—-](?=\s)")

_FIELD_SPLIT_RE = re.compile(r"[,;|]")

# ── Section headings ─────────────────────────────────────────────────────────

_EXPERIENCE_RE = re.compile(r"experience|work history", re.IGNORECASE)
_EDUCATION_RE = re.compile(r"education", re.IGNORECASE)
_SKILLS_RE = re.compile(r"skills", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"about|summary", re.IGNORECASE)
_EXPERIENCE_END_RE = re.compile(r"education|skills", re.IGNORECASE)
_KNOWN_SECTION_RE = re.compile(
    r"experience|work history|education|skills|about|summary|certifications|languages",
    re.IGNORECASE,
)


def parse_profile(markdown: str) -> ScrapedProfile:
    """Parse scraped Markdown into a structured profile.

    Always returns a profile, falling back to defaults for any field that
    cannot be located. The raw Markdown is kept on the result.
    """
    text = markdown or ""
    lines = text.splitlines()

    profile = ScrapedProfile(
        name=_extract_name(lines),
        headline=_extract_headline(lines),
        current_position=_extract_current_position(lines),
        past_positions=_extract_past_positions(lines),
        education=_extract_education(lines),
        skills=_extract_skills(lines),
        summary=_extract_summary(lines),
        raw_markdown=text,
    )
    logger.debug(
        "Parsed profile name=%r positions=%d education=%d skills=%d",
        profile.name,
        len(profile.past_positions),
        len(profile.education),
        len(profile.skills),
    )
    return profile


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _strip_heading_markers(line: str) -> str:
    return line.strip().lstrip("#").strip()


def _non_empty_lines(lines: list[str]) -> list[str]:
    return [line for line in lines if line.strip()]


def _heading_title(line: str) -> str | None:
    """Text of a ``#``-``######`` heading without closing hashes, else None."""
    match = _HEADING_RE.match(line)
    if not match:
        return None
    return match.group(1).strip().rstrip("#").strip()


def _split_role(
    text: str, separator: re.Pattern[str] = _ROLE_SEPARATOR_RE
) -> tuple[str, str] | None:
    """Split "Title at Company" on the first separator, returning raw halves."""
    text = text.strip()
    match = separator.search(text)
    if not match:
        return None
    return text[: match.start()], text[match.end():]


def _section_lines(
    lines: list[str],
    start_re: re.Pattern[str],
    stop_re: re.Pattern[str] | None = None,
) -> list[str] | None:
    """Return the lines under the first heading matching ``start_re``.

    The section ends at the next heading matching ``stop_re`` (any heading
    when ``stop_re`` is None) or at end of text. Returns None when no
    heading matches ``start_re``.
    """
    collected: list[str] | None = None
    for line in lines:
        title = _heading_title(line)
        if title is not None:
            if collected is None:
                if start_re.search(title):
                    collected = []
                continue
            if stop_re is None or stop_re.search(title):
                break
        if collected is not None:
            collected.append(line)
    return collected


# ---------------------------------------------------------------------------
# Field extractors
# ---------------------------------------------------------------------------


def _extract_name(lines: list[str]) -> str:
    for line in lines:
        match = _NAME_HEADING_RE.match(line)
        if match:
            return _strip_heading_markers(match.group(1))

    non_empty = _non_empty_lines(lines)
    if non_empty:
        return _strip_heading_markers(non_empty[0])
    return ""


def _extract_headline(lines: list[str]) -> str:
    for line in lines:
        match = _LABELLED_HEADLINE_RE.match(line)
        if match:
            return match.group(1).strip("* ").strip()

    for line in lines:
        match = _SUBHEADING_RE.match(line)
        if match:
            return match.group(1).strip()

    non_empty = _non_empty_lines(lines)
    if len(non_empty) > 1:
        return _strip_heading_markers(non_empty[1])
    return ""


def _extract_current_position(lines: list[str]) -> Position | None:
    for line in lines:
        marker = _CURRENT_POSITION_RE.search(line)
        if not marker:
            continue
        role = _split_role(line[marker.end():], _CURRENT_SEPARATOR_RE)
        if not role:
            continue
        title = role[0].strip("* ").strip()
        company = role[1].strip("* ").strip()
        if title and company:
            # Only the role is captured; the date range is never parsed.
            return Position(title=title, company=company, duration="Present")
    return None


def _dashed_position(line: str) -> Position | None:
    """``- Title at Company – Duration``, the duration being optional."""
    bullet = _BULLET_PREFIX_RE.match(line)
    if not bullet:
        return None
    role = _split_role(line[bullet.end():])
    if not role or not role[1].strip():
        return None
    title, rest = role[0].strip(), role[1].strip()
    dash = _DURATION_DASH_RE.search(rest)
    if dash:
        company, duration = rest[: dash.start()], rest[dash.end():]
    else:
        company, duration = rest, ""
    return Position(title=title, company=company.strip(), duration=duration.strip() or "N/A")


def _paren_position(line: str) -> Position | None:
    """``Title at Company (Duration)``, with or without a bullet."""
    bullet = _BULLET_PREFIX_RE.match(line)
    body = (line[bullet.end():] if bullet else line).strip()
    if not body.endswith(")"):
        return None
    inner = body[:-1]
    separator = _ROLE_SEPARATOR_RE.search(body)
    if not separator:
        return None
    # The duration opens at the first "(" past the company with no ")" after it.
    opening = inner.find("(", max(separator.end() + 2, inner.rfind(")") + 1))
    if opening == -1 or opening == len(inner) - 1:
        return None
    return Position(
        title=body[: separator.start()].strip(),
        company=body[separator.end():opening].strip(),
        duration=inner[opening + 1:].strip() or "N/A",
    )


def _extract_past_positions(lines: list[str]) -> list[Position]:
    section = _section_lines(lines, _EXPERIENCE_RE, _EXPERIENCE_END_RE)
    if not section:
        return []

    # Both patterns run over the whole section; a line matching both yields two entries.
    positions: list[Position] = []
    for extract in (_dashed_position, _paren_position):
        for line in section:
            position = extract(line)
            if position:
                positions.append(position)
    return positions


def _extract_education(lines: list[str]) -> list[Education]:
    section = _section_lines(lines, _EDUCATION_RE, _KNOWN_SECTION_RE)
    if not section:
        return []

    entries: list[Education] = []
    for line in section:
        bullet = _BULLET_RE.match(line)
        if not bullet:
            continue
        fields = [f.strip() for f in _FIELD_SPLIT_RE.split(bullet.group(1))]
        if not fields or not fields[0]:
            continue
        entries.append(
            Education(
                school=fields[0],
                degree=fields[1] if len(fields) > 1 and fields[1] else "N/A",
                field=fields[2] if len(fields) > 2 and fields[2] else "N/A",
            )
        )
    return entries


def _extract_skills(lines: list[str]) -> list[str]:
    section = _section_lines(lines, _SKILLS_RE, _KNOWN_SECTION_RE)
    if not section:
        return []

    skills: list[str] = []
    for line in section:
        stripped = line.strip()
        if not stripped:
            continue
        bullet = _BULLET_RE.match(line)
        if bullet:
            skills.append(bullet.group(1).strip())
        elif "," in stripped:
            skills.extend(part.strip() for part in stripped.split(","))
        elif _heading_title(stripped) is None:
            skills.append(stripped)

    return [s for s in skills if s][:MAX_SKILLS]


def _extract_summary(lines: list[str]) -> str | None:
    section = _section_lines(lines, _SUMMARY_RE)
    if section is None:
        return None
    summary = "\n".join(section).strip()
    if not summary:
        return None
    return summary[:MAX_SUMMARY_LENGTH]
