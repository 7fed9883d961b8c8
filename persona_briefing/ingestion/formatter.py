"""Format a parsed profile into structured evidence text for LLM analysis.

Structured fields come first; the raw scraped Markdown is appended (trimmed)
so the model can recover anything the heuristic parser missed.
"""

from __future__ import annotations

from persona_briefing.models.schemas import Education, Position, ScrapedProfile

_MAX_RAW_CHARS = 6000
_MAX_POSITIONS = 10
_MAX_EDUCATION = 5


def format_profile_evidence(profile: ScrapedProfile) -> str:
    """Turn a ScrapedProfile into a Markdown evidence document."""
    sections: list[str] = [_format_overview(profile)]

    if profile.past_positions:
        sections.append(_format_positions(profile.past_positions))

    if profile.education:
        sections.append(_format_education(profile.education))

    if profile.skills:
        sections.append(_format_skills(profile.skills))

    if profile.summary:
        sections.append(f"## About\n{profile.summary}")

    if profile.raw_markdown.strip():
        sections.append(_format_raw(profile.raw_markdown))

    return "\n\n".join(sections)


def _format_overview(profile: ScrapedProfile) -> str:
    name = profile.name or "Unknown"
    headline = profile.headline or "No headline"
    if profile.current_position:
        current = f"{profile.current_position.title} at {profile.current_position.company}"
    else:
        current = "Not specified"

    return f"""## Professional Profile
- **Name**: {name}
- **Headline**: {headline}
- **Current position**: {current}"""


def _format_positions(positions: list[Position]) -> str:
    lines = ["## Experience"]
    for position in positions[:_MAX_POSITIONS]:
        duration = f" ({position.duration})" if position.duration != "N/A" else ""
        lines.append(f"- **{position.title}** at {position.company}{duration}")

    remaining = len(positions) - _MAX_POSITIONS
    if remaining > 0:
        lines.append(f"- +{remaining} earlier roles")
    return "\n".join(lines)


def _format_education(entries: list[Education]) -> str:
    lines = ["## Education"]
    for entry in entries[:_MAX_EDUCATION]:
        details = [d for d in (entry.degree, entry.field) if d and d != "N/A"]
        detail_str = f": {', '.join(details)}" if details else ""
        lines.append(f"- {entry.school}{detail_str}")
    return "\n".join(lines)


def _format_skills(skills: list[str]) -> str:
    return f"## Skills\n{', '.join(skills)}"


def _format_raw(raw: str) -> str:
    raw = raw.strip()
    if len(raw) > _MAX_RAW_CHARS:
        raw = raw[:_MAX_RAW_CHARS] + "\n[... truncated]"
    return (
        "## Source Text\n"
        "(Original scraped text. Use it to fill gaps in the fields above.)\n\n"
        f"{raw}"
    )
