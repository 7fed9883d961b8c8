from __future__ import annotations

import re
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from persona_briefing.core.urls import is_blocked_host

LINKEDIN_PROFILE_RE = re.compile(r"linkedin\.com/in/[a-zA-Z0-9-]+")

MIN_BRIEF_LENGTH = 10
MIN_ARTICLE_LENGTH = 500
MAX_ARTICLE_LENGTH = 50_000


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for the web front end."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -- Scraped profile --

class Position(CamelModel):
    title: str = ""
    company: str = ""
    duration: str = ""


class Education(CamelModel):
    school: str = ""
    degree: str = ""
    field: str = ""


class ScrapedProfile(CamelModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    headline: str = ""
    current_position: Position | None = None
    past_positions: list[Position] = []
    education: list[Education] = []
    skills: list[str] = []  # Capped at 50 by the parser
    summary: str | None = None  # Capped at 500 chars by the parser
    raw_markdown: str = ""


# -- Analysis / persona --

Verbosity = Literal["low", "medium", "high"]


class ProfessionalContext(CamelModel):
    role: str
    industry: str
    seniority: str


class CommunicationStyle(CamelModel):
    tone: str
    verbosity: Verbosity

    @field_validator("verbosity", mode="before")
    @classmethod
    def normalize_verbosity(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class DesignPreferences(CamelModel):
    visual_style: str
    ux_priority: str


class ContentPreferences(CamelModel):
    responds_to: list[str] = []
    avoids: list[str] = []


class Analysis(CamelModel):
    professional_context: ProfessionalContext
    communication_style: CommunicationStyle
    inferred_design_preferences: DesignPreferences
    inferred_content_preferences: ContentPreferences


class DesignGuidance(CamelModel):
    do: list[str] = Field(min_length=1)
    avoid: list[str] = Field(min_length=1)


class Persona(CamelModel):
    persona_name: str
    summary: str
    professional_context: ProfessionalContext
    communication_style: CommunicationStyle
    design_biases: DesignPreferences
    content_biases: ContentPreferences
    brief_conflicts: list[str] = []  # Tension between inferred preferences and the brief
    design_guidance: DesignGuidance


class PipelineResult(CamelModel):
    persona: Persona
    audio_url: str  # data: URL or hosted http(s) URL
    audio_script: str
    processing_time: int  # milliseconds


class PipelineEvent(BaseModel):
    stage: str
    status: str  # "started", "completed", "failed"
    message: str
    progress: float  # 0.0 - 1.0


# -- Request / error schemas --

class GeneratePersonaRequest(CamelModel):
    linkedin_url: str | None = None
    article_text: str | None = None
    article_url: str | None = None
    design_brief: str

    @field_validator("design_brief")
    @classmethod
    def check_design_brief(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Design brief cannot be empty")
        if len(value) < MIN_BRIEF_LENGTH:
            raise ValueError(
                f"Design brief must be at least {MIN_BRIEF_LENGTH} characters"
            )
        return value

    @field_validator("linkedin_url")
    @classmethod
    def check_linkedin_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("Invalid URL format")
        if not LINKEDIN_PROFILE_RE.search(value):
            raise ValueError("Must be a valid LinkedIn profile URL")
        return value

    @field_validator("article_text")
    @classmethod
    def check_article_text(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value.strip():
            raise ValueError("Article text cannot be empty")
        if not MIN_ARTICLE_LENGTH <= len(value) <= MAX_ARTICLE_LENGTH:
            raise ValueError(
                f"Article text must be between {MIN_ARTICLE_LENGTH} and "
                f"{MAX_ARTICLE_LENGTH} characters"
            )
        return value

    @field_validator("article_url")
    @classmethod
    def check_article_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("Invalid URL format")
        host = urlparse(value).hostname
        if not host or is_blocked_host(host):
            raise ValueError("Article URL must point to a public host")
        return value

    @model_validator(mode="after")
    def check_single_source(self) -> GeneratePersonaRequest:
        provided = [
            name
            for name, value in (
                ("linkedinUrl", self.linkedin_url),
                ("articleText", self.article_text),
                ("articleUrl", self.article_url),
            )
            if value is not None
        ]
        if not provided:
            raise ValueError("One of linkedinUrl, articleText or articleUrl is required")
        if len(provided) > 1:
            raise ValueError(f"Provide only one source, got: {', '.join(provided)}")
        return self

    @property
    def source(self) -> tuple[str, str]:
        """Return (source plugin name, identifier) for the pipeline."""
        if self.linkedin_url is not None:
            return "linkedin", self.linkedin_url
        if self.article_url is not None:
            return "article_url", self.article_url
        return "article", self.article_text or ""


class ErrorResponse(CamelModel):
    error: str
    code: str
    details: str | None = None
    timestamp: str
    request_id: str
