"""Schemas for content generation and topic suggestions."""

from typing import Literal
from uuid import UUID

from pydantic import Field, field_validator

from contentforge.core.schemas_research import CamelModel

MAX_TOPIC_CHARS = 60
MAX_TOPIC_KEYWORDS = 5

Platform = Literal["linkedin", "twitter", "instagram", "facebook", "blog"]


class ClientProfileContext(CamelModel):
    """Client details used to steer generated content."""

    name: str | None = None
    industry: str | None = None
    target_audience: str | None = None
    brand_voice: str | None = None
    competitors: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)
    seo_keywords: list[str] = Field(default_factory=list)


class GenerateContentRequest(CamelModel):
    """Generate one post or article."""

    topic: str
    platform: Platform = "linkedin"
    tone: str = "professional"
    client_profile: ClientProfileContext | None = None


class GenerateContentResponse(CamelModel):
    """Generated content text."""

    content: str


class TopicSuggestion(CamelModel):
    """One suggested content topic."""

    topic: str = Field(..., min_length=1)
    trending_score: int = Field(default=80, description="Relevance score, 70-100")
    keywords: list[str] = Field(default_factory=list)
    content_angle: str = ""
    target_audience: str = ""

    @field_validator("topic")
    @classmethod
    def _truncate_topic(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("topic is blank")
        return stripped[:MAX_TOPIC_CHARS]

    @field_validator("trending_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: object) -> int:
        try:
            score = int(float(value))  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            return 80
        return max(70, min(100, score))

    @field_validator("keywords")
    @classmethod
    def _limit_keywords(cls, value: list[str]) -> list[str]:
        return [k.strip() for k in value if k.strip()][:MAX_TOPIC_KEYWORDS]


class TopicSuggestionsRequest(CamelModel):
    """Suggest topics for a team from its profile and content history."""

    team_id: UUID


class TopicSuggestionsResponse(CamelModel):
    """Suggested topics."""

    success: bool = True
    topics: list[TopicSuggestion]


class VoiceMetrics(CamelModel):
    """Lightweight text statistics over a team's past content."""

    avg_sentence_length: float = 0.0
    emoji_count: int = 0
    hashtag_count: int = 0
    exclamation_count: int = 0


class BrandVoice(CamelModel):
    """Brand voice guide derived from past content."""

    summary: str = ""
    tone_adjectives: list[str] = Field(default_factory=list)
    style_notes: list[str] = Field(default_factory=list)
    platform_variations: dict[str, list[str]] = Field(default_factory=dict)
    do: list[str] = Field(default_factory=list)
    dont: list[str] = Field(default_factory=list)
    metrics: VoiceMetrics = Field(default_factory=VoiceMetrics)


class DeriveVoiceRequest(CamelModel):
    """Derive a brand voice from a team's recent content."""

    team_id: UUID
    limit: int = Field(default=50, description="Documents to analyze, clamped to 10-100")

    @field_validator("limit")
    @classmethod
    def _clamp_limit(cls, value: int) -> int:
        return max(10, min(100, value))


class DeriveVoiceResponse(CamelModel):
    """Derived brand voice."""

    success: bool = True
    derived: BrandVoice
