"""Schemas for company research and extracted business-intelligence profiles."""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

# Max items kept in any list field of a profile
LIST_CAP = 8

SCALAR_FIELDS: tuple[str, ...] = (
    "industry",
    "business_type",
    "company_size",
    "target_audience",
    "unique_value_prop",
    "brand_tone",
    "market_position",
)

LIST_FIELDS: tuple[str, ...] = (
    "key_services",
    "competitors",
    "seo_keywords",
    "market_trends",
    "opportunities",
    "challenges",
    "audience_pain_points",
    "audience_goals",
    "content_goals",
    "recent_news",
)

# Fallbacks for scalars nothing could be extracted for.
# Overridable per deployment via Settings.PROFILE_DEFAULT_OVERRIDES.
DEFAULT_SCALARS: dict[str, str] = {
    "industry": "Technology",
    "business_type": "B2B",
    "company_size": "Small Business",
    "target_audience": "Business professionals",
    "unique_value_prop": "Quality service and customer focus",
    "brand_tone": "Professional",
    "market_position": "Not specified",
}


def dedupe_preserving_order(items: list[str], cap: int | None = None) -> list[str]:
    """
    Drop exact duplicates keeping first-seen order, optionally truncating.

    Args:
        items: Strings to de-duplicate (comparison is case-sensitive)
        cap: Max items to keep, or None for no limit

    Returns:
        New list of unique items
    """
    seen: set[str] = set()
    unique: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        unique.append(item)
    return unique if cap is None else unique[:cap]


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExtractedProfile(CamelModel):
    """Fixed-shape business profile derived from a free-text research report."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    industry: str = ""
    business_type: str = ""
    company_size: str = ""
    target_audience: str = ""
    unique_value_prop: str = ""
    brand_tone: str = ""
    market_position: str = ""

    key_services: list[str] = Field(default_factory=list)
    competitors: list[str] = Field(default_factory=list)
    seo_keywords: list[str] = Field(default_factory=list)
    market_trends: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    challenges: list[str] = Field(default_factory=list)
    audience_pain_points: list[str] = Field(default_factory=list)
    audience_goals: list[str] = Field(default_factory=list)
    content_goals: list[str] = Field(default_factory=list)
    recent_news: list[str] = Field(default_factory=list)

    citations: list[str] = Field(default_factory=list)
    sections: dict[str, str] = Field(default_factory=dict)

    @field_validator(*LIST_FIELDS)
    @classmethod
    def _unique_and_capped(cls, value: list[str]) -> list[str]:
        return dedupe_preserving_order(value, cap=LIST_CAP)

    @field_validator("citations")
    @classmethod
    def _unique_citations(cls, value: list[str]) -> list[str]:
        return dedupe_preserving_order(value)

    def with_defaults(self, defaults: dict[str, str] | None = None) -> "ExtractedProfile":
        """
        Return a copy whose empty scalar fields hold the documented fallbacks.

        Args:
            defaults: Per-field overrides applied on top of DEFAULT_SCALARS

        Returns:
            Profile with every scalar populated
        """
        merged = {**DEFAULT_SCALARS, **(defaults or {})}
        updates = {
            name: merged.get(name, "")
            for name in SCALAR_FIELDS
            if not getattr(self, name).strip()
        }
        if not updates:
            return self
        return self.model_copy(update=updates)

    def to_record(self) -> dict[str, Any]:
        """Serialize with camelCase keys for storage and API payloads."""
        return self.model_dump(by_alias=True)


# ============================================================================
# API request/response models
# ============================================================================


class ExtractReportRequest(CamelModel):
    """Normalize a report that the caller already has."""

    report: str = Field(..., description="Free-text research report")
    apply_defaults: bool = Field(
        default=True, description="Substitute fallback values for empty scalars"
    )


class ProfileResponse(CamelModel):
    """Extracted profile wrapped in the standard success envelope."""

    success: bool = True
    data: ExtractedProfile


class CompanyResearchRequest(CamelModel):
    """Research a company through the JSON-emitting model."""

    company_name: str = Field(..., min_length=2, description="Company to research")


class PerplexityResearchRequest(CamelModel):
    """Research a company through Perplexity, optionally persisting the result."""

    company_name: str = Field(..., min_length=2, description="Company to research")
    website: str | None = Field(default=None, description="Company website")
    team_id: UUID | None = Field(default=None, description="Team to store the research for")
    client_profile_id: UUID | None = Field(default=None, description="Client profile UUID")


class ResearchResponse(CamelModel):
    """Result of a company research run."""

    success: bool = True
    data: ExtractedProfile
    research_type: str = Field(..., description="perplexity or openrouter")
    fallback_reason: str | None = Field(
        default=None, description="Why the primary provider was skipped"
    )
    research_id: str | None = Field(default=None, description="Stored research_data row id")
    source_citations: list[str] = Field(default_factory=list)


class ReprocessRequest(CamelModel):
    """Re-run extraction over a stored report."""

    research_id: UUID


class IndustryTrendsRequest(CamelModel):
    """Ask for trending topics in an industry."""

    industry: str = Field(..., min_length=1)


class IndustryTrendsResponse(CamelModel):
    """Trending topics for an industry."""

    success: bool = True
    trends: list[str]
