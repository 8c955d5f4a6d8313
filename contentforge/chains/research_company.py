"""Company research: Perplexity web research normalized by regex, OpenRouter JSON as fallback.

Builds a structured client profile from a single research call and records
where it came from so callers can persist it alongside the raw report.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from contentforge.core.config import Settings
from contentforge.core.llm import LLMProviderError, TextGenerator, parse_llm_json_lenient
from contentforge.core.logging import get_logger
from contentforge.core.profile_coercion import coerce_profile
from contentforge.core.report_normalizer import extract_profile
from contentforge.core.schemas_research import ExtractedProfile

logger = get_logger(__name__)

PERPLEXITY_SYSTEM_PROMPT = (
    "You are a business research assistant. Provide accurate, current information "
    "based on real-time data. Be specific and detailed in your analysis."
)

RESEARCH_SECTIONS = """and provide comprehensive information about:

1. **Company Overview**
   - Industry and business sector
   - Business model and company size
   - Unique value proposition
   - Brand tone and voice

2. **Target Audience**
   - Primary target customers
   - Customer pain points
   - Customer goals and objectives

3. **Market Analysis**
   - Current market trends
   - Market opportunities
   - Industry challenges

4. **Competitive Landscape**
   - Direct competitors
   - Competitive advantages
   - Market positioning

5. **SEO & Digital Presence**
   - Key SEO keywords
   - Content goals and marketing objectives
   - Social media platforms and strategy

6. **Recent Developments**
   - Recent news, launches and partnerships

Format your response with a ## heading for each section and bullet points for
lists. Provide specific, actionable insights."""

AI_RESEARCH_SYSTEM_PROMPT = """You are an expert business researcher and marketing strategist.
Research the company "{company_name}" and provide comprehensive business intelligence.

Return ONLY a valid JSON object with this exact structure:
{{
  "industry": "string",
  "businessType": "string",
  "companySize": "string",
  "targetAudience": "string",
  "uniqueValueProp": "string",
  "brandTone": "string",
  "marketPosition": "string",
  "audiencePainPoints": ["string1", "string2", "string3"],
  "audienceGoals": ["string1", "string2", "string3"],
  "keyServices": ["string1", "string2", "string3"],
  "seoKeywords": ["string1", "string2", "string3"],
  "competitors": ["string1", "string2", "string3"],
  "marketTrends": ["string1", "string2", "string3"],
  "contentGoals": ["string1", "string2", "string3"]
}}

Research guidelines:
- Industry should be specific (e.g., "Technology", "Healthcare", "Finance")
- BusinessType should be one of: "B2B", "B2C", "SaaS", "E-commerce", "Service-based", "Agency", "Non-profit"
- CompanySize should be one of: "1-10 employees", "11-50 employees", "51-200 employees", "201-1000 employees", "1000+ employees"
- BrandTone should be one of: "professional", "casual", "authoritative", "conversational", "friendly", "technical", "creative", "formal"
- ContentGoals should be marketing objectives like: "Brand Awareness", "Lead Generation", "Thought Leadership", "Customer Education"

If you cannot find specific information, make educated inferences based on the company name and industry."""


@dataclass
class ResearchOutcome:
    """A normalized profile plus the provenance of the research that produced it."""

    profile: ExtractedProfile
    research_type: str
    report: str = ""
    model: str = ""
    response_id: str | None = None
    usage: dict[str, Any] = field(default_factory=dict)
    source_citations: list[str] = field(default_factory=list)
    fallback_reason: str | None = None


def build_research_prompt(company_name: str, website: str | None = None) -> str:
    """Research brief asking for one ## section per profile area."""
    prompt = f'Research the company "{company_name}"'
    if website:
        prompt += f" (website: {website})"
    return f"{prompt} {RESEARCH_SECTIONS}"


def research_with_perplexity(
    generator: TextGenerator,
    company_name: str,
    website: str | None = None,
    *,
    model: str,
    defaults: dict[str, str] | None = None,
) -> ResearchOutcome:
    """
    Run web-grounded research and normalize the report with the regex extractor.

    Raises:
        LLMProviderError: If the Perplexity call fails
    """
    completion = generator.generate(
        model=model,
        messages=[
            {"role": "system", "content": PERPLEXITY_SYSTEM_PROMPT},
            {"role": "user", "content": build_research_prompt(company_name, website)},
        ],
        max_tokens=2000,
        temperature=0.2,
    )

    profile = extract_profile(completion.text).with_defaults(defaults)

    logger.info(
        f"Perplexity research for {company_name}: {len(completion.text)} chars, "
        f"{len(profile.sections)} sections, {len(completion.citations)} sources"
    )

    return ResearchOutcome(
        profile=profile,
        research_type="perplexity",
        report=completion.text,
        model=completion.model,
        response_id=completion.response_id,
        usage=completion.usage,
        source_citations=completion.citations,
    )


def research_with_ai(
    generator: TextGenerator,
    company_name: str,
    *,
    model: str,
    defaults: dict[str, str] | None = None,
) -> ResearchOutcome:
    """
    Ask a JSON-emitting model for the profile directly.

    Unparseable output yields the all-defaults profile rather than an error.

    Raises:
        LLMProviderError: If the OpenRouter call fails
    """
    completion = generator.generate(
        model=model,
        messages=[
            {
                "role": "system",
                "content": AI_RESEARCH_SYSTEM_PROMPT.format(company_name=company_name),
            },
            {
                "role": "user",
                "content": (
                    f"Research the company: {company_name}\n\n"
                    "Provide comprehensive business intelligence including industry, target "
                    "audience, services, competitors, and marketing insights."
                ),
            },
        ],
        max_tokens=2000,
        temperature=0.3,
    )

    parsed = parse_llm_json_lenient(completion.text)
    if not isinstance(parsed, dict):
        logger.warning(f"AI research for {company_name} returned no JSON object, using defaults")

    return ResearchOutcome(
        profile=coerce_profile(parsed, defaults=defaults),
        research_type="openrouter",
        report=completion.text,
        model=completion.model,
        response_id=completion.response_id,
        usage=completion.usage,
    )


def research_company(
    perplexity: TextGenerator,
    openrouter: TextGenerator,
    company_name: str,
    website: str | None = None,
    *,
    settings: Settings,
) -> ResearchOutcome:
    """
    Research a company with Perplexity, falling back to OpenRouter JSON research.

    Args:
        perplexity: Web-grounded generator
        openrouter: JSON-capable generator used when Perplexity fails
        company_name: Company to research
        website: Optional company website
        settings: Model names and default overrides

    Returns:
        ResearchOutcome; fallback_reason holds the Perplexity error if it failed

    Raises:
        LLMProviderError: If both providers fail (the OpenRouter error)
    """
    defaults = settings.PROFILE_DEFAULT_OVERRIDES
    try:
        return research_with_perplexity(
            perplexity,
            company_name,
            website,
            model=settings.PERPLEXITY_MODEL,
            defaults=defaults,
        )
    except LLMProviderError as e:
        logger.warning(f"Perplexity research failed for {company_name}, falling back: {e}")
        outcome = research_with_ai(
            openrouter,
            company_name,
            model=settings.EXTRACTION_MODEL,
            defaults=defaults,
        )
        outcome.fallback_reason = str(e)
        return outcome


def reprocess_report(report: str, defaults: dict[str, str] | None = None) -> ExtractedProfile:
    """Re-run the regex normalizer over a stored raw report."""
    return extract_profile(report).with_defaults(defaults)


def build_research_payload(outcome: ResearchOutcome) -> dict[str, Any]:
    """
    Shape an outcome for the research_data.research_data JSON column.

    Returns:
        camelCase profile plus report, provenance and completion metadata
    """
    payload = outcome.profile.to_record()
    payload.update(
        {
            "fullReport": outcome.report,
            "reportSections": outcome.profile.sections,
            "sourceCitations": outcome.source_citations,
            "jobId": outcome.response_id,
            "model": outcome.model,
            "usage": outcome.usage,
            "jobStatus": "completed",
            "completedAt": datetime.now(timezone.utc).isoformat(),
        }
    )
    return payload
