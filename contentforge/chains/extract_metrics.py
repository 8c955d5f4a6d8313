"""
Metrics Extraction Chain

Asks a JSON-emitting model to read a research report and fill the profile
schema directly. Citations and the section map are still taken from the
report text by the regex normalizer.
"""

from contentforge.core.llm import TextGenerator, parse_llm_json_lenient
from contentforge.core.logging import get_logger
from contentforge.core.profile_coercion import coerce_profile
from contentforge.core.report_normalizer import clean, extract_citations, extract_sections
from contentforge.core.schemas_research import ExtractedProfile

logger = get_logger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You are a business intelligence analyst. Extract key metrics from company "
    "research data and return structured JSON. Return ONLY valid JSON. "
    "No explanation or code fences."
)

EXTRACTION_PROMPT = """Extract key business metrics from this company research report.

REPORT:
{report}

Return a JSON object with exactly these keys:
{{
  "industry": "main industry/sector",
  "businessType": "B2B/B2C/SaaS/etc",
  "companySize": "startup/SMB/enterprise or an employee range",
  "targetAudience": "primary audience",
  "uniqueValueProp": "value proposition",
  "brandTone": "brand voice",
  "marketPosition": "market position description",
  "keyServices": ["service 1", "service 2"],
  "competitors": ["competitor 1", "competitor 2"],
  "seoKeywords": ["keyword 1", "keyword 2"],
  "marketTrends": ["trend 1", "trend 2"],
  "opportunities": ["opportunity 1", "opportunity 2"],
  "challenges": ["challenge 1", "challenge 2"],
  "audiencePainPoints": ["pain point 1", "pain point 2"],
  "audienceGoals": ["goal 1", "goal 2"],
  "contentGoals": ["content goal 1", "content goal 2"],
  "recentNews": ["news item 1", "news item 2"]
}}

Use at most 8 short items per list. Use an empty string or empty list when the
report does not say."""


def extract_metrics(
    generator: TextGenerator,
    report: str,
    *,
    model: str,
    max_chars: int = 12000,
    defaults: dict[str, str] | None = None,
) -> ExtractedProfile:
    """
    Extract a profile from a report via the LLM, falling back to defaults.

    Args:
        generator: JSON-capable text generator (OpenRouter in production)
        report: Raw research report
        model: Model identifier for the generator
        max_chars: Max cleaned report characters sent to the model
        defaults: Scalar default overrides

    Returns:
        ExtractedProfile; all-defaults (plus citations/sections) when the
        response cannot be parsed

    Raises:
        LLMProviderError: If the generator call itself fails
    """
    cleaned = clean(report)[:max_chars]

    completion = generator.generate(
        model=model,
        messages=[
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": EXTRACTION_PROMPT.format(report=cleaned)},
        ],
        max_tokens=2000,
        temperature=0.3,
    )

    parsed = parse_llm_json_lenient(completion.text)
    if parsed is None:
        logger.warning(
            f"Metrics extraction returned unparseable output "
            f"({len(completion.text)} chars), using defaults"
        )
    elif not isinstance(parsed, dict):
        logger.warning(
            f"Metrics extraction returned {type(parsed).__name__} instead of an object, "
            f"using defaults"
        )

    profile = coerce_profile(parsed, defaults=defaults)

    logger.info(
        f"Metrics extraction complete: competitors={len(profile.competitors)}, "
        f"keywords={len(profile.seo_keywords)}, trends={len(profile.market_trends)}"
    )

    return profile.model_copy(
        update={
            "citations": extract_citations(clean(report, keep_citations=True)),
            "sections": extract_sections(report),
        }
    )
