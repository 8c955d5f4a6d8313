"""Content topic suggestions and industry trend topics."""

import json
from typing import Any

from pydantic import ValidationError

from contentforge.core.llm import TextGenerator, parse_llm_json_lenient
from contentforge.core.logging import get_logger
from contentforge.core.schemas_content import TopicSuggestion
from contentforge.core.schemas_research import dedupe_preserving_order

logger = get_logger(__name__)

MAX_SUGGESTIONS = 12
TREND_COUNT = 5

TOPIC_SYSTEM_PROMPT = (
    "You are a content strategist that generates highly relevant topic suggestions "
    "based on client profiles and content history. Return only valid JSON arrays."
)

TRENDS_SYSTEM_PROMPT = """You are an expert industry analyst. Research current trends and topics in the {industry} industry.

Return ONLY a JSON array of 5 trending topics as strings:
["topic1", "topic2", "topic3", "topic4", "topic5"]

Focus on:
- Current industry trends
- Emerging technologies
- Market developments
- Regulatory changes
- Consumer behavior shifts

Make topics specific and actionable for content creation."""


def fallback_trends(industry: str) -> list[str]:
    """Generic trend topics used when the model output cannot be parsed."""
    return [
        f"{industry} industry trends",
        f"Digital transformation in {industry}",
        f"Future of {industry}",
        f"{industry} best practices",
        f"Emerging {industry} technologies",
    ]


def _client_context(profile: dict[str, Any] | None) -> list[str]:
    if not profile:
        return []
    lines = []
    if profile.get("name"):
        lines.append(f"Company: {profile['name']}")
    if profile.get("industry"):
        lines.append(f"Industry: {profile['industry']}")
    if profile.get("target_audience"):
        lines.append(f"Target Audience: {profile['target_audience']}")
    if profile.get("brand_voice"):
        lines.append(f"Brand Voice: {profile['brand_voice']}")
    if profile.get("goals"):
        lines.append(f"Content Goals: {', '.join(profile['goals'])}")
    if profile.get("seo_keywords"):
        lines.append(f"SEO Keywords: {', '.join(profile['seo_keywords'])}")
    return lines


def _metadata(doc: dict[str, Any]) -> dict[str, Any]:
    metadata = doc.get("metadata")
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except json.JSONDecodeError:
            return {}
    return metadata if isinstance(metadata, dict) else {}


def build_topic_prompt(
    client_profile: dict[str, Any] | None,
    previous_content: list[dict[str, Any]],
) -> str:
    """
    Build the topic-suggestion prompt from a client profile and recent documents.

    Args:
        client_profile: client_profiles row (snake_case keys) or None
        previous_content: content_documents rows, newest first

    Returns:
        Prompt text
    """
    previous_topics: list[str] = []
    titles: list[str] = []
    keywords: list[str] = []

    for doc in previous_content:
        if doc.get("topic"):
            previous_topics.append(doc["topic"])
        if doc.get("title"):
            titles.append(doc["title"])
        metadata = _metadata(doc)
        if isinstance(metadata.get("keywords"), list):
            keywords.extend(str(k).lower() for k in metadata["keywords"])
        if metadata.get("topic"):
            previous_topics.append(metadata["topic"])

    prompt = (
        "Generate 8-12 relevant content topic suggestions for this client based on "
        "their profile and previous content."
    )

    context = _client_context(client_profile)
    if context:
        prompt += "\n\nClient Profile:\n" + "\n".join(context)

    if previous_topics or titles:
        prompt += "\n\nPrevious Content Analysis:"
        if previous_topics:
            unique_topics = dedupe_preserving_order(previous_topics, cap=10)
            prompt += f"\n- Topics covered: {', '.join(unique_topics)}"
        if titles:
            prompt += f"\n- Recent titles: {', '.join(titles[:5])}"
        if keywords:
            prompt += f"\n- Keywords used: {', '.join(dedupe_preserving_order(keywords, cap=15))}"
        prompt += (
            "\n\nGenerate topics that:"
            "\n1. Align with their industry and audience"
            "\n2. Build upon or expand their previous content themes"
            "\n3. Are relevant to their brand voice and goals"
            "\n4. Offer variety while staying on-brand"
        )
    else:
        prompt += (
            "\n\nThis is a new client with no previous content. Generate foundational "
            "topics that:"
            "\n1. Align with their industry and target audience"
            "\n2. Support their content goals"
            "\n3. Are appropriate for their brand voice"
        )

    prompt += (
        "\n\nReturn a JSON array of topic objects, each with:"
        "\n- topic: A concise, engaging topic title (max 60 characters)"
        "\n- trending_score: A number between 70-100 indicating relevance"
        "\n- keywords: An array of 3-5 relevant keywords"
        "\n- content_angle: A brief description of the content angle/approach"
        "\n- target_audience: Who this topic appeals to"
        "\n\nFormat as a valid JSON array only, no markdown or additional text."
    )
    return prompt


def parse_topic_suggestions(raw_output: str) -> list[TopicSuggestion]:
    """
    Decode topic suggestions item by item, skipping malformed entries.

    Accepts a bare array or an object wrapping it under "topics".
    """
    parsed = parse_llm_json_lenient(raw_output)
    if isinstance(parsed, dict):
        parsed = parsed.get("topics")
    if not isinstance(parsed, list):
        return []

    suggestions: list[TopicSuggestion] = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        try:
            suggestions.append(TopicSuggestion.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping invalid topic suggestion: {e.error_count()} errors")
    return suggestions[:MAX_SUGGESTIONS]


def suggest_topics(
    generator: TextGenerator,
    client_profile: dict[str, Any] | None,
    previous_content: list[dict[str, Any]],
    *,
    model: str,
) -> list[TopicSuggestion]:
    """
    Suggest content topics for a client.

    Returns:
        Up to 12 suggestions; empty if the model output has none usable

    Raises:
        LLMProviderError: If the generator call fails
    """
    completion = generator.generate(
        model=model,
        messages=[
            {"role": "system", "content": TOPIC_SYSTEM_PROMPT},
            {"role": "user", "content": build_topic_prompt(client_profile, previous_content)},
        ],
        max_tokens=2000,
        temperature=0.8,
    )

    suggestions = parse_topic_suggestions(completion.text)
    if not suggestions:
        logger.warning("Topic suggestion output contained no usable topics")
    return suggestions


def suggest_industry_trends(
    generator: TextGenerator,
    industry: str,
    *,
    model: str,
) -> list[str]:
    """
    Five trending content topics for an industry.

    Returns:
        Topic strings, or fallback_trends(industry) when output is unusable

    Raises:
        LLMProviderError: If the generator call fails
    """
    completion = generator.generate(
        model=model,
        messages=[
            {"role": "system", "content": TRENDS_SYSTEM_PROMPT.format(industry=industry)},
            {
                "role": "user",
                "content": (
                    f"Research current trends in the {industry} industry for content "
                    "marketing purposes."
                ),
            },
        ],
        max_tokens=500,
        temperature=0.7,
    )

    parsed = parse_llm_json_lenient(completion.text)
    if isinstance(parsed, list):
        trends = [str(t).strip() for t in parsed if isinstance(t, str) and t.strip()]
        if trends:
            return dedupe_preserving_order(trends, cap=TREND_COUNT)

    logger.warning(f"Industry trends output for {industry} unusable, using fallback topics")
    return fallback_trends(industry)
