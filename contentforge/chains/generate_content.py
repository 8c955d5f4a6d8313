"""Social and blog content generation from a client profile."""

from typing import Any

from contentforge.core.llm import TextGenerator
from contentforge.core.logging import get_logger

logger = get_logger(__name__)

PLATFORM_INSTRUCTIONS: dict[str, str] = {
    "twitter": (
        "Create a Twitter post (max 280 characters) that is engaging and includes "
        "relevant hashtags."
    ),
    "linkedin": (
        "Create a LinkedIn post that is professional and thought-provoking, suitable "
        "for B2B audience."
    ),
    "instagram": "Create an Instagram post with engaging copy and relevant hashtags.",
    "facebook": "Create a Facebook post that encourages engagement and community interaction.",
    "blog": (
        "Create a comprehensive blog post with a compelling headline and well-structured "
        "content."
    ),
}


def build_content_prompt(
    topic: str,
    platform: str,
    tone: str,
    client_profile: dict[str, Any] | None,
) -> str:
    """
    Build the user prompt for one piece of content.

    Client lines are only included for fields the profile actually has.
    """
    profile = client_profile or {}
    lines = [f"Create {platform} content about: {topic}", ""]

    if profile.get("name"):
        lines.append(f"Client: {profile['name']}")
    if profile.get("industry"):
        lines.append(f"Industry: {profile['industry']}")
    if profile.get("target_audience"):
        lines.append(f"Target Audience: {profile['target_audience']}")
    if profile.get("brand_voice"):
        lines.append(f"Brand Voice: {profile['brand_voice']}")
    if profile.get("competitors"):
        lines.append(f"Competitors: {', '.join(profile['competitors'])}")
    if profile.get("goals"):
        lines.append(f"Business Goals: {', '.join(profile['goals'])}")

    lines.extend(["", f"Tone: {tone}", f"Platform: {platform}", ""])
    lines.append(
        PLATFORM_INSTRUCTIONS.get(
            platform,
            f"Create {platform} content that is engaging and appropriate for the platform.",
        )
    )
    return "\n".join(lines)


def generate_content(
    generator: TextGenerator,
    topic: str,
    platform: str,
    tone: str,
    client_profile: dict[str, Any] | None,
    *,
    model: str,
    max_tokens: int,
    temperature: float,
    system_prompt: str,
) -> str:
    """
    Generate a post or article for a client.

    Returns:
        Generated content text

    Raises:
        ValueError: If the topic is blank or the model returned nothing
        LLMProviderError: If the generator call fails
    """
    if not topic or not topic.strip():
        raise ValueError("Topic is required")

    completion = generator.generate(
        model=model,
        messages=[
            {"role": "system", "content": system_prompt},
            {
                "role": "user",
                "content": build_content_prompt(topic.strip(), platform, tone, client_profile),
            },
        ],
        max_tokens=max_tokens,
        temperature=temperature,
    )

    content = completion.text.strip()
    if not content:
        raise ValueError("Model returned empty content")

    logger.info(f"Generated {platform} content: {len(content)} chars with {completion.model}")
    return content
