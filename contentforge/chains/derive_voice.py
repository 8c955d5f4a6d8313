"""
Brand Voice Derivation Chain

Reads a team's recent content, measures a few surface statistics and asks a
model to summarize the observed voice as a short, actionable guide.
"""

import re
from typing import Any

from contentforge.core.llm import TextGenerator, parse_llm_json_lenient
from contentforge.core.logging import get_logger
from contentforge.core.profile_coercion import coerce_list, coerce_scalar
from contentforge.core.schemas_content import BrandVoice, VoiceMetrics

logger = get_logger(__name__)

MAX_SAMPLE_DOCUMENTS = 30
MAX_SAMPLE_CHARS = 20000
MAX_VOICE_ITEMS = 10
MAX_SUMMARY_CHARS = 500
DEFAULT_SUMMARY = "Professional"

_EMOJI_RE = re.compile("[\U0001F300-\U0001FAFF\u2600-\u27BF\uFE0F]")
_HASHTAG_RE = re.compile(r"(?:^|\s)#\w+")
_SENTENCE_END_RE = re.compile(r"[.!?]+\s")

VOICE_SYSTEM_PROMPT = (
    "You are a marketing editor. Given excerpts of a team's past content, infer a "
    "concise, practical brand voice guide. Output strictly JSON with fields: summary "
    "(string), tone_adjectives (string[]), style_notes (string[]), platform_variations "
    "(object with twitter/linkedin/instagram keys, each array of strings), do (string[]), "
    "dont (string[]). Keep it short and actionable."
)


def document_texts(documents: list[dict[str, Any]]) -> list[str]:
    """Title and body of each document joined, skipping empty documents."""
    texts = []
    for doc in documents:
        text = "\n".join(str(doc[key]) for key in ("title", "content") if doc.get(key))
        if text.strip():
            texts.append(text)
    return texts


def voice_metrics(sample: str) -> VoiceMetrics:
    """Average sentence length plus emoji, hashtag and exclamation counts."""
    sentence_count = len([s for s in _SENTENCE_END_RE.split(sample) if s]) or 1
    word_count = len(sample.split()) or 1
    return VoiceMetrics(
        avg_sentence_length=round(word_count / sentence_count, 1),
        emoji_count=len(_EMOJI_RE.findall(sample)),
        hashtag_count=len(_HASHTAG_RE.findall(sample)),
        exclamation_count=sample.count("!"),
    )


def build_voice_prompt(sample: str, metrics: VoiceMetrics) -> str:
    return (
        f"Here are excerpts from past content (truncated):\n\n{sample}\n\n"
        f"Observed metrics: avgSentenceLength={metrics.avg_sentence_length}, "
        f"emojiCount={metrics.emoji_count}, hashtagCount={metrics.hashtag_count}, "
        f"exclamationCount={metrics.exclamation_count}."
    )


def coerce_brand_voice(data: Any, metrics: VoiceMetrics) -> BrandVoice:
    """
    Decode the model's voice guide field by field.

    Non-object input yields the default guide. Lists keep at most 10 items.
    """
    source = data if isinstance(data, dict) else {}

    variations: dict[str, list[str]] = {}
    raw_variations = source.get("platform_variations")
    if isinstance(raw_variations, dict):
        for platform, notes in raw_variations.items():
            items = coerce_list(notes)[:MAX_VOICE_ITEMS]
            if items:
                variations[str(platform).lower()] = items

    return BrandVoice(
        summary=coerce_scalar(source.get("summary"), DEFAULT_SUMMARY)[:MAX_SUMMARY_CHARS],
        tone_adjectives=coerce_list(source.get("tone_adjectives"))[:MAX_VOICE_ITEMS],
        style_notes=coerce_list(source.get("style_notes"))[:MAX_VOICE_ITEMS],
        platform_variations=variations,
        do=coerce_list(source.get("do"))[:MAX_VOICE_ITEMS],
        dont=coerce_list(source.get("dont"))[:MAX_VOICE_ITEMS],
        metrics=metrics,
    )


def derive_brand_voice(
    generator: TextGenerator,
    documents: list[dict[str, Any]],
    *,
    model: str,
) -> BrandVoice:
    """
    Derive a brand voice guide from past content documents.

    Args:
        generator: JSON-capable text generator
        documents: content_documents rows (title, content), newest first
        model: Model identifier for the generator

    Returns:
        BrandVoice; the default guide (with real metrics) when output is unusable

    Raises:
        ValueError: If no document has any text
        LLMProviderError: If the generator call fails
    """
    texts = document_texts(documents)
    if not texts:
        raise ValueError("No content available to analyze")

    sample = "\n\n".join(texts[:MAX_SAMPLE_DOCUMENTS])[:MAX_SAMPLE_CHARS]
    metrics = voice_metrics(sample)

    completion = generator.generate(
        model=model,
        messages=[
            {"role": "system", "content": VOICE_SYSTEM_PROMPT},
            {"role": "user", "content": build_voice_prompt(sample, metrics)},
        ],
        max_tokens=800,
        temperature=0.4,
    )

    parsed = parse_llm_json_lenient(completion.text)
    if not isinstance(parsed, dict):
        logger.warning(
            f"Voice derivation returned no JSON object ({len(completion.text)} chars), "
            f"using default guide"
        )

    voice = coerce_brand_voice(parsed, metrics)
    logger.info(
        f"Derived brand voice from {len(texts)} documents: "
        f"{len(voice.tone_adjectives)} adjectives, {len(voice.style_notes)} notes"
    )
    return voice
