"""Turn free-text LLM research reports into a fixed-shape ExtractedProfile.

Everything here is a pure function over the input text and the read-only
pattern tables below. Section-scoped matches take precedence over inline
``label: value`` matches; list fields are de-duplicated and capped.
"""

import re
from collections.abc import Mapping, Sequence
from types import MappingProxyType

from contentforge.core.schemas_research import (
    LIST_CAP,
    LIST_FIELDS,
    SCALAR_FIELDS,
    ExtractedProfile,
    dedupe_preserving_order,
)

_THINK_RE = re.compile(r"<think>.*?</think>", re.DOTALL)
_CITATION_RE = re.compile(r"\[\d+\]")
_EXCESS_BREAKS_RE = re.compile(r"\n(?:[ \t]*\n){2,}")
_DEEP_HEADING_RE = re.compile(r"^#{3,}", re.MULTILINE)
_HEADING_RE = re.compile(r"^##[ \t]*(.*?)[ \t#]*$", re.MULTILINE)
_BULLET_RE = re.compile(r"^\s*(?:[-*]\s+|•\s*|\d+[.)]\s+)(.*\S)\s*$")
_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")
_EMPHASIS_RE = re.compile(r"\*\*|__")
_HEADING_LINE_RE = re.compile(r"^##.*$", re.MULTILINE)

FIELD_SENTENCE_LENGTH = (20, 200)
LIST_SENTENCE_LENGTH = (10, 150)

# Candidate labels per profile field, most specific first. Matching is
# case-insensitive against section titles and inline "label: value" text.
FIELD_LABELS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "industry": ("industry overview", "industry", "sector"),
        "business_type": ("business model", "revenue model", "business type"),
        "company_size": ("company size", "employees", "size"),
        "target_audience": ("target audience", "target customers", "customer segmentation"),
        "unique_value_prop": ("unique value proposition", "value proposition", "differentiator"),
        "brand_tone": ("brand tone", "brand voice", "tone", "voice"),
        "market_position": ("market positioning", "market position", "positioning"),
        "key_services": ("key services", "services", "products", "offerings"),
        "competitors": ("competitive landscape", "competitors", "rivals"),
        "seo_keywords": ("seo keywords", "seo", "keywords", "search terms"),
        "market_trends": ("market trends", "industry trends", "trends"),
        "opportunities": ("market opportunities", "opportunities"),
        "challenges": ("industry challenges", "challenges"),
        "audience_pain_points": ("pain points", "customer challenges", "problems"),
        "audience_goals": ("customer goals", "goals", "objectives"),
        "content_goals": ("content goals", "marketing objectives", "content strategy"),
        "recent_news": ("recent developments", "recent news", "latest updates"),
    }
)


def clean(text: str, keep_citations: bool = False) -> str:
    """
    Normalize raw LLM output before extraction.

    Removes <think> blocks and (unless keep_citations) [n] markers, collapses
    3+ line breaks to 2, and rewrites ###/#### headings to ##.

    Args:
        text: Raw report text
        keep_citations: Leave [n] markers in place

    Returns:
        Cleaned text (cleaning it again is a no-op)
    """
    if not text:
        return ""

    cleaned = text.replace("\r\n", "\n")
    cleaned = _THINK_RE.sub("", cleaned)
    if not keep_citations:
        cleaned = _CITATION_RE.sub("", cleaned)
    cleaned = _EXCESS_BREAKS_RE.sub("\n\n", cleaned)
    cleaned = _DEEP_HEADING_RE.sub("##", cleaned)
    return cleaned.strip()


def _split_sections(cleaned: str) -> list[tuple[str, str]]:
    """(title, body) for every ## heading, body running to the next heading."""
    matches = list(_HEADING_RE.finditer(cleaned))
    sections: list[tuple[str, str]] = []
    for index, match in enumerate(matches):
        body_end = matches[index + 1].start() if index + 1 < len(matches) else len(cleaned)
        sections.append((match.group(1).strip(), cleaned[match.end() : body_end].strip()))
    return sections


def _matching_bodies(sections: list[tuple[str, str]], label: str) -> list[str]:
    needle = label.lower()
    return [body for title, body in sections if needle in title.lower()]


def _bullets(body: str) -> list[str]:
    items = []
    for line in body.splitlines():
        match = _BULLET_RE.match(line)
        if match:
            item = _EMPHASIS_RE.sub("", match.group(1)).strip()
            if item:
                items.append(item)
    return items


def _sentences(body: str, min_len: int, max_len: int) -> list[str]:
    """Uppercase-initial, punctuation-terminated sentences within the length bounds."""
    found = []
    for line in body.splitlines():
        bullet = _BULLET_RE.match(line)
        line = bullet.group(1) if bullet else line
        line = _EMPHASIS_RE.sub("", line).strip()
        for piece in _SENTENCE_SPLIT_RE.split(line):
            piece = piece.strip()
            if (
                min_len <= len(piece) <= max_len
                and piece[0].isupper()
                and piece[-1] in ".!?"
            ):
                found.append(piece)
    return found


def _inline_values(cleaned: str, label: str) -> list[str]:
    """
    Values of ``label: value`` (or ``label value``) up to the next period or line end.

    Heading lines are skipped and a match never continues onto the next line.
    Bold markers around the label (``**Industry:**``) are tolerated.
    """
    pattern = re.compile(
        rf"(?<!\w){re.escape(label)}(?:\*\*|__)?(?:[ \t]*:[ \t]*|[ \t]+)([^.\n]+)",
        re.IGNORECASE,
    )
    values = []
    for match in pattern.finditer(_HEADING_LINE_RE.sub("", cleaned)):
        value = match.group(1)
        bullet = _BULLET_RE.match(value)
        if bullet:
            value = bullet.group(1)
        value = _EMPHASIS_RE.sub("", value).strip()
        if value:
            values.append(value)
    return values


def _first_line(body: str) -> str:
    """First bullet item of a section body, or its first non-empty line."""
    bullets = _bullets(body)
    if bullets:
        return bullets[0]
    for line in body.splitlines():
        line = _EMPHASIS_RE.sub("", line).strip()
        if line:
            return line[: FIELD_SENTENCE_LENGTH[1]]
    return ""


def _field_from(cleaned: str, sections: list[tuple[str, str]], labels: Sequence[str]) -> str:
    min_len, max_len = FIELD_SENTENCE_LENGTH
    for label in labels:
        for body in _matching_bodies(sections, label):
            sentences = _sentences(body, min_len, max_len)
            if sentences:
                return sentences[0]

    for label in labels:
        for body in _matching_bodies(sections, label):
            line = _first_line(body)
            if line:
                return line

    for label in labels:
        values = _inline_values(cleaned, label)
        if values:
            return values[0]
    return ""


def _array_from(
    cleaned: str,
    sections: list[tuple[str, str]],
    labels: Sequence[str],
    cap: int,
) -> list[str]:
    min_len, max_len = LIST_SENTENCE_LENGTH
    items: list[str] = []
    for label in labels:
        for body in _matching_bodies(sections, label):
            items.extend(_bullets(body) or _sentences(body, min_len, max_len))

    if not items:
        for label in labels:
            items.extend(_inline_values(cleaned, label))

    return dedupe_preserving_order(items, cap=cap)


def extract_field(text: str, labels: Sequence[str]) -> str:
    """
    Extract one scalar value for a concept described by candidate labels.

    Section pass: for each label, the first 20-200 character sentence inside a
    ## section whose title contains the label; failing that, the first bullet
    item or line of such a section. Inline pass (only if the section pass
    found nothing): the first same-line ``label: value`` match outside
    headings.

    Args:
        text: Raw or cleaned report text
        labels: Synonyms for the concept, in preference order

    Returns:
        Extracted value, or "" if nothing matched
    """
    cleaned = clean(text)
    if not cleaned:
        return ""
    return _field_from(cleaned, _split_sections(cleaned), labels)


def extract_array(text: str, labels: Sequence[str], cap: int = LIST_CAP) -> list[str]:
    """
    Extract a list of short values for a concept described by candidate labels.

    Matching sections contribute their bullet items, or their 10-150 character
    sentences when they have no bullets. If no section yields anything, every
    inline ``label: value`` match in the whole text is collected instead.

    Args:
        text: Raw or cleaned report text
        labels: Synonyms for the concept, in preference order
        cap: Max items returned

    Returns:
        De-duplicated items in document order, at most ``cap`` long
    """
    cleaned = clean(text)
    if not cleaned:
        return []
    return _array_from(cleaned, _split_sections(cleaned), labels, cap)


def extract_sections(text: str) -> dict[str, str]:
    """
    Map each ## heading title to its body text.

    Citation markers are kept in the bodies. A repeated title keeps the body
    of its last occurrence.
    """
    cleaned = clean(text, keep_citations=True)
    sections: dict[str, str] = {}
    for title, body in _split_sections(cleaned):
        if title:
            sections[title] = body
    return sections


def extract_citations(text: str) -> list[str]:
    """Unique ``[n]`` markers in first-seen order."""
    if not text:
        return []
    return dedupe_preserving_order(_CITATION_RE.findall(text))


def extract_profile(
    text: str,
    field_labels: Mapping[str, Sequence[str]] = FIELD_LABELS,
) -> ExtractedProfile:
    """
    Run every field extraction over a report.

    Scalars nothing matched stay ""; call ``with_defaults()`` on the result to
    substitute fallbacks before persisting.

    Args:
        text: Raw report text
        field_labels: Profile field name -> candidate labels

    Returns:
        ExtractedProfile with citations and section map

    Raises:
        ValueError: If field_labels names a field the profile does not have
    """
    unknown = set(field_labels) - set(SCALAR_FIELDS) - set(LIST_FIELDS)
    if unknown:
        raise ValueError(f"Unknown profile fields in label table: {sorted(unknown)}")

    text = text or ""
    cleaned = clean(text)
    sections = _split_sections(cleaned)

    values: dict[str, object] = {}
    for name, labels in field_labels.items():
        if name in SCALAR_FIELDS:
            values[name] = _field_from(cleaned, sections, labels) if cleaned else ""
        else:
            values[name] = _array_from(cleaned, sections, labels, LIST_CAP) if cleaned else []

    return ExtractedProfile(
        **values,
        citations=extract_citations(clean(text, keep_citations=True)),
        sections=extract_sections(text),
    )
