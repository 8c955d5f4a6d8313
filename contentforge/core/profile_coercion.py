"""Field-by-field decoding of LLM-produced JSON into an ExtractedProfile.

Each field is coerced on its own with its own fallback, so one malformed
value never discards the rest of an otherwise usable response.
"""

import re
from typing import Any

from pydantic.alias_generators import to_camel

from contentforge.core.schemas_research import (
    LIST_FIELDS,
    SCALAR_FIELDS,
    DEFAULT_SCALARS,
    ExtractedProfile,
)

_LIST_SPLIT_RE = re.compile(r"\s*[,;]\s*")


def _flatten(data: dict[str, Any]) -> dict[str, Any]:
    """Lift one level of grouped objects, e.g. {"companyOverview": {"industry": ...}}."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for inner_key, inner_value in value.items():
                flat.setdefault(inner_key, inner_value)
        else:
            flat[key] = value
    return flat


def _lookup(data: dict[str, Any], field_name: str) -> Any:
    if field_name in data:
        return data[field_name]
    return data.get(to_camel(field_name))


def coerce_scalar(value: Any, default: str) -> str:
    """Non-empty string or number -> stripped string; anything else -> default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def coerce_list(value: Any) -> list[str]:
    """List of string-ish items, or a delimited string; anything else -> []."""
    if isinstance(value, str):
        raw_items: list[Any] = _LIST_SPLIT_RE.split(value)
    elif isinstance(value, list):
        raw_items = value
    else:
        return []

    items = []
    for item in raw_items:
        if isinstance(item, bool):
            continue
        if isinstance(item, (str, int, float)):
            text = str(item).strip()
            if text:
                items.append(text)
    return items


def coerce_profile(data: Any, defaults: dict[str, str] | None = None) -> ExtractedProfile:
    """
    Decode parsed LLM JSON into a profile, defaulting each bad field independently.

    Args:
        data: Parsed JSON (any type; non-objects yield the all-defaults profile)
        defaults: Overrides applied on top of DEFAULT_SCALARS

    Returns:
        ExtractedProfile with every scalar populated and every list capped
    """
    merged_defaults = {**DEFAULT_SCALARS, **(defaults or {})}
    source = _flatten(data) if isinstance(data, dict) else {}

    values: dict[str, Any] = {}
    for name in SCALAR_FIELDS:
        values[name] = coerce_scalar(_lookup(source, name), merged_defaults.get(name, ""))
    for name in LIST_FIELDS:
        values[name] = coerce_list(_lookup(source, name))

    return ExtractedProfile(**values)
