"""LLM provider contract, OpenAI-compatible adapter, and JSON parsing helpers.

OpenRouter and Perplexity both speak the OpenAI chat-completions protocol, so a
single adapter over the ``openai`` SDK serves both. Chains depend only on the
``TextGenerator`` protocol and receive a concrete generator from the caller.
"""

import json
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol

from openai import APIError, APIStatusError, OpenAI

from contentforge.core.config import Settings
from contentforge.core.logging import get_logger

logger = get_logger(__name__)

Message = dict[str, str]


class LLMProviderError(Exception):
    """An upstream text-generation call failed (auth, rate limit, network, bad request)."""

    def __init__(self, message: str, provider: str, status_code: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


@dataclass(frozen=True)
class Completion:
    """Generated text plus the provider metadata callers persist."""

    text: str
    model: str = ""
    response_id: str | None = None
    usage: dict[str, Any] = field(default_factory=dict)
    citations: list[str] = field(default_factory=list)


class TextGenerator(Protocol):
    """Anything that turns role-tagged messages into a Completion."""

    provider: str

    def generate(
        self,
        model: str,
        messages: list[Message],
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> Completion: ...


class OpenAIChatGenerator:
    """TextGenerator backed by an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        provider: str,
        api_key: str,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        timeout: float = 120.0,
    ):
        self.provider = provider
        self._client = (
            OpenAI(
                api_key=api_key,
                base_url=base_url,
                default_headers=default_headers,
                timeout=timeout,
            )
            if api_key
            else None
        )

    def generate(
        self,
        model: str,
        messages: list[Message],
        max_tokens: int = 1000,
        temperature: float = 0.7,
    ) -> Completion:
        """
        Run one chat completion.

        Args:
            model: Provider model identifier
            messages: Ordered role/content messages
            max_tokens: Max output tokens
            temperature: Sampling temperature

        Returns:
            Completion with text and provider metadata

        Raises:
            LLMProviderError: If the key is missing or the provider call fails
        """
        if self._client is None:
            raise LLMProviderError(f"{self.provider} API key not configured", self.provider)

        logger.debug(
            f"{self.provider} request: model={model} messages={len(messages)} "
            f"max_tokens={max_tokens}"
        )

        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except APIStatusError as e:
            raise LLMProviderError(
                f"{self.provider} API error: {e.status_code} {e.message}",
                self.provider,
                status_code=e.status_code,
            ) from e
        except APIError as e:
            raise LLMProviderError(f"{self.provider} request failed: {e}", self.provider) from e

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        # Perplexity returns source URLs as a non-standard top-level field
        citations = getattr(response, "citations", None) or []

        return Completion(
            text=text,
            model=response.model or model,
            response_id=response.id,
            usage=response.usage.model_dump() if response.usage else {},
            citations=[str(c) for c in citations],
        )


def build_openrouter_generator(settings: Settings) -> OpenAIChatGenerator:
    """Build the OpenRouter generator used for JSON extraction and content."""
    return OpenAIChatGenerator(
        provider="openrouter",
        api_key=settings.OPENROUTER_API_KEY,
        base_url=settings.OPENROUTER_BASE_URL,
        default_headers={"HTTP-Referer": settings.APP_URL, "X-Title": "ContentForge"},
    )


def build_perplexity_generator(settings: Settings) -> OpenAIChatGenerator:
    """Build the Perplexity generator used for web-grounded research."""
    return OpenAIChatGenerator(
        provider="perplexity",
        api_key=settings.PERPLEXITY_API_KEY,
        base_url=settings.PERPLEXITY_BASE_URL,
    )


# ============================================================================
# JSON parsing
# ============================================================================

_CLOSERS = {"{": "}", "[": "]"}


def strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def _json_spans(text: str) -> list[tuple[int, int]]:
    """
    (start, end) of every balanced {...} / [...] block, sorted by start.

    One pass over the text. Quotes only open strings inside a bracket, and a
    mismatched closer discards every open bracket.
    """
    spans: list[tuple[int, int]] = []
    stack: list[tuple[str, int]] = []
    in_string = False
    escaped = False

    for index, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"' and stack:
            in_string = True
        elif char in _CLOSERS:
            stack.append((_CLOSERS[char], index))
        elif char in ("}", "]") and stack:
            expected, start = stack.pop()
            if expected == char:
                spans.append((start, index))
            else:
                stack.clear()

    return sorted(spans)


def _iter_json_blocks(text: str) -> Iterator[str]:
    """Yield balanced {...} / [...] substrings in order of their opening bracket."""
    for start, end in _json_spans(text):
        yield text[start : end + 1]


def find_json_block(text: str) -> str | None:
    """
    Locate the first balanced JSON object or array in free text.

    Args:
        text: LLM output possibly wrapping JSON in prose

    Returns:
        The substring, or None if no balanced block exists
    """
    return next(_iter_json_blocks(text), None)


def parse_llm_json_lenient(raw_output: str) -> Any | None:
    """
    Parse LLM output as JSON without raising.

    Tries the fence-stripped text first, then each balanced {...} / [...]
    block in order until one parses.

    Args:
        raw_output: Raw string from LLM response

    Returns:
        Parsed JSON value, or None if nothing parses
    """
    if not raw_output or not raw_output.strip():
        return None

    cleaned = strip_llm_fences(raw_output)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    for block in _iter_json_blocks(cleaned):
        try:
            return json.loads(block)
        except json.JSONDecodeError:
            continue

    return None
