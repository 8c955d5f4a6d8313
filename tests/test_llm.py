"""Tests for the LLM adapter and lenient JSON parsing."""

from types import SimpleNamespace
from unittest.mock import patch

import httpx
import pytest
from openai import APIConnectionError, APIStatusError

from contentforge.core.config import Settings
from contentforge.core.llm import (
    LLMProviderError,
    OpenAIChatGenerator,
    build_openrouter_generator,
    build_perplexity_generator,
    find_json_block,
    parse_llm_json_lenient,
    strip_llm_fences,
)


def _settings(**overrides) -> Settings:
    values = {
        "SUPABASE_URL": "https://test.supabase.co",
        "SUPABASE_SERVICE_ROLE_KEY": "test-key",
        "OPENROUTER_API_KEY": "or-key",
        "PERPLEXITY_API_KEY": "pplx-key",
    }
    values.update(overrides)
    return Settings(**values)


def _response(text: str, citations=None):
    return SimpleNamespace(
        id="resp-1",
        model="sonar",
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(model_dump=lambda: {"total_tokens": 10}),
        citations=citations,
    )


class TestStripFences:
    """Tests for markdown fence stripping."""

    def test_json_fence(self):
        assert strip_llm_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence_inside_prose(self):
        assert strip_llm_fences('Here you go:\n```\n[1, 2]\n```\nThanks') == "[1, 2]"

    def test_no_fence(self):
        assert strip_llm_fences('  {"a": 1}  ') == '{"a": 1}'


class TestParseLenient:
    """Tests for lenient JSON parsing."""

    def test_plain_object(self):
        assert parse_llm_json_lenient('{"industry": "SaaS"}') == {"industry": "SaaS"}

    def test_object_wrapped_in_prose(self):
        raw = 'Sure! Here is the profile: {"industry": "SaaS"} Let me know.'
        assert parse_llm_json_lenient(raw) == {"industry": "SaaS"}

    def test_braces_inside_strings(self):
        raw = 'Result: {"note": "use {curly} and ]brackets[", "n": 1} done'
        assert parse_llm_json_lenient(raw) == {"note": "use {curly} and ]brackets[", "n": 1}

    def test_skips_unparseable_block(self):
        raw = "{not json} then [\"a\", \"b\"]"
        assert parse_llm_json_lenient(raw) == ["a", "b"]

    def test_garbage_returns_none(self):
        assert parse_llm_json_lenient("I could not find anything.") is None

    def test_truncated_returns_none(self):
        assert parse_llm_json_lenient('{"industry": "SaaS", "competitors": ["A"') is None

    def test_empty_returns_none(self):
        assert parse_llm_json_lenient("") is None
        assert parse_llm_json_lenient("   ") is None

    def test_find_json_block(self):
        assert find_json_block('x {"a": [1, 2]} y') == '{"a": [1, 2]}'
        assert find_json_block("no json") is None

    def test_unclosed_outer_bracket_keeps_inner_block(self):
        raw = 'Notes [ draft {"ok": true} and more'
        assert parse_llm_json_lenient(raw) == {"ok": True}
        assert find_json_block(raw) == '{"ok": true}'

    def test_many_unclosed_openers(self):
        assert parse_llm_json_lenient("[" * 20000 + '{"ok": true}') == {"ok": True}

    def test_mismatched_closer_discards_open_brackets(self):
        assert parse_llm_json_lenient('{"a": 1] then {"b": 2}') == {"b": 2}


class TestOpenAIChatGenerator:
    """Tests for the OpenAI-compatible generator."""

    def test_missing_key_raises_provider_error(self):
        generator = OpenAIChatGenerator("perplexity", api_key="", base_url="https://x")
        with pytest.raises(LLMProviderError) as exc_info:
            generator.generate("sonar", [{"role": "user", "content": "hi"}])
        assert exc_info.value.provider == "perplexity"

    def test_generate_maps_response(self):
        with patch("contentforge.core.llm.OpenAI") as mock_openai:
            client = mock_openai.return_value
            client.chat.completions.create.return_value = _response(
                "report text", citations=["https://a.example", "https://b.example"]
            )

            generator = OpenAIChatGenerator("perplexity", api_key="k", base_url="https://x")
            completion = generator.generate(
                "sonar", [{"role": "user", "content": "hi"}], max_tokens=50, temperature=0.2
            )

        assert completion.text == "report text"
        assert completion.model == "sonar"
        assert completion.response_id == "resp-1"
        assert completion.usage == {"total_tokens": 10}
        assert completion.citations == ["https://a.example", "https://b.example"]
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["max_tokens"] == 50
        assert kwargs["temperature"] == 0.2

    def test_missing_citations_attribute(self):
        with patch("contentforge.core.llm.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.return_value = _response("ok")
            generator = OpenAIChatGenerator("openrouter", api_key="k", base_url="https://x")
            completion = generator.generate("m", [{"role": "user", "content": "hi"}])

        assert completion.citations == []

    def test_status_error_mapped(self):
        request = httpx.Request("POST", "https://x/chat/completions")
        error = APIStatusError(
            "rate limited",
            response=httpx.Response(429, request=request),
            body=None,
        )
        with patch("contentforge.core.llm.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.side_effect = error
            generator = OpenAIChatGenerator("openrouter", api_key="k", base_url="https://x")
            with pytest.raises(LLMProviderError) as exc_info:
                generator.generate("m", [{"role": "user", "content": "hi"}])

        assert exc_info.value.status_code == 429
        assert exc_info.value.provider == "openrouter"

    def test_connection_error_mapped(self):
        request = httpx.Request("POST", "https://x/chat/completions")
        with patch("contentforge.core.llm.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.side_effect = APIConnectionError(
                request=request
            )
            generator = OpenAIChatGenerator("openrouter", api_key="k", base_url="https://x")
            with pytest.raises(LLMProviderError) as exc_info:
                generator.generate("m", [{"role": "user", "content": "hi"}])

        assert exc_info.value.status_code is None


class TestGeneratorFactories:
    """Tests for provider-specific generator construction."""

    def test_openrouter_headers(self):
        with patch("contentforge.core.llm.OpenAI") as mock_openai:
            generator = build_openrouter_generator(_settings(APP_URL="https://app.example"))

        assert generator.provider == "openrouter"
        kwargs = mock_openai.call_args.kwargs
        assert kwargs["base_url"] == "https://openrouter.ai/api/v1"
        assert kwargs["default_headers"]["HTTP-Referer"] == "https://app.example"

    def test_perplexity_base_url(self):
        with patch("contentforge.core.llm.OpenAI") as mock_openai:
            generator = build_perplexity_generator(_settings())

        assert generator.provider == "perplexity"
        assert mock_openai.call_args.kwargs["base_url"] == "https://api.perplexity.ai"
        assert mock_openai.call_args.kwargs["api_key"] == "pplx-key"

    def test_no_client_without_key(self):
        with patch("contentforge.core.llm.OpenAI") as mock_openai:
            build_perplexity_generator(_settings(PERPLEXITY_API_KEY=""))

        mock_openai.assert_not_called()
