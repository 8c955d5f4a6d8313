"""Tests for content generation."""

import pytest

from contentforge.chains.generate_content import build_content_prompt, generate_content
from contentforge.core.llm import LLMProviderError
from tests.fakes.fake_llm import FakeGenerator

PROFILE = {
    "name": "Acme",
    "industry": "Fintech",
    "target_audience": "Founders",
    "brand_voice": "Bold",
    "competitors": ["Stripe", "Adyen"],
    "goals": ["Lead Generation"],
}


def _generate(generator, topic="Cash flow tips", platform="linkedin", profile=None):
    return generate_content(
        generator,
        topic,
        platform,
        "friendly",
        profile,
        model="content-model",
        max_tokens=300,
        temperature=0.5,
        system_prompt="You write posts.",
    )


class TestBuildContentPrompt:
    def test_includes_profile_fields(self):
        prompt = build_content_prompt("Cash flow tips", "twitter", "friendly", PROFILE)
        assert "Create twitter content about: Cash flow tips" in prompt
        assert "Client: Acme" in prompt
        assert "Competitors: Stripe, Adyen" in prompt
        assert "Business Goals: Lead Generation" in prompt
        assert "280 characters" in prompt

    def test_without_profile(self):
        prompt = build_content_prompt("Cash flow tips", "blog", "formal", None)
        assert "Client:" not in prompt
        assert "Tone: formal" in prompt

    def test_unknown_platform_gets_generic_instruction(self):
        prompt = build_content_prompt("Tips", "threads", "formal", None)
        assert "Create threads content that is engaging" in prompt


class TestGenerateContent:
    """Tests for generate_content."""

    def test_returns_stripped_text(self):
        generator = FakeGenerator(["  Great post!  \n"])

        assert _generate(generator, profile=PROFILE) == "Great post!"
        call = generator.calls[0]
        assert call["model"] == "content-model"
        assert call["max_tokens"] == 300
        assert call["messages"][0] == {"role": "system", "content": "You write posts."}

    def test_blank_topic_rejected(self):
        generator = FakeGenerator(["unused"])

        with pytest.raises(ValueError, match="Topic is required"):
            _generate(generator, topic="   ")
        assert generator.calls == []

    def test_empty_output_rejected(self):
        with pytest.raises(ValueError, match="empty content"):
            _generate(FakeGenerator(["   "]))

    def test_provider_error_propagates(self):
        generator = FakeGenerator(error=LLMProviderError("nope", "openrouter", 401))

        with pytest.raises(LLMProviderError):
            _generate(generator)
