"""Tests for client profile API endpoints."""

import json
from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from contentforge.api.deps import get_openrouter_generator
from contentforge.api.profiles import VOICE_DOCUMENT_COLUMNS
from contentforge.core.llm import LLMProviderError
from contentforge.main import app
from tests.fakes.fake_llm import FakeGenerator

client = TestClient(app)

DOCUMENTS = [
    {"title": "Launch day", "content": "We shipped it! #launch"},
    {"title": "Hiring", "content": "Join a small, focused team."},
]

VOICE_JSON = json.dumps(
    {
        "summary": "Energetic and plain-spoken",
        "tone_adjectives": ["energetic"],
        "platform_variations": {"twitter": ["Punchy"]},
    }
)


@pytest.fixture
def generator():
    fake = FakeGenerator(provider="openrouter")
    app.dependency_overrides[get_openrouter_generator] = lambda: fake
    yield fake
    app.dependency_overrides.clear()


class TestDeriveVoiceEndpoint:
    """Tests for POST /v1/profiles/derive-voice."""

    def test_derives_and_saves(self, generator):
        generator.responses = [VOICE_JSON]
        team_id = uuid4()

        with (
            patch("contentforge.api.profiles.list_recent_content") as mock_list,
            patch("contentforge.api.profiles.save_derived_brand_voice") as mock_save,
        ):
            mock_list.return_value = DOCUMENTS
            mock_save.return_value = {"id": "profile-1"}
            response = client.post(
                "/v1/profiles/derive-voice",
                json={"teamId": str(team_id), "limit": 500},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["derived"]["summary"] == "Energetic and plain-spoken"
        assert body["derived"]["platformVariations"] == {"twitter": ["Punchy"]}
        assert body["derived"]["metrics"]["hashtagCount"] == 1
        mock_list.assert_called_once_with(team_id, limit=100, columns=VOICE_DOCUMENT_COLUMNS)
        saved_team, saved_voice = mock_save.call_args[0]
        assert saved_team == team_id
        assert saved_voice["tone_adjectives"] == ["energetic"]
        assert saved_voice["metrics"]["exclamation_count"] == 1

    def test_small_limit_raised_to_minimum(self, generator):
        generator.responses = [VOICE_JSON]

        with (
            patch("contentforge.api.profiles.list_recent_content") as mock_list,
            patch("contentforge.api.profiles.save_derived_brand_voice"),
        ):
            mock_list.return_value = DOCUMENTS
            client.post("/v1/profiles/derive-voice", json={"teamId": str(uuid4()), "limit": 2})

        assert mock_list.call_args.kwargs["limit"] == 10

    def test_no_content_is_400(self, generator):
        with (
            patch("contentforge.api.profiles.list_recent_content") as mock_list,
            patch("contentforge.api.profiles.save_derived_brand_voice") as mock_save,
        ):
            mock_list.return_value = []
            response = client.post("/v1/profiles/derive-voice", json={"teamId": str(uuid4())})

        assert response.status_code == 400
        assert response.json()["detail"] == "No content available to analyze"
        assert generator.calls == []
        mock_save.assert_not_called()

    def test_provider_error_is_502(self, generator):
        generator.error = LLMProviderError("rate limited", "openrouter", status_code=429)

        with (
            patch("contentforge.api.profiles.list_recent_content") as mock_list,
            patch("contentforge.api.profiles.save_derived_brand_voice") as mock_save,
        ):
            mock_list.return_value = DOCUMENTS
            response = client.post("/v1/profiles/derive-voice", json={"teamId": str(uuid4())})

        assert response.status_code == 502
        mock_save.assert_not_called()

    def test_save_failure_is_500(self, generator):
        generator.responses = [VOICE_JSON]

        with (
            patch("contentforge.api.profiles.list_recent_content") as mock_list,
            patch("contentforge.api.profiles.save_derived_brand_voice") as mock_save,
        ):
            mock_list.return_value = DOCUMENTS
            mock_save.side_effect = RuntimeError("db down")
            response = client.post("/v1/profiles/derive-voice", json={"teamId": str(uuid4())})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to derive brand voice"

    def test_invalid_team_id_is_422(self, generator):
        response = client.post("/v1/profiles/derive-voice", json={"teamId": "not-a-uuid"})
        assert response.status_code == 422
