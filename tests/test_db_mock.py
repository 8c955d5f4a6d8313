"""Tests for Supabase persistence helpers (mocked client)."""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest

from contentforge.db.client_profiles import get_latest_client_profile, save_derived_brand_voice
from contentforge.db.content_documents import list_recent_content
from contentforge.db.research_data import (
    get_research_data,
    save_research_data,
    update_research_payload,
)


def _response(data):
    response = MagicMock()
    response.data = data
    return response


class TestSaveResearchData:
    """Tests for save_research_data."""

    def test_upserts_with_client_profile(self):
        team_id, profile_id = uuid4(), uuid4()

        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            table.upsert.return_value.execute.return_value = _response([{"id": "row-1"}])

            saved = save_research_data(
                team_id, "perplexity", {"industry": "SaaS"}, client_profile_id=profile_id
            )

        assert saved == {"id": "row-1"}
        mock_supabase.return_value.table.assert_called_with("research_data")
        row = table.upsert.call_args.args[0]
        assert row["team_id"] == str(team_id)
        assert row["client_profile_id"] == str(profile_id)
        assert row["research_data"] == {"industry": "SaaS"}
        assert table.upsert.call_args.kwargs["on_conflict"] == "team_id,client_profile_id"
        table.insert.assert_not_called()

    def test_inserts_without_client_profile(self):
        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            table.insert.return_value.execute.return_value = _response([{"id": "row-2"}])

            saved = save_research_data(uuid4(), "openrouter", {})

        assert saved["id"] == "row-2"
        assert "client_profile_id" not in table.insert.call_args.args[0]

    def test_no_data_raises(self):
        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            table.insert.return_value.execute.return_value = _response([])

            with pytest.raises(ValueError):
                save_research_data(uuid4(), "perplexity", {})

    def test_database_error_reraised(self):
        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            table.insert.return_value.execute.side_effect = RuntimeError("connection reset")

            with pytest.raises(RuntimeError):
                save_research_data(uuid4(), "perplexity", {})


class TestGetResearchData:
    def test_found(self):
        row = {"id": "row-1", "research_data": {"fullReport": "text"}}

        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            query = mock_supabase.return_value.table.return_value.select.return_value
            query.eq.return_value.maybe_single.return_value.execute.return_value = _response(row)

            assert get_research_data(uuid4()) == row

    def test_not_found(self):
        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            query = mock_supabase.return_value.table.return_value.select.return_value
            query.eq.return_value.maybe_single.return_value.execute.return_value = None

            assert get_research_data(uuid4()) is None

    def test_error_returns_none(self):
        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            mock_supabase.return_value.table.side_effect = RuntimeError("boom")

            assert get_research_data(uuid4()) is None


class TestUpdateResearchPayload:
    def test_updates(self):
        research_id = uuid4()

        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            table.update.return_value.eq.return_value.execute.return_value = _response(
                [{"id": str(research_id)}]
            )

            updated = update_research_payload(research_id, {"industry": "SaaS"})

        assert updated["id"] == str(research_id)
        assert table.update.call_args.args[0]["research_data"] == {"industry": "SaaS"}
        table.update.return_value.eq.assert_called_with("id", str(research_id))

    def test_missing_row_raises(self):
        with patch("contentforge.db.research_data.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            table.update.return_value.eq.return_value.execute.return_value = _response([])

            with pytest.raises(ValueError, match="not found"):
                update_research_payload(uuid4(), {})


class TestClientProfilesAndContent:
    def test_latest_client_profile(self):
        with patch("contentforge.db.client_profiles.get_supabase") as mock_supabase:
            query = mock_supabase.return_value.table.return_value.select.return_value.eq.return_value
            query.order.return_value.limit.return_value.execute.return_value = _response(
                [{"name": "Acme"}]
            )

            assert get_latest_client_profile(uuid4()) == {"name": "Acme"}

    def test_no_client_profile(self):
        with patch("contentforge.db.client_profiles.get_supabase") as mock_supabase:
            query = mock_supabase.return_value.table.return_value.select.return_value.eq.return_value
            query.order.return_value.limit.return_value.execute.return_value = _response([])

            assert get_latest_client_profile(uuid4()) is None

    def test_recent_content(self):
        docs = [{"title": "Post", "topic": "Budgets", "metadata": {}, "platform": "linkedin"}]

        with patch("contentforge.db.content_documents.get_supabase") as mock_supabase:
            query = mock_supabase.return_value.table.return_value.select.return_value.eq.return_value
            query.order.return_value.limit.return_value.execute.return_value = _response(docs)

            assert list_recent_content(uuid4(), limit=5) == docs
            query.order.return_value.limit.assert_called_with(5)

    def test_recent_content_error(self):
        with patch("contentforge.db.content_documents.get_supabase") as mock_supabase:
            mock_supabase.return_value.table.side_effect = RuntimeError("boom")

            assert list_recent_content(uuid4()) == []

    def test_recent_content_selects_columns(self):
        with patch("contentforge.db.content_documents.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            list_recent_content(uuid4(), columns="id, title, content")

        table.select.assert_called_with("id, title, content")


class TestSaveDerivedBrandVoice:
    """Tests for save_derived_brand_voice."""

    def test_updates_latest_profile(self):
        voice = {"summary": "Warm"}

        with patch("contentforge.db.client_profiles.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            latest = table.select.return_value.eq.return_value.order.return_value.limit.return_value
            latest.execute.return_value = _response([{"id": "profile-1"}])
            table.update.return_value.eq.return_value.execute.return_value = _response(
                [{"id": "profile-1", "derived_brand_voice": voice}]
            )

            saved = save_derived_brand_voice(uuid4(), voice)

        assert saved["id"] == "profile-1"
        table.update.assert_called_once_with({"derived_brand_voice": voice})
        table.update.return_value.eq.assert_called_once_with("id", "profile-1")
        table.insert.assert_not_called()

    def test_creates_profile_when_missing(self):
        team_id = uuid4()

        with patch("contentforge.db.client_profiles.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            latest = table.select.return_value.eq.return_value.order.return_value.limit.return_value
            latest.execute.return_value = _response([])
            table.insert.return_value.execute.return_value = _response([{"id": "profile-2"}])

            saved = save_derived_brand_voice(team_id, {"summary": "Warm"})

        assert saved == {"id": "profile-2"}
        row = table.insert.call_args.args[0]
        assert row["team_id"] == str(team_id)
        assert row["brand_voice"] == "professional"
        assert row["derived_brand_voice"] == {"summary": "Warm"}
        table.update.assert_not_called()

    def test_database_error_reraised(self):
        with patch("contentforge.db.client_profiles.get_supabase") as mock_supabase:
            mock_supabase.return_value.table.side_effect = RuntimeError("boom")

            with pytest.raises(RuntimeError):
                save_derived_brand_voice(uuid4(), {})

    def test_no_data_raises(self):
        with patch("contentforge.db.client_profiles.get_supabase") as mock_supabase:
            table = mock_supabase.return_value.table.return_value
            latest = table.select.return_value.eq.return_value.order.return_value.limit.return_value
            latest.execute.return_value = _response([])
            table.insert.return_value.execute.return_value = _response([])

            with pytest.raises(ValueError):
                save_derived_brand_voice(uuid4(), {})
