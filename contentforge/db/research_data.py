"""Database operations for the research_data table."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from contentforge.core.logging import get_logger
from contentforge.db.supabase_client import get_supabase

logger = get_logger(__name__)


def _utc_now_iso() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat()


def save_research_data(
    team_id: UUID,
    research_type: str,
    research_data: dict[str, Any],
    client_profile_id: UUID | None = None,
) -> dict[str, Any]:
    """
    Store a research result for a team.

    With a client profile the row is upserted (one research row per team and
    profile); without one a new row is inserted.

    Args:
        team_id: Team UUID
        research_type: Source of the research (perplexity, openrouter, ...)
        research_data: JSON payload (camelCase profile plus report metadata)
        client_profile_id: Optional client profile UUID

    Returns:
        Stored row

    Raises:
        ValueError: If no row is returned
        Exception: If database operation fails
    """
    supabase = get_supabase()

    row: dict[str, Any] = {
        "team_id": str(team_id),
        "research_type": research_type,
        "research_data": research_data,
        "updated_at": _utc_now_iso(),
    }

    try:
        if client_profile_id is not None:
            row["client_profile_id"] = str(client_profile_id)
            response = (
                supabase.table("research_data")
                .upsert(row, on_conflict="team_id,client_profile_id")
                .execute()
            )
        else:
            response = supabase.table("research_data").insert(row).execute()

        if not response.data:
            raise ValueError("No data returned from save_research_data")

        saved = response.data[0]
        logger.info(
            f"Saved {research_type} research {saved.get('id')} for team {team_id}",
        )
        return saved

    except Exception as e:
        logger.error(f"Failed to save research data for team {team_id}: {e}")
        raise


def get_research_data(research_id: UUID) -> dict[str, Any] | None:
    """
    Get a research_data row by id.

    Args:
        research_id: Row UUID

    Returns:
        Row dict or None if not found (or on error)
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("research_data")
            .select("*")
            .eq("id", str(research_id))
            .maybe_single()
            .execute()
        )
        return response.data if response else None
    except Exception as e:
        logger.error(f"Error getting research data {research_id}: {e}")
        return None


def update_research_payload(research_id: UUID, research_data: dict[str, Any]) -> dict[str, Any]:
    """
    Replace the JSON payload of a research_data row.

    Args:
        research_id: Row UUID
        research_data: New payload

    Returns:
        Updated row

    Raises:
        ValueError: If the row does not exist
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("research_data")
            .update({"research_data": research_data, "updated_at": _utc_now_iso()})
            .eq("id", str(research_id))
            .execute()
        )

        if not response.data:
            raise ValueError(f"Research data {research_id} not found")

        logger.info(f"Updated research payload {research_id}")
        return response.data[0]

    except Exception as e:
        logger.error(f"Failed to update research data {research_id}: {e}")
        raise
