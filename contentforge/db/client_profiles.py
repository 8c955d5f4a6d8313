"""Database operations for client_profiles."""

from typing import Any
from uuid import UUID

from contentforge.core.logging import get_logger
from contentforge.db.supabase_client import get_supabase

logger = get_logger(__name__)


def get_latest_client_profile(team_id: UUID) -> dict[str, Any] | None:
    """
    Get the most recently created client profile for a team.

    Args:
        team_id: Team UUID

    Returns:
        Profile dict or None if the team has none (or on error)
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("client_profiles")
            .select("*")
            .eq("team_id", str(team_id))
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        return response.data[0] if response.data else None
    except Exception as e:
        logger.error(f"Error getting client profile for team {team_id}: {e}")
        return None


def save_derived_brand_voice(team_id: UUID, derived: dict[str, Any]) -> dict[str, Any]:
    """
    Store a derived brand voice on the team's latest client profile.

    A team without a profile gets a minimal one holding only the voice.

    Args:
        team_id: Team UUID
        derived: Brand voice guide (JSON)

    Returns:
        Updated or created profile row

    Raises:
        ValueError: If no row is returned
        Exception: If database operation fails
    """
    supabase = get_supabase()

    try:
        existing = (
            supabase.table("client_profiles")
            .select("id")
            .eq("team_id", str(team_id))
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )

        if existing.data:
            profile_id = existing.data[0]["id"]
            response = (
                supabase.table("client_profiles")
                .update({"derived_brand_voice": derived})
                .eq("id", profile_id)
                .execute()
            )
        else:
            response = (
                supabase.table("client_profiles")
                .insert(
                    {
                        "team_id": str(team_id),
                        "brand_voice": "professional",
                        "derived_brand_voice": derived,
                    }
                )
                .execute()
            )

        if not response.data:
            raise ValueError("No data returned from save_derived_brand_voice")

        saved = response.data[0]
        logger.info(f"Saved derived brand voice on profile {saved.get('id')} for team {team_id}")
        return saved

    except Exception as e:
        logger.error(f"Failed to save derived brand voice for team {team_id}: {e}")
        raise
