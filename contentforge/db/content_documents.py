"""Database operations for content_documents."""

from typing import Any
from uuid import UUID

from contentforge.core.logging import get_logger
from contentforge.db.supabase_client import get_supabase

logger = get_logger(__name__)

DEFAULT_COLUMNS = "title, topic, metadata, platform"


def list_recent_content(
    team_id: UUID,
    limit: int = 20,
    columns: str = DEFAULT_COLUMNS,
) -> list[dict[str, Any]]:
    """
    List a team's most recent content documents, newest first.

    Args:
        team_id: Team UUID
        limit: Max documents to return
        columns: Comma-separated columns to select

    Returns:
        Documents with the selected columns (empty on error)
    """
    supabase = get_supabase()

    try:
        response = (
            supabase.table("content_documents")
            .select(columns)
            .eq("team_id", str(team_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []
    except Exception as e:
        logger.error(f"Error listing content for team {team_id}: {e}")
        return []
