"""API endpoints for client profiles."""

from fastapi import APIRouter, Depends, HTTPException

from contentforge.api.deps import get_openrouter_generator
from contentforge.chains.derive_voice import derive_brand_voice
from contentforge.core.config import Settings, get_settings
from contentforge.core.llm import LLMProviderError, TextGenerator
from contentforge.core.logging import get_logger
from contentforge.core.schemas_content import DeriveVoiceRequest, DeriveVoiceResponse
from contentforge.db.client_profiles import save_derived_brand_voice
from contentforge.db.content_documents import list_recent_content

logger = get_logger(__name__)

router = APIRouter()

VOICE_DOCUMENT_COLUMNS = "id, title, content, platform, metadata, created_at"


@router.post("/profiles/derive-voice", response_model=DeriveVoiceResponse)
def derive_voice(
    request: DeriveVoiceRequest,
    settings: Settings = Depends(get_settings),
    generator: TextGenerator = Depends(get_openrouter_generator),
) -> DeriveVoiceResponse:
    """
    Derive a brand voice guide from a team's recent content and store it.

    Raises:
        HTTPException 400: If the team has no content to analyze
        HTTPException 502: If the model call fails
    """
    try:
        documents = list_recent_content(
            request.team_id, limit=request.limit, columns=VOICE_DOCUMENT_COLUMNS
        )

        try:
            voice = derive_brand_voice(generator, documents, model=settings.VOICE_MODEL)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        save_derived_brand_voice(request.team_id, voice.model_dump())
        return DeriveVoiceResponse(derived=voice)

    except HTTPException:
        raise
    except LLMProviderError as e:
        logger.warning(f"{e.provider} call failed (status={e.status_code}): {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Brand voice derivation failed for team {request.team_id}")
        raise HTTPException(status_code=500, detail="Failed to derive brand voice") from e
