"""API endpoints for content generation and topic suggestions."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from contentforge.api.deps import get_openrouter_generator
from contentforge.chains.generate_content import generate_content
from contentforge.chains.suggest_topics import suggest_topics
from contentforge.core.config import Settings, get_settings
from contentforge.core.llm import LLMProviderError, TextGenerator
from contentforge.core.logging import get_logger, log_with_context
from contentforge.core.schemas_content import (
    GenerateContentRequest,
    GenerateContentResponse,
    TopicSuggestionsRequest,
    TopicSuggestionsResponse,
)
from contentforge.db.client_profiles import get_latest_client_profile
from contentforge.db.content_documents import list_recent_content

logger = get_logger(__name__)

router = APIRouter()


@router.post("/content/generate", response_model=GenerateContentResponse)
def generate(
    request: GenerateContentRequest,
    settings: Settings = Depends(get_settings),
    generator: TextGenerator = Depends(get_openrouter_generator),
) -> GenerateContentResponse:
    """
    Generate a post or article for a topic and platform.

    Raises:
        HTTPException 400: If the topic is blank
        HTTPException 502: If the model call fails or returns nothing
    """
    if not request.topic.strip():
        raise HTTPException(status_code=400, detail="Topic is required")

    client_profile = request.client_profile.model_dump() if request.client_profile else None

    try:
        content = generate_content(
            generator,
            request.topic,
            request.platform,
            request.tone,
            client_profile,
            model=settings.CONTENT_MODEL,
            max_tokens=settings.CONTENT_MAX_TOKENS,
            temperature=settings.CONTENT_TEMPERATURE,
            system_prompt=settings.CONTENT_SYSTEM_PROMPT,
        )
        return GenerateContentResponse(content=content)

    except LLMProviderError as e:
        logger.warning(f"{e.provider} call failed (status={e.status_code}): {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    except ValueError as e:
        logger.warning(f"Content generation produced no content: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        logger.exception("Content generation failed")
        raise HTTPException(status_code=500, detail="Content generation failed") from e


@router.post("/content/topic-suggestions", response_model=TopicSuggestionsResponse)
def topic_suggestions(
    request: TopicSuggestionsRequest,
    settings: Settings = Depends(get_settings),
    generator: TextGenerator = Depends(get_openrouter_generator),
) -> TopicSuggestionsResponse:
    """
    Suggest topics from the team's latest client profile and recent content.

    Raises:
        HTTPException 502: If the model call fails
    """
    try:
        client_profile = get_latest_client_profile(request.team_id)
        previous_content = list_recent_content(request.team_id)

        log_with_context(
            logger,
            logging.INFO,
            "Suggesting topics",
            team_id=str(request.team_id),
            has_profile=client_profile is not None,
            previous_documents=len(previous_content),
        )

        topics = suggest_topics(
            generator,
            client_profile,
            previous_content,
            model=settings.TOPICS_MODEL,
        )
        return TopicSuggestionsResponse(topics=topics)

    except LLMProviderError as e:
        logger.warning(f"{e.provider} call failed (status={e.status_code}): {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e
    except Exception as e:
        logger.exception(f"Topic suggestions failed for team {request.team_id}")
        raise HTTPException(status_code=500, detail="Topic suggestions failed") from e
