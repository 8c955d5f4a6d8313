"""API endpoints for company research and report normalization."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from contentforge.api.deps import get_openrouter_generator, get_perplexity_generator
from contentforge.chains.extract_metrics import extract_metrics
from contentforge.chains.research_company import (
    build_research_payload,
    reprocess_report,
    research_company,
    research_with_ai,
)
from contentforge.chains.suggest_topics import suggest_industry_trends
from contentforge.core.config import Settings, get_settings
from contentforge.core.llm import LLMProviderError, TextGenerator
from contentforge.core.logging import get_logger
from contentforge.core.report_normalizer import extract_profile
from contentforge.core.schemas_research import (
    CompanyResearchRequest,
    ExtractReportRequest,
    IndustryTrendsRequest,
    IndustryTrendsResponse,
    PerplexityResearchRequest,
    ProfileResponse,
    ReprocessRequest,
    ResearchResponse,
)
from contentforge.db.research_data import (
    get_research_data,
    save_research_data,
    update_research_payload,
)

logger = get_logger(__name__)

router = APIRouter()


def _provider_error(e: LLMProviderError) -> HTTPException:
    logger.warning(f"{e.provider} call failed (status={e.status_code}): {e}")
    return HTTPException(status_code=502, detail=str(e))


@router.post("/research/extract", response_model=ProfileResponse)
def extract_report(
    request: ExtractReportRequest,
    settings: Settings = Depends(get_settings),
) -> ProfileResponse:
    """
    Normalize a free-text report with the regex extractor (no model call).

    Args:
        request: Report text and whether to substitute default scalars

    Returns:
        ProfileResponse with the extracted profile
    """
    try:
        profile = extract_profile(request.report)
        if request.apply_defaults:
            profile = profile.with_defaults(settings.PROFILE_DEFAULT_OVERRIDES)
        return ProfileResponse(data=profile)
    except Exception as e:
        logger.exception("Report extraction failed")
        raise HTTPException(status_code=500, detail="Report extraction failed") from e


@router.post("/research/extract-metrics", response_model=ProfileResponse)
def extract_report_metrics(
    request: ExtractReportRequest,
    settings: Settings = Depends(get_settings),
    generator: TextGenerator = Depends(get_openrouter_generator),
) -> ProfileResponse:
    """
    Extract a profile from a report by asking a model for JSON.

    Returns:
        ProfileResponse; unparseable model output yields the defaults profile

    Raises:
        HTTPException 502: If the model call fails
    """
    try:
        profile = extract_metrics(
            generator,
            request.report,
            model=settings.EXTRACTION_MODEL,
            max_chars=settings.MAX_REPORT_CHARS,
            defaults=settings.PROFILE_DEFAULT_OVERRIDES,
        )
        return ProfileResponse(data=profile)

    except LLMProviderError as e:
        raise _provider_error(e) from e
    except Exception as e:
        logger.exception("Metrics extraction failed")
        raise HTTPException(status_code=500, detail="Metrics extraction failed") from e


@router.post("/research/company", response_model=ResearchResponse)
def research_company_profile(
    request: CompanyResearchRequest,
    settings: Settings = Depends(get_settings),
    generator: TextGenerator = Depends(get_openrouter_generator),
) -> ResearchResponse:
    """
    Research a company by asking a JSON-emitting model for its profile.

    Raises:
        HTTPException 502: If the model call fails
    """
    try:
        outcome = research_with_ai(
            generator,
            request.company_name,
            model=settings.EXTRACTION_MODEL,
            defaults=settings.PROFILE_DEFAULT_OVERRIDES,
        )
        return ResearchResponse(data=outcome.profile, research_type=outcome.research_type)

    except LLMProviderError as e:
        raise _provider_error(e) from e
    except Exception as e:
        logger.exception(f"Company research failed for {request.company_name}")
        raise HTTPException(status_code=500, detail="Company research failed") from e


@router.post("/research/perplexity", response_model=ResearchResponse)
def research_company_perplexity(
    request: PerplexityResearchRequest,
    settings: Settings = Depends(get_settings),
    perplexity: TextGenerator = Depends(get_perplexity_generator),
    openrouter: TextGenerator = Depends(get_openrouter_generator),
) -> ResearchResponse:
    """
    Research a company with Perplexity (falling back to OpenRouter) and store it.

    The result is persisted when team_id is given. A storage failure is logged
    and the research is still returned.

    Raises:
        HTTPException 502: If both providers fail
    """
    try:
        outcome = research_company(
            perplexity,
            openrouter,
            request.company_name,
            request.website,
            settings=settings,
        )

        research_id = None
        if request.team_id is not None:
            try:
                saved = save_research_data(
                    request.team_id,
                    outcome.research_type,
                    build_research_payload(outcome),
                    client_profile_id=request.client_profile_id,
                )
                research_id = str(saved["id"]) if saved.get("id") is not None else None
            except Exception:
                logger.exception(
                    f"Failed to store research for {request.company_name}",
                    extra={"extra_data": {"team_id": str(request.team_id)}},
                )

        return ResearchResponse(
            data=outcome.profile,
            research_type=outcome.research_type,
            fallback_reason=outcome.fallback_reason,
            research_id=research_id,
            source_citations=outcome.source_citations,
        )

    except LLMProviderError as e:
        raise _provider_error(e) from e
    except Exception as e:
        logger.exception(f"Perplexity research failed for {request.company_name}")
        raise HTTPException(status_code=500, detail="Company research failed") from e


@router.post("/research/reprocess", response_model=ResearchResponse)
def reprocess_research(
    request: ReprocessRequest,
    settings: Settings = Depends(get_settings),
) -> ResearchResponse:
    """
    Re-run the normalizer over a stored report and update the stored profile.

    Raises:
        HTTPException 404: If the row is missing or has no stored report
    """
    try:
        row = get_research_data(request.research_id)
        if not row:
            raise HTTPException(status_code=404, detail="Research data not found")

        payload = row.get("research_data") or {}
        report = payload.get("fullReport")
        if not report:
            raise HTTPException(status_code=404, detail="No full report stored for this research")

        profile = reprocess_report(report, settings.PROFILE_DEFAULT_OVERRIDES)

        updated = {
            **payload,
            **profile.to_record(),
            "reportSections": profile.sections,
            "reprocessedAt": datetime.now(timezone.utc).isoformat(),
        }
        update_research_payload(request.research_id, updated)

        logger.info(f"Reprocessed research {request.research_id}")

        return ResearchResponse(
            data=profile,
            research_type=row.get("research_type") or "perplexity",
            research_id=str(request.research_id),
            source_citations=payload.get("sourceCitations") or [],
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Reprocessing failed for research {request.research_id}")
        raise HTTPException(status_code=500, detail="Reprocessing failed") from e


@router.post("/research/industry-trends", response_model=IndustryTrendsResponse)
def industry_trends(
    request: IndustryTrendsRequest,
    settings: Settings = Depends(get_settings),
    generator: TextGenerator = Depends(get_openrouter_generator),
) -> IndustryTrendsResponse:
    """
    Five trending content topics for an industry.

    Raises:
        HTTPException 502: If the model call fails
    """
    try:
        trends = suggest_industry_trends(
            generator, request.industry, model=settings.EXTRACTION_MODEL
        )
        return IndustryTrendsResponse(trends=trends)

    except LLMProviderError as e:
        raise _provider_error(e) from e
    except Exception as e:
        logger.exception(f"Industry trends failed for {request.industry}")
        raise HTTPException(status_code=500, detail="Industry trends failed") from e
