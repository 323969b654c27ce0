"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from datetime import datetime, timezone
from pathlib import Path
import logging

from gapscope.config import settings
from gapscope.models.schemas import HealthCheckResponse
from gapscope.services.narrative import NarrativeService, get_narrative_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(narrative: NarrativeService = Depends(get_narrative_service)):
    """
    Health check endpoint to verify system status.

    The narrative service is optional: when it is down, analyses still succeed
    with the fallback summary, so the overall status is only "degraded".

    Returns:
        HealthCheckResponse with status of the narrative service and corpus file
    """
    narrative_status = "ok"
    try:
        if not await narrative.check_health():
            narrative_status = "error"
    except Exception as e:
        logger.error(f"Narrative service health check failed: {e}")
        narrative_status = "error"

    if not settings.CORPUS_PATH:
        corpus_status = "not_configured"
    elif Path(settings.CORPUS_PATH).is_file():
        corpus_status = "ok"
    else:
        corpus_status = "missing"

    overall_status = "healthy" if narrative_status == "ok" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        narrative_service=narrative_status,
        corpus=corpus_status,
        timestamp=datetime.now(timezone.utc),
    )
