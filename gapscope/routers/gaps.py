"""
Research gap analysis endpoints.

Routes
------
GET  /api/gaps/                           — analyse the configured corpus file → GapAnalysisReport
POST /api/gaps/analyze                    — analyse the posted corpus          → GapAnalysisReport
POST /api/gaps/research-areas/{area}      — gaps for one research area         → CategoryGapsResponse
POST /api/gaps/organisms/{organism}       — gaps for one organism              → CategoryGapsResponse
POST /api/gaps/categories/{name}          — gaps for an area or organism name  → CategoryGapsResponse
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from gapscope.config import settings
from gapscope.models.schemas import (
    CategoryGapsResponse,
    GapAnalysisReport,
    GapAnalysisRequest,
)
from gapscope.services.corpus import CorpusLoadError, CorpusSource
from gapscope.services.gap_analysis import GapAnalysisService, InvalidCorpusError
from gapscope.services.narrative import NarrativeService, get_narrative_service

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_gap_analysis_service(
    narrative: NarrativeService = Depends(get_narrative_service),
) -> GapAnalysisService:
    return GapAnalysisService(narrative=narrative)


def get_corpus_source() -> CorpusSource:
    if not settings.CORPUS_PATH:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No corpus configured. Set CORPUS_PATH or POST publications to /api/gaps/analyze.",
        )
    return CorpusSource(settings.CORPUS_PATH)


def _invalid_corpus(exc: InvalidCorpusError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Invalid corpus: {exc}",
    )


# ---------------------------------------------------------------------------
# GET / — analyse the configured corpus
# ---------------------------------------------------------------------------

@router.get("/", response_model=GapAnalysisReport)
async def analyze_configured_corpus(
    source: CorpusSource = Depends(get_corpus_source),
    service: GapAnalysisService = Depends(get_gap_analysis_service),
):
    """Load the corpus file named by CORPUS_PATH and analyse it."""
    try:
        publications = source.load()
    except CorpusLoadError as exc:
        logger.error("analyze_configured_corpus: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
        )
    try:
        return await service.analyze(publications)
    except InvalidCorpusError as exc:
        raise _invalid_corpus(exc)


# ---------------------------------------------------------------------------
# POST /analyze — analyse a posted corpus
# ---------------------------------------------------------------------------

@router.post("/analyze", response_model=GapAnalysisReport, status_code=status.HTTP_200_OK)
async def analyze_gaps(
    request: GapAnalysisRequest,
    service: GapAnalysisService = Depends(get_gap_analysis_service),
):
    """
    Run the full research gap analysis over the posted publications.

    Returns up to 20 severity-sorted gaps, a coverage score (0–100) and a
    narrative summary.  The summary falls back to a templated text when the
    narrative service is unavailable.
    """
    try:
        return await service.analyze(request.publications)
    except InvalidCorpusError as exc:
        raise _invalid_corpus(exc)


# ---------------------------------------------------------------------------
# Filtered variants
# ---------------------------------------------------------------------------

@router.post("/research-areas/{area}", response_model=CategoryGapsResponse)
async def research_area_gaps(
    area: str,
    request: GapAnalysisRequest,
    service: GapAnalysisService = Depends(get_gap_analysis_service),
):
    """Gaps for the publications tagged with research area *area*."""
    try:
        gaps = await service.analyze_research_area_gaps(request.publications, area)
    except InvalidCorpusError as exc:
        raise _invalid_corpus(exc)
    return CategoryGapsResponse(name=area, gaps=gaps, total=len(gaps))


@router.post("/organisms/{organism}", response_model=CategoryGapsResponse)
async def organism_gaps(
    organism: str,
    request: GapAnalysisRequest,
    service: GapAnalysisService = Depends(get_gap_analysis_service),
):
    """Gaps for the publications tagged with organism *organism*."""
    try:
        gaps = await service.analyze_organism_gaps(request.publications, organism)
    except InvalidCorpusError as exc:
        raise _invalid_corpus(exc)
    return CategoryGapsResponse(name=organism, gaps=gaps, total=len(gaps))


@router.post("/categories/{name}", response_model=CategoryGapsResponse)
async def category_gaps(
    name: str,
    request: GapAnalysisRequest,
    service: GapAnalysisService = Depends(get_gap_analysis_service),
):
    """Gaps for the publications whose organism or research area equals *name*."""
    try:
        gaps = await service.analyze_for_category(request.publications, name)
    except InvalidCorpusError as exc:
        raise _invalid_corpus(exc)
    return CategoryGapsResponse(name=name, gaps=gaps, total=len(gaps))
