"""
Research gap analysis: the single entry point of the gap engine.

Pipeline per call (nothing is cached between calls):

  1. aggregate   corpus → CorpusStatistics
  2. detect      five independent category detectors (optionally in threads)
  3. rank        merge in detector order, stable severity sort, score, truncate
  4. summarise   narrative service with deterministic fallback

Public API
----------
GapAnalysisService.analyze(corpus)                              -> GapAnalysisReport
GapAnalysisService.analyze_research_area_gaps(corpus, area)     -> List[GapFinding]
GapAnalysisService.analyze_organism_gaps(corpus, organism)      -> List[GapFinding]
GapAnalysisService.analyze_for_category(corpus, name)           -> List[GapFinding]
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence, Set, Tuple

from pydantic import ValidationError

from gapscope.config import settings
from gapscope.models.schemas import (
    GapAnalysisReport,
    GapCategory,
    GapFinding,
    PublicationRecord,
)
from gapscope.services.aggregator import (
    CorpusStatistics,
    InvalidCorpusError,
    aggregate_corpus,
)
from gapscope.services.detectors import DETECTORS, Detector
from gapscope.services.narrative import NarrativeService, get_narrative_service
from gapscope.services.ranking import rank_gaps
from gapscope.services.summary import SummaryComposer

logger = logging.getLogger(__name__)


class GapAnalysisService:
    """
    Orchestrates aggregation, detection, ranking and summarisation.

    The narrative service is injected so tests (and alternative deployments)
    can substitute a deterministic stub.
    """

    def __init__(
        self,
        narrative: Optional[NarrativeService] = None,
        detectors: Sequence[Tuple[GapCategory, Detector]] = DETECTORS,
        max_gaps: Optional[int] = None,
        concurrent: Optional[bool] = None,
        summary_timeout: Optional[float] = None,
    ) -> None:
        self._composer = SummaryComposer(
            narrative if narrative is not None else get_narrative_service(),
            timeout=summary_timeout,
        )
        self._detectors = tuple(detectors)
        self.max_gaps = max_gaps if max_gaps is not None else settings.MAX_GAPS
        self.concurrent = (
            concurrent if concurrent is not None else settings.RUN_DETECTORS_CONCURRENTLY
        )

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    async def analyze(self, corpus: Optional[Iterable[Any]]) -> GapAnalysisReport:
        """
        Run the full gap analysis over *corpus*.

        Raises:
            InvalidCorpusError: if the corpus is missing or holds malformed records.
        """
        publications = self._coerce_corpus(corpus)
        logger.info("GapAnalysis: analysing %d publication(s)", len(publications))

        stats = aggregate_corpus(publications)
        batches = await self._run_detectors(stats, publications)
        ranked = rank_gaps(batches, max_gaps=self.max_gaps)

        logger.info(
            "GapAnalysis: %d gap(s) detected (high=%d medium=%d low=%d), coverage=%d",
            ranked.total_detected,
            ranked.high_count,
            ranked.medium_count,
            ranked.low_count,
            ranked.coverage_score,
        )

        summary = await self._composer.compose(ranked, stats.total_publications)

        return GapAnalysisReport(
            gaps=tuple(ranked.gaps),
            summary=summary,
            total_publications=stats.total_publications,
            coverage_score=ranked.coverage_score,
            timestamp=datetime.now(timezone.utc),
        )

    # ------------------------------------------------------------------
    # Filtered variants
    # ------------------------------------------------------------------

    async def analyze_research_area_gaps(
        self, corpus: Optional[Iterable[Any]], research_area: str
    ) -> List[GapFinding]:
        """Gaps for the sub-corpus tagged with *research_area*."""
        publications = self._coerce_corpus(corpus)
        subset = [p for p in publications if p.research_area == research_area]
        return await self._analyze_subset(
            subset, research_area, {GapCategory.RESEARCH_AREA}
        )

    async def analyze_organism_gaps(
        self, corpus: Optional[Iterable[Any]], organism: str
    ) -> List[GapFinding]:
        """Gaps for the sub-corpus tagged with *organism*."""
        publications = self._coerce_corpus(corpus)
        subset = [p for p in publications if p.organism == organism]
        return await self._analyze_subset(subset, organism, {GapCategory.ORGANISM})

    async def analyze_for_category(
        self, corpus: Optional[Iterable[Any]], name: str
    ) -> List[GapFinding]:
        """
        Gaps for the sub-corpus whose organism or research-area tag equals *name*.

        A finding is kept when its category belongs to a tag dimension that
        matched, or when its description mentions *name*.
        """
        publications = self._coerce_corpus(corpus)
        subset: List[PublicationRecord] = []
        categories: Set[GapCategory] = set()
        for pub in publications:
            matched = False
            if pub.research_area == name:
                categories.add(GapCategory.RESEARCH_AREA)
                matched = True
            if pub.organism == name:
                categories.add(GapCategory.ORGANISM)
                matched = True
            if matched:
                subset.append(pub)
        return await self._analyze_subset(subset, name, categories)

    async def _analyze_subset(
        self,
        subset: List[PublicationRecord],
        name: str,
        categories: Set[GapCategory],
    ) -> List[GapFinding]:
        # Nothing tagged with *name*: no findings
        if not subset:
            logger.info("GapAnalysis: no publications tagged %r, no gaps to report", name)
            return []

        report = await self.analyze(subset)
        needle = name.lower()
        return [
            g for g in report.gaps
            if g.category in categories or needle in g.description.lower()
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run_detectors(
        self,
        stats: CorpusStatistics,
        publications: Tuple[PublicationRecord, ...],
    ) -> List[List[GapFinding]]:
        """
        Run every detector and return their outputs in registry order.

        gather() returns results positionally, so completion order of the
        worker threads never leaks into the merge order.
        """
        if self.concurrent:
            return list(
                await asyncio.gather(
                    *(
                        asyncio.to_thread(self._run_detector, category, detector, stats, publications)
                        for category, detector in self._detectors
                    )
                )
            )
        return [
            self._run_detector(category, detector, stats, publications)
            for category, detector in self._detectors
        ]

    @staticmethod
    def _run_detector(
        category: GapCategory,
        detector: Detector,
        stats: CorpusStatistics,
        publications: Tuple[PublicationRecord, ...],
    ) -> List[GapFinding]:
        """Run one detector; a fault contributes zero findings instead of failing the report."""
        try:
            findings = list(detector(stats, publications))
        except Exception:
            logger.exception(
                "GapAnalysis: %s detector failed, continuing without its findings",
                category.value,
            )
            return []
        logger.debug("GapAnalysis: %s detector → %d finding(s)", category.value, len(findings))
        return findings

    @staticmethod
    def _coerce_corpus(corpus: Optional[Iterable[Any]]) -> Tuple[PublicationRecord, ...]:
        """Validate the corpus reference and return an immutable snapshot of records."""
        if corpus is None:
            raise InvalidCorpusError("Corpus reference is required")
        if isinstance(corpus, (str, bytes, Mapping)):
            raise InvalidCorpusError(
                f"Corpus must be a sequence of publications, got {type(corpus).__name__}"
            )
        try:
            items = list(corpus)
        except TypeError as exc:
            raise InvalidCorpusError(
                f"Corpus must be a sequence of publications, got {type(corpus).__name__}"
            ) from exc

        publications: List[PublicationRecord] = []
        for index, item in enumerate(items):
            if isinstance(item, PublicationRecord):
                publications.append(item)
            elif isinstance(item, Mapping):
                try:
                    publications.append(PublicationRecord.model_validate(item))
                except ValidationError as exc:
                    raise InvalidCorpusError(
                        f"Publication at index {index} is malformed: "
                        f"{exc.error_count()} validation error(s)"
                    ) from exc
            else:
                raise InvalidCorpusError(
                    f"Publication at index {index} has unsupported type "
                    f"{type(item).__name__}"
                )
        return tuple(publications)


__all__ = ["GapAnalysisService", "InvalidCorpusError"]
