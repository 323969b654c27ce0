"""
Summary composer: turns ranked gaps into a narrative summary.

The narrative service is the only suspending, failure-prone step of an
analysis.  Any failure (exception, timeout, blank body) selects the
deterministic fallback built from counts already computed; the composer
itself never raises.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from gapscope.config import settings
from gapscope.models.schemas import GapFinding
from gapscope.services.narrative import NarrativeService
from gapscope.services.ranking import RankedGaps
from gapscope.utils.helpers import truncate_text

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SUMMARY_PROMPT = """\
As a NASA research strategist, provide a concise 3-paragraph summary of these research gaps:

Total Publications: {total_publications}
Critical Gaps (High): {high_count}
Medium Priority Gaps: {medium_count}

Top {top_n} Gaps:
{top_gaps}

Provide:
1. Overall assessment of research coverage
2. Most critical areas needing immediate attention
3. Strategic recommendations for future research priorities

Keep it under {word_limit} words, scientific but accessible.\
"""

_FALLBACK_SUMMARY = (
    "Research gap analysis identified {gap_count} gaps across "
    "{total_publications} publications ({high_count} high, {medium_count} medium "
    "and {low_count} low severity). High-priority areas include organism "
    "diversity, long-duration studies, and deep space environment research. "
    "Focus on longitudinal multi-omics studies and international collaboration "
    "to address critical mission health risks."
)


class SummaryComposer:
    """Builds the summary prompt, calls the narrative service, falls back on failure."""

    MAX_DESCRIPTION_CHARS: int = 300

    def __init__(
        self,
        narrative: NarrativeService,
        timeout: Optional[float] = None,
        top_n: Optional[int] = None,
        word_limit: Optional[int] = None,
    ) -> None:
        self._narrative = narrative
        self.timeout = float(timeout if timeout is not None else settings.NARRATIVE_TIMEOUT)
        self.top_n = top_n if top_n is not None else settings.SUMMARY_TOP_GAPS
        self.word_limit = word_limit if word_limit is not None else settings.SUMMARY_WORD_LIMIT

    def build_prompt(self, ranked: RankedGaps, total_publications: int) -> str:
        top = ranked.all_gaps[: self.top_n]
        return _SUMMARY_PROMPT.format(
            total_publications=total_publications,
            high_count=ranked.high_count,
            medium_count=ranked.medium_count,
            top_n=self.top_n,
            top_gaps=self._format_gaps(top) or "(none)",
            word_limit=self.word_limit,
        )

    def _format_gaps(self, gaps: Sequence[GapFinding]) -> str:
        return "\n".join(
            f"{i}. [{g.severity.value.upper()}] {g.title}: "
            f"{truncate_text(g.description, self.MAX_DESCRIPTION_CHARS)}"
            for i, g in enumerate(gaps, start=1)
        )

    @staticmethod
    def fallback_summary(ranked: RankedGaps, total_publications: int) -> str:
        """Deterministic summary derived only from local counts."""
        return _FALLBACK_SUMMARY.format(
            gap_count=ranked.total_detected,
            total_publications=total_publications,
            high_count=ranked.high_count,
            medium_count=ranked.medium_count,
            low_count=ranked.low_count,
        )

    async def compose(self, ranked: RankedGaps, total_publications: int) -> str:
        prompt = self.build_prompt(ranked, total_publications)
        try:
            text = await asyncio.wait_for(
                self._narrative.summarize(prompt), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "SummaryComposer: narrative service timed out after %.1f s, using fallback",
                self.timeout,
            )
            return self.fallback_summary(ranked, total_publications)
        except Exception as exc:
            logger.warning(
                "SummaryComposer: narrative service failed (%s), using fallback", exc
            )
            return self.fallback_summary(ranked, total_publications)

        if not isinstance(text, str) or not text.strip():
            logger.warning("SummaryComposer: empty narrative response, using fallback")
            return self.fallback_summary(ranked, total_publications)

        return text.strip()
