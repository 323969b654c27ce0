"""
Gap ranking and coverage scoring.

Findings are merged in detector order, stable-sorted by severity (ties keep
their emission order) and truncated.  The coverage score is computed over the
full merged set, before truncation, so it reflects every detected gap.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, List, Sequence

from gapscope.models.schemas import GapFinding, GapSeverity
from gapscope.services.rules import COVERAGE_PENALTY, SEVERITY_RANK

logger = logging.getLogger(__name__)

DEFAULT_MAX_GAPS = 20


@dataclasses.dataclass
class RankedGaps:
    """Returned by rank_gaps()."""

    gaps: List[GapFinding]      # severity-sorted, truncated
    all_gaps: List[GapFinding]  # severity-sorted, untruncated
    coverage_score: int
    high_count: int
    medium_count: int
    low_count: int

    @property
    def total_detected(self) -> int:
        return len(self.all_gaps)


def merge_findings(batches: Iterable[Sequence[GapFinding]]) -> List[GapFinding]:
    """Concatenate detector outputs, preserving batch order then emission order."""
    merged: List[GapFinding] = []
    for batch in batches:
        merged.extend(batch)
    return merged


def sort_by_severity(findings: Sequence[GapFinding]) -> List[GapFinding]:
    # sorted() is stable, so equal-severity findings keep their relative order
    return sorted(findings, key=lambda g: SEVERITY_RANK[g.severity], reverse=True)


def count_by_severity(findings: Sequence[GapFinding], severity: GapSeverity) -> int:
    return sum(1 for g in findings if g.severity == severity)


def calculate_coverage_score(findings: Sequence[GapFinding]) -> int:
    """
    100 = no penalised gaps, 0 = many critical gaps.

    Each high gap costs 10 points and each medium gap 5; low gaps are free.
    The result is clamped to [0, 100].
    """
    penalty = sum(COVERAGE_PENALTY[g.severity] for g in findings)
    return max(0, min(100, 100 - penalty))


def rank_gaps(
    batches: Iterable[Sequence[GapFinding]],
    max_gaps: int = DEFAULT_MAX_GAPS,
) -> RankedGaps:
    """Merge, sort, score and truncate detector output."""
    merged = merge_findings(batches)
    ordered = sort_by_severity(merged)
    score = calculate_coverage_score(merged)

    ranked = RankedGaps(
        gaps=ordered[:max_gaps],
        all_gaps=ordered,
        coverage_score=score,
        high_count=count_by_severity(merged, GapSeverity.HIGH),
        medium_count=count_by_severity(merged, GapSeverity.MEDIUM),
        low_count=count_by_severity(merged, GapSeverity.LOW),
    )

    if len(ordered) > max_gaps:
        logger.info(
            "rank_gaps: truncated %d finding(s) to top %d", len(ordered), max_gaps
        )
    return ranked
