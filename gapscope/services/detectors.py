"""
Category gap detectors.

Each detector is a pure function ``(stats, corpus) -> List[GapFinding]`` over
immutable inputs.  They are mutually independent; DETECTORS fixes the order in
which their output is merged into the report, whatever order they finish in.

    organism       statistics only   up to 5 findings, priority-list order
    research_area  statistics only   up to 6 findings, never "low"
    methodology    corpus-independent, always the same 2 findings
    duration       abstract keyword scan, 0 or 1 finding
    environment    abstract keyword scan, 0 or 1 finding
"""
from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple

from gapscope.models.schemas import (
    GapCategory,
    GapFinding,
    GapSeverity,
    PublicationRecord,
)
from gapscope.services import rules
from gapscope.services.aggregator import CorpusStatistics
from gapscope.utils.helpers import round_half_up, slugify

logger = logging.getLogger(__name__)

Detector = Callable[[CorpusStatistics, Sequence[PublicationRecord]], List[GapFinding]]


def _abstract_text(pub: PublicationRecord) -> str:
    return (pub.abstract or "").lower()


def _mentions_any(text: str, keywords: Sequence[str]) -> bool:
    return any(kw in text for kw in keywords)


# ---------------------------------------------------------------------------
# Organism
# ---------------------------------------------------------------------------

def detect_organism_gaps(
    stats: CorpusStatistics,
    corpus: Sequence[PublicationRecord] = (),
) -> List[GapFinding]:
    """Flag priority organisms studied at less than half the per-organism average."""
    if stats.distinct_organisms == 0:
        return []

    avg = stats.total_publications / stats.distinct_organisms
    gaps: List[GapFinding] = []

    for priority in rules.PRIORITY_ORGANISMS:
        count = stats.by_organism.get(priority.name, 0)
        if count >= avg * rules.ORGANISM_FLAG_RATIO:
            continue

        if count == 0:
            severity = GapSeverity.HIGH
        elif count < avg * rules.ORGANISM_MEDIUM_RATIO:
            severity = GapSeverity.MEDIUM
        else:
            severity = GapSeverity.LOW

        gaps.append(
            GapFinding(
                id=f"organism-{slugify(priority.name)}",
                category=GapCategory.ORGANISM,
                title=f"Under-studied: {priority.name}",
                description=(
                    f"Only {count} studies found for {priority.name}. "
                    f"{priority.importance}"
                ),
                severity=severity,
                evidence=(
                    f"Current studies: {count}",
                    f"Average per organism: {round_half_up(avg)}",
                    f"Deficit: {round_half_up(avg - count)} studies",
                ),
                recommendations=tuple(
                    r.format(name=priority.name) for r in rules.ORGANISM_RECOMMENDATIONS
                ),
                related_publications=count,
            )
        )

    return gaps


# ---------------------------------------------------------------------------
# Research area
# ---------------------------------------------------------------------------

def detect_research_area_gaps(
    stats: CorpusStatistics,
    corpus: Sequence[PublicationRecord] = (),
) -> List[GapFinding]:
    """Flag critical research areas below their minimum expected study count."""
    gaps: List[GapFinding] = []

    for area in rules.CRITICAL_RESEARCH_AREAS:
        count = stats.by_research_area.get(area.name, 0)
        if count >= area.min_expected:
            continue

        severity = (
            GapSeverity.HIGH
            if count < area.min_expected * rules.AREA_HIGH_RATIO
            else GapSeverity.MEDIUM
        )
        gaps.append(
            GapFinding(
                id=f"area-{slugify(area.name)}",
                category=GapCategory.RESEARCH_AREA,
                title=f"Gap in {area.name} Research",
                description=(
                    f"{area.name} has only {count} studies, below the expected "
                    f"{area.min_expected} for critical mission health risks."
                ),
                severity=severity,
                evidence=(
                    f"Current studies: {count}",
                    f"Expected minimum: {area.min_expected}",
                    f"Gap: {area.min_expected - count} studies needed",
                ),
                recommendations=tuple(
                    r.format(name=area.name) for r in rules.AREA_RECOMMENDATIONS
                ),
                related_publications=count,
            )
        )

    return gaps


# ---------------------------------------------------------------------------
# Methodology
# ---------------------------------------------------------------------------

def detect_methodology_gaps(
    stats: CorpusStatistics,
    corpus: Sequence[PublicationRecord] = (),
) -> List[GapFinding]:
    """
    Emit the fixed methodology findings.

    Placeholder heuristic: the output does not depend on the corpus.  Nothing
    in the publication tags supports a real methodology signal yet.
    """
    return [
        GapFinding(
            id=f"methodology-{gap.key}",
            category=GapCategory.METHODOLOGY,
            title=gap.title,
            description=gap.description,
            severity=gap.severity,
            evidence=gap.evidence,
            recommendations=gap.recommendations,
        )
        for gap in rules.METHODOLOGY_GAPS
    ]


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------

def count_duration_mentions(corpus: Sequence[PublicationRecord]) -> Tuple[int, int]:
    """
    Return (short_term_count, long_term_count).

    A record may count towards both; matching is a raw case-insensitive
    substring test against the abstract.
    """
    short_term = 0
    long_term = 0
    for pub in corpus:
        text = _abstract_text(pub)
        if _mentions_any(text, rules.SHORT_TERM_KEYWORDS):
            short_term += 1
        if _mentions_any(text, rules.LONG_TERM_KEYWORDS):
            long_term += 1
    return short_term, long_term


def detect_duration_gaps(
    stats: CorpusStatistics,
    corpus: Sequence[PublicationRecord] = (),
) -> List[GapFinding]:
    """Flag a shortage of long-duration studies relative to short-term ones."""
    short_term, long_term = count_duration_mentions(corpus)
    if long_term >= short_term * rules.DURATION_LONG_TERM_RATIO:
        return []

    return [
        GapFinding(
            id="duration-long-term",
            category=GapCategory.DURATION,
            title="Insufficient Long-Duration Studies",
            description=(
                f"Only {long_term} studies focus on long-duration effects vs "
                f"{short_term} short-term studies."
            ),
            severity=GapSeverity.HIGH,
            evidence=(
                f"Short-term studies: {short_term}",
                f"Long-term studies: {long_term}",
                rules.DURATION_RATIONALE,
            ),
            recommendations=rules.DURATION_RECOMMENDATIONS,
            related_publications=long_term,
        )
    ]


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

def detect_environment_gaps(
    stats: CorpusStatistics,
    corpus: Sequence[PublicationRecord] = (),
) -> List[GapFinding]:
    """Flag a corpus where under 15 % of abstracts address deep-space conditions."""
    total = stats.total_publications
    if total == 0:
        return []

    deep_space = sum(
        1 for pub in corpus if _mentions_any(_abstract_text(pub), rules.DEEP_SPACE_KEYWORDS)
    )
    if deep_space >= total * rules.DEEP_SPACE_MIN_SHARE:
        return []

    percent = round_half_up(deep_space / total * 100)
    return [
        GapFinding(
            id="environment-deep-space",
            category=GapCategory.ENVIRONMENT,
            title="Limited Deep Space Environment Research",
            description=(
                f"Only {deep_space} studies ({percent}%) address deep space "
                f"conditions beyond LEO."
            ),
            severity=GapSeverity.HIGH,
            evidence=(f"Deep space studies: {deep_space}",) + rules.ENVIRONMENT_EVIDENCE,
            recommendations=rules.ENVIRONMENT_RECOMMENDATIONS,
            related_publications=deep_space,
        )
    ]


# ---------------------------------------------------------------------------
# Registry (fixes the merge order of the report)
# ---------------------------------------------------------------------------

DETECTORS: Tuple[Tuple[GapCategory, Detector], ...] = (
    (GapCategory.ORGANISM, detect_organism_gaps),
    (GapCategory.RESEARCH_AREA, detect_research_area_gaps),
    (GapCategory.METHODOLOGY, detect_methodology_gaps),
    (GapCategory.DURATION, detect_duration_gaps),
    (GapCategory.ENVIRONMENT, detect_environment_gaps),
)

__all__ = [
    "DETECTORS",
    "Detector",
    "count_duration_mentions",
    "detect_duration_gaps",
    "detect_environment_gaps",
    "detect_methodology_gaps",
    "detect_organism_gaps",
    "detect_research_area_gaps",
]
