"""
Declarative rule tables for the category gap detectors.

Every threshold, priority list and keyword set lives here so new rules can be
added without touching detector control flow.  Detectors iterate these tables
in order; that order is part of the report's deterministic ordering.
"""
from __future__ import annotations

import dataclasses
from typing import Dict, Tuple

from gapscope.models.schemas import GapSeverity


# ---------------------------------------------------------------------------
# Corpus aggregation sentinels
# ---------------------------------------------------------------------------

UNKNOWN_ORGANISM = "Unknown"
GENERAL_RESEARCH_AREA = "General"
DEFAULT_YEAR = 2020


# ---------------------------------------------------------------------------
# Organism detector
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class PriorityOrganism:
    name: str
    importance: str


PRIORITY_ORGANISMS: Tuple[PriorityOrganism, ...] = (
    PriorityOrganism("Homo sapiens", "Critical for human spaceflight missions"),
    PriorityOrganism("Arabidopsis thaliana", "Model plant for life support systems"),
    PriorityOrganism("Caenorhabditis elegans", "Model for aging and muscle loss"),
    PriorityOrganism("Drosophila melanogaster", "Genetic model for development"),
    PriorityOrganism("Mus musculus", "Mammalian model closest to humans"),
)

ORGANISM_FLAG_RATIO = 0.5      # count < avg * 0.5   → gap
ORGANISM_MEDIUM_RATIO = 0.25   # count < avg * 0.25  → medium (0 → high)

ORGANISM_RECOMMENDATIONS: Tuple[str, ...] = (
    "Increase {name} experiments on ISS",
    "Leverage existing ground-based facilities",
    "Coordinate with international partners",
)


# ---------------------------------------------------------------------------
# Research-area detector
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class CriticalArea:
    name: str
    min_expected: int


CRITICAL_RESEARCH_AREAS: Tuple[CriticalArea, ...] = (
    CriticalArea("Radiation Biology", 30),
    CriticalArea("Bone Biology", 25),
    CriticalArea("Cardiovascular", 20),
    CriticalArea("Immunology", 20),
    CriticalArea("Plant Biology", 25),
    CriticalArea("Microbiology", 20),
)

AREA_HIGH_RATIO = 0.5          # count < minExpected * 0.5 → high, else medium

AREA_RECOMMENDATIONS: Tuple[str, ...] = (
    "Prioritize {name} in next funding cycle",
    "Collaborate with medical research institutions",
    "Leverage existing ISS research opportunities",
)


# ---------------------------------------------------------------------------
# Methodology detector
# ---------------------------------------------------------------------------
# These are structural claims about the field and are not derived from the
# corpus.  The detector emits them unconditionally.

@dataclasses.dataclass(frozen=True)
class MethodologyGap:
    key: str
    title: str
    description: str
    severity: GapSeverity
    evidence: Tuple[str, ...]
    recommendations: Tuple[str, ...]


METHODOLOGY_GAPS: Tuple[MethodologyGap, ...] = (
    MethodologyGap(
        key="longitudinal",
        title="Limited Longitudinal Studies",
        description=(
            "Few studies track biological changes over extended mission "
            "durations (6+ months)."
        ),
        severity=GapSeverity.HIGH,
        evidence=(
            "Most studies focus on short-duration effects",
            "Long-term health impacts poorly understood",
            "Critical for Mars missions (2+ years)",
        ),
        recommendations=(
            "Design multi-year study protocols",
            "Coordinate with ISS long-duration crews",
            "Establish biobanking for retrospective analysis",
        ),
    ),
    MethodologyGap(
        key="multi-omics",
        title="Insufficient Multi-Omics Integration",
        description=(
            "Limited studies combining transcriptomics, proteomics, metabolomics "
            "for systems-level understanding."
        ),
        severity=GapSeverity.MEDIUM,
        evidence=(
            "Single-omics studies dominate",
            "Systems biology approaches underutilized",
            "Critical for understanding complex adaptations",
        ),
        recommendations=(
            "Fund integrated multi-omics projects",
            "Develop spaceflight-compatible sample collection",
            "Create standardized data analysis pipelines",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Duration detector
# ---------------------------------------------------------------------------
# Raw substring matching: "day" also matches "Monday".  Kept literal.

SHORT_TERM_KEYWORDS: Tuple[str, ...] = ("day", "days", "week", "weeks")
LONG_TERM_KEYWORDS: Tuple[str, ...] = ("month", "months", "year", "years")

DURATION_LONG_TERM_RATIO = 0.3  # long < short * 0.3 → gap

DURATION_RATIONALE = "Mars missions require 2+ year data"

DURATION_RECOMMENDATIONS: Tuple[str, ...] = (
    "Prioritize 6+ month ISS experiments",
    "Leverage analog environments (Antarctic, submarine)",
    "Coordinate with commercial space stations",
)


# ---------------------------------------------------------------------------
# Environment detector
# ---------------------------------------------------------------------------

DEEP_SPACE_KEYWORDS: Tuple[str, ...] = (
    "deep space",
    "beyond leo",
    "mars",
    "lunar",
    "moon",
)

DEEP_SPACE_MIN_SHARE = 0.15     # deep < total * 0.15 → gap

ENVIRONMENT_EVIDENCE: Tuple[str, ...] = (
    "Artemis and Mars missions require this data",
    "Radiation and isolation factors unique to deep space",
)

ENVIRONMENT_RECOMMENDATIONS: Tuple[str, ...] = (
    "Leverage Artemis lunar missions",
    "Coordinate with ESA and international partners",
    "Utilize Gateway space station",
)


# ---------------------------------------------------------------------------
# Ranking / coverage
# ---------------------------------------------------------------------------

SEVERITY_RANK: Dict[GapSeverity, int] = {
    GapSeverity.HIGH: 3,
    GapSeverity.MEDIUM: 2,
    GapSeverity.LOW: 1,
}

COVERAGE_PENALTY: Dict[GapSeverity, int] = {
    GapSeverity.HIGH: 10,
    GapSeverity.MEDIUM: 5,
    GapSeverity.LOW: 0,
}
