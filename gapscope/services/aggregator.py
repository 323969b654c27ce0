"""
Corpus aggregation: reduce a publication sequence to frequency tables.

Public API
----------
aggregate_corpus(corpus) -> CorpusStatistics
parse_publication_year(date) -> int
"""
from __future__ import annotations

import dataclasses
import logging
import re
from datetime import datetime
from typing import Dict, Optional, Sequence

from gapscope.models.schemas import PublicationRecord
from gapscope.services.rules import (
    DEFAULT_YEAR,
    GENERAL_RESEARCH_AREA,
    UNKNOWN_ORGANISM,
)

logger = logging.getLogger(__name__)

_LEADING_YEAR = re.compile(r"^\s*(\d{4})")


class InvalidCorpusError(ValueError):
    """The corpus reference is missing or malformed.  Fatal for the analysis."""


@dataclasses.dataclass
class CorpusStatistics:
    """Frequency tables for one analysis run.  Rebuilt on every call."""

    by_organism: Dict[str, int]
    by_research_area: Dict[str, int]
    by_year: Dict[int, int]
    total_publications: int

    @property
    def distinct_organisms(self) -> int:
        return len(self.by_organism)


def parse_publication_year(date: Optional[str]) -> int:
    """
    Extract the publication year from an ISO-8601 date or a bare year.

    Missing or unparseable dates map to DEFAULT_YEAR (a fixed sentinel rather
    than the current year, so results do not drift over time).
    """
    if not date:
        return DEFAULT_YEAR
    text = date.strip()
    try:
        # fromisoformat() rejects the "Z" suffix before Python 3.11
        return datetime.fromisoformat(text.replace("Z", "+00:00")).year
    except ValueError:
        pass
    match = _LEADING_YEAR.match(text)
    if match:
        return int(match.group(1))
    return DEFAULT_YEAR


def aggregate_corpus(corpus: Optional[Sequence[PublicationRecord]]) -> CorpusStatistics:
    """
    Count publications by organism, research area and year in a single pass.

    Records without an organism tag are counted under "Unknown", records
    without a research-area tag under "General".

    Raises:
        InvalidCorpusError: if *corpus* is None.
    """
    if corpus is None:
        raise InvalidCorpusError("Corpus reference is required")

    by_organism: Dict[str, int] = {}
    by_research_area: Dict[str, int] = {}
    by_year: Dict[int, int] = {}
    total = 0

    for pub in corpus:
        organism = pub.organism or UNKNOWN_ORGANISM
        by_organism[organism] = by_organism.get(organism, 0) + 1

        area = pub.research_area or GENERAL_RESEARCH_AREA
        by_research_area[area] = by_research_area.get(area, 0) + 1

        year = parse_publication_year(pub.date)
        by_year[year] = by_year.get(year, 0) + 1

        total += 1

    logger.debug(
        "aggregate_corpus: %d publication(s), %d organism(s), %d area(s), %d year(s)",
        total,
        len(by_organism),
        len(by_research_area),
        len(by_year),
    )

    return CorpusStatistics(
        by_organism=by_organism,
        by_research_area=by_research_area,
        by_year=by_year,
        total_publications=total,
    )
