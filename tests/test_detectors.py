"""Tests for the five category gap detectors."""
from gapscope.models.schemas import GapCategory, GapSeverity
from gapscope.services.aggregator import CorpusStatistics, aggregate_corpus
from gapscope.services.detectors import (
    count_duration_mentions,
    detect_duration_gaps,
    detect_environment_gaps,
    detect_methodology_gaps,
    detect_organism_gaps,
    detect_research_area_gaps,
)
from tests.conftest import balanced_corpus, make_pub


def _stats(by_organism=None, by_research_area=None, total=0) -> CorpusStatistics:
    return CorpusStatistics(
        by_organism=by_organism or {},
        by_research_area=by_research_area or {},
        by_year={},
        total_publications=total,
    )


# ---------------------------------------------------------------------------
# Organism
# ---------------------------------------------------------------------------

def test_organism_absent_priority_organism_is_high():
    stats = aggregate_corpus(balanced_corpus())
    gaps = detect_organism_gaps(stats)

    # average = 10 / 5 = 2; only Homo sapiens (0) is below 2 * 0.5
    assert [g.id for g in gaps] == ["organism-homo-sapiens"]
    gap = gaps[0]
    assert gap.category == GapCategory.ORGANISM
    assert gap.severity == GapSeverity.HIGH
    assert gap.related_publications == 0
    assert gap.evidence == (
        "Current studies: 0",
        "Average per organism: 2",
        "Deficit: 2 studies",
    )
    assert gap.recommendations[0] == "Increase Homo sapiens experiments on ISS"


def test_organism_medium_and_low_thresholds():
    # average = 100 / 3 ≈ 33.3 → flag < 16.7, medium < 8.3
    medium = detect_organism_gaps(
        _stats({"Homo sapiens": 3, "X": 47, "Y": 50}, total=100)
    )
    low = detect_organism_gaps(
        _stats({"Homo sapiens": 10, "X": 40, "Y": 50}, total=100)
    )

    assert medium[0].id == "organism-homo-sapiens"
    assert medium[0].severity == GapSeverity.MEDIUM
    assert low[0].id == "organism-homo-sapiens"
    assert low[0].severity == GapSeverity.LOW
    # remaining priority organisms are absent → high, in priority order
    assert [g.id for g in low[1:]] == [
        "organism-arabidopsis-thaliana",
        "organism-caenorhabditis-elegans",
        "organism-drosophila-melanogaster",
        "organism-mus-musculus",
    ]
    assert all(g.severity == GapSeverity.HIGH for g in low[1:])


def test_organism_no_organisms_emits_nothing():
    assert detect_organism_gaps(_stats()) == []


# ---------------------------------------------------------------------------
# Research area
# ---------------------------------------------------------------------------

def test_research_area_thresholds():
    stats = _stats(
        by_research_area={"Radiation Biology": 30, "Bone Biology": 20, "Cardiovascular": 5},
        total=55,
    )
    gaps = {g.id: g for g in detect_research_area_gaps(stats)}

    assert "area-radiation-biology" not in gaps
    assert gaps["area-bone-biology"].severity == GapSeverity.MEDIUM
    assert gaps["area-bone-biology"].evidence == (
        "Current studies: 20",
        "Expected minimum: 25",
        "Gap: 5 studies needed",
    )
    assert gaps["area-cardiovascular"].severity == GapSeverity.HIGH
    assert gaps["area-microbiology"].severity == GapSeverity.HIGH
    assert list(gaps) == [
        "area-bone-biology",
        "area-cardiovascular",
        "area-immunology",
        "area-plant-biology",
        "area-microbiology",
    ]


def test_research_area_never_low():
    stats = _stats(by_research_area={"Microbiology": 19}, total=19)
    severities = {g.severity for g in detect_research_area_gaps(stats)}
    assert GapSeverity.LOW not in severities


# ---------------------------------------------------------------------------
# Methodology
# ---------------------------------------------------------------------------

def test_methodology_is_corpus_independent():
    empty = detect_methodology_gaps(_stats())
    full = detect_methodology_gaps(aggregate_corpus(balanced_corpus()), balanced_corpus())

    assert empty == full
    assert [(g.id, g.severity) for g in empty] == [
        ("methodology-longitudinal", GapSeverity.HIGH),
        ("methodology-multi-omics", GapSeverity.MEDIUM),
    ]


# ---------------------------------------------------------------------------
# Duration
# ---------------------------------------------------------------------------

def test_duration_only_short_term_abstracts():
    corpus = [make_pub(i, abstract="Mice flown for 30 days") for i in range(4)]
    gaps = detect_duration_gaps(aggregate_corpus(corpus), corpus)

    assert len(gaps) == 1
    assert gaps[0].category == GapCategory.DURATION
    assert gaps[0].severity == GapSeverity.HIGH
    assert gaps[0].evidence[:2] == ("Short-term studies: 4", "Long-term studies: 0")


def test_duration_balanced_corpus_has_no_gap():
    corpus = [make_pub(i, abstract="A 14 day study") for i in range(3)]
    corpus.append(make_pub(9, abstract="Six months aboard the station"))
    assert detect_duration_gaps(aggregate_corpus(corpus), corpus) == []


def test_duration_keyword_sets_are_not_exclusive():
    corpus = [make_pub(1, abstract="Sampled over DAYS and YEARS"), make_pub(2)]
    assert count_duration_mentions(corpus) == (1, 1)


def test_duration_matches_raw_substrings():
    # "Monday" contains "day"
    corpus = [make_pub(1, abstract="Samples collected on Monday")]
    assert count_duration_mentions(corpus) == (1, 0)


def test_duration_empty_corpus():
    assert detect_duration_gaps(_stats(), []) == []


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

def test_environment_empty_corpus_emits_nothing():
    assert detect_environment_gaps(_stats(), []) == []


def test_environment_low_deep_space_share():
    corpus = [make_pub(0, abstract="Preparing for LUNAR surface missions")]
    corpus += [make_pub(i, abstract="Low Earth orbit study") for i in range(1, 10)]
    gaps = detect_environment_gaps(aggregate_corpus(corpus), corpus)

    assert len(gaps) == 1
    assert gaps[0].id == "environment-deep-space"
    assert gaps[0].severity == GapSeverity.HIGH
    assert "(10%)" in gaps[0].description
    assert gaps[0].related_publications == 1


def test_environment_percentage_rounds_half_up():
    corpus = [make_pub(0, abstract="Mars analog")]
    corpus += [make_pub(i, abstract="ISS") for i in range(1, 8)]
    gaps = detect_environment_gaps(aggregate_corpus(corpus), corpus)
    assert "(13%)" in gaps[0].description  # 1 / 8 = 12.5 %


def test_environment_sufficient_coverage():
    corpus = [make_pub(i, abstract="deep space radiation") for i in range(2)]
    corpus += [make_pub(i, abstract="ISS") for i in range(2, 10)]
    assert detect_environment_gaps(aggregate_corpus(corpus), corpus) == []
