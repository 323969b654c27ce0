"""
Corpus source: load publication records from a JSON file and tag them.

The gap engine treats the corpus as an opaque sequence; this module is the
boundary that produces one.  Records that arrive without tags are tagged from
their title + abstract with keyword rules:

  organism       Mice, Rats, Human, Drosophila, C. elegans, Plants, Microbes
                 ("Various/Mixed" when several match, "N/A" when none)
  research area  first matching rule wins, "General" when none

Accepted file shapes: a JSON array of records, or an object with a
"publications" array.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from gapscope.models.schemas import PublicationRecord, PublicationTags
from gapscope.services.rules import GENERAL_RESEARCH_AREA

logger = logging.getLogger(__name__)

MIXED_ORGANISMS = "Various/Mixed"
NO_ORGANISM = "N/A"

_ORGANISM_RULES: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("Mice", re.compile(r"\b(mouse|mice|murine)\b")),
    ("Rats", re.compile(r"\b(rat|rats)\b")),
    ("Human", re.compile(r"\b(human|astronaut|men|women|patient|crew|civilian)\b")),
    ("Drosophila", re.compile(r"\b(drosophila|fruit fl(?:y|ies))\b")),
    ("C. elegans", re.compile(r"\b(c\. elegans|nematode)\b")),
    ("Plants", re.compile(
        r"\b(plant|arabidopsis|seedling|root|leaf|lettuce|wheat|crop|brachypodium"
        r"|wolffia|mizuna|maize|populus|zinni|cauliflower|fern|flax)\b"
    )),
    ("Microbes", re.compile(
        r"\b(microb|bacteri|fung|yeast|e\. coli|salmonella|pseudomonas|spore|alga"
        r"|tardigrade|pathogen|cell culture|vessel|bioreactor|organoid|archaea)\b"
    )),
)

_RESEARCH_AREA_RULES: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("Musculoskeletal", re.compile(
        r"\b(bone|skeletal|osteoporosis|osteoclast|osteoblast|femur|vertebra|cartilage"
        r"|osteopen|sarcopenia|muscle|musculoskeletal)\b"
    )),
    ("Cardiovascular", re.compile(
        r"\b(cardiovascular|cardiac|heart|artery|vascular|endotheli|blood flow|blood pressure)\b"
    )),
    ("Immunology", re.compile(
        r"\b(immune|immunolog|lymphocyte|leukocyte|macrophage|t-cell|cytokine"
        r"|inflammation|innate|adaptive)\b"
    )),
    ("Neuroscience", re.compile(
        r"\b(neuro|brain|neuronal|hippocamp|cns|vestibular|synap|cognit|ocul|retina)\b"
    )),
    ("Radiation", re.compile(r"\b(radiat|ionizing|cosmic ray|gcr|spe|hze|gamma|proton)\b")),
    ("Cellular Biology", re.compile(
        r"\b(cell|cellular|cytoskeleton|mitochondri|apoptosis|dna|rna|proliferat|differentiation)\b"
    )),
    ("Microbiology", re.compile(
        r"\b(microb|bacteri|fung|yeast|microbiome|biofilm|pathogen|host-pathogen|symbio)\b"
    )),
    ("Plant Biology", re.compile(
        r"\b(plant|arabidopsis|seedling|root|photosynthesis|gravitropism|auxin|lettuce|crop)\b"
    )),
    ("Genomics & Omics", re.compile(
        r"\b(gene|genomic|transcriptom|proteom|epigenetic|expression|molecular|dna|rna|splicing)\b"
    )),
)


class CorpusLoadError(RuntimeError):
    """The corpus file is missing, unreadable, or not a list of publications."""


def infer_tags(title: str, abstract: Optional[str]) -> PublicationTags:
    """Derive organism / research-area tags from free text."""
    text = f"{title} {abstract or ''}".lower()

    organisms = [name for name, pattern in _ORGANISM_RULES if pattern.search(text)]
    if len(organisms) > 1:
        organism = MIXED_ORGANISMS
    elif organisms:
        organism = organisms[0]
    else:
        organism = NO_ORGANISM

    research_area = next(
        (name for name, pattern in _RESEARCH_AREA_RULES if pattern.search(text)),
        GENERAL_RESEARCH_AREA,
    )
    return PublicationTags(organism=organism, research_area=research_area)


def tag_publication(pub: PublicationRecord) -> PublicationRecord:
    """Return *pub* with inferred tags if it has none; tagged records pass through."""
    if pub.tags is not None and (pub.tags.organism or pub.tags.research_area):
        return pub
    return pub.model_copy(update={"tags": infer_tags(pub.title, pub.abstract)})


class CorpusSource:
    """Loads a tagged publication corpus from a JSON file on every call."""

    def __init__(self, path: Union[str, Path], auto_tag: bool = True) -> None:
        self.path = Path(path)
        self.auto_tag = auto_tag

    def load(self) -> List[PublicationRecord]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise CorpusLoadError(f"Corpus file not found: {self.path}") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise CorpusLoadError(f"Could not read corpus file {self.path}: {exc}") from exc

        records = self._unwrap(raw)
        try:
            publications = [PublicationRecord.model_validate(r) for r in records]
        except ValidationError as exc:
            raise CorpusLoadError(
                f"Corpus file {self.path} contains invalid records: "
                f"{exc.error_count()} error(s)"
            ) from exc

        if self.auto_tag:
            publications = [tag_publication(p) for p in publications]

        logger.info("CorpusSource: loaded %d publication(s) from %s", len(publications), self.path)
        return publications

    def _unwrap(self, raw: Any) -> Sequence[Any]:
        if isinstance(raw, dict):
            raw = raw.get("publications")
        if not isinstance(raw, list):
            raise CorpusLoadError(
                f"Corpus file {self.path} must hold a JSON array or "
                f'an object with a "publications" array'
            )
        return raw
