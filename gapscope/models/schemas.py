"""
Pydantic schemas for the gap analysis domain and the HTTP API.

Wire format follows the publication feed and the report consumer: camelCase
aliases (``researchArea``, ``coverageScore`` …) on the way out, either
spelling accepted on the way in.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Tuple
from datetime import datetime
from enum import Enum


# Enums
class GapCategory(str, Enum):
    """The five kinds of research gap the detectors can emit."""

    ORGANISM = "organism"
    RESEARCH_AREA = "research_area"
    METHODOLOGY = "methodology"
    DURATION = "duration"
    ENVIRONMENT = "environment"


class GapSeverity(str, Enum):
    """Ordinal gap rating; drives both ranking and coverage-score weighting."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Publication Schemas
class PublicationTags(BaseModel):
    """Organism / research-area tag bundle attached to a publication."""

    organism: Optional[str] = None
    research_area: Optional[str] = Field(None, alias="researchArea")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class PublicationRecord(BaseModel):
    """A single publication in the analysed corpus.  Read-only to the engine."""

    id: str
    title: str = ""
    abstract: Optional[str] = None
    date: Optional[str] = None              # ISO-8601 timestamp or bare year
    authors: List[str] = []
    link: Optional[str] = None
    tags: Optional[PublicationTags] = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Upstream feeds use both numeric and string identifiers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def organism(self) -> Optional[str]:
        return self.tags.organism if self.tags else None

    @property
    def research_area(self) -> Optional[str]:
        return self.tags.research_area if self.tags else None


# Gap Schemas
class GapFinding(BaseModel):
    """A single detected gap.  Immutable once constructed."""

    id: str                                 # "<prefix>-<slug>", stable across runs
    category: GapCategory
    title: str
    description: str
    severity: GapSeverity
    evidence: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    related_publications: Optional[int] = Field(None, alias="relatedPublications")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class GapAnalysisReport(BaseModel):
    """Final output of one analysis run."""

    gaps: Tuple[GapFinding, ...] = ()
    summary: str
    total_publications: int = Field(..., ge=0, alias="totalPublications")
    coverage_score: int = Field(..., ge=0, le=100, alias="coverageScore")
    timestamp: datetime

    model_config = ConfigDict(frozen=True, populate_by_name=True)


# API Schemas
class GapAnalysisRequest(BaseModel):
    """Request body for POST /api/gaps/analyze and the filtered variants."""

    publications: List[PublicationRecord]


class CategoryGapsResponse(BaseModel):
    """Response for the research-area / organism / category filtered analyses."""

    name: str
    gaps: List[GapFinding] = []
    total: int

    model_config = ConfigDict(populate_by_name=True)


# Health Check Schema
class HealthCheckResponse(BaseModel):
    """Schema for health check endpoint."""

    status: str
    narrative_service: str
    corpus: str
    timestamp: datetime
    version: str = "0.1.0"
