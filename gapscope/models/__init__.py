"""Domain and API schema models for gapscope."""
from gapscope.models.schemas import (
    GapCategory,
    GapSeverity,
    PublicationTags,
    PublicationRecord,
    GapFinding,
    GapAnalysisReport,
    GapAnalysisRequest,
    CategoryGapsResponse,
    HealthCheckResponse,
)

__all__ = [
    # Enums
    "GapCategory",
    "GapSeverity",
    # Domain models
    "PublicationTags",
    "PublicationRecord",
    "GapFinding",
    "GapAnalysisReport",
    # API schemas
    "GapAnalysisRequest",
    "CategoryGapsResponse",
    "HealthCheckResponse",
]
