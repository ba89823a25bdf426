"""Pydantic schemas for API request/response validation."""

from repolens.schemas.selection import (
    ArtifactFilterSummary,
    ContentPackageResponse,
    CourseRequest,
    OptimizedFileResponse,
    OptimizedNotebookResponse,
    OptimizeNotebookRequest,
    OptimizeSelectionRequest,
    PhaseTimingsResponse,
    RepositoryRefRequest,
    ResolveStructureRequest,
    ResolveStructureResponse,
)

__all__ = [
    "ArtifactFilterSummary",
    "ContentPackageResponse",
    "CourseRequest",
    "OptimizedFileResponse",
    "OptimizedNotebookResponse",
    "OptimizeNotebookRequest",
    "OptimizeSelectionRequest",
    "PhaseTimingsResponse",
    "RepositoryRefRequest",
    "ResolveStructureRequest",
    "ResolveStructureResponse",
]
