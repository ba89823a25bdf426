"""Pydantic schemas for the structure, selection and notebook endpoints.

Service results are dataclasses; these models are the HTTP contract built
from them. Field naming uses snake_case throughout.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field

from repolens.services.github import RepositoryRef
from repolens.services.notebook import CourseContext, OptimizedNotebook
from repolens.services.repository import (
    ClassificationResult,
    RepositoryOptimizationResult,
    ResolvedStructure,
)
from repolens.services.selection import ContentPackage, OptimizedFile, PhaseTimings

# ─────────────────────────────────────────────────────────────
# Requests
# ─────────────────────────────────────────────────────────────


class RepositoryRefRequest(BaseModel):
    """A repository pinned to a commit."""

    owner: str = Field(min_length=1, description="Repository owner, e.g. 'octocat'")
    repo: str = Field(min_length=1, description="Repository name")
    commit: str = Field(min_length=1, description="Commit SHA (or any ref GitHub resolves)")

    def to_ref(self) -> RepositoryRef:
        return RepositoryRef(owner=self.owner, repo=self.repo, commit=self.commit)


class CourseRequest(BaseModel):
    """Course the content is graded for."""

    course_id: str = Field(min_length=1, description="Course identifier, e.g. 'mlops-zoomcamp'")
    course_name: str = ""
    rubric: str | None = Field(default=None, description="Rubric text used for keyword weighting")

    def to_context(self) -> CourseContext:
        return CourseContext(
            course_id=self.course_id,
            course_name=self.course_name,
            rubric=self.rubric,
        )


class ResolveStructureRequest(BaseModel):
    repository: RepositoryRefRequest


class OptimizeSelectionRequest(BaseModel):
    repository: RepositoryRefRequest
    course: CourseRequest
    paths: list[str] = Field(description="Already narrowed selection, fetched in order")


class OptimizeNotebookRequest(BaseModel):
    path: str = Field(min_length=1, description="Notebook path, used for labelling")
    content: str = Field(description="Raw notebook JSON")
    course: CourseRequest


# ─────────────────────────────────────────────────────────────
# Responses
# ─────────────────────────────────────────────────────────────


class ArtifactFilterSummary(BaseModel):
    """Outcome of ML experiment artifact filtering."""

    was_filtered: bool
    filter_reason: str | None = None
    original_count: int
    filtered_count: int

    @classmethod
    def from_result(cls, result: RepositoryOptimizationResult) -> "ArtifactFilterSummary":
        return cls(
            was_filtered=result.was_filtered,
            filter_reason=result.filter_reason,
            original_count=result.original_count,
            filtered_count=result.filtered_count,
        )


class ResolveStructureResponse(BaseModel):
    """Resolved listing with recovery, filtering and classification details."""

    files: list[str] = Field(description="Candidate paths after artifact filtering")
    total_files: int
    original_count: int = Field(description="Files in the initial tree response")
    truncated: bool
    recovery_attempted: bool
    recovery_calls: int
    recovered_files: list[str]
    recovered_directories: list[str]
    notes: list[str]
    artifact_filter: ArtifactFilterSummary
    classification: dict[str, list[str]]
    missing_files: dict[str, list[str]]

    @classmethod
    def from_results(
        cls,
        structure: ResolvedStructure,
        artifacts: RepositoryOptimizationResult,
        classification: ClassificationResult,
    ) -> "ResolveStructureResponse":
        categories = classification.to_dict()
        return cls(
            files=artifacts.files,
            total_files=len(artifacts.files),
            original_count=structure.original_count,
            truncated=structure.truncated,
            recovery_attempted=structure.recovery_attempted,
            recovery_calls=structure.recovery_calls,
            recovered_files=structure.recovered_files,
            recovered_directories=structure.recovered_directories,
            notes=structure.notes,
            artifact_filter=ArtifactFilterSummary.from_result(artifacts),
            classification=categories["categories"],
            missing_files=categories["missing"],
        )


class OptimizedFileResponse(BaseModel):
    path: str
    optimized_content: str
    type: Literal["regular", "optimized-notebook", "missing"]
    original_size: int = Field(description="Estimated tokens before optimization")
    optimized_size: int = Field(description="Estimated tokens after optimization")
    compression_ratio: float = Field(ge=0, le=1)

    @classmethod
    def from_file(cls, file: OptimizedFile) -> "OptimizedFileResponse":
        return cls(
            path=file.path,
            optimized_content=file.optimized_content,
            type=file.type,
            original_size=file.original_size,
            optimized_size=file.optimized_size,
            compression_ratio=file.compression_ratio,
        )


class PhaseTimingsResponse(BaseModel):
    """Per-phase processing time in milliseconds."""

    file_discovery_ms: float
    selection_ms: float
    content_fetch_ms: float
    optimization_ms: float
    total_ms: float

    @classmethod
    def from_timings(cls, timings: PhaseTimings) -> "PhaseTimingsResponse":
        return cls(
            file_discovery_ms=timings.file_discovery_ms,
            selection_ms=timings.selection_ms,
            content_fetch_ms=timings.content_fetch_ms,
            optimization_ms=timings.optimization_ms,
            total_ms=timings.total_ms,
        )


class ContentPackageResponse(BaseModel):
    """Content handed to the evaluator, one entry per requested path."""

    files: list[OptimizedFileResponse]
    total_files: int
    total_token_savings: int = Field(description="Tokens saved by notebook compression")
    timings: PhaseTimingsResponse

    @classmethod
    def from_package(cls, package: ContentPackage) -> "ContentPackageResponse":
        return cls(
            files=[OptimizedFileResponse.from_file(f) for f in package.files],
            total_files=package.total_files,
            total_token_savings=package.total_token_savings,
            timings=PhaseTimingsResponse.from_timings(package.timings),
        )


class OptimizedNotebookResponse(BaseModel):
    original_size: int
    optimized_size: int
    compression_ratio: float = Field(ge=0, le=1)
    content: str
    metadata: dict[str, Any]

    @classmethod
    def from_notebook(cls, notebook: OptimizedNotebook) -> "OptimizedNotebookResponse":
        return cls(
            original_size=notebook.original_size,
            optimized_size=notebook.optimized_size,
            compression_ratio=notebook.compression_ratio,
            content=notebook.content,
            metadata=notebook.metadata,
        )
