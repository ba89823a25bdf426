"""Data types for content selection."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal

from repolens.services.repository import (
    ClassificationResult,
    RepositoryOptimizationResult,
    ResolvedStructure,
)

FileKind = Literal["regular", "optimized-notebook", "missing"]

# External selection stage: (candidate paths, classification) -> chosen paths
SelectFiles = Callable[[list[str], ClassificationResult], Awaitable[list[str]]]


@dataclass
class OptimizedFile:
    """Content of one selected file, ready for the evaluator. Sizes are estimated tokens."""

    path: str
    optimized_content: str
    original_size: int
    optimized_size: int
    compression_ratio: float
    type: FileKind

    @property
    def token_savings(self) -> int:
        return self.original_size - self.optimized_size


@dataclass
class PhaseTimings:
    """Wall-clock duration of each pipeline phase, in milliseconds."""

    file_discovery_ms: float = 0.0
    selection_ms: float = 0.0
    content_fetch_ms: float = 0.0
    optimization_ms: float = 0.0
    total_ms: float = 0.0


@dataclass
class DiscoveryResult:
    """Candidate listing produced before selection."""

    structure: ResolvedStructure
    artifacts: RepositoryOptimizationResult
    classification: ClassificationResult

    @property
    def candidates(self) -> list[str]:
        return self.artifacts.files


@dataclass
class ContentPackage:
    """Final package handed to the evaluator."""

    selected_files: list[str]
    files: list[OptimizedFile]
    timings: PhaseTimings = field(default_factory=PhaseTimings)
    discovery: DiscoveryResult | None = None

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_token_savings(self) -> int:
        """Savings from compressed notebooks only."""
        return sum(f.token_savings for f in self.files if f.type == "optimized-notebook")
