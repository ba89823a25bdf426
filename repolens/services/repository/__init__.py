"""
Repository listing services.

Module structure:
- patterns.py: File purpose classification and missing-file suggestions
- artifacts.py: ML experiment artifact detection and filtering
- resolver.py: Tree fetching with truncated listing recovery
"""

from repolens.services.repository.artifacts import (
    ArtifactFilter,
    MLExperimentSignals,
    RepositoryOptimizationResult,
    filter_ml_artifacts,
)
from repolens.services.repository.patterns import (
    ALL_PATTERN_MATCHERS,
    ClassificationResult,
    FileCategory,
    FilePatternMatcher,
    classify,
    classify_paths,
    find_files_for,
    find_missing_important_files,
)
from repolens.services.repository.resolver import (
    RepositoryStructureResolver,
    ResolvedStructure,
)

__all__ = [
    # Classification
    "ALL_PATTERN_MATCHERS",
    "ClassificationResult",
    "FileCategory",
    "FilePatternMatcher",
    "classify",
    "classify_paths",
    "find_files_for",
    "find_missing_important_files",
    # Artifact filtering
    "ArtifactFilter",
    "MLExperimentSignals",
    "RepositoryOptimizationResult",
    "filter_ml_artifacts",
    # Resolution
    "RepositoryStructureResolver",
    "ResolvedStructure",
]
