"""
ML experiment artifact filtering.

Experiment-tracking tools (MLflow, Weights & Biases, DVC) commit run
directories by the thousand. They drown out the authored code when a listing
is narrowed for grading, so repositories that look like experiment stores get
their run artifacts removed and repeated artifact files capped.

Detection needs both a volume signal and a tooling-config signal: a small
repo with an `artifacts/` folder is not experiment noise.
"""

import logging
import posixpath
import re
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Volume thresholds (strictly greater than)
ARTIFACT_COUNT_THRESHOLD = 100
MLRUN_COUNT_THRESHOLD = 50
UUID_PATH_THRESHOLD = 50

UUID_FRAGMENT = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}")

EXPERIMENT_ARTIFACT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"artifacts/[0-9a-f]{8}-[0-9a-f]{4}"),  # MLflow artifacts keyed by run UUID
    re.compile(r"mlruns/[0-9]+/[0-9a-f]{8}-[0-9a-f]{4}"),  # MLflow run directories
    re.compile(r"mlruns/[0-9]+/[0-9a-f]{32}(/|$)"),  # MLflow run ids without dashes
    re.compile(r"wandb/(offline-)?run-[0-9]{8}[-_][0-9]{6}"),  # W&B run directories
    re.compile(r"outputs/[0-9]{4}-[0-9]{2}-[0-9]{2}"),  # Hydra-style dated outputs
)

# Substrings of artifacts worth keeping even inside run directories
IMPORTANT_ARTIFACT_MARKERS: tuple[str, ...] = (
    "MLproject",
    "conda.yaml",
    "conda.yml",
    "model.pkl",
    "model.joblib",
    "dvc.yaml",
    "dvc.lock",
    "experiment.yaml",
    "config.yaml",
    "params.yaml",
)

# Basenames capped during deduplication, regardless of directory
DEDUPLICATED_BASENAMES: tuple[str, ...] = (
    "requirements.txt",
    "MLmodel",
    "classification_report.json",
)
MAX_DUPLICATE_INSTANCES = 2

# requirements.txt is only important at the root or one directory below it
MAX_REQUIREMENTS_DEPTH = 2


@dataclass
class MLExperimentSignals:
    """Experiment-tracking evidence derived from a file listing. Counts are >= 0."""

    artifact_count: int = 0
    mlrun_count: int = 0
    uuid_path_count: int = 0
    has_mlflow_config: bool = False
    has_wandb: bool = False
    has_dvc_config: bool = False

    @property
    def volume_exceeded(self) -> bool:
        return (
            self.artifact_count > ARTIFACT_COUNT_THRESHOLD
            or self.mlrun_count > MLRUN_COUNT_THRESHOLD
            or self.uuid_path_count > UUID_PATH_THRESHOLD
        )

    @property
    def has_tooling_config(self) -> bool:
        return self.has_mlflow_config or self.has_wandb or self.has_dvc_config

    @property
    def is_ml_repo(self) -> bool:
        return self.volume_exceeded and self.has_tooling_config


@dataclass
class RepositoryOptimizationResult:
    """Outcome of artifact filtering. filtered_count <= original_count."""

    files: list[str]
    was_filtered: bool
    original_count: int
    filtered_count: int
    filter_reason: str | None = None

    @property
    def removed_count(self) -> int:
        return self.original_count - self.filtered_count


def detect_ml_experiment_repository(files: Sequence[str]) -> MLExperimentSignals:
    """Count experiment-tracking signals in a listing."""
    signals = MLExperimentSignals()

    for path in files:
        if "artifacts/" in path:
            signals.artifact_count += 1
        if "mlruns/" in path:
            signals.mlrun_count += 1
        if UUID_FRAGMENT.search(path):
            signals.uuid_path_count += 1
        if "MLproject" in path or "mlflow.yml" in path or "mlflow.yaml" in path:
            signals.has_mlflow_config = True
        if path.startswith("wandb/") or "/wandb/" in path or ".wandb/" in path:
            signals.has_wandb = True
        if "dvc.yaml" in path or path.startswith(".dvc/") or "/.dvc/" in path:
            signals.has_dvc_config = True

    return signals


def is_experiment_artifact(path: str) -> bool:
    """Check if a path lives in a run, UUID or date-stamped output directory."""
    return any(pattern.search(path) for pattern in EXPERIMENT_ARTIFACT_PATTERNS)


def is_important_artifact(path: str) -> bool:
    """
    Check if an artifact path should survive filtering.

    Keeps configuration and model files, the first classification report of
    a series, and requirements.txt near the root.
    """
    if any(marker in path for marker in IMPORTANT_ARTIFACT_MARKERS):
        return True

    if "classification_report" in path:
        return not (path.endswith("_1.txt") or path.endswith("_2.txt"))

    if posixpath.basename(path) == "requirements.txt":
        return len(path.split("/")) <= MAX_REQUIREMENTS_DEPTH

    return False


def deduplicate_artifacts(
    files: Sequence[str],
    basenames: Sequence[str] = DEDUPLICATED_BASENAMES,
    max_instances: int = MAX_DUPLICATE_INSTANCES,
) -> list[str]:
    """
    Cap repeated artifact basenames, keeping the shallowest instances.

    Never removes every instance of a basename. Input order is preserved.
    """
    dropped: set[str] = set()
    max_instances = max(1, max_instances)

    for basename in basenames:
        instances = [f for f in files if posixpath.basename(f) == basename]
        if len(instances) <= max_instances:
            continue
        # Stable sort keeps listing order among paths of equal depth
        keep = set(sorted(instances, key=lambda p: p.count("/"))[:max_instances])
        dropped.update(f for f in instances if f not in keep)
        logger.info(f"Deduplicated artifacts: {len(instances)} -> {max_instances} {basename} files")

    return [f for f in files if f not in dropped]


def filter_ml_artifacts(files: list[str]) -> RepositoryOptimizationResult:
    """
    Remove ML experiment noise from a listing.

    Args:
        files: Full repository listing (blob paths)

    Returns:
        RepositoryOptimizationResult; when the repository is not an experiment
        store, `files` is the input list itself and was_filtered is False
    """
    original_count = len(files)
    signals = detect_ml_experiment_repository(files)

    if not signals.is_ml_repo:
        return RepositoryOptimizationResult(
            files=files,
            was_filtered=False,
            original_count=original_count,
            filtered_count=original_count,
        )

    logger.info(
        f"ML experiment repository detected: artifacts={signals.artifact_count}, "
        f"mlruns={signals.mlrun_count}, uuid_paths={signals.uuid_path_count}, "
        f"mlflow={signals.has_mlflow_config}, wandb={signals.has_wandb}, "
        f"dvc={signals.has_dvc_config}"
    )

    kept = [f for f in files if not is_experiment_artifact(f) or is_important_artifact(f)]
    deduplicated = deduplicate_artifacts(kept)

    filtered_count = len(deduplicated)
    reason = (
        f"Filtered {original_count - filtered_count} ML experiment artifacts "
        f"({signals.artifact_count} artifacts, {signals.mlrun_count} mlruns)"
    )
    reduction = round((1 - filtered_count / original_count) * 100) if original_count else 0
    logger.info(
        f"Artifact filtering result: {original_count} -> {filtered_count} files "
        f"({reduction}% reduction)"
    )

    return RepositoryOptimizationResult(
        files=deduplicated,
        was_filtered=True,
        original_count=original_count,
        filtered_count=filtered_count,
        filter_reason=reason,
    )


class ArtifactFilter:
    """Stateless facade over the artifact detection and filtering functions."""

    def detect(self, files: Sequence[str]) -> MLExperimentSignals:
        return detect_ml_experiment_repository(files)

    def filter(self, files: list[str]) -> RepositoryOptimizationResult:
        return filter_ml_artifacts(files)
