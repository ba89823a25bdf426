"""Unit tests for ML experiment artifact filtering."""

from __future__ import annotations

import pytest

from repolens.services.repository.artifacts import (
    ArtifactFilter,
    deduplicate_artifacts,
    detect_ml_experiment_repository,
    filter_ml_artifacts,
    is_experiment_artifact,
    is_important_artifact,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

RUN_FILES = (
    "meta.yaml",
    "params/lr",
    "params/epochs",
    "metrics/accuracy",
    "metrics/loss",
    "tags/mlflow.user",
    "tags/mlflow.source.name",
    "artifacts/model/MLmodel",
    "artifacts/model/model.pkl",
    "artifacts/model/requirements.txt",
)


def _run_id(i: int) -> str:
    return f"{i:08x}-abcd-4ef0-9abc-{i:012x}"


def _mlflow_repository(runs: int = 80, source_files: int = 398) -> list[str]:
    """An MLflow project with committed run directories."""
    files = ["MLproject", "README.md"]
    files += [f"src/module_{i}.py" for i in range(source_files)]
    for i in range(runs):
        files += [f"mlruns/0/{_run_id(i)}/{name}" for name in RUN_FILES]
    return files


# ═══════════════════════════════════════════════════════════════════════════
# Detection
# ═══════════════════════════════════════════════════════════════════════════


class TestDetectMLExperimentRepository:
    """Tests for experiment-store detection."""

    def test_mlflow_repository_detected(self):
        signals = detect_ml_experiment_repository(_mlflow_repository())

        assert signals.mlrun_count == 800
        assert signals.artifact_count == 240
        assert signals.has_mlflow_config is True
        assert signals.volume_exceeded is True
        assert signals.is_ml_repo is True

    def test_volume_without_tooling_is_not_ml_repo(self):
        files = [f"artifacts/report_{i}.csv" for i in range(150)]

        signals = detect_ml_experiment_repository(files)

        assert signals.volume_exceeded is True
        assert signals.has_tooling_config is False
        assert signals.is_ml_repo is False

    def test_tooling_without_volume_is_not_ml_repo(self):
        files = ["dvc.yaml", "artifacts/model.bin", "src/train.py"]

        signals = detect_ml_experiment_repository(files)

        assert signals.has_dvc_config is True
        assert signals.is_ml_repo is False

    def test_wandb_directory_is_a_tooling_signal(self):
        signals = detect_ml_experiment_repository(["wandb/settings", "src/a.py"])

        assert signals.has_wandb is True

    def test_empty_listing(self):
        signals = detect_ml_experiment_repository([])

        assert signals.artifact_count == 0
        assert signals.mlrun_count == 0
        assert signals.uuid_path_count == 0
        assert signals.is_ml_repo is False


# ═══════════════════════════════════════════════════════════════════════════
# Path predicates
# ═══════════════════════════════════════════════════════════════════════════


class TestPathPredicates:
    """Tests for artifact and important-artifact path checks."""

    @pytest.mark.parametrize(
        "path",
        [
            f"mlruns/0/{_run_id(1)}/meta.yaml",
            f"artifacts/{_run_id(2)}/plot.png",
            "wandb/run-20240101_120000-a1b2c3/files/output.log",
            "wandb/offline-run-20240101_120000-a1b2c3/logs/debug.log",
            "outputs/2024-01-05/12-00-00/.hydra/config.yaml",
        ],
    )
    def test_experiment_artifacts(self, path):
        assert is_experiment_artifact(path) is True

    @pytest.mark.parametrize(
        "path",
        ["src/model.py", "artifacts/README.md", "mlruns/.trash/keep", "outputs/summary.csv"],
    )
    def test_not_experiment_artifacts(self, path):
        assert is_experiment_artifact(path) is False

    def test_important_artifacts(self):
        assert is_important_artifact("mlruns/0/x/artifacts/MLproject")
        assert is_important_artifact("mlruns/0/x/artifacts/model/model.pkl")
        assert is_important_artifact("mlruns/0/x/artifacts/classification_report.txt")
        assert is_important_artifact("requirements.txt")
        assert is_important_artifact("service/requirements.txt")

    def test_unimportant_artifacts(self):
        assert not is_important_artifact("mlruns/0/x/artifacts/classification_report_1.txt")
        assert not is_important_artifact("mlruns/0/x/artifacts/classification_report_2.txt")
        assert not is_important_artifact("mlruns/0/x/artifacts/model/requirements.txt")
        assert not is_important_artifact("mlruns/0/x/metrics/loss")


# ═══════════════════════════════════════════════════════════════════════════
# Deduplication
# ═══════════════════════════════════════════════════════════════════════════


class TestDeduplicateArtifacts:
    """Tests for basename capping."""

    def test_caps_to_two_shallowest(self):
        files = [
            "a/b/c/requirements.txt",
            "requirements.txt",
            "a/b/requirements.txt",
            "x/requirements.txt",
            "src/main.py",
        ]

        result = deduplicate_artifacts(files)

        assert result == ["requirements.txt", "x/requirements.txt", "src/main.py"]

    def test_never_removes_last_instance(self):
        files = ["deep/a/b/MLmodel", "src/main.py"]

        assert deduplicate_artifacts(files) == files
        assert deduplicate_artifacts(files, max_instances=0) == files

    def test_caps_each_basename_independently(self):
        files = [f"run{i}/classification_report.json" for i in range(4)]
        files += [f"run{i}/MLmodel" for i in range(3)]

        result = deduplicate_artifacts(files)

        assert sum(1 for f in result if f.endswith("classification_report.json")) == 2
        assert sum(1 for f in result if f.endswith("MLmodel")) == 2

    def test_other_basenames_untouched(self):
        files = [f"dir{i}/config.yaml" for i in range(5)]

        assert deduplicate_artifacts(files) == files


# ═══════════════════════════════════════════════════════════════════════════
# filter_ml_artifacts
# ═══════════════════════════════════════════════════════════════════════════


class TestFilterMLArtifacts:
    """Tests for the full filtering pass."""

    def test_mlflow_repository_end_to_end(self):
        files = _mlflow_repository()
        assert len(files) == 1200

        result = ArtifactFilter().filter(files)

        assert result.was_filtered is True
        assert result.original_count == 1200
        # Source files, MLproject, README and one model.pkl per run survive
        assert result.filtered_count == 398 + 2 + 80
        assert result.filtered_count == len(result.files)
        assert "MLproject" in result.files
        assert "README.md" in result.files
        assert not any(f.endswith("meta.yaml") for f in result.files)
        assert result.filter_reason == (
            "Filtered 720 ML experiment artifacts (240 artifacts, 800 mlruns)"
        )

    def test_not_filtered_returns_input_list(self):
        files = ["README.md", "src/app.py", "artifacts/model.bin"]

        result = filter_ml_artifacts(files)

        assert result.was_filtered is False
        assert result.files is files
        assert result.filter_reason is None
        assert result.original_count == result.filtered_count == 3

    def test_dedup_keeps_root_requirements(self):
        files = _mlflow_repository(runs=10, source_files=10)
        files += ["requirements.txt", "svc/requirements.txt", "svc/api/requirements.txt"]
        files += [f"artifacts/{_run_id(i)}/x.bin" for i in range(120)]

        result = filter_ml_artifacts(files)

        kept = [f for f in result.files if f.endswith("requirements.txt")]
        assert kept == ["requirements.txt", "svc/requirements.txt"]

    @pytest.mark.parametrize(
        "files",
        [
            [],
            ["README.md"],
            _mlflow_repository(runs=6, source_files=3),
            _mlflow_repository(runs=30, source_files=0),
        ],
    )
    def test_filtered_count_never_exceeds_original(self, files):
        result = filter_ml_artifacts(files)

        assert result.filtered_count <= result.original_count
        assert result.removed_count >= 0

    def test_logs_reason(self, caplog):
        with caplog.at_level("INFO", logger="repolens.services.repository.artifacts"):
            filter_ml_artifacts(_mlflow_repository())

        assert "ML experiment repository detected" in caplog.text
        assert "1200 -> 480 files" in caplog.text
