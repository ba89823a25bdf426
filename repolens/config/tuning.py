"""Tunable heuristic tables.

These are hand-tuned defaults, not derived constants. The resolver and the
notebook compressor take them as constructor arguments so deployments can
recalibrate without code changes.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DirectoryPriority:
    """Score assigned to top-level directories matching a pattern."""

    pattern: str  # Full-match regex, case-insensitive
    score: int


# Missing top-level directories are recovered in descending score order
DIRECTORY_PRIORITIES: tuple[DirectoryPriority, ...] = (
    DirectoryPriority(r"src|source|lib|app", 100),
    DirectoryPriority(r"infra|infrastructure|terraform|k8s", 95),
    DirectoryPriority(r"tests?|__tests__|spec", 90),
    DirectoryPriority(r"flows|dags|pipelines|workflows", 85),
    DirectoryPriority(r"webapp|web|frontend|backend|client|server", 80),
    DirectoryPriority(r"data|models|reports|analysis", 75),
    DirectoryPriority(r"docs?|documentation", 70),
    DirectoryPriority(r"config|configs|settings", 65),
    DirectoryPriority(r"scripts|bin|tools|utils", 60),
)

DEFAULT_DIRECTORY_SCORE = 50


# Course id fragment -> keywords that raise a notebook cell's priority
COURSE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "ml": ("train", "model", "predict", "accuracy", "sklearn", "tensorflow", "pytorch"),
    "machine": ("train", "model", "predict", "accuracy", "sklearn", "tensorflow", "pytorch"),
    "data": ("pandas", "numpy", "matplotlib", "plot", "dataframe", "analysis"),
    "mlops": ("pipeline", "deployment", "model", "mlflow", "docker", "kubernetes"),
}

# Maximum number of rubric words added to the keyword set
MAX_RUBRIC_KEYWORDS = 10
