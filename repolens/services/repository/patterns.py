"""
File pattern classification.

A declarative table of regex rules sorting repository paths into purpose
categories, plus pure functions that apply it. Gaps in high-priority
categories turn into canonical filenames that the structure resolver checks
for directly.

Configuration and documentation conventions are root-level, so most
categories only look at paths without a directory separator. CI/CD and
infrastructure files live in nested, well-known directories and are matched
against full paths.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum


class FileCategory(str, Enum):
    """Purpose classes for repository files."""

    DOCUMENTATION = "documentation"
    ENVIRONMENT = "environment"
    BUILD = "build"
    WORKFLOW = "workflow"
    CICD = "cicd"
    INFRASTRUCTURE = "infrastructure"


@dataclass(frozen=True)
class FilePatternMatcher:
    """Rule set for one category. Static configuration."""

    category: FileCategory
    patterns: tuple[re.Pattern[str], ...]
    priority: int  # 0-100, higher wins when several categories apply
    description: str

    @property
    def matches_nested_paths(self) -> bool:
        return self.category in NESTED_CATEGORIES

    def matches(self, path: str) -> bool:
        return any(pattern.search(path) for pattern in self.patterns)


def _rules(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


NESTED_CATEGORIES = frozenset({FileCategory.CICD, FileCategory.INFRASTRUCTURE})

# Categories at or above this priority are expected in every repository
HIGH_PRIORITY_THRESHOLD = 85


DOCUMENTATION_MATCHER = FilePatternMatcher(
    category=FileCategory.DOCUMENTATION,
    patterns=_rules(
        r"^readme\.(md|rst|txt)$",
        r"^(install|installation)\.(md|rst|txt)$",
        r"^(setup|getting[_-]?started|quickstart)\.(md|rst|txt)$",
        r"^(how[_-]?to[_-]?run|run|running|usage)\.(md|rst|txt)$",
        r"^(guide|tutorial|walkthrough)\.(md|rst|txt)$",
        r"^(contributing|changelog|license)\.(md|rst|txt)$",
    ),
    priority=95,
    description="Documentation and setup files",
)

ENVIRONMENT_MATCHER = FilePatternMatcher(
    category=FileCategory.ENVIRONMENT,
    patterns=_rules(
        r"^environment\.(yml|yaml)$",
        r"^conda\.(yml|yaml)$",
        r"^\.env(\.example|\.template)?$",
        r"^requirements.*\.txt$",
        r"^pyproject\.toml$",
        r"^setup\.(py|cfg)$",
        r"^pipfile(\.lock)?$",
        r"^poetry\.lock$",
    ),
    priority=90,
    description="Environment and dependency files",
)

BUILD_MATCHER = FilePatternMatcher(
    category=FileCategory.BUILD,
    patterns=_rules(
        r"^(makefile|gnumakefile)$",
        r"^taskfile\.(yml|yaml)$",
        r"^justfile$",
        r"^build\.(sh|py|js|gradle)$",
        r"^dockerfile(\..*)?$",
        r"^docker-compose.*\.(yml|yaml)$",
    ),
    priority=85,
    description="Build and containerization files",
)

WORKFLOW_MATCHER = FilePatternMatcher(
    category=FileCategory.WORKFLOW,
    patterns=_rules(
        r"^prefect\.(yaml|yml)$",
        r"^airflow\.cfg$",
        r"^pipeline\.(yaml|yml)$",
        r"^mlflow\.(yml|yaml)$",
        r"^mlproject$",
        r"^dvc\.(yaml|lock)$",
    ),
    priority=88,
    description="Workflow orchestration files",
)

CICD_MATCHER = FilePatternMatcher(
    category=FileCategory.CICD,
    patterns=_rules(
        r"^\.github/workflows/.*\.(yml|yaml)$",
        r"^\.gitlab-ci\.yml$",
        r"^\.travis\.yml$",
        r"^\.circleci/config\.yml$",
        r"^azure-pipelines\.yml$",
        r"^buildkite\.yml$",
        r"^jenkins\.yml$",
        r"^jenkinsfile$",
        r"^\.pre-commit-config\.yaml$",
    ),
    priority=80,
    description="CI/CD and automation files",
)

INFRASTRUCTURE_MATCHER = FilePatternMatcher(
    category=FileCategory.INFRASTRUCTURE,
    patterns=_rules(
        r"\.tf$",
        r"\.tfvars$",
        r"(^|/)pulumi(\.[^/]+)?\.(yaml|yml)$",
        r"(^|/)playbook\.yml$",
        r"(^|/)inventory$",
        r"(^|/)kustomization\.(yaml|yml)$",
        r"(^|/)terraform\.tfstate$",
    ),
    priority=82,
    description="Infrastructure as Code files",
)

ALL_PATTERN_MATCHERS: tuple[FilePatternMatcher, ...] = (
    DOCUMENTATION_MATCHER,
    ENVIRONMENT_MATCHER,
    BUILD_MATCHER,
    WORKFLOW_MATCHER,
    CICD_MATCHER,
    INFRASTRUCTURE_MATCHER,
)

# Canonical filenames proposed when a high-priority category has no match
SUGGESTED_FILES: dict[FileCategory, tuple[str, ...]] = {
    FileCategory.DOCUMENTATION: ("README.md", "how_to_run.md", "INSTALL.md", "setup.md"),
    FileCategory.ENVIRONMENT: ("environment.yml", "requirements.txt", "pyproject.toml", "setup.py"),
    FileCategory.BUILD: ("Makefile", "Dockerfile", "docker-compose.yml"),
    FileCategory.WORKFLOW: ("prefect.yaml", "dvc.yaml", "MLproject"),
    FileCategory.INFRASTRUCTURE: ("main.tf", "variables.tf"),
}


@dataclass
class ClassificationResult:
    """Category map plus the canonical files expected but absent."""

    categories: dict[FileCategory, list[str]] = field(default_factory=dict)
    missing: dict[FileCategory, list[str]] = field(default_factory=dict)

    @property
    def missing_files(self) -> list[str]:
        """All suggested filenames, deduplicated, in matcher order."""
        return list(dict.fromkeys(name for names in self.missing.values() for name in names))

    def to_dict(self) -> dict[str, dict[str, list[str]]]:
        return {
            "categories": {c.value: paths for c, paths in self.categories.items()},
            "missing": {c.value: names for c, names in self.missing.items()},
        }


def is_root_path(path: str) -> bool:
    return "/" not in path


def find_files_for(
    paths: Sequence[str],
    matchers: Iterable[FilePatternMatcher],
) -> list[str]:
    """
    Find paths matching any of the given matchers.

    Args:
        paths: Repository-relative POSIX paths
        matchers: Rule sets to apply

    Returns:
        Matching paths, deduplicated, in input order
    """
    matchers = tuple(matchers)
    found: list[str] = []
    seen: set[str] = set()

    for path in paths:
        if path in seen:
            continue
        for matcher in matchers:
            if not matcher.matches_nested_paths and not is_root_path(path):
                continue
            if matcher.matches(path):
                found.append(path)
                seen.add(path)
                break

    return found


def classify_paths(
    paths: Sequence[str],
    matchers: Iterable[FilePatternMatcher] = ALL_PATTERN_MATCHERS,
) -> dict[FileCategory, list[str]]:
    """
    Map each category to the paths it matches.

    A path can appear under several categories. Categories with no match are
    omitted.
    """
    results: dict[FileCategory, list[str]] = {}
    for matcher in matchers:
        matched = find_files_for(paths, [matcher])
        if matched:
            results.setdefault(matcher.category, []).extend(matched)
    return results


def find_missing_important_files(
    paths: Sequence[str],
    matchers: Iterable[FilePatternMatcher] = ALL_PATTERN_MATCHERS,
) -> dict[FileCategory, list[str]]:
    """
    Suggest canonical filenames for high-priority categories with no match.

    Returns:
        Category -> suggested filenames, only for categories with priority >= 85
        and zero matching paths
    """
    missing: dict[FileCategory, list[str]] = {}
    for matcher in matchers:
        if matcher.priority < HIGH_PRIORITY_THRESHOLD:
            continue
        if find_files_for(paths, [matcher]):
            continue
        suggestions = SUGGESTED_FILES.get(matcher.category, ())
        if suggestions:
            missing[matcher.category] = list(suggestions)
    return missing


def classify(paths: Sequence[str]) -> ClassificationResult:
    """Classify paths and report high-priority gaps in one pass."""
    return ClassificationResult(
        categories=classify_paths(paths),
        missing=find_missing_important_files(paths),
    )
