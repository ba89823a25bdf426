"""Unit tests for repository structure resolution.

Tests RepositoryStructureResolver with a mocked GitHubReadOperations to verify:
- Listings below the large tree threshold are returned without extra calls
- Large listings recover missing root files and directories, whether or
  not GitHub flagged them truncated
- The recovery budget caps every additional call
- Recovery calls are throttled
- Per-item failures are skipped, initial failures propagate
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from repolens.config.tuning import DirectoryPriority
from repolens.services.github import (
    EmptyRepositoryError,
    GitHubAPIError,
    GitHubReadOperations,
    RepositoryFile,
    RepositoryRef,
    TreeListing,
)
from repolens.services.repository.resolver import (
    RepositoryStructureResolver,
    directory_score,
    rank_directories,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

REF = RepositoryRef(owner="octo", repo="project", commit="abc123")

# Satisfies every high-priority category, so no root file checks are issued
ROOT_FILES = ["README.md", "requirements.txt", "Makefile", "prefect.yaml"]


def _listing(
    files: list[str],
    truncated: bool = False,
    directories: list[str] | None = None,
) -> TreeListing:
    entries = [RepositoryFile(path=d, type="tree") for d in directories or []]
    entries += [RepositoryFile(path=f, type="blob") for f in files]
    return TreeListing(sha="abc123", entries=entries, truncated=truncated)


def _mock_github(
    recursive: TreeListing | Exception,
    root: TreeListing | Exception | None = None,
    subtrees: dict[str, list[str] | Exception] | None = None,
    existing: set[str] | None = None,
    authenticated: bool = True,
) -> MagicMock:
    """Mock read operations serving fixed tree, subtree and existence check results."""
    github = MagicMock(spec=GitHubReadOperations)
    github.authenticated = authenticated

    async def get_tree(ref, recursive=True):
        result = recursive_result if recursive else root
        if isinstance(result, Exception):
            raise result
        return result

    async def get_subtree_files(ref, directory):
        result = (subtrees or {}).get(directory, GitHubAPIError("not found", 404))
        if isinstance(result, Exception):
            raise result
        return result

    async def path_exists(ref, path):
        return path in (existing or set())

    recursive_result = recursive
    github.get_tree = AsyncMock(side_effect=get_tree)
    github.get_subtree_files = AsyncMock(side_effect=get_subtree_files)
    github.path_exists = AsyncMock(side_effect=path_exists)
    return github


def _resolver(github: MagicMock, **overrides) -> RepositoryStructureResolver:
    return RepositoryStructureResolver(github, check_delay=0, directory_delay=0, **overrides)


def _extra_calls(github: MagicMock) -> int:
    """Calls beyond the initial recursive tree request."""
    return (
        github.path_exists.await_count
        + github.get_subtree_files.await_count
        + github.get_tree.await_count
        - 1
    )


# ═══════════════════════════════════════════════════════════════════════════
# Directory ranking
# ═══════════════════════════════════════════════════════════════════════════


class TestDirectoryRanking:
    """Tests for the directory priority table."""

    def test_scores(self):
        assert directory_score("src") == 100
        assert directory_score("Infra") == 95
        assert directory_score("tests") == 90
        assert directory_score("pipelines") == 85
        assert directory_score("frontend") == 80
        assert directory_score("data") == 75
        assert directory_score("docs") == 70
        assert directory_score("config") == 65
        assert directory_score("scripts") == 60
        assert directory_score("misc") == 50

    def test_full_match_only(self):
        assert directory_score("srcs") == 50
        assert directory_score("my_tests") == 50

    def test_rank_is_stable_on_ties(self):
        ranked = rank_directories(["misc", "docs", "notes", "src", "tests", "lib"])

        assert ranked == ["src", "lib", "tests", "docs", "misc", "notes"]

    def test_custom_priorities(self):
        priorities = (DirectoryPriority(r"notebooks", 120),)

        assert rank_directories(["src", "notebooks"], priorities) == ["notebooks", "src"]


# ═══════════════════════════════════════════════════════════════════════════
# No recovery
# ═══════════════════════════════════════════════════════════════════════════


class TestNoRecovery:
    """Listings that are returned as-is."""

    @pytest.mark.anyio
    async def test_small_truncated_listing_returned_as_is(self):
        files = [f"pkg/file_{i}.py" for i in range(500)]
        github = _mock_github(_listing(files, truncated=True))

        structure = await _resolver(github).resolve(REF)

        assert structure.files == files
        assert structure.truncated is True
        assert structure.recovery_attempted is False
        assert structure.recovery_calls == 0
        assert _extra_calls(github) == 0

    @pytest.mark.anyio
    async def test_small_truncated_listing_logs_warning(self, caplog):
        github = _mock_github(_listing(["a.py"], truncated=True))

        with caplog.at_level("WARNING"):
            await _resolver(github).resolve(REF)

        assert "below recovery threshold" in caplog.text

    @pytest.mark.anyio
    async def test_small_untruncated_listing_has_no_notes(self):
        github = _mock_github(_listing(["a.py", "b.py"]))

        structure = await _resolver(github).resolve(REF)

        assert structure.notes == []
        assert structure.recovery_attempted is False

    @pytest.mark.anyio
    async def test_duplicate_paths_removed(self):
        github = _mock_github(_listing(["a.py", "b.py", "a.py"]))

        assert await _resolver(github).resolve_files(REF) == ["a.py", "b.py"]

    @pytest.mark.anyio
    async def test_empty_tree_raises(self):
        github = _mock_github(_listing([], directories=["empty"]))

        with pytest.raises(EmptyRepositoryError):
            await _resolver(github).resolve(REF)

    @pytest.mark.anyio
    async def test_initial_failure_propagates(self):
        github = _mock_github(GitHubAPIError("GitHub unreachable"))

        with pytest.raises(GitHubAPIError, match="unreachable"):
            await _resolver(github).resolve(REF)


# ═══════════════════════════════════════════════════════════════════════════
# Recovery
# ═══════════════════════════════════════════════════════════════════════════


class TestRecovery:
    """Listings at or above the threshold."""

    @pytest.mark.anyio
    async def test_large_listing_recovered_without_truncated_flag(self):
        files = ROOT_FILES + [f"misc/file_{i}.txt" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=False),
            root=_listing([], directories=["misc", "src"]),
            subtrees={"src": ["src/main.py"]},
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.truncated is False
        assert structure.recovery_attempted is True
        assert structure.recovered_directories == ["src"]
        assert "src/main.py" in structure.files
        assert structure.file_count == 1505

    @pytest.mark.anyio
    async def test_large_complete_listing_only_spends_root_listing(self):
        files = ROOT_FILES + [f"pkg/file_{i}.py" for i in range(2000)]
        github = _mock_github(
            _listing(files, truncated=False),
            root=_listing([], directories=["pkg"]),
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.files == files
        assert structure.recovered_files == []
        assert structure.recovery_calls == 1
        github.get_subtree_files.assert_not_awaited()

    @pytest.mark.anyio
    async def test_recovers_missing_src_directory(self):
        files = [f"data/file_{i}.csv" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["data", "src"]),
            subtrees={"src": ["src/main.py", "src/utils.py"]},
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.recovery_attempted is True
        assert "src/main.py" in structure.files
        assert structure.files[:1500] == files
        assert structure.recovered_directories == ["src"]
        assert structure.recovered_files == ["src/main.py", "src/utils.py"]
        # 10 root file checks, 1 root listing, 1 subtree
        assert structure.recovery_calls == 12
        assert _extra_calls(github) == 12

    @pytest.mark.anyio
    async def test_observed_directories_not_refetched(self):
        files = ROOT_FILES + [f"src/deep/file_{i}.py" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["src", "tests"]),
            subtrees={"tests": ["tests/test_a.py"]},
        )

        structure = await _resolver(github).resolve(REF)

        github.get_subtree_files.assert_awaited_once_with(REF, "tests")
        assert structure.recovered_files == ["tests/test_a.py"]

    @pytest.mark.anyio
    async def test_fetches_directories_in_priority_order(self):
        files = ROOT_FILES + [f"misc/file_{i}.txt" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["misc", "notes", "docs", "tests", "src", "infra"]),
            subtrees={
                "notes": ["notes/a.md"],
                "docs": ["docs/index.md"],
                "tests": ["tests/test_app.py"],
                "src": ["src/app.py"],
                "infra": ["infra/main.tf"],
            },
        )

        structure = await _resolver(github).resolve(REF)

        fetched = [c.args[1] for c in github.get_subtree_files.await_args_list]
        assert fetched == ["src", "infra", "tests", "docs", "notes"]
        assert structure.recovered_files == [
            "src/app.py",
            "infra/main.tf",
            "tests/test_app.py",
            "docs/index.md",
            "notes/a.md",
        ]
        github.path_exists.assert_not_awaited()

    @pytest.mark.anyio
    async def test_budget_caps_all_additional_calls(self):
        files = [f"misc/file_{i}.txt" for i in range(1500)]
        missing = [f"dir{i:02d}" for i in range(20)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["misc", *missing]),
            subtrees={d: [f"{d}/x.py"] for d in missing},
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.recovery_calls == 15
        assert _extra_calls(github) == 15
        assert github.path_exists.await_count == 10
        assert github.get_subtree_files.await_count == 4
        assert any("budget" in note for note in structure.notes)

    @pytest.mark.anyio
    async def test_smaller_budget_stops_root_file_checks(self):
        files = [f"misc/file_{i}.txt" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["misc", "src"]),
        )

        structure = await _resolver(github, max_recovery_calls=3).resolve(REF)

        assert structure.recovery_calls == 3
        assert github.path_exists.await_count == 3
        assert github.get_tree.await_count == 1

    @pytest.mark.anyio
    async def test_root_file_checks_find_unlisted_files(self):
        files = [f"src/file_{i}.py" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["src"]),
            existing={"README.md", "Dockerfile"},
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.recovered_files == ["README.md", "Dockerfile"]
        assert structure.files[-2:] == ["README.md", "Dockerfile"]

    @pytest.mark.anyio
    async def test_root_file_checks_skip_other_case_matches(self):
        files = ["readme.md", "REQUIREMENTS.TXT", "makefile", "Prefect.yaml"]
        files += [f"src/file_{i}.py" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["src"]),
        )

        await _resolver(github).resolve(REF)

        github.path_exists.assert_not_awaited()

    @pytest.mark.anyio
    async def test_subtree_failures_are_skipped(self):
        files = ROOT_FILES + [f"misc/file_{i}.txt" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["misc", "src", "lib", "tests"]),
            subtrees={
                "src": GitHubAPIError("not found", 404),
                "lib": GitHubAPIError("GitHub unreachable"),
                "tests": ["tests/test_a.py"],
            },
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.recovered_directories == ["tests"]
        assert structure.recovered_files == ["tests/test_a.py"]
        assert structure.recovery_calls == 4

    @pytest.mark.anyio
    async def test_root_file_check_failures_are_skipped(self):
        files = [f"src/file_{i}.py" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["src"]),
        )
        github.path_exists.side_effect = GitHubAPIError("forbidden", 403)

        structure = await _resolver(github).resolve(REF)

        assert structure.file_count == 1500
        assert structure.recovery_calls == 11

    @pytest.mark.anyio
    async def test_root_listing_failure_keeps_original(self):
        files = ROOT_FILES + [f"src/file_{i}.py" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=GitHubAPIError("server error", 500),
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.files == files
        assert structure.recovery_calls == 1
        github.get_subtree_files.assert_not_awaited()

    @pytest.mark.anyio
    async def test_recovered_paths_are_deduplicated(self):
        files = ROOT_FILES + [f"misc/file_{i}.txt" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["misc", "src"]),
            subtrees={"src": ["src/a.py", "src/a.py", "misc/file_0.txt"]},
        )

        structure = await _resolver(github).resolve(REF)

        assert structure.recovered_files == ["src/a.py"]
        assert len(structure.files) == len(set(structure.files))


# ═══════════════════════════════════════════════════════════════════════════
# Throttling
# ═══════════════════════════════════════════════════════════════════════════


def _record_calls(github: MagicMock, events: list[str]) -> None:
    """Append an event name to `events` before each recovery call."""
    for name, label in (("path_exists", "check"), ("get_subtree_files", "subtree")):
        mock = getattr(github, name)
        original = mock.side_effect

        async def recorded(*args, _original=original, _label=label):
            events.append(_label)
            return await _original(*args)

        mock.side_effect = recorded

    get_tree = github.get_tree.side_effect

    async def recorded_tree(ref, recursive=True):
        if not recursive:
            events.append("root")
        return await get_tree(ref, recursive=recursive)

    github.get_tree.side_effect = recorded_tree


class TestThrottling:
    """Delays between recovery calls."""

    @pytest.mark.anyio
    async def test_delay_precedes_every_call_after_the_first(self):
        files = [f"misc/file_{i}.txt" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["misc", "src", "tests"]),
            subtrees={"src": ["src/a.py"], "tests": ["tests/test_a.py"]},
        )
        events: list[str] = []
        _record_calls(github, events)

        async def sleep(seconds):
            events.append(f"sleep {seconds}")

        resolver = RepositoryStructureResolver(github, check_delay=0.3, directory_delay=1.0)
        with patch("repolens.services.repository.resolver.asyncio.sleep", side_effect=sleep):
            await resolver.resolve(REF)

        calls = [i for i, event in enumerate(events) if not event.startswith("sleep")]
        assert [events[i] for i in calls] == ["check"] * 10 + ["root", "subtree", "subtree"]
        for i in calls[1:]:
            assert events[i - 1].startswith("sleep"), events[: i + 1]
        assert events[calls[10] - 1] == "sleep 0.3"
        assert events[calls[11] - 1] == "sleep 1.0"

    @pytest.mark.anyio
    async def test_no_delay_before_root_listing_without_root_file_checks(self):
        files = ROOT_FILES + [f"misc/file_{i}.txt" for i in range(1500)]
        github = _mock_github(
            _listing(files, truncated=True),
            root=_listing([], directories=["misc"]),
        )
        events: list[str] = []
        _record_calls(github, events)

        async def sleep(seconds):
            events.append(f"sleep {seconds}")

        resolver = RepositoryStructureResolver(github, check_delay=0.3, directory_delay=1.0)
        with patch("repolens.services.repository.resolver.asyncio.sleep", side_effect=sleep):
            await resolver.resolve(REF)

        assert events == ["root"]


# ═══════════════════════════════════════════════════════════════════════════
# Authentication
# ═══════════════════════════════════════════════════════════════════════════


class TestUnauthenticated:
    """Missing token handling."""

    @pytest.mark.anyio
    async def test_warns_once_per_resolver(self, caplog):
        github = _mock_github(_listing(["a.py"]), authenticated=False)
        resolver = _resolver(github)

        with caplog.at_level("WARNING", logger="repolens.services.repository.resolver"):
            await resolver.resolve(REF)
            await resolver.resolve(REF)

        warnings = [r for r in caplog.records if "No GitHub token" in r.getMessage()]
        assert len(warnings) == 1

    @pytest.mark.anyio
    async def test_authenticated_does_not_warn(self, caplog):
        github = _mock_github(_listing(["a.py"]))

        with caplog.at_level("WARNING", logger="repolens.services.repository.resolver"):
            await _resolver(github).resolve(REF)

        assert "No GitHub token" not in caplog.text
