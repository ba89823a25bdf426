"""
Repository structure resolution with truncated tree recovery.

The recursive Git Trees API returns at most ~100k entries and silently drops
the rest. Its `truncated` flag is not reliable, so every listing at or above
the large tree threshold is treated as possibly incomplete. The dropped part
often contains the code that matters, so the resolver spends a small budget of
extra calls recovering it:

1. Check for canonical root files the classifier expects but did not see
2. List the root tree to find top-level directories missing from the listing
3. Fetch the highest-priority missing directories one subtree at a time

Every extra call counts against the budget, whether it succeeds or not.
"""

import asyncio
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from repolens.config.tuning import (
    DEFAULT_DIRECTORY_SCORE,
    DIRECTORY_PRIORITIES,
    DirectoryPriority,
)
from repolens.services.github import (
    EmptyRepositoryError,
    GitHubAPIError,
    GitHubReadOperations,
    RepositoryRef,
    TreeListing,
)
from repolens.services.repository.patterns import find_missing_important_files, is_root_path

logger = logging.getLogger(__name__)

LARGE_TREE_THRESHOLD = 1000
MAX_RECOVERY_CALLS = 15
MAX_ROOT_FILE_CHECKS = 10
CHECK_DELAY_SECONDS = 0.3
DIRECTORY_DELAY_SECONDS = 1.0


@dataclass
class ResolvedStructure:
    """A file listing plus a record of how it was obtained."""

    files: list[str]  # Blob paths, unique, first-seen order
    original_count: int
    truncated: bool
    recovery_attempted: bool = False
    recovery_calls: int = 0
    recovered_files: list[str] = field(default_factory=list)
    recovered_directories: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)


class _RecoveryBudget:
    """Counts extra GitHub calls made during one recovery pass."""

    def __init__(self, limit: int):
        self.limit = limit
        self.used = 0

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)

    @property
    def exhausted(self) -> bool:
        return self.used >= self.limit

    def spend(self) -> None:
        self.used += 1


def directory_score(
    name: str,
    priorities: Sequence[DirectoryPriority] = DIRECTORY_PRIORITIES,
) -> int:
    """Score a top-level directory name. First matching rule wins."""
    for priority in priorities:
        if re.fullmatch(priority.pattern, name, re.IGNORECASE):
            return priority.score
    return DEFAULT_DIRECTORY_SCORE


def rank_directories(
    names: Sequence[str],
    priorities: Sequence[DirectoryPriority] = DIRECTORY_PRIORITIES,
) -> list[str]:
    """Order directory names by descending score, keeping input order on ties."""
    return sorted(names, key=lambda name: -directory_score(name, priorities))


class RepositoryStructureResolver:
    """
    Produces the most complete file listing affordable for a commit.

    The initial tree request is the only hard failure: its errors propagate as
    GitHubAPIError. Everything after it is best effort.
    """

    def __init__(
        self,
        github: GitHubReadOperations,
        large_tree_threshold: int = LARGE_TREE_THRESHOLD,
        max_recovery_calls: int = MAX_RECOVERY_CALLS,
        max_root_file_checks: int = MAX_ROOT_FILE_CHECKS,
        check_delay: float = CHECK_DELAY_SECONDS,
        directory_delay: float = DIRECTORY_DELAY_SECONDS,
        directory_priorities: Sequence[DirectoryPriority] = DIRECTORY_PRIORITIES,
    ):
        self.github = github
        self.large_tree_threshold = large_tree_threshold
        self.max_recovery_calls = max_recovery_calls
        self.max_root_file_checks = max_root_file_checks
        self.check_delay = check_delay
        self.directory_delay = directory_delay
        self.directory_priorities = tuple(directory_priorities)
        self._warned_unauthenticated = False

    def _warn_if_unauthenticated(self) -> None:
        if self.github.authenticated or self._warned_unauthenticated:
            return
        logger.warning(
            "No GitHub token configured: requests are unauthenticated and "
            "limited to 60 per hour, large repositories may not resolve"
        )
        self._warned_unauthenticated = True

    async def resolve_files(self, ref: RepositoryRef) -> list[str]:
        """Resolve and return only the file paths."""
        structure = await self.resolve(ref)
        return structure.files

    async def resolve(self, ref: RepositoryRef) -> ResolvedStructure:
        """
        Fetch the file listing for a commit, recovering truncated parts.

        Args:
            ref: Repository and commit to resolve

        Returns:
            ResolvedStructure with a non-empty, duplicate-free file list

        Raises:
            GitHubAPIError: If the initial tree request fails
            EmptyRepositoryError: If the tree contains no files
        """
        self._warn_if_unauthenticated()

        listing = await self.github.get_tree(ref, recursive=True)
        files = list(dict.fromkeys(listing.files))
        if not files:
            raise EmptyRepositoryError(ref.full_name, ref.commit)

        structure = ResolvedStructure(
            files=files,
            original_count=len(files),
            truncated=listing.truncated,
        )

        if len(files) < self.large_tree_threshold:
            if listing.truncated:
                logger.warning(
                    f"Tree for {ref} flagged truncated with only {len(files)} files, "
                    f"below recovery threshold of {self.large_tree_threshold}"
                )
                structure.notes.append(
                    "Truncated listing below recovery threshold, returned as-is"
                )
            return structure

        # The truncated flag is not trusted: large listings are always checked
        logger.info(
            f"Tree for {ref} has {len(files)} files (truncated={listing.truncated}), "
            f"attempting recovery"
        )
        structure.recovery_attempted = True

        try:
            await self._recover(ref, listing, structure)
        except Exception as e:
            logger.warning(f"Recovery failed for {ref}, using original listing: {e}")
            structure.files = files
            structure.recovered_files = []
            structure.recovered_directories = []
            structure.notes.append("Recovery failed, original listing used")

        return structure

    async def _recover(
        self,
        ref: RepositoryRef,
        listing: TreeListing,
        structure: ResolvedStructure,
    ) -> None:
        budget = _RecoveryBudget(self.max_recovery_calls)
        recovered: list[str] = []

        recovered.extend(await self._check_root_files(ref, structure.files, budget))

        directories = await self._find_missing_directories(ref, listing, budget)
        if directories:
            subtree_files, fetched = await self._fetch_directories(ref, directories, budget)
            recovered.extend(subtree_files)
            structure.recovered_directories = fetched

        if budget.exhausted:
            logger.info(f"Recovery budget of {budget.limit} calls exhausted for {ref}")
            structure.notes.append(f"Recovery budget of {budget.limit} calls exhausted")

        known = set(structure.files)
        new_files = [path for path in dict.fromkeys(recovered) if path not in known]

        structure.files = structure.files + new_files
        structure.recovered_files = new_files
        structure.recovery_calls = budget.used

        logger.info(
            f"Recovered {len(new_files)} files for {ref} "
            f"({len(structure.recovered_directories)} directories, {budget.used} calls)"
        )

    async def _check_root_files(
        self,
        ref: RepositoryRef,
        files: Sequence[str],
        budget: _RecoveryBudget,
    ) -> list[str]:
        """Check which expected root files exist despite being absent from the listing."""
        present = {path.lower() for path in files if is_root_path(path)}
        suggestions = [
            name
            for names in find_missing_important_files(files).values()
            for name in names
        ]
        candidates = [
            name for name in dict.fromkeys(suggestions) if name.lower() not in present
        ][: self.max_root_file_checks]

        found: list[str] = []
        for i, name in enumerate(candidates):
            if budget.exhausted:
                break
            if i > 0:
                await asyncio.sleep(self.check_delay)
            budget.spend()
            try:
                if await self.github.path_exists(ref, name):
                    found.append(name)
            except GitHubAPIError as e:
                logger.debug(f"Check for {name} in {ref} failed: {e}")

        if found:
            logger.info(f"Root file checks found {len(found)} unlisted files: {found}")
        return found

    async def _find_missing_directories(
        self,
        ref: RepositoryRef,
        listing: TreeListing,
        budget: _RecoveryBudget,
    ) -> list[str]:
        """List the root tree and rank top-level directories the listing never reached."""
        if budget.exhausted:
            return []

        if budget.used:
            await asyncio.sleep(self.check_delay)
        budget.spend()
        try:
            root = await self.github.get_tree(ref, recursive=False)
        except GitHubAPIError as e:
            logger.debug(f"Root tree listing for {ref} failed: {e}")
            return []

        observed = listing.observed_directories()
        missing = [name for name in root.directories if name not in observed]
        return rank_directories(missing, self.directory_priorities)

    async def _fetch_directories(
        self,
        ref: RepositoryRef,
        directories: Sequence[str],
        budget: _RecoveryBudget,
    ) -> tuple[list[str], list[str]]:
        """Fetch subtrees in priority order until the budget runs out."""
        files: list[str] = []
        fetched: list[str] = []

        for i, directory in enumerate(directories):
            if budget.exhausted:
                logger.info(
                    f"Skipping {len(directories) - i} lower-priority directories in {ref}"
                )
                break
            await asyncio.sleep(self.directory_delay)
            budget.spend()
            try:
                subtree = await self.github.get_subtree_files(ref, directory)
            except GitHubAPIError as e:
                logger.debug(f"Subtree fetch for {directory} in {ref} failed: {e}")
                continue
            files.extend(subtree)
            fetched.append(directory)

        return files, fetched
