"""Data types for GitHub API responses."""

from dataclasses import dataclass, field
from typing import Literal

from repolens.services.github.constants import BLOB, TREE

EntryType = Literal["blob", "tree"]


@dataclass(frozen=True)
class RepositoryRef:
    """A repository pinned to a commit (or any ref GitHub resolves)."""

    owner: str
    repo: str
    commit: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return f"{self.full_name}@{self.commit}"


@dataclass(frozen=True)
class RepositoryFile:
    """Single entry of a repository tree. Paths are POSIX, relative to the root."""

    path: str
    type: EntryType

    @property
    def is_blob(self) -> bool:
        return self.type == BLOB

    @property
    def parent_directories(self) -> list[str]:
        """Every ancestor directory of this path, shallowest first."""
        parts = self.path.split("/")
        return ["/".join(parts[:i]) for i in range(1, len(parts))]


@dataclass
class TreeListing:
    """Result of a Git Trees API call."""

    sha: str
    entries: list[RepositoryFile]
    truncated: bool  # True if GitHub cut the recursive listing short

    @property
    def files(self) -> list[str]:
        """Blob paths, in API order."""
        return [entry.path for entry in self.entries if entry.type == BLOB]

    @property
    def directories(self) -> list[str]:
        """Tree paths, in API order."""
        return [entry.path for entry in self.entries if entry.type == TREE]

    def observed_directories(self) -> set[str]:
        """
        Every directory the listing proves exists.

        Includes explicit tree entries plus the parents of every blob, since a
        truncated listing can contain files whose directory entries were cut.
        """
        observed = set(self.directories)
        for entry in self.entries:
            if entry.is_blob:
                observed.update(entry.parent_directories)
        return observed


@dataclass
class FileContent:
    """Decoded text content of a single file."""

    path: str
    content: str
    size: int  # Size in bytes as reported by GitHub
    truncated: bool = False  # True if content was cut at the fetch size limit
    errors: list[str] = field(default_factory=list)
