"""
GitHub API read operations.

Provides the read-only calls the content selection pipeline depends on:
- Recursive and non-recursive tree listings for a commit
- Recursive listings scoped to a single subtree
- Existence checks and decoded file contents via the contents endpoint

Every method raises GitHubAPIError on failure, including network-level
failures, so callers only need to handle one exception type.
"""

import base64
import binascii
import logging
from typing import Any

import httpx

from repolens.services.github.cache import cached_github_call, tree_cache
from repolens.services.github.constants import BLOB, CONTENT_TRUNCATION_SENTINEL, TREE
from repolens.services.github.exceptions import GitHubAPIError
from repolens.services.github.helpers import build_auth_headers, handle_error_response
from repolens.services.github.http_client import get_github_client
from repolens.services.github.types import (
    FileContent,
    RepositoryFile,
    RepositoryRef,
    TreeListing,
)

logger = logging.getLogger(__name__)


class GitHubReadOperations:
    """
    Read-only operations for GitHub API.

    Uses a shared HTTP client singleton for connection pooling. Requests are
    issued one at a time by callers; nothing here fans out in parallel.
    """

    def __init__(self, token: str | None = None):
        self.token = token or None
        self._headers = build_auth_headers(token)

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    async def _get(
        self,
        url: str,
        resource: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Issue a GET, translating transport failures into GitHubAPIError."""
        client = get_github_client()
        try:
            return await client.get(url, headers=self._headers, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"GitHub unreachable while fetching {resource}: {e}") from e

    def _json(self, response: httpx.Response, resource: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(
                f"Invalid JSON from GitHub for {resource}", response.status_code
            ) from e

    def _parse_tree(self, data: dict[str, Any], prefix: str = "") -> TreeListing:
        entries: list[RepositoryFile] = []
        for item in data.get("tree") or []:
            path = item.get("path")
            item_type = item.get("type")
            if not path or not isinstance(path, str) or item_type not in (BLOB, TREE):
                continue  # submodules ("commit") and malformed entries
            entries.append(RepositoryFile(path=f"{prefix}{path}", type=item_type))

        return TreeListing(
            sha=data.get("sha", ""),
            entries=entries,
            truncated=bool(data.get("truncated", False)),
        )

    @cached_github_call(tree_cache)
    async def get_tree(self, ref: RepositoryRef, recursive: bool = True) -> TreeListing:
        """
        Fetch the file tree for a commit.

        Uses the Git Trees API. With recursive=True the whole tree comes back in
        a single call, but GitHub sets `truncated` once it exceeds its size
        limit and silently drops the rest.

        Args:
            ref: Repository and commit to list
            recursive: Walk subdirectories (True) or list the root only (False)

        Returns:
            TreeListing with every blob and tree entry and the truncation flag
        """
        params = {"recursive": "1"} if recursive else None
        response = await self._get(
            f"/repos/{ref.owner}/{ref.repo}/git/trees/{ref.commit}",
            str(ref),
            params=params,
        )
        handle_error_response(response, str(ref))
        return self._parse_tree(self._json(response, str(ref)))

    @cached_github_call(tree_cache)
    async def get_subtree_files(self, ref: RepositoryRef, directory: str) -> list[str]:
        """
        Fetch every blob path below one directory, recursively.

        Args:
            ref: Repository and commit
            directory: Directory path relative to the repository root

        Returns:
            Blob paths prefixed with the directory, relative to the repository root
        """
        directory = directory.strip("/")
        resource = f"{ref}:{directory}"
        response = await self._get(
            f"/repos/{ref.owner}/{ref.repo}/git/trees/{ref.commit}:{directory}",
            resource,
            params={"recursive": "1"},
        )
        handle_error_response(response, resource)
        listing = self._parse_tree(self._json(response, resource), prefix=f"{directory}/")
        if listing.truncated:
            logger.info(f"Subtree listing for {resource} was truncated as well")
        return listing.files

    async def path_exists(self, ref: RepositoryRef, path: str) -> bool:
        """
        Check whether a path exists at a commit.

        Returns:
            True for 2xx, False for 404. Other failures raise GitHubAPIError.
        """
        resource = f"{ref}:{path}"
        response = await self._get(
            f"/repos/{ref.owner}/{ref.repo}/contents/{path}",
            resource,
            params={"ref": ref.commit},
        )
        if response.status_code == 404:
            return False
        handle_error_response(response, resource)
        return True

    async def get_file_content(
        self,
        ref: RepositoryRef,
        path: str,
        max_chars: int = 100_000,
    ) -> FileContent | None:
        """
        Fetch the decoded text of a file.

        Content longer than max_chars is cut and suffixed with
        CONTENT_TRUNCATION_SENTINEL. Files GitHub is unwilling to inline
        (over 1 MB) come back as the sentinel alone.

        Args:
            ref: Repository and commit
            path: File path within the repository
            max_chars: Maximum number of characters to keep

        Returns:
            FileContent, or None if the path is missing, not a file, or binary
        """
        resource = f"{ref}:{path}"
        response = await self._get(
            f"/repos/{ref.owner}/{ref.repo}/contents/{path}",
            resource,
            params={"ref": ref.commit},
        )

        if response.status_code == 404:
            return None

        handle_error_response(response, resource)

        data = self._json(response, resource)
        if not isinstance(data, dict) or data.get("type") != "file":
            return None

        size = data.get("size", 0)
        content_b64 = data.get("content")

        if not content_b64:
            if size > 0:
                logger.info(f"{resource} too large to inline ({size} bytes)")
                return FileContent(
                    path=path,
                    content=CONTENT_TRUNCATION_SENTINEL,
                    size=size,
                    truncated=True,
                )
            return FileContent(path=path, content="", size=0)

        try:
            content = base64.b64decode(content_b64).decode("utf-8")
        except (binascii.Error, ValueError, UnicodeDecodeError):
            logger.debug(f"Skipping binary or undecodable file {resource}")
            return None

        truncated = len(content) > max_chars
        if truncated:
            content = f"{content[:max_chars]}\n{CONTENT_TRUNCATION_SENTINEL}"

        return FileContent(path=path, content=content, size=size, truncated=truncated)
