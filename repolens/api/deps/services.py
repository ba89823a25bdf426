"""Service factories for request handlers.

Each request gets fresh service instances configured from settings. The
compressed notebook store is shared for the life of the process.
"""

from typing import Annotated

from fastapi import Depends, HTTPException

from repolens.config import settings
from repolens.core.exceptions import (
    NotFoundError,
    UnprocessableError,
    UpstreamError,
    UpstreamRateLimitError,
)
from repolens.services.github import EmptyRepositoryError, GitHubAPIError, GitHubReadOperations
from repolens.services.notebook import NotebookCompressor
from repolens.services.repository import RepositoryStructureResolver
from repolens.services.selection import InMemoryStore, SelectionOrchestrator

_notebook_store = InMemoryStore(ttl=settings.content_cache_ttl_seconds)


def get_github_reader() -> GitHubReadOperations:
    return GitHubReadOperations(settings.github_token)


def get_resolver(
    github: Annotated[GitHubReadOperations, Depends(get_github_reader)],
) -> RepositoryStructureResolver:
    return RepositoryStructureResolver(
        github,
        large_tree_threshold=settings.large_tree_threshold,
        max_recovery_calls=settings.max_recovery_calls,
        max_root_file_checks=settings.max_root_file_checks,
        check_delay=settings.check_delay_seconds,
        directory_delay=settings.directory_delay_seconds,
    )


def get_compressor() -> NotebookCompressor:
    return NotebookCompressor(
        token_budget=settings.notebook_token_budget,
        output_token_limit=settings.notebook_output_token_limit,
    )


def get_orchestrator(
    github: Annotated[GitHubReadOperations, Depends(get_github_reader)],
    resolver: Annotated[RepositoryStructureResolver, Depends(get_resolver)],
    compressor: Annotated[NotebookCompressor, Depends(get_compressor)],
) -> SelectionOrchestrator:
    return SelectionOrchestrator(
        github,
        resolver=resolver,
        compressor=compressor,
        store=_notebook_store,
        max_content_chars=settings.max_content_chars,
    )


Resolver = Annotated[RepositoryStructureResolver, Depends(get_resolver)]
Compressor = Annotated[NotebookCompressor, Depends(get_compressor)]
Orchestrator = Annotated[SelectionOrchestrator, Depends(get_orchestrator)]


def github_http_error(e: GitHubAPIError) -> HTTPException:
    """Map a GitHub failure to the HTTP error returned to our caller."""
    if isinstance(e, EmptyRepositoryError):
        return UnprocessableError(e.message)
    if e.is_rate_limited:
        return UpstreamRateLimitError(e.rate_limit_reset or None)
    if e.status_code == 404:
        return NotFoundError("Repository or commit")
    return UpstreamError(e.message)
