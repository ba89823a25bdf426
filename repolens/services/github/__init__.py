"""
GitHub service package.

Usage: `from repolens.services.github import GitHubReadOperations, RepositoryRef`

Module structure:
- read_operations.py: Tree listings, existence checks and file contents
- helpers.py: Auth headers, rate limit handling and error mapping
- http_client.py: Shared pooled httpx.AsyncClient
- cache.py: TTL cache for tree listings
- types.py: Data types for refs, tree entries and contents
- exceptions.py: Custom exceptions
- constants.py: API constants
"""

from repolens.services.github.cache import clear_all_caches as clear_github_caches
from repolens.services.github.cache import get_cache_stats as get_github_cache_stats
from repolens.services.github.constants import CONTENT_TRUNCATION_SENTINEL
from repolens.services.github.exceptions import EmptyRepositoryError, GitHubAPIError
from repolens.services.github.helpers import RateLimitInfo, handle_error_response
from repolens.services.github.http_client import close_github_client
from repolens.services.github.read_operations import GitHubReadOperations
from repolens.services.github.types import (
    FileContent,
    RepositoryFile,
    RepositoryRef,
    TreeListing,
)

__all__ = [
    # Operations
    "GitHubReadOperations",
    # HTTP client lifecycle
    "close_github_client",
    # Cache management
    "clear_github_caches",
    "get_github_cache_stats",
    # Utilities
    "handle_error_response",
    "RateLimitInfo",
    # Exceptions
    "EmptyRepositoryError",
    "GitHubAPIError",
    # Types
    "FileContent",
    "RepositoryFile",
    "RepositoryRef",
    "TreeListing",
    # Constants
    "CONTENT_TRUNCATION_SENTINEL",
]
