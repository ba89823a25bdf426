"""
GitHub API helper utilities.

Provides request headers, rate limit parsing and error response processing
shared by every GitHub call.
"""

import logging

import httpx

from repolens.services.github.exceptions import GitHubAPIError

logger = logging.getLogger(__name__)


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get("X-RateLimit-Remaining")
        self.reset = response.headers.get("X-RateLimit-Reset")

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        return int(self.reset) if self.reset else None

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining is not None and int(self.remaining) == 0


def build_auth_headers(token: str | None) -> dict[str, str]:
    """
    Build per-request auth headers.

    An empty or missing token yields no Authorization header; GitHub then
    applies the anonymous rate ceiling.
    """
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def handle_error_response(response: httpx.Response, resource: str) -> None:
    """
    Handle common error responses from GitHub API.

    Args:
        response: The HTTP response from GitHub API
        resource: What was requested, for error context (e.g. "owner/repo@sha")

    Raises:
        GitHubAPIError: For authentication, authorization, rate limit or other API errors
    """
    if response.is_success:
        return

    rate_info = RateLimitInfo(response)

    if response.status_code == 401:
        raise GitHubAPIError("Invalid or expired GitHub token", 401)
    elif response.status_code == 404:
        raise GitHubAPIError(f"Repository or resource not found: {resource}", 404)
    elif response.status_code in (403, 429):
        if rate_info.is_exhausted or response.status_code == 429:
            logger.warning(f"GitHub rate limit exhausted while fetching {resource}")
            raise GitHubAPIError(
                "GitHub API rate limit exceeded",
                response.status_code,
                rate_limit_reset=rate_info.reset_timestamp or 0,
            )
        raise GitHubAPIError("GitHub API forbidden", 403)
    raise GitHubAPIError(f"GitHub API error: {response.status_code}", response.status_code)
