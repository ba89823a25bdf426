"""Exceptions for GitHub service."""


class GitHubAPIError(Exception):
    """Error from GitHub API, or GitHub could not be reached at all."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit_reset: int | None = None,
    ):
        self.message = message
        self.status_code = status_code  # None for network-level failures
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when rate limit resets
        super().__init__(message)

    @property
    def is_rate_limited(self) -> bool:
        """Check if the error was caused by an exhausted rate limit."""
        return self.rate_limit_reset is not None


class EmptyRepositoryError(GitHubAPIError):
    """The commit's tree contains no files, so there is nothing to select from."""

    def __init__(self, full_name: str, ref: str):
        self.full_name = full_name
        self.ref = ref
        super().__init__(f"No files found in {full_name}@{ref}", status_code=None)
