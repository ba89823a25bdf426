from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )


class ValidationError(HTTPException):
    """Raised when request validation fails."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=message,
        )


class UnprocessableError(HTTPException):
    """Raised when a request is well-formed but cannot be processed."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=message,
        )


class UpstreamRateLimitError(HTTPException):
    """Raised when GitHub's rate limit is exhausted."""

    def __init__(self, reset_timestamp: int | None = None):
        headers = {"Retry-After-Timestamp": str(reset_timestamp)} if reset_timestamp else None
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="GitHub API rate limit exceeded",
            headers=headers,
        )


class UpstreamError(HTTPException):
    """Raised when GitHub cannot be reached or returns an error."""

    def __init__(self, message: str):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=message,
        )
