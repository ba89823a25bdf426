from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]

    # GitHub - optional token raises the API rate ceiling (5k vs 60 requests/hour)
    # Empty string = unauthenticated requests (tolerated, but logged as a risk)
    github_token: str = ""

    # Truncated tree recovery
    # Listings below this many files are returned as-is even if GitHub flags truncation
    large_tree_threshold: int = 1000
    # Hard cap on additional GitHub calls per resolution (root file checks + root tree + subtrees)
    max_recovery_calls: int = 15
    max_root_file_checks: int = 10
    # Throttle between recovery calls (seconds)
    check_delay_seconds: float = 0.3
    directory_delay_seconds: float = 1.0

    # Notebook compression (estimated tokens, ~4 chars per token)
    notebook_token_budget: int = 8000
    notebook_output_token_limit: int = 100

    # Content fetching
    # Files longer than this are cut and suffixed with the truncation sentinel
    max_content_chars: int = 100_000
    # TTL for the default in-memory store of compressed notebooks
    content_cache_ttl_seconds: int = 3600

    @property
    def github_authenticated(self) -> bool:
        """Check if a GitHub token is configured."""
        return bool(self.github_token)


settings = Settings()
