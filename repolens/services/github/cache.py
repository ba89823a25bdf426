"""
TTL caching for GitHub API responses.

Trees fetched by commit SHA never change, so they are safe to cache; the TTL
only bounds memory and covers callers that pass a branch name instead.

Cache durations:
- Trees: 10 minutes (recursive listings, root listings and subtrees)
"""

import hashlib
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from cachetools import TTLCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

# Type vars for decorator typing
P = ParamSpec("P")
T = TypeVar("T")

_tree_cache: TTLCache[str, Any] = TTLCache(maxsize=200, ttl=600)  # 10 min


def _make_cache_key(func_name: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    """
    Generate a cache key from function name and arguments.

    Skips 'self' (first positional arg) since we're caching by repo identity, not instance.
    """
    cache_args = args[1:] if args else ()
    key_data = f"{func_name}:{cache_args}:{sorted(kwargs.items())}"
    return hashlib.md5(key_data.encode()).hexdigest()


def cached_github_call(
    cache: TTLCache[str, Any],
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """
    Decorator for caching async GitHub API calls.

    Usage:
        @cached_github_call(tree_cache)
        async def get_tree(self, ref: RepositoryRef, recursive: bool) -> TreeListing:
            ...

    The cache key is generated from the function name and arguments (excluding 'self').
    Only successful results are stored; exceptions propagate uncached.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            key = _make_cache_key(func.__name__, args, kwargs)

            if key in cache:
                logger.debug(f"Cache HIT: {func.__name__}")
                cached_result: T = cache[key]
                return cached_result

            logger.debug(f"Cache MISS: {func.__name__}")
            result = await func(*args, **kwargs)
            cache[key] = result
            return result

        return wrapper

    return decorator


def clear_all_caches() -> None:
    """Clear all GitHub caches. Useful for testing or when data is known to be stale."""
    _tree_cache.clear()
    logger.debug("Cleared all GitHub caches")


def get_cache_stats() -> dict[str, dict[str, int]]:
    """Get current cache statistics for monitoring."""
    return {
        "tree": {"size": len(_tree_cache), "maxsize": _tree_cache.maxsize},
    }


# Export cache instance for decorator use
tree_cache = _tree_cache
