"""Root conftest: test infrastructure for all tests.

Provides:
- Autouse cache reset so GitHub tree listings never leak between tests
- A pinned repository reference shared by service and API tests
"""

from __future__ import annotations

import pytest

from repolens.services.github import RepositoryRef, clear_github_caches


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clear_github_caches():
    """Clear GitHub TTL caches before and after each test."""
    clear_github_caches()
    yield
    clear_github_caches()


@pytest.fixture
def repo_ref() -> RepositoryRef:
    return RepositoryRef(owner="octo", repo="project", commit="abc123")
