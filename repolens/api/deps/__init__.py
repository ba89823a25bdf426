"""API dependencies - re-exports from submodules."""

from .services import (
    Compressor,
    Orchestrator,
    Resolver,
    get_compressor,
    get_github_reader,
    get_orchestrator,
    get_resolver,
    github_http_error,
)

__all__ = [
    "Compressor",
    "Orchestrator",
    "Resolver",
    "get_compressor",
    "get_github_reader",
    "get_orchestrator",
    "get_resolver",
    "github_http_error",
]
