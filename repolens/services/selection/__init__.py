"""
Content selection package.

Module structure:
- orchestrator.py: SelectionOrchestrator (discovery, selection, optimization)
- store.py: KeyValueStore protocol and the in-memory default
- types.py: OptimizedFile, PhaseTimings, ContentPackage
"""

from repolens.services.selection.orchestrator import SelectionOrchestrator
from repolens.services.selection.store import InMemoryStore, KeyValueStore
from repolens.services.selection.types import (
    ContentPackage,
    DiscoveryResult,
    OptimizedFile,
    PhaseTimings,
    SelectFiles,
)

__all__ = [
    "SelectionOrchestrator",
    "InMemoryStore",
    "KeyValueStore",
    "ContentPackage",
    "DiscoveryResult",
    "OptimizedFile",
    "PhaseTimings",
    "SelectFiles",
]
