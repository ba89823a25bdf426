# Services package

from repolens.services.notebook import NotebookCompressor
from repolens.services.repository import ArtifactFilter, RepositoryStructureResolver
from repolens.services.selection import SelectionOrchestrator

__all__ = [
    # Repository listing
    "ArtifactFilter",
    "RepositoryStructureResolver",
    # Notebook compression
    "NotebookCompressor",
    # Orchestration
    "SelectionOrchestrator",
]
