"""
Notebook compression package.

Usage: `from repolens.services.notebook import NotebookCompressor, CourseContext`

Module structure:
- compressor.py: NotebookCompressor, section assembly and the degraded path
- parser.py: JSON parsing and output cleaning
- scoring.py: Course keywords and cell priority
- extraction.py: Definitions, imports, main logic, errors and outputs
- types.py: Data types
- constants.py: Budgets, weights and markers
"""

from repolens.services.notebook.compressor import NotebookCompressor
from repolens.services.notebook.constants import TRUNCATION_MARKER
from repolens.services.notebook.parser import NotebookParseError, clean_notebook, parse_notebook
from repolens.services.notebook.scoring import cell_priority, course_keywords
from repolens.services.notebook.types import (
    CellOutput,
    CodeDefinition,
    CourseContext,
    NotebookCell,
    NotebookComponents,
    NotebookContent,
    OptimizedNotebook,
)

__all__ = [
    "NotebookCompressor",
    # Parsing
    "NotebookParseError",
    "clean_notebook",
    "parse_notebook",
    # Scoring
    "cell_priority",
    "course_keywords",
    # Types
    "CellOutput",
    "CodeDefinition",
    "CourseContext",
    "NotebookCell",
    "NotebookComponents",
    "NotebookContent",
    "OptimizedNotebook",
    # Constants
    "TRUNCATION_MARKER",
]
