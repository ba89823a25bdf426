"""Data types for notebook compression."""

from dataclasses import dataclass, field
from typing import Any, Literal

CellType = Literal["code", "markdown", "raw"]
DefinitionKind = Literal["function", "class"]


@dataclass(frozen=True)
class CellOutput:
    """One output of a code cell. Only the textual fields are kept."""

    output_type: str
    text: str = ""  # stream outputs
    ename: str = ""  # error outputs
    evalue: str = ""
    truncated: bool = False


@dataclass(frozen=True)
class NotebookCell:
    """A single notebook cell. `source` holds lines with their line endings."""

    cell_type: CellType
    source: tuple[str, ...]
    outputs: tuple[CellOutput, ...] = ()
    execution_count: int | None = None

    @property
    def text(self) -> str:
        return "".join(self.source)

    @property
    def is_code(self) -> bool:
        return self.cell_type == "code"


@dataclass(frozen=True)
class NotebookContent:
    """A parsed notebook. Cleaning returns a new instance."""

    cells: tuple[NotebookCell, ...]
    metadata: dict[str, Any] = field(default_factory=dict)
    nbformat: int = 4
    nbformat_minor: int = 0


@dataclass
class CodeDefinition:
    """A function or class found in a code cell."""

    name: str
    kind: DefinitionKind
    signature: str
    cell_index: int
    body: str = ""

    def render(self) -> str:
        return self.body or self.signature


@dataclass
class NotebookComponents:
    """Everything extracted from one notebook, before assembly into text."""

    summary: str
    definitions: list[CodeDefinition]
    imports: list[str]
    main_logic: list[str]
    errors: list[str]
    outputs: list[str]
    structure: dict[str, Any]


@dataclass
class CourseContext:
    """Course the notebook is graded for. Drives keyword weighting."""

    course_id: str
    course_name: str = ""
    rubric: str | None = None


@dataclass
class OptimizedNotebook:
    """Compressed notebook text. Sizes are estimated tokens."""

    original_size: int
    optimized_size: int
    compression_ratio: float  # 0.0-1.0, fraction of tokens removed
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def token_savings(self) -> int:
        return self.original_size - self.optimized_size
