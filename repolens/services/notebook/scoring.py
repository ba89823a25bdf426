"""Cell priority scoring."""

import re
from collections.abc import Mapping, Sequence

from repolens.config.tuning import COURSE_KEYWORDS, MAX_RUBRIC_KEYWORDS
from repolens.core.tokens import estimate_tokens
from repolens.services.notebook.constants import (
    ASSIGNMENT_PENALTY,
    BASE_PRIORITY,
    CONTROL_FLOW_BONUS,
    DEFINITION_BONUS,
    IMPORT_BONUS,
    KEYWORD_BONUS,
    LARGE_CELL_PENALTY,
    LARGE_CELL_TOKENS,
    NON_CODE_PRIORITY,
)
from repolens.services.notebook.types import CourseContext, NotebookCell

ASSIGNMENT_START = re.compile(r"^[A-Za-z_]\w*\s*=(?!=)")
RUBRIC_WORD = re.compile(r"\b[a-zA-Z]{4,}\b")


def course_keywords(
    course: CourseContext,
    keyword_table: Mapping[str, Sequence[str]] = COURSE_KEYWORDS,
    max_rubric_keywords: int = MAX_RUBRIC_KEYWORDS,
) -> list[str]:
    """
    Build the keyword set for a course.

    Every table entry whose key occurs in the course id contributes its
    keywords, then the first rubric words of four or more letters are added.
    Result is lowercased and deduplicated.
    """
    course_id = course.course_id.lower()
    keywords: list[str] = []

    for fragment, words in keyword_table.items():
        if fragment.lower() in course_id:
            keywords.extend(word.lower() for word in words)

    if course.rubric:
        rubric_words = dict.fromkeys(RUBRIC_WORD.findall(course.rubric.lower()))
        keywords.extend(list(rubric_words)[:max_rubric_keywords])

    return list(dict.fromkeys(keywords))


def cell_priority(cell: NotebookCell, keywords: Sequence[str]) -> float:
    """Score a cell in [0, 1]. Non-code cells get a flat score."""
    if not cell.is_code:
        return NON_CODE_PRIORITY

    code = cell.text
    lowered = code.lower()
    priority = BASE_PRIORITY

    if "def " in code or "class " in code:
        priority += DEFINITION_BONUS

    priority += KEYWORD_BONUS * sum(1 for keyword in keywords if keyword in lowered)

    if "import " in code or "from " in code:
        priority += IMPORT_BONUS

    if ASSIGNMENT_START.match(code.strip()):
        priority -= ASSIGNMENT_PENALTY

    if "for " in code or "while " in code or "if " in code:
        priority += CONTROL_FLOW_BONUS

    if estimate_tokens(code) > LARGE_CELL_TOKENS:
        priority -= LARGE_CELL_PENALTY

    # Rounded so accumulated float error cannot cross a threshold
    return round(min(1.0, max(0.0, priority)), 6)


def prioritize_cells(
    cells: Sequence[NotebookCell],
    keywords: Sequence[str],
) -> list[tuple[int, NotebookCell, float]]:
    """Return (cell index, cell, priority) sorted by descending priority, stable on ties."""
    scored = [(i, cell, cell_priority(cell, keywords)) for i, cell in enumerate(cells)]
    return sorted(scored, key=lambda item: -item[2])
