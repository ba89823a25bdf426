"""
Component extraction from a cleaned notebook.

Each function here is a pure view over a NotebookContent. The compressor
assembles their results into the final text.
"""

import re
from collections.abc import Sequence
from typing import Any

from repolens.core.tokens import estimate_tokens
from repolens.services.notebook.constants import (
    ALWAYS_INCLUDE_PRIORITY,
    CELL_SUMMARY_CHARS,
    DEFAULT_TOKEN_BUDGET,
    KEY_OUTPUT_CHARS,
    KNOWN_TOPIC_LIBRARIES,
    LOGIC_GROUP_SEPARATOR,
    MAX_LOGIC_GROUPS,
    MAX_TOPIC_CHARS,
    MAX_TOPICS,
    SUMMARY_PRIORITY,
    TRUNCATION_MARKER,
)
from repolens.services.notebook.scoring import prioritize_cells
from repolens.services.notebook.types import CodeDefinition, NotebookContent

FUNCTION_LINE = re.compile(r"^([ \t]*)(?:async[ \t]+)?def[ \t]+([A-Za-z_]\w*)[ \t]*\(")
CLASS_LINE = re.compile(r"^([ \t]*)class[ \t]+([A-Za-z_]\w*)")
IMPORT_LINE = re.compile(
    r"^(?:import\s+[A-Za-z_][\w.]*|from\s+[A-Za-z_][\w.]*\s+import\s+).*$",
    re.MULTILINE,
)
MARKDOWN_HEADER = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
IMPORTED_MODULE = re.compile(r"(?:from|import)\s+([A-Za-z_][\w.]*)")
TRAILING_ASSIGNMENT = re.compile(r"^(\w+)\s*=")


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def extract_block(lines: Sequence[str], start: int) -> str:
    """
    Extract the indented block that starts at lines[start].

    The block ends at the first later non-blank line indented no deeper than
    the header line. Trailing blank lines are dropped.
    """
    header_indent = _indent(lines[start])
    block = [lines[start]]

    for line in lines[start + 1 :]:
        if line.strip() and _indent(line) <= header_indent:
            break
        block.append(line)

    while len(block) > 1 and not block[-1].strip():
        block.pop()
    return "\n".join(block)


def extract_definitions(notebook: NotebookContent) -> list[CodeDefinition]:
    """Find function and class definitions, with full bodies for functions."""
    definitions: list[CodeDefinition] = []

    for index, cell in enumerate(notebook.cells):
        if not cell.is_code:
            continue
        lines = cell.text.splitlines()
        for i, line in enumerate(lines):
            if match := FUNCTION_LINE.match(line):
                definitions.append(
                    CodeDefinition(
                        name=match.group(2),
                        kind="function",
                        signature=line.strip(),
                        cell_index=index,
                        body=extract_block(lines, i),
                    )
                )
            elif match := CLASS_LINE.match(line):
                definitions.append(
                    CodeDefinition(
                        name=match.group(2),
                        kind="class",
                        signature=line.strip(),
                        cell_index=index,
                    )
                )

    return definitions


def extract_imports(notebook: NotebookContent) -> list[str]:
    """Top-level import statements, deduplicated, in notebook order."""
    imports: list[str] = []
    for cell in notebook.cells:
        if cell.is_code:
            imports.extend(match.rstrip() for match in IMPORT_LINE.findall(cell.text))
    return list(dict.fromkeys(imports))


def summarize_cell(code: str) -> str:
    """First non-comment, non-empty line, cut to a short preview."""
    for line in code.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            if len(stripped) > CELL_SUMMARY_CHARS:
                return f"{stripped[:CELL_SUMMARY_CHARS]}..."
            return stripped
    return "Empty cell"


def extract_main_logic(
    notebook: NotebookContent,
    keywords: Sequence[str],
    token_budget: int = DEFAULT_TOKEN_BUDGET,
) -> list[str]:
    """
    Select code cells by descending priority within a token budget.

    Cells above ALWAYS_INCLUDE_PRIORITY are included even past the budget.
    Medium-priority cells that do not fit become a one-line summary.
    """
    selected: list[str] = []
    used_tokens = 0

    for index, cell, priority in prioritize_cells(notebook.cells, keywords):
        if not cell.is_code:
            continue
        code = cell.text
        tokens = estimate_tokens(code)

        if priority > ALWAYS_INCLUDE_PRIORITY or used_tokens + tokens < token_budget:
            selected.append(code)
            used_tokens += tokens
        elif priority > SUMMARY_PRIORITY:
            selected.append(f"# Cell {index}: {summarize_cell(code)}")

    return selected


def are_snippets_related(first: str, second: str) -> bool:
    """
    Check whether two snippets read as one continued piece of code.

    True when the last line of `first` assigns a name that the first line of
    `second` uses, when `first` ends in a line continuation, or when `second`
    starts indented.
    """
    first_lines = [line for line in first.splitlines() if line.strip()]
    second_lines = [line for line in second.splitlines() if line.strip()]
    if not first_lines or not second_lines:
        return False

    last_line = first_lines[-1]
    opening_line = second_lines[0]

    if match := TRAILING_ASSIGNMENT.match(last_line):
        return match.group(1) in opening_line

    return (
        last_line.endswith("\\")
        or opening_line.startswith("  ")
        or opening_line.startswith("\t")
    )


def group_snippets(snippets: Sequence[str], max_groups: int = MAX_LOGIC_GROUPS) -> str:
    """Join related snippets into groups and keep the first max_groups of them."""
    groups: list[list[str]] = []
    for snippet in snippets:
        if groups and are_snippets_related(groups[-1][-1], snippet):
            groups[-1].append(snippet)
        else:
            groups.append([snippet])

    return LOGIC_GROUP_SEPARATOR.join("\n\n".join(group) for group in groups[:max_groups])


def extract_errors(notebook: NotebookContent) -> list[str]:
    """Error outputs rendered as `Cell N: ename: evalue`."""
    return [
        f"Cell {index}: {output.ename}: {output.evalue}"
        for index, cell in enumerate(notebook.cells)
        for output in cell.outputs
        if output.output_type == "error"
    ]


def extract_key_outputs(notebook: NotebookContent) -> list[str]:
    """Stream outputs, each shown up to KEY_OUTPUT_CHARS characters."""
    outputs: list[str] = []
    for index, cell in enumerate(notebook.cells):
        for output in cell.outputs:
            if output.output_type != "stream":
                continue
            text = output.text.rstrip()
            if not text:
                continue
            if len(text) > KEY_OUTPUT_CHARS:
                text = f"{text[:KEY_OUTPUT_CHARS]}{TRUNCATION_MARKER}"
            elif output.truncated and not text.endswith(TRUNCATION_MARKER):
                text = f"{text}{TRUNCATION_MARKER}"
            outputs.append(f"Cell {index} output: {text}")
    return outputs


def extract_topics(notebook: NotebookContent) -> list[str]:
    """Short markdown headers and well-known libraries, first MAX_TOPICS."""
    topics: dict[str, None] = {}

    for cell in notebook.cells:
        if cell.cell_type == "markdown":
            for header in MARKDOWN_HEADER.findall(cell.text):
                topic = header.strip()
                if topic and len(topic) < MAX_TOPIC_CHARS:
                    topics[topic] = None
        elif cell.is_code:
            for module in IMPORTED_MODULE.findall(cell.text):
                library = module.split(".")[0]
                if library in KNOWN_TOPIC_LIBRARIES:
                    topics[library] = None

    return list(topics)[:MAX_TOPICS]


def analyze_structure(notebook: NotebookContent) -> dict[str, Any]:
    cell_types: dict[str, int] = {}
    for cell in notebook.cells:
        cell_types[cell.cell_type] = cell_types.get(cell.cell_type, 0) + 1

    return {
        "total_cells": len(notebook.cells),
        "cell_types": cell_types,
        "code_cells_with_output": sum(1 for c in notebook.cells if c.is_code and c.outputs),
    }


def summarize_notebook(notebook: NotebookContent) -> str:
    total = len(notebook.cells)
    code = sum(1 for c in notebook.cells if c.cell_type == "code")
    markdown = sum(1 for c in notebook.cells if c.cell_type == "markdown")
    has_errors = any(o.output_type == "error" for c in notebook.cells for o in c.outputs)
    topics = extract_topics(notebook)

    return (
        f"Jupyter notebook with {total} cells ({code} code, {markdown} markdown).\n"
        f"Topics: {', '.join(topics) if topics else 'none detected'}.\n"
        f"{'Contains execution errors.' if has_errors else 'No execution errors detected.'}"
    )
