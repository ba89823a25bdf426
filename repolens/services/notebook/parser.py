"""
Notebook parsing and output cleaning.

Accepts nbformat 4 JSON. Multi-line fields (`source`, stream `text`) may be
either a string or a list of strings; both are normalised to lines.
"""

import json
from dataclasses import replace
from typing import Any

from repolens.core.tokens import CHARS_PER_TOKEN, estimate_tokens
from repolens.services.notebook.constants import DEFAULT_OUTPUT_TOKEN_LIMIT, TRUNCATION_MARKER
from repolens.services.notebook.types import CellOutput, NotebookCell, NotebookContent

CELL_TYPES = ("code", "markdown", "raw")


class NotebookParseError(ValueError):
    """The text is not JSON or does not have a notebook's structure."""


def join_text(value: Any) -> str:
    """Normalise a string-or-list-of-strings field to one string."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "".join(str(part) for part in value)
    raise NotebookParseError(f"Expected string or list of strings, got {type(value).__name__}")


def split_lines(value: Any) -> tuple[str, ...]:
    return tuple(join_text(value).splitlines(keepends=True))


def _parse_output(data: Any) -> CellOutput:
    if not isinstance(data, dict):
        raise NotebookParseError("Cell output is not an object")
    output_type = str(data.get("output_type", ""))
    if output_type == "error":
        return CellOutput(
            output_type=output_type,
            ename=str(data.get("ename", "")),
            evalue=str(data.get("evalue", "")),
        )
    if output_type == "stream":
        return CellOutput(output_type=output_type, text=join_text(data.get("text")))
    return CellOutput(output_type=output_type)


def _parse_cell(data: Any) -> NotebookCell:
    if not isinstance(data, dict):
        raise NotebookParseError("Cell is not an object")

    cell_type = data.get("cell_type")
    if cell_type not in CELL_TYPES:
        raise NotebookParseError(f"Unknown cell type: {cell_type!r}")

    outputs = data.get("outputs") or []
    if not isinstance(outputs, list):
        raise NotebookParseError("Cell outputs is not a list")

    execution_count = data.get("execution_count")
    if not isinstance(execution_count, int):
        execution_count = None

    return NotebookCell(
        cell_type=cell_type,
        source=split_lines(data.get("source")),
        outputs=tuple(_parse_output(o) for o in outputs),
        execution_count=execution_count,
    )


def parse_notebook(raw_text: str) -> NotebookContent:
    """
    Parse notebook JSON.

    Raises:
        NotebookParseError: If the text is not JSON or lacks a `cells` list
    """
    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError as e:
        raise NotebookParseError(f"Invalid notebook JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("cells"), list):
        raise NotebookParseError("Notebook JSON has no cells list")

    metadata = data.get("metadata")
    nbformat = data.get("nbformat")
    nbformat_minor = data.get("nbformat_minor")

    return NotebookContent(
        cells=tuple(_parse_cell(cell) for cell in data["cells"]),
        metadata=metadata if isinstance(metadata, dict) else {},
        nbformat=nbformat if isinstance(nbformat, int) else 4,
        nbformat_minor=nbformat_minor if isinstance(nbformat_minor, int) else 0,
    )


def truncate_output_text(text: str, token_limit: int) -> str:
    return f"{text[: token_limit * CHARS_PER_TOKEN]}{TRUNCATION_MARKER}"


def clean_outputs(
    outputs: tuple[CellOutput, ...],
    token_limit: int = DEFAULT_OUTPUT_TOKEN_LIMIT,
) -> tuple[CellOutput, ...]:
    """
    Keep error and stream outputs, dropping everything else.

    Stream text over the token ceiling is cut to it and marked as truncated.
    """
    kept: list[CellOutput] = []
    for output in outputs:
        if output.output_type == "error":
            kept.append(output)
        elif output.output_type == "stream" and output.text:
            if estimate_tokens(output.text) > token_limit:
                output = replace(
                    output,
                    text=truncate_output_text(output.text, token_limit),
                    truncated=True,
                )
            kept.append(output)
    return tuple(kept)


def clean_notebook(
    notebook: NotebookContent,
    token_limit: int = DEFAULT_OUTPUT_TOKEN_LIMIT,
) -> NotebookContent:
    """Return a copy of the notebook with code cell outputs cleaned."""
    cells = tuple(
        replace(cell, outputs=clean_outputs(cell.outputs, token_limit)) if cell.is_code else cell
        for cell in notebook.cells
    )
    return replace(notebook, cells=cells)
