"""
Notebook compression for text-only grading.

Turns notebook JSON into a bounded-size text summary: imports, definitions,
the highest-priority code cells within a token budget, errors and short
outputs. Images, rich display data and large outputs are discarded.

Notebooks that were cut during fetching, or are not valid notebook JSON,
still produce a result through a degraded path so the file is never dropped.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from repolens.config.tuning import COURSE_KEYWORDS, MAX_RUBRIC_KEYWORDS
from repolens.core.tokens import compression_ratio, estimate_tokens
from repolens.services.notebook.constants import (
    DEFAULT_OUTPUT_TOKEN_LIMIT,
    DEFAULT_TOKEN_BUDGET,
    DEGRADED_PREVIEW_CHARS,
    DEGRADED_SCAN_LINES,
    EXTERNAL_TRUNCATION_SENTINEL,
    METADATA_FRAGMENTS,
    TRUNCATION_MARKER,
)
from repolens.services.notebook.extraction import (
    analyze_structure,
    extract_definitions,
    extract_errors,
    extract_imports,
    extract_key_outputs,
    extract_main_logic,
    group_snippets,
    summarize_notebook,
)
from repolens.services.notebook.parser import NotebookParseError, clean_notebook, parse_notebook
from repolens.services.notebook.scoring import course_keywords
from repolens.services.notebook.types import (
    CourseContext,
    NotebookComponents,
    NotebookContent,
    OptimizedNotebook,
)

logger = logging.getLogger(__name__)


class NotebookCompressor:
    """
    Compresses Jupyter notebooks into token-budgeted text.

    Stateless apart from its configuration; results are never cached here.
    """

    def __init__(
        self,
        token_budget: int = DEFAULT_TOKEN_BUDGET,
        output_token_limit: int = DEFAULT_OUTPUT_TOKEN_LIMIT,
        keyword_table: Mapping[str, Sequence[str]] = COURSE_KEYWORDS,
        max_rubric_keywords: int = MAX_RUBRIC_KEYWORDS,
    ):
        self.token_budget = token_budget
        self.output_token_limit = output_token_limit
        self.keyword_table = keyword_table
        self.max_rubric_keywords = max_rubric_keywords

    def optimize_notebook(
        self,
        path: str,
        raw_text: str,
        course: CourseContext,
    ) -> OptimizedNotebook | None:
        """
        Compress one notebook.

        Args:
            path: Notebook path, for logging and the degraded header
            raw_text: Notebook JSON as fetched (may carry the truncation sentinel)
            course: Course context used for keyword weighting

        Returns:
            OptimizedNotebook, or None if even the degraded path failed
        """
        if EXTERNAL_TRUNCATION_SENTINEL in raw_text:
            logger.warning(f"Notebook {path} was truncated during fetch, using degraded summary")
            return self.optimize_degraded(path, raw_text)

        try:
            notebook = parse_notebook(raw_text)
        except NotebookParseError as e:
            logger.warning(f"Notebook {path} could not be parsed ({e}), using degraded summary")
            return self.optimize_degraded(path, raw_text)

        try:
            cleaned = clean_notebook(notebook, self.output_token_limit)
            components = self.extract_components(cleaned, course)
            content = self.render(components)
        except Exception as e:
            logger.error(f"Error optimizing notebook {path}: {e}")
            return self.optimize_degraded(path, raw_text)

        original_size = estimate_tokens(raw_text)
        optimized_size = estimate_tokens(content)
        logger.debug(f"Compressed notebook {path}: {original_size} -> {optimized_size} tokens")

        return OptimizedNotebook(
            original_size=original_size,
            optimized_size=optimized_size,
            compression_ratio=compression_ratio(original_size, optimized_size),
            content=content,
            metadata=self._metadata(cleaned),
        )

    def extract_components(
        self,
        notebook: NotebookContent,
        course: CourseContext,
    ) -> NotebookComponents:
        keywords = course_keywords(course, self.keyword_table, self.max_rubric_keywords)
        return NotebookComponents(
            summary=summarize_notebook(notebook),
            definitions=extract_definitions(notebook),
            imports=extract_imports(notebook),
            main_logic=extract_main_logic(notebook, keywords, self.token_budget),
            errors=extract_errors(notebook),
            outputs=extract_key_outputs(notebook),
            structure=analyze_structure(notebook),
        )

    def render(self, components: NotebookComponents) -> str:
        """Assemble components into sections in a fixed order."""
        imports = "\n".join(components.imports)
        definitions = "\n\n".join(d.render() for d in components.definitions)
        logic = group_snippets(components.main_logic)
        errors = "\n".join(components.errors)
        outputs = "\n".join(components.outputs)
        structure = json.dumps(components.structure, indent=2)

        sections = [
            f"# Notebook Summary\n{components.summary}\n",
            f"# Key Imports\n{imports}\n",
            f"# Main Functions\n{definitions}\n",
            f"# Core Logic\n{logic}\n",
        ]
        if errors:
            sections.append(f"# Errors Found\n{errors}\n")
        sections.append(f"# Key Outputs\n{outputs}\n")
        sections.append(f"# Notebook Structure\n{structure}")
        return "\n".join(sections)

    def optimize_degraded(self, path: str, raw_text: str) -> OptimizedNotebook | None:
        """
        Summarise a notebook that cannot be parsed.

        Reports what the raw prefix reveals and includes its first
        DEGRADED_PREVIEW_CHARS characters.
        """
        try:
            preview = raw_text[:DEGRADED_PREVIEW_CHARS]
            if len(raw_text) > DEGRADED_PREVIEW_CHARS:
                preview += f"\n{TRUNCATION_MARKER}"

            content = (
                f"# Truncated Notebook: {path}\n\n"
                f"## Summary\n{self._degraded_summary(raw_text)}\n\n"
                "## Note\n"
                "This notebook was truncated or malformed when fetched. "
                "Only partial content is available for evaluation.\n\n"
                f"## Available Content\n```\n{preview}\n```"
            )

            original_size = estimate_tokens(raw_text)
            optimized_size = estimate_tokens(content)
            return OptimizedNotebook(
                original_size=original_size,
                optimized_size=optimized_size,
                compression_ratio=compression_ratio(original_size, optimized_size),
                content=content,
                metadata={"truncated": True, "original_length": len(raw_text)},
            )
        except Exception as e:
            logger.error(f"Degraded optimization failed for {path}: {e}")
            return None

    def _degraded_summary(self, raw_text: str) -> str:
        first_lines = raw_text.split("\n")[:DEGRADED_SCAN_LINES]
        has_metadata = any(
            fragment in line for line in first_lines for fragment in METADATA_FRAGMENTS
        )
        headers = [line for line in first_lines if line.strip().startswith("#") and len(line) > 10]
        return (
            f"Truncated notebook file ({len(raw_text)} characters).\n"
            f"Metadata detected: {'Yes' if has_metadata else 'No'}.\n"
            f"Headers detected: {len(headers)} found."
        )

    def _metadata(self, notebook: NotebookContent) -> dict[str, Any]:
        return {
            "language_info": notebook.metadata.get("language_info"),
            "kernelspec": notebook.metadata.get("kernelspec"),
            "nbformat": notebook.nbformat,
            "nbformat_minor": notebook.nbformat_minor,
        }
