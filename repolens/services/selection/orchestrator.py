"""
Selection orchestrator for the complete content workflow.

Coordinates:
1. File discovery - RepositoryStructureResolver, ArtifactFilter, classification
2. Selection - external async callable narrowing the candidates
3. Content fetch - one contents call per selected path, sequentially
4. Optimization - NotebookCompressor for .ipynb, pass-through otherwise

Every phase is timed. Per-file failures become empty placeholders so the
package always holds one record per requested path.
"""

import logging
import time
from collections.abc import Sequence

from repolens.core.tokens import estimate_tokens
from repolens.services.github import GitHubAPIError, GitHubReadOperations, RepositoryRef
from repolens.services.notebook import CourseContext, NotebookCompressor, OptimizedNotebook
from repolens.services.repository import (
    ArtifactFilter,
    RepositoryStructureResolver,
    classify,
)
from repolens.services.selection.store import InMemoryStore, KeyValueStore, notebook_cache_key
from repolens.services.selection.types import (
    ContentPackage,
    DiscoveryResult,
    OptimizedFile,
    PhaseTimings,
    SelectFiles,
)

logger = logging.getLogger(__name__)

NOTEBOOK_EXTENSION = ".ipynb"
DEFAULT_MAX_CONTENT_CHARS = 100_000


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def missing_file(path: str) -> OptimizedFile:
    return OptimizedFile(
        path=path,
        optimized_content="",
        original_size=0,
        optimized_size=0,
        compression_ratio=0.0,
        type="missing",
    )


def regular_file(path: str, content: str) -> OptimizedFile:
    size = estimate_tokens(content)
    return OptimizedFile(
        path=path,
        optimized_content=content,
        original_size=size,
        optimized_size=size,
        compression_ratio=0.0,
        type="regular",
    )


def notebook_file(path: str, notebook: OptimizedNotebook) -> OptimizedFile:
    return OptimizedFile(
        path=path,
        optimized_content=notebook.content,
        original_size=notebook.original_size,
        optimized_size=notebook.optimized_size,
        compression_ratio=notebook.compression_ratio,
        type="optimized-notebook",
    )


class SelectionOrchestrator:
    """
    Orchestrates discovery, selection and content optimization for one commit.

    Holds no per-request state; a single instance can serve concurrent calls.
    """

    def __init__(
        self,
        github: GitHubReadOperations,
        resolver: RepositoryStructureResolver | None = None,
        compressor: NotebookCompressor | None = None,
        artifact_filter: ArtifactFilter | None = None,
        store: KeyValueStore | None = None,
        max_content_chars: int = DEFAULT_MAX_CONTENT_CHARS,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            github: Read operations used for content fetches
            resolver: Structure resolver (built from `github` if omitted)
            compressor: Notebook compressor with default budgets if omitted
            artifact_filter: ML artifact filter
            store: Cache for compressed notebooks (in-memory if omitted)
            max_content_chars: Content longer than this is cut with the truncation sentinel
        """
        self.github = github
        self.resolver = resolver or RepositoryStructureResolver(github)
        self.compressor = compressor or NotebookCompressor()
        self.artifact_filter = artifact_filter or ArtifactFilter()
        self.store: KeyValueStore = store if store is not None else InMemoryStore()
        self.max_content_chars = max_content_chars

    async def discover(self, ref: RepositoryRef) -> DiscoveryResult:
        """
        Resolve the listing, drop experiment artifacts and classify what remains.

        Raises:
            GitHubAPIError: If the initial tree request fails
        """
        structure = await self.resolver.resolve(ref)
        artifacts = self.artifact_filter.filter(structure.files)
        if artifacts.was_filtered:
            logger.info(f"{ref}: {artifacts.filter_reason}")
        classification = classify(artifacts.files)
        return DiscoveryResult(
            structure=structure,
            artifacts=artifacts,
            classification=classification,
        )

    async def run(
        self,
        ref: RepositoryRef,
        course: CourseContext,
        select_files: SelectFiles,
    ) -> ContentPackage:
        """
        Full workflow: discovery, external selection, content optimization.

        Args:
            ref: Repository and commit
            course: Course context for notebook prioritization
            select_files: Async callable narrowing candidates to the paths to fetch

        Returns:
            ContentPackage with one OptimizedFile per selected path
        """
        started = time.perf_counter()
        logger.info(f"Starting content selection for {ref} (course={course.course_id})")

        phase = time.perf_counter()
        discovery = await self.discover(ref)
        discovery_ms = _elapsed_ms(phase)
        logger.info(
            f"Discovered {len(discovery.candidates)} candidate files for {ref} "
            f"in {discovery_ms}ms"
        )

        phase = time.perf_counter()
        selected = await select_files(discovery.candidates, discovery.classification)
        selection_ms = _elapsed_ms(phase)
        logger.info(f"Selection stage chose {len(selected)} files for {ref}")

        package = await self.optimize_selection(ref, course, selected)
        package.discovery = discovery
        package.timings.file_discovery_ms = discovery_ms
        package.timings.selection_ms = selection_ms
        package.timings.total_ms = _elapsed_ms(started)

        logger.info(
            f"Content selection for {ref} complete: {package.total_files} files, "
            f"{package.total_token_savings} tokens saved, {package.timings.total_ms}ms"
        )
        return package

    async def optimize_selection(
        self,
        ref: RepositoryRef,
        course: CourseContext,
        selected_paths: Sequence[str],
    ) -> ContentPackage:
        """
        Fetch and optimize an already narrowed selection.

        Paths are processed one at a time, in order. Duplicates each get their
        own record.
        """
        started = time.perf_counter()
        timings = PhaseTimings()
        files: list[OptimizedFile] = []

        for path in selected_paths:
            phase = time.perf_counter()
            content = await self._fetch(ref, path)
            timings.content_fetch_ms += _elapsed_ms(phase)

            if content is None:
                files.append(missing_file(path))
                continue

            phase = time.perf_counter()
            files.append(await self._optimize(ref, course, path, content))
            timings.optimization_ms += _elapsed_ms(phase)

        timings.content_fetch_ms = round(timings.content_fetch_ms, 2)
        timings.optimization_ms = round(timings.optimization_ms, 2)
        timings.total_ms = _elapsed_ms(started)

        missing = sum(1 for f in files if f.type == "missing")
        if missing:
            logger.info(f"{missing} of {len(files)} selected files unavailable for {ref}")

        return ContentPackage(
            selected_files=list(selected_paths),
            files=files,
            timings=timings,
        )

    async def _fetch(self, ref: RepositoryRef, path: str) -> str | None:
        try:
            result = await self.github.get_file_content(ref, path, self.max_content_chars)
        except GitHubAPIError as e:
            logger.debug(f"Failed to fetch {path} from {ref}: {e}")
            return None
        if result is None:
            logger.debug(f"{path} not found or not text in {ref}")
            return None
        return result.content

    async def _optimize(
        self,
        ref: RepositoryRef,
        course: CourseContext,
        path: str,
        content: str,
    ) -> OptimizedFile:
        if not path.lower().endswith(NOTEBOOK_EXTENSION):
            return regular_file(path, content)

        course_key = f"{course.course_id}:{course.rubric or ''}"
        key = notebook_cache_key(ref.full_name, ref.commit, path, course_key)

        try:
            cached = await self.store.get(key)
        except Exception as e:
            logger.warning(f"Notebook store read failed for {path}, compressing uncached: {e}")
            cached = None
        if isinstance(cached, OptimizedNotebook):
            logger.debug(f"Using cached compressed notebook for {path}")
            return notebook_file(path, cached)

        notebook = self.compressor.optimize_notebook(path, content, course)
        if notebook is None:
            logger.warning(f"Notebook {path} could not be compressed, passing through")
            return regular_file(path, content)

        try:
            await self.store.set(key, notebook)
        except Exception as e:
            logger.warning(f"Notebook store write failed for {path}: {e}")
        return notebook_file(path, notebook)
