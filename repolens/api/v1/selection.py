"""
Content selection endpoint: fetch and optimize an already narrowed selection.
"""

import logging

from fastapi import APIRouter

from repolens.api.deps import Orchestrator
from repolens.schemas import ContentPackageResponse, OptimizeSelectionRequest

router = APIRouter(prefix="/selection", tags=["selection"])
logger = logging.getLogger(__name__)


@router.post("/optimize", response_model=ContentPackageResponse)
async def optimize_selection(
    data: OptimizeSelectionRequest,
    orchestrator: Orchestrator,
) -> ContentPackageResponse:
    """
    Fetch each selected path and compress notebooks.

    Always returns one entry per requested path. Files that could not be
    fetched come back empty with type `missing`.
    """
    ref = data.repository.to_ref()
    package = await orchestrator.optimize_selection(ref, data.course.to_context(), data.paths)
    logger.info(
        f"Optimized {package.total_files} files for {ref}, "
        f"saved {package.total_token_savings} tokens"
    )
    return ContentPackageResponse.from_package(package)
