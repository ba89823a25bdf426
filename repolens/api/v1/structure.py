"""
Repository structure endpoint: resolved listing, artifact filtering, classification.
"""

import logging

from fastapi import APIRouter

from repolens.api.deps import Orchestrator, github_http_error
from repolens.schemas import ResolveStructureRequest, ResolveStructureResponse
from repolens.services.github import GitHubAPIError

router = APIRouter(prefix="/structure", tags=["structure"])
logger = logging.getLogger(__name__)


@router.post("/resolve", response_model=ResolveStructureResponse)
async def resolve_structure(
    data: ResolveStructureRequest,
    orchestrator: Orchestrator,
) -> ResolveStructureResponse:
    """
    Resolve the full file listing for a commit.

    Recovers truncated trees, removes ML experiment artifacts and reports
    which expected files are missing.
    """
    ref = data.repository.to_ref()
    try:
        discovery = await orchestrator.discover(ref)
    except GitHubAPIError as e:
        logger.warning(f"Structure resolution failed for {ref}: {e.message}")
        raise github_http_error(e) from None

    return ResolveStructureResponse.from_results(
        discovery.structure,
        discovery.artifacts,
        discovery.classification,
    )
