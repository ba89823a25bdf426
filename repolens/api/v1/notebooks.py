"""
Notebook compression endpoint.
"""

from fastapi import APIRouter

from repolens.api.deps import Compressor
from repolens.core.exceptions import UnprocessableError
from repolens.schemas import OptimizedNotebookResponse, OptimizeNotebookRequest

router = APIRouter(prefix="/notebooks", tags=["notebooks"])


@router.post("/optimize", response_model=OptimizedNotebookResponse)
async def optimize_notebook(
    data: OptimizeNotebookRequest,
    compressor: Compressor,
) -> OptimizedNotebookResponse:
    """Compress a notebook body supplied directly by the caller."""
    notebook = compressor.optimize_notebook(data.path, data.content, data.course.to_context())
    if notebook is None:
        raise UnprocessableError(f"Notebook {data.path} could not be optimized")
    return OptimizedNotebookResponse.from_notebook(notebook)
