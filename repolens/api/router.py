from fastapi import APIRouter

from repolens.api.v1 import notebooks, selection, structure

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(structure.router)
api_router.include_router(selection.router)
api_router.include_router(notebooks.router)
