"""Main API router — aggregates all endpoint modules."""

from fastapi import APIRouter

from tool_forge.api.presets import router as presets_router
from tool_forge.api.tools import router as tools_router

api_router = APIRouter()

api_router.include_router(tools_router, prefix="/tools", tags=["tools"])
api_router.include_router(presets_router, tags=["presets"])
