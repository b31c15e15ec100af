"""Preset discovery endpoint."""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends

from tool_forge.api.models import PresetListResponse
from tool_forge.config import get_settings
from tool_forge.core.loader import PresetCatalog

router = APIRouter()


@lru_cache
def get_preset_catalog() -> PresetCatalog:
    """Get cached preset catalog for the configured search paths."""
    return PresetCatalog(get_settings().preset_search_paths)


@router.get("/presets", response_model=PresetListResponse)
async def list_presets(
    catalog: PresetCatalog = Depends(get_preset_catalog),
) -> PresetListResponse:
    """List preset names that can be loaded."""
    return PresetListResponse(presets=catalog.available())
