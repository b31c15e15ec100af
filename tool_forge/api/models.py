"""Pydantic request/response models for the API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Tools ---


class ToolResponse(BaseModel):
    """A registered tool and its advertised call signature."""

    name: str
    description: str
    input_schema: dict[str, Any]


class ToolCallRequest(BaseModel):
    """Arguments for a tool call."""

    arguments: dict[str, Any] = Field(default_factory=dict)


class ToolCallResponse(BaseModel):
    """Rendered instruction text for a successful call."""

    name: str
    text: str
    arguments: dict[str, Any]


# --- Presets ---


class PresetListResponse(BaseModel):
    """Preset names available to the server."""

    presets: list[str]
