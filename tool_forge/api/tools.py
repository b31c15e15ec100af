"""Tool listing and invocation endpoints."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from tool_forge.api.models import ToolCallRequest, ToolCallResponse, ToolResponse
from tool_forge.core.registry import ToolNotFoundError, ToolRegistry, get_registry

router = APIRouter()


@router.get("", response_model=list[ToolResponse])
async def list_tools(
    registry: ToolRegistry = Depends(get_registry),
) -> list[ToolResponse]:
    """List every enabled tool with its input schema."""
    return [ToolResponse(**tool.to_dict()) for tool in registry.list_tools()]


@router.get("/{name}", response_model=ToolResponse)
async def get_tool(
    name: str,
    registry: ToolRegistry = Depends(get_registry),
) -> ToolResponse:
    """Get a single tool by its registered name."""
    try:
        tool = registry.get(name)
    except ToolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ToolResponse(**tool.to_dict())


@router.post("/{name}/call", response_model=ToolCallResponse)
async def call_tool(
    name: str,
    data: ToolCallRequest,
    registry: ToolRegistry = Depends(get_registry),
) -> ToolCallResponse:
    """Validate arguments and return the tool's rendered prompt."""
    try:
        invocation = registry.invoke(name, data.arguments)
    except ToolNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not invocation.ok:
        raise HTTPException(
            status_code=422,
            detail={
                "message": f"Invalid arguments for tool '{name}'",
                "issues": [asdict(issue) for issue in invocation.issues],
            },
        )
    return ToolCallResponse(name=name, text=invocation.text, arguments=invocation.arguments)
