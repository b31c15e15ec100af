"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tool_forge.api.router import api_router
from tool_forge.config import get_settings
from tool_forge.core.registry import get_registry
from tool_forge.utils.logging import setup_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — configure logging and compile declarations."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(
        "toolforge.starting",
        port=settings.port,
        presets=settings.preset_names,
        config_dir=settings.config_dir,
    )

    registry = get_registry()
    logger.info("toolforge.tools_registered", tools=[t.name for t in registry.list_tools()])

    yield

    logger.info("toolforge.shutdown")


app = FastAPI(
    title="ToolForge",
    description="Declarative tools compiled into schemas, validators and prompts",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Service info endpoint."""
    return {"service": "toolforge", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "toolforge", "version": "0.1.0"}
