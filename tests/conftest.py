"""Test fixtures — declaration trees, registries and an API client."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from structlog.testing import capture_logs
from fastapi.testclient import TestClient

from tool_forge.core.declarations import parse_declaration_set
from tool_forge.core.loader import DeclarationLoader, PresetCatalog
from tool_forge.core.registry import ToolRegistry


@pytest.fixture(autouse=True)
def captured_logs(monkeypatch):
    """Capture structlog output instead of printing it; CLI runs keep this config."""
    monkeypatch.setattr("tool_forge.cli.main.setup_logging", lambda level="INFO": None)
    with capture_logs() as logs:
        yield logs


@pytest.fixture
def raw_declarations() -> dict[str, Any]:
    """A declaration document as it would come out of a YAML file."""
    return {
        "configure": {
            "name": "advanced_configuration",
            "description": "Configure a system",
            "parameters": {
                "name": {"type": "string", "description": "Config name", "required": True},
                "level": {"type": "enum", "enum": [1, 2, 3], "required": True},
                "settings": {
                    "type": "object",
                    "properties": {
                        "theme": {"type": "enum", "enum": ["light", "dark"], "required": True},
                        "fontSize": {"type": "number", "default": 16},
                    },
                },
                "tags": {"type": "array", "items": {"type": "string"}},
                "timeout": {"type": "number", "default": 30},
            },
            "prompt": "Apply {{ name }} at level {{ level }}.",
            "tools": "think, search",
            "toolMode": "sequential",
        },
        "review": {
            "description": "Review a change",
            "prompt": "Review the change carefully.",
            "tools": {
                "think": "Reason first",
                "lint": {"description": "Run the linter", "prompt": "Fix every warning", "optional": True},
            },
        },
        "retired": {
            "description": "No longer offered",
            "prompt": "Unused.",
            "disabled": True,
        },
    }


@pytest.fixture
def declarations(raw_declarations):
    return parse_declaration_set(raw_declarations)


@pytest.fixture
def registry(declarations) -> ToolRegistry:
    return ToolRegistry(declarations)


@pytest.fixture
def preset_dir(tmp_path: Path) -> Path:
    """A preset directory with two presets."""
    directory = tmp_path / "presets"
    directory.mkdir()
    (directory / "base.yaml").write_text(
        "greet:\n"
        "  description: Say hello\n"
        "  prompt: Hello {{ who }}\n"
        "  parameters:\n"
        "    who:\n"
        "      type: string\n"
        "      required: true\n"
        "  tools: a, b\n"
    )
    (directory / "extra.yml").write_text(
        "greet:\n"
        "  description: Say hello warmly\n"
        "  tools: b, c\n"
        "farewell:\n"
        "  prompt: Goodbye\n"
    )
    return directory


@pytest.fixture
def loader(preset_dir: Path) -> DeclarationLoader:
    return DeclarationLoader(PresetCatalog([preset_dir]))


@pytest.fixture
def workflows_dir(tmp_path: Path) -> Path:
    """A user override directory named the way the loader expects."""
    directory = tmp_path / ".workflows"
    directory.mkdir()
    (directory / "10-greet.yaml").write_text(
        "greet:\n"
        "  prompt: Hi {{ who }}!\n"
        "  toolMode: sequential\n"
    )
    (directory / "20-custom.yaml").write_text(
        "custom:\n"
        "  description: A user tool\n"
        "  prompt: Do the custom thing\n"
    )
    return directory


@pytest.fixture
def app(registry, preset_dir):
    """FastAPI test app with the registry and preset catalog overridden."""
    from tool_forge.api.presets import get_preset_catalog
    from tool_forge.core.registry import get_registry
    from tool_forge.main import app as _app

    catalog = PresetCatalog([preset_dir])
    _app.dependency_overrides[get_registry] = lambda: registry
    _app.dependency_overrides[get_preset_catalog] = lambda: catalog

    yield _app

    _app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """HTTP test client."""
    return TestClient(app)
