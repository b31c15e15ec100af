"""Tool Registry — compiled, callable view of a declaration set."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

import structlog

from tool_forge.config import get_settings
from tool_forge.core.compiler import (
    ValidationIssue,
    Validator,
    parameters_to_validator,
    parameters_to_wire_schema,
)
from tool_forge.core.declarations import ToolDeclaration
from tool_forge.core.loader import DeclarationLoader, PresetCatalog
from tool_forge.core.merge import DeclarationSet
from tool_forge.core.template import render_tool_prompt

logger = structlog.get_logger()


class ToolNotFoundError(KeyError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Tool '{self.name}' not found"


@dataclass
class CompiledTool:
    """Artifacts derived from one declaration; never mutated after compile."""

    name: str
    description: str
    input_schema: dict[str, Any]
    validator: Validator
    declaration: ToolDeclaration

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }


@dataclass
class ToolInvocation:
    """Result of calling a tool: rendered text, or the reasons it was rejected."""

    name: str
    ok: bool
    text: str = ""
    arguments: dict[str, Any] = field(default_factory=dict)
    issues: list[ValidationIssue] = field(default_factory=list)


class ToolRegistry:
    """Compiles enabled declarations and dispatches calls to them."""

    def __init__(self, declarations: DeclarationSet) -> None:
        self.declarations = declarations
        self._tools: dict[str, CompiledTool] | None = None

    @property
    def tools(self) -> dict[str, CompiledTool]:
        if self._tools is None:
            self._tools = self._compile_all()
        return self._tools

    def _compile_all(self) -> dict[str, CompiledTool]:
        tools: dict[str, CompiledTool] = {}
        for key in sorted(self.declarations):
            declaration = self.declarations[key]
            if not declaration.is_enabled:
                logger.info("registry.tool_disabled", key=key)
                continue
            compiled = compile_declaration(declaration)
            if compiled.name in tools:
                logger.warning(
                    "registry.duplicate_name",
                    name=compiled.name,
                    replaced=tools[compiled.name].declaration.key,
                    key=key,
                )
            tools[compiled.name] = compiled
        logger.info("registry.compiled", tools=len(tools))
        return tools

    def list_tools(self) -> list[CompiledTool]:
        return list(self.tools.values())

    def get(self, name: str) -> CompiledTool:
        tool = self.tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> ToolInvocation:
        """Validate ``arguments`` and render the tool's prompt."""
        tool = self.get(name)
        result = tool.validator.validate(arguments if arguments is not None else {})
        if not result.ok:
            logger.info("registry.invalid_arguments", tool=name, issues=len(result.issues))
            return ToolInvocation(name=name, ok=False, issues=result.issues)

        text = render_tool_prompt(tool.declaration, result.value)
        logger.info("registry.invoked", tool=name)
        return ToolInvocation(name=name, ok=True, text=text, arguments=result.value)


def compile_declaration(declaration: ToolDeclaration) -> CompiledTool:
    """Derive the wire schema and validator for a single declaration."""
    name = declaration.registered_name
    return CompiledTool(
        name=name,
        description=declaration.description or "",
        input_schema=parameters_to_wire_schema(declaration.parameters),
        validator=parameters_to_validator(declaration.parameters, name=_model_name(name)),
        declaration=declaration,
    )


def _model_name(name: str) -> str:
    return "".join(part.title() for part in name.replace("-", "_").split("_") if part) + "Arguments"


@lru_cache
def get_registry() -> ToolRegistry:
    """Get cached registry built from the configured presets and workflow directory."""
    settings = get_settings()
    loader = DeclarationLoader(PresetCatalog(settings.preset_search_paths))
    return ToolRegistry(loader.load(settings.preset_names, settings.config_dir))
