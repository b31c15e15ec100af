"""Tool declarations — the parsed form of one entry in a declaration file."""

from __future__ import annotations

from typing import Any, Literal

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tool_forge.core.shapes import SHAPE_TYPES, Shape, parse_parameters
from tool_forge.core.tools_ref import ToolsRef

logger = structlog.get_logger()

TOOL_MODES = ("sequential", "situational")


class ToolDeclaration(BaseModel):
    """A named tool definition.

    ``key`` is the declaration key in the source file; ``name`` overrides the
    name the tool is registered under. Only fields present in the source end
    up in ``model_fields_set``, which is what merges rely on.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str
    name: str | None = None
    description: str | None = None
    prompt: str | None = None
    context: str | None = None
    parameters: dict[str, Shape] | None = None
    tools: ToolsRef | None = None
    tool_mode: Literal["sequential", "situational"] | None = Field(default=None, alias="toolMode")
    disabled: bool | None = None

    @property
    def registered_name(self) -> str:
        return self.name or self.key

    @property
    def is_enabled(self) -> bool:
        return not self.disabled

    @classmethod
    def from_raw(cls, key: str, raw: dict[str, Any]) -> ToolDeclaration:
        """Build a declaration from a parsed YAML/JSON mapping."""
        data: dict[str, Any] = {"key": key}

        for text_field in ("name", "description", "prompt", "context"):
            if text_field in raw:
                value = raw[text_field]
                data[text_field] = None if value is None else str(value)

        if "parameters" in raw:
            params = raw["parameters"]
            data["parameters"] = parse_parameters(params) if isinstance(params, dict) else None

        if "tools" in raw:
            data["tools"] = ToolsRef.parse(raw["tools"])

        if "toolMode" in raw:
            mode = raw["toolMode"]
            if mode is not None and mode not in TOOL_MODES:
                logger.warning("declaration.unknown_tool_mode", key=key, tool_mode=mode)
                mode = None
            data["tool_mode"] = mode

        if "disabled" in raw:
            data["disabled"] = bool(raw["disabled"])

        return cls(**data)


def parse_declaration_set(raw: Any, source: str = "<memory>") -> dict[str, ToolDeclaration]:
    """Parse a whole declaration document into a declaration set."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        logger.warning("declarations.not_a_mapping", source=source, value_type=type(raw).__name__)
        return {}

    declarations: dict[str, ToolDeclaration] = {}
    for key, value in raw.items():
        if not isinstance(value, dict):
            logger.warning("declarations.entry_skipped", source=source, key=key)
            continue
        try:
            declarations[str(key)] = ToolDeclaration.from_raw(str(key), value)
        except ValidationError as e:
            logger.warning("declarations.entry_skipped", source=source, key=key, error=str(e))
    return declarations


def lint_declaration(key: str, raw: Any) -> list[str]:
    """Report problems in a raw declaration's parameter definitions.

    This checks the declaration itself, not call-time arguments. Problems are
    advisory: compiling the declaration still succeeds.
    """
    if not isinstance(raw, dict):
        return [f'Tool "{key}" must be a mapping']

    params = raw.get("parameters")
    if params is None:
        return []
    if not isinstance(params, dict):
        return [f'Parameters of tool "{key}" must be a mapping']

    problems: list[str] = []
    for name, param in params.items():
        problems.extend(_lint_parameter(param, str(name)))
    return problems


def _lint_parameter(param: Any, path: str) -> list[str]:
    if not isinstance(param, dict):
        return [f'Parameter "{path}" must be a mapping']

    param_type = param.get("type")
    if not param_type:
        return [f'Parameter "{path}" is missing type property']
    if param_type not in SHAPE_TYPES:
        return [f'Parameter "{path}" has invalid type "{param_type}"']

    problems: list[str] = []

    if param_type == "enum":
        values = param.get("enum")
        if not isinstance(values, list) or not values:
            problems.append(f'Parameter "{path}" of type "enum" must have a non-empty enum array')
        elif len({_value_kind(v) for v in values}) > 1:
            problems.append(f'Parameter "{path}" mixes string and number enum values')

    if param_type == "object" and isinstance(param.get("properties"), dict):
        for nested_name, nested in param["properties"].items():
            problems.extend(_lint_parameter(nested, f"{path}.{nested_name}"))

    if param_type == "array" and "items" in param:
        items = param["items"]
        if not isinstance(items, dict) or not items.get("type"):
            problems.append(f'Items in array parameter "{path}" must specify a type')
        else:
            problems.extend(_lint_parameter(items, f"{path} items"))

    return problems


def _value_kind(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return "number"
    return "string"
