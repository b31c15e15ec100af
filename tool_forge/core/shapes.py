"""Shape Model — declared parameter shapes as a closed set of pydantic models."""

from __future__ import annotations

from typing import Any, Literal, Union

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()

SHAPE_TYPES = ("string", "number", "boolean", "array", "object", "enum")


class BaseShape(BaseModel):
    """Metadata shared by every shape variant."""

    description: str | None = None
    required: bool = False
    default: Any = None

    @property
    def has_default(self) -> bool:
        """True when the declaration set a default, even an explicit null."""
        return "default" in self.model_fields_set


class ScalarShape(BaseShape):
    kind: Literal["string", "number", "boolean"] = "string"


class EnumShape(BaseShape):
    values: list[Any] = []

    @property
    def kind(self) -> str:
        """Primitive kind of the enum, taken from its first value."""
        if self.values and _is_number(self.values[0]):
            return "number"
        return "string"


class ArrayShape(BaseShape):
    items: Shape | None = None


class ObjectShape(BaseShape):
    properties: dict[str, Shape] | None = None


Shape = Union[ScalarShape, EnumShape, ArrayShape, ObjectShape]

ArrayShape.model_rebuild()
ObjectShape.model_rebuild()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_shape(raw: Any, path: str = "") -> Shape:
    """Build a Shape from a raw declaration tree.

    Unknown or missing type tags fall back to a string scalar so that one
    bad parameter never prevents the rest of a declaration from loading.
    """
    if not isinstance(raw, dict):
        logger.warning("shape.not_a_mapping", path=path, value_type=type(raw).__name__)
        return ScalarShape(kind="string")

    description = raw.get("description")
    meta: dict[str, Any] = {
        "description": str(description) if description is not None else None,
        "required": bool(raw.get("required", False)),
    }
    if "default" in raw:
        meta["default"] = raw["default"]

    type_tag = raw.get("type")
    if type_tag in ("string", "number", "boolean"):
        return ScalarShape(kind=type_tag, **meta)

    if type_tag == "enum":
        values = raw.get("enum")
        if not isinstance(values, list):
            values = []
        return EnumShape(values=values, **meta)

    if type_tag == "array":
        items = raw.get("items")
        item_shape = parse_shape(items, f"{path} items") if items is not None else None
        return ArrayShape(items=item_shape, **meta)

    if type_tag == "object":
        properties = raw.get("properties")
        if isinstance(properties, dict):
            return ObjectShape(properties=parse_parameters(properties, path), **meta)
        return ObjectShape(properties=None, **meta)

    logger.warning("shape.unknown_type", path=path, type=type_tag)
    return ScalarShape(kind="string", **meta)


def parse_parameters(raw: dict[str, Any] | None, path: str = "") -> dict[str, Shape]:
    """Parse a mapping of parameter names to raw shape trees."""
    if not raw:
        return {}
    return {
        str(name): parse_shape(value, f"{path}.{name}" if path else str(name))
        for name, value in raw.items()
    }
