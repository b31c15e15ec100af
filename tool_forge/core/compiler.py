"""Schema Compiler — lowers shapes into wire schemas and runtime validators.

Both compilers dispatch over the same closed set of shape classes. Anything
outside that set compiles as a string scalar.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainValidator,
    Strict,
    StrictBool,
    StrictStr,
    TypeAdapter,
    ValidationError,
    create_model,
)
from pydantic_core import PydanticCustomError

from tool_forge.core.shapes import ArrayShape, BaseShape, EnumShape, ObjectShape, ScalarShape, Shape


class _Absent:
    """Marker for a value that was not supplied at all."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __copy__(self) -> _Absent:
        return self

    def __deepcopy__(self, memo: dict) -> _Absent:
        return self

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT: Any = _Absent()


# --- Wire schema ---


def shape_to_wire_schema(shape: Shape) -> dict[str, Any]:
    """Compile a shape into a JSON-Schema-shaped descriptor."""
    schema: dict[str, Any] = {}

    if isinstance(shape, ScalarShape):
        schema["type"] = shape.kind
    elif isinstance(shape, EnumShape):
        if shape.values:
            schema["type"] = shape.kind
            schema["enum"] = list(shape.values)
        else:
            schema["type"] = "string"
            schema["enum"] = []
    elif isinstance(shape, ArrayShape):
        schema["type"] = "array"
        if shape.items is not None:
            schema["items"] = shape_to_wire_schema(shape.items)
        else:
            schema["items"] = {"type": "string"}
    elif isinstance(shape, ObjectShape):
        schema["type"] = "object"
        if shape.properties is not None:
            nested = parameters_to_wire_schema(shape.properties)
            schema["properties"] = nested["properties"]
            if nested.get("required"):
                schema["required"] = nested["required"]
        else:
            schema["additionalProperties"] = True
    else:
        schema["type"] = "string"

    if isinstance(shape, BaseShape):
        if shape.description:
            schema["description"] = shape.description
        if shape.has_default:
            schema["default"] = shape.default

    return schema


def parameters_to_wire_schema(parameters: dict[str, Shape] | None) -> dict[str, Any]:
    """Wrap named parameter shapes as an object schema."""
    properties: dict[str, Any] = {}
    required: list[str] = []

    for name, shape in (parameters or {}).items():
        if getattr(shape, "required", False):
            required.append(name)
        properties[name] = shape_to_wire_schema(shape)

    schema: dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


# --- Validators ---


@dataclass
class ValidationIssue:
    """A single reason an argument value was rejected."""

    path: str
    message: str
    code: str


@dataclass
class ValidationResult:
    """Outcome of running a validator: either a value or a list of issues."""

    ok: bool
    value: Any = None
    issues: list[ValidationIssue] = field(default_factory=list)

    def summary(self) -> str:
        if self.ok:
            return "valid"
        return "; ".join(f"{i.path or '<root>'}: {i.message}" for i in self.issues)


def _check_number(value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError("number_type", "Input should be a valid number")
    return value


StrictNumber = Annotated[Any, PlainValidator(_check_number)]


def _value_kind(value: Any) -> type:
    if isinstance(value, bool):
        return bool
    if isinstance(value, (int, float)):
        return float
    return type(value)


def _membership_check(values: list[Any]):
    """Build a validator accepting exactly the listed values, without coercion."""
    allowed = [(_value_kind(v), v) for v in values]
    expected = ", ".join(repr(v) for v in values)

    def check(value: Any) -> Any:
        kind = _value_kind(value)
        if any(kind is k and value == v for k, v in allowed):
            return value
        raise PydanticCustomError("enum", "Input should be one of: {expected}", {"expected": expected})

    return check


class ArgumentsModel(BaseModel):
    """Base class for validators generated from object shapes."""

    model_config = ConfigDict(extra="ignore")


class Validator:
    """Executable check compiled from a shape.

    Wraps a pydantic ``TypeAdapter`` and adds the optional/default handling
    that applies when the value is absent altogether.
    """

    def __init__(
        self,
        annotation: Any,
        required: bool = True,
        default: Any = ABSENT,
        description: str | None = None,
    ) -> None:
        self.annotation = annotation
        self.required = required
        self.default = default
        self.description = description
        self._adapter = TypeAdapter(annotation)

    @property
    def optional(self) -> bool:
        return not self.required

    def validate(self, value: Any = ABSENT) -> ValidationResult:
        """Validate ``value``; invalid input is reported, never raised."""
        if value is ABSENT:
            if self.default is not ABSENT:
                return ValidationResult(ok=True, value=copy.deepcopy(self.default))
            if not self.required:
                return ValidationResult(ok=True, value=None)
            return ValidationResult(
                ok=False,
                issues=[ValidationIssue(path="", message="Field required", code="missing")],
            )

        try:
            validated = self._adapter.validate_python(value)
        except ValidationError as e:
            return ValidationResult(ok=False, issues=_issues_from_error(e))
        return ValidationResult(ok=True, value=_to_plain(validated))


def shape_to_validator(shape: Shape) -> Validator:
    """Compile a shape into a standalone validator."""
    if not isinstance(shape, BaseShape):
        return Validator(StrictStr, required=False)
    return Validator(
        _annotation_for(shape, "Value"),
        required=shape.required,
        default=shape.default if shape.has_default else ABSENT,
        description=shape.description,
    )


def parameters_to_validator(parameters: dict[str, Shape] | None, name: str = "Arguments") -> Validator:
    """Compile named parameter shapes into a validator for a whole argument mapping."""
    return Validator(_object_model(parameters or {}, name), required=True)


def _annotation_for(shape: Any, model_name: str) -> Any:
    if isinstance(shape, ScalarShape):
        if shape.kind == "number":
            return StrictNumber
        if shape.kind == "boolean":
            return StrictBool
        return StrictStr

    if isinstance(shape, EnumShape):
        return Annotated[Any, PlainValidator(_membership_check(shape.values or [""]))]

    if isinstance(shape, ArrayShape):
        if shape.items is not None:
            item = _annotation_for(shape.items, f"{model_name}Item")
        else:
            item = StrictStr
        return Annotated[list[item], Strict()]

    if isinstance(shape, ObjectShape):
        if shape.properties is None:
            return Annotated[dict[str, Any], Strict()]
        return _object_model(shape.properties, model_name)

    return StrictStr


def _object_model(properties: dict[str, Shape], model_name: str) -> type[BaseModel]:
    fields: dict[str, Any] = {}
    for index, (name, prop) in enumerate(properties.items()):
        annotation = _annotation_for(prop, f"{model_name}_{_model_suffix(name)}")
        if getattr(prop, "has_default", False):
            default = prop.default
        elif getattr(prop, "required", False):
            default = ...
        else:
            default = ABSENT
        fields[f"field_{index}"] = (
            annotation,
            Field(default, alias=name, description=getattr(prop, "description", None)),
        )
    return create_model(model_name, __base__=ArgumentsModel, **fields)


def _model_suffix(name: str) -> str:
    return re.sub(r"\W", "_", name).title().replace("_", "") or "Field"


def _to_plain(value: Any) -> Any:
    """Convert validated pydantic output back into plain Python values."""
    if isinstance(value, BaseModel):
        plain: dict[str, Any] = {}
        for field_name, info in type(value).model_fields.items():
            item = getattr(value, field_name)
            if item is ABSENT:
                continue
            plain[info.alias or field_name] = _to_plain(item)
        return plain
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    return value


def _format_loc(loc: tuple[Any, ...]) -> str:
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path


def _issues_from_error(error: ValidationError) -> list[ValidationIssue]:
    return [
        ValidationIssue(path=_format_loc(e["loc"]), message=e["msg"], code=e["type"])
        for e in error.errors()
    ]
