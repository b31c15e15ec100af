"""Tool references — the sub-tools a declaration can invoke.

Declarations may list tools either as a comma-separated string or as a
mapping of tool name to a description or a full record. Both are normalized
here into one ordered mapping; the string form survives only as a flag so
that merged string lists serialize back to a string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import BaseModel

logger = structlog.get_logger()


class ToolRefEntry(BaseModel):
    """What a declaration says about one referenced tool.

    Fields left unset were absent in the source; merges only let fields
    that are actually present in the overlay win.
    """

    description: str | None = None
    prompt: str | None = None
    optional: bool | None = None

    def merged_with(self, overlay: ToolRefEntry) -> ToolRefEntry:
        data = self.model_dump(exclude_unset=True)
        data.update(overlay.model_dump(exclude_unset=True))
        return ToolRefEntry(**data)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


def _compact_entry() -> ToolRefEntry:
    return ToolRefEntry(description="", prompt="", optional=False)


class ToolsRef(BaseModel):
    """Normalized tool reference list, in declaration order."""

    entries: dict[str, ToolRefEntry] = {}
    compact: bool = False

    @classmethod
    def parse(cls, raw: Any) -> ToolsRef | None:
        """Normalize a raw ``tools`` value from a declaration."""
        if raw is None:
            return None
        if isinstance(raw, ToolsRef):
            return raw

        if isinstance(raw, str):
            return cls.from_names([t.strip() for t in raw.split(",")])

        if isinstance(raw, dict):
            entries: dict[str, ToolRefEntry] = {}
            for name, value in raw.items():
                entries[str(name)] = _parse_entry(value)
            return cls(entries=entries)

        logger.warning("tools_ref.unsupported_value", value_type=type(raw).__name__)
        return None

    @classmethod
    def from_names(cls, names: list[str]) -> ToolsRef:
        return cls(entries={name: _compact_entry() for name in names}, compact=True)

    def names(self) -> list[str]:
        return list(self.entries)

    def to_wire(self) -> str | dict[str, Any]:
        """Serialize back to the declaration-file representation."""
        if self.compact:
            return ", ".join(self.entries)
        return {name: entry.to_wire() for name, entry in self.entries.items()}


def _parse_entry(value: Any) -> ToolRefEntry:
    if isinstance(value, str):
        return ToolRefEntry(description=value)
    if isinstance(value, dict):
        data: dict[str, Any] = {}
        if "description" in value:
            data["description"] = _text_or_none(value["description"])
        if "prompt" in value:
            data["prompt"] = _text_or_none(value["prompt"])
        if "optional" in value:
            data["optional"] = bool(value["optional"])
        return ToolRefEntry(**data)
    return ToolRefEntry(description="")


def _text_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


@dataclass
class ToolEntry:
    """One line of a rendered "Available Tools" section."""

    name: str
    description: str = ""
    prompt: str = ""
    optional: bool = False


def format_tools_list(tools: ToolsRef | str | dict[str, Any] | None) -> list[ToolEntry]:
    """Flatten a tool reference into render-ready entries, preserving order.

    An empty string yields a single entry with an empty name, the same as
    splitting it on commas would.
    """
    ref = ToolsRef.parse(tools)
    if ref is None:
        return []
    return [
        ToolEntry(
            name=name,
            description=entry.description or "",
            prompt=entry.prompt or "",
            optional=bool(entry.optional),
        )
        for name, entry in ref.entries.items()
    ]
