"""Declaration Merge Engine — folds declaration sources with precedence.

Scalar declaration fields follow last-source-wins. Tool references are
cumulative: they are unioned (string form) or merged entry by entry.
"""

from __future__ import annotations

import structlog

from tool_forge.core.declarations import ToolDeclaration
from tool_forge.core.tools_ref import ToolsRef

logger = structlog.get_logger()

DeclarationSet = dict[str, ToolDeclaration]


def merge_declaration_sets(base: DeclarationSet, overlay: DeclarationSet) -> DeclarationSet:
    """Merge ``overlay`` into ``base`` and return ``base``.

    ``base`` is mutated. Callers fold sources lowest precedence first and
    pass a fresh accumulator when the original must be preserved.
    """
    for key, declaration in overlay.items():
        existing = base.get(key)
        if existing is None:
            base[key] = declaration
            continue
        base[key] = merge_declarations(existing, declaration)
        logger.debug("merge.declaration_overridden", key=key)
    return base


def merge_declarations(base: ToolDeclaration, overlay: ToolDeclaration) -> ToolDeclaration:
    """Shallow-merge two declarations, merging only their tool references."""
    update = {
        field: getattr(overlay, field)
        for field in overlay.model_fields_set
        if field not in ("key", "tools")
    }
    tools = merge_tools_ref(base.tools, overlay.tools)
    if tools is not None:
        update["tools"] = tools
    return base.model_copy(update=update)


def merge_tools_ref(base: ToolsRef | None, overlay: ToolsRef | None) -> ToolsRef | None:
    """Merge two tool references; neither input is modified.

    An empty string reference counts as absent.
    """
    base = None if _is_blank(base) else base
    overlay = None if _is_blank(overlay) else overlay
    if base is None and overlay is None:
        return None
    if base is None:
        return overlay
    if overlay is None:
        return base

    if base.compact and overlay.compact:
        # dict preserves first-seen order while de-duplicating
        names = dict.fromkeys(base.names() + overlay.names())
        return ToolsRef.from_names(list(names))

    entries = dict(base.entries)
    for name, entry in overlay.entries.items():
        if name in entries:
            entries[name] = entries[name].merged_with(entry)
        else:
            entries[name] = entry
    return ToolsRef(entries=entries)


def _is_blank(ref: ToolsRef | None) -> bool:
    return ref is not None and ref.compact and not any(ref.names())
