"""Prompt Template Engine — placeholder substitution and tool-section rendering."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from tool_forge.core.declarations import ToolDeclaration
from tool_forge.core.tools_ref import ToolEntry, format_tools_list

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^}]+)\s*\}\}")

TOOLS_HEADER = "## Available Tools"
SEQUENTIAL_INTRO = (
    "If all required user input/feedback is acquired or if no input/feedback is needed, "
    "execute this exact sequence of tools to complete this task:"
)
SITUATIONAL_INTRO = "Use these tools as needed to complete the user's request:"
NEXT_STEPS_INSTRUCTION = (
    "After using each tool, return a 'Next Steps' section with a list of the next steps "
    "to take / remaining tools to invoke along with each tool's prompt/description and "
    "'optional' flag if present."
)


@dataclass
class RenderedTemplate:
    """Rendered text plus the names of the arguments it consumed."""

    text: str
    used: set[str] = field(default_factory=set)


def stringify(value: Any) -> str:
    """Render an argument value the way it should read inside a prompt."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, dict)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)


def render_template(template: str | None, args: dict[str, Any] | None) -> RenderedTemplate:
    """Replace ``{{ name }}`` placeholders with argument values.

    Placeholders without a matching argument are left as they are, so a
    template can be rendered against a partial argument set.
    """
    if template is None:
        return RenderedTemplate(text="")
    if not args:
        return RenderedTemplate(text=template)

    used: set[str] = set()

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        if name in args:
            used.add(name)
            return stringify(args[name])
        return match.group(0)

    return RenderedTemplate(text=PLACEHOLDER_PATTERN.sub(_substitute, template), used=used)


def _format_tool_line(tool: ToolEntry) -> str:
    line = tool.name
    if tool.description:
        line += f": {tool.description}"
    if tool.prompt:
        line += f" - {tool.prompt}" if tool.description else f": {tool.prompt}"
    if tool.optional:
        line += " (Optional)"
    return line


def render_tools_section(base_text: str, tools: list[ToolEntry], mode: str | None = None) -> str:
    """Append an "Available Tools" section to ``base_text``.

    ``sequential`` renders a numbered execution order; any other mode renders
    a bulleted list of tools to use as needed.
    """
    if not tools:
        return base_text

    parts = [f"{base_text}\n\n{TOOLS_HEADER}\n"]
    if mode == "sequential":
        parts.append(f"{SEQUENTIAL_INTRO}\n\n")
        for index, tool in enumerate(tools, start=1):
            parts.append(f"{index}. {_format_tool_line(tool)}\n")
    else:
        parts.append(f"{SITUATIONAL_INTRO}\n\n")
        for tool in tools:
            parts.append(f"- {_format_tool_line(tool)}\n")
    parts.append(f"\n{NEXT_STEPS_INSTRUCTION}")
    return "".join(parts)


def render_tool_prompt(declaration: ToolDeclaration, args: dict[str, Any] | None = None) -> str:
    """Build the full call-time text for a declaration.

    Renders the prompt and context templates, lists arguments that no
    placeholder consumed, then appends the declaration's tools section.
    """
    args = args or {}
    rendered = render_template(declaration.prompt, args)
    text = rendered.text
    used = set(rendered.used)

    if declaration.context:
        context = render_template(declaration.context, args)
        used |= context.used
        text = f"{text}\n\n{context.text}" if text else context.text

    unused = [name for name in args if name not in used]
    if unused:
        lines = "\n".join(f"- {name}: {stringify(args[name])}" for name in unused)
        text = f"{text}\n\n## Parameters\n{lines}" if text else f"## Parameters\n{lines}"

    return render_tools_section(text, format_tools_list(declaration.tools), declaration.tool_mode)
