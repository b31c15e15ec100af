"""ToolForge CLI — tool-forge command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from tool_forge.config import get_settings
from tool_forge.core.compiler import ValidationIssue
from tool_forge.core.declarations import lint_declaration
from tool_forge.core.loader import DeclarationLoader, PresetCatalog
from tool_forge.core.registry import ToolNotFoundError, ToolRegistry
from tool_forge.utils.logging import setup_logging


def _format_table(rows: list[dict], columns: list[str]) -> str:
    """Simple table formatter."""
    if not rows:
        return "No results."
    widths = {c: len(c) for c in columns}
    for row in rows:
        for c in columns:
            widths[c] = max(widths[c], len(str(row.get(c, ""))))

    header = "  ".join(c.upper().ljust(widths[c]) for c in columns)
    separator = "  ".join("-" * widths[c] for c in columns)
    lines = [header, separator]
    for row in rows:
        lines.append("  ".join(str(row.get(c, "")).ljust(widths[c]) for c in columns))
    return "\n".join(lines)


def _parse_value(raw: str) -> Any:
    """Interpret a --arg value as JSON when possible, else as a plain string."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def _format_issue(issue: ValidationIssue) -> str:
    return f"{issue.path or '<arguments>'}: {issue.message}"


@click.group()
@click.option("--preset", "presets", multiple=True, help="Preset to load (repeatable)")
@click.option(
    "--config-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Workflow directory (.workflows or .mcp-workflows) with override files",
)
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table")
@click.option("--log-level", default="WARNING", help="Log level for diagnostics on stderr")
@click.pass_context
def cli(
    ctx: click.Context,
    presets: tuple[str, ...],
    config_dir: Path | None,
    output_format: str,
    log_level: str,
) -> None:
    """ToolForge CLI — inspect and call declared tools."""
    setup_logging(log_level)
    settings = get_settings()

    loader = DeclarationLoader(PresetCatalog(settings.preset_search_paths))
    ctx.meta["loader"] = loader
    ctx.meta["presets"] = list(presets) or settings.preset_names
    ctx.meta["config_dir"] = config_dir or settings.config_dir
    ctx.meta["output_format"] = output_format
    ctx.obj = ToolRegistry(loader.load(ctx.meta["presets"], ctx.meta["config_dir"]))


def _output(ctx: click.Context, data: Any, columns: list[str] | None = None) -> None:
    fmt = ctx.meta.get("output_format", "table")
    if fmt == "json":
        click.echo(json.dumps(data, indent=2, default=str))
    elif isinstance(data, list) and columns:
        click.echo(_format_table(data, columns))
    else:
        click.echo(json.dumps(data, indent=2, default=str))


@cli.command("list")
@click.pass_context
def list_tools(ctx: click.Context) -> None:
    """List registered tools."""
    registry: ToolRegistry = ctx.obj
    rows = [
        {
            "name": tool.name,
            "description": tool.description,
            "parameters": ", ".join(tool.input_schema.get("properties", {})),
        }
        for tool in registry.list_tools()
    ]
    _output(ctx, rows, ["name", "description", "parameters"])


@cli.command()
@click.argument("name")
@click.pass_context
def schema(ctx: click.Context, name: str) -> None:
    """Show a tool's input schema."""
    registry: ToolRegistry = ctx.obj
    try:
        tool = registry.get(name)
    except ToolNotFoundError as e:
        raise click.ClickException(str(e))
    _output(ctx, tool.to_dict())


@cli.command()
@click.argument("name")
@click.option("--arg", "args", multiple=True, help="key=value pairs; values are parsed as JSON")
@click.option("--json-args", default=None, help="All arguments as a JSON object")
@click.pass_context
def call(ctx: click.Context, name: str, args: tuple[str, ...], json_args: str | None) -> None:
    """Validate arguments and print the tool's rendered prompt."""
    registry: ToolRegistry = ctx.obj
    arguments: dict[str, Any] = {}
    if json_args:
        try:
            arguments = json.loads(json_args)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--json-args")
        if not isinstance(arguments, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--json-args")
    for item in args:
        if "=" not in item:
            raise click.BadParameter(f"'{item}' is not key=value", param_hint="--arg")
        key, value = item.split("=", 1)
        arguments[key] = _parse_value(value)

    try:
        invocation = registry.invoke(name, arguments)
    except ToolNotFoundError as e:
        raise click.ClickException(str(e))

    if not invocation.ok:
        click.echo(f"Invalid arguments for '{name}':", err=True)
        for issue in invocation.issues:
            click.echo(f"  - {_format_issue(issue)}", err=True)
        ctx.exit(1)
    click.echo(invocation.text)


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Check declaration files for malformed parameter definitions."""
    loader: DeclarationLoader = ctx.meta["loader"]
    files = loader.source_files(ctx.meta["presets"], ctx.meta["config_dir"])
    problems: list[str] = []
    for path in files:
        for key, entry in loader.load_raw(path).items():
            problems.extend(f"{path.name}: {p}" for p in lint_declaration(str(key), entry))

    if not problems:
        click.echo(f"{len(files)} file(s) checked, no problems found.")
        return
    for problem in problems:
        click.echo(f"  - {problem}")
    click.echo(f"{len(problems)} problem(s) found.", err=True)
    ctx.exit(1)


@cli.command()
@click.pass_context
def presets(ctx: click.Context) -> None:
    """List available presets."""
    loader: DeclarationLoader = ctx.meta["loader"]
    names = loader.catalog.available()
    _output(ctx, [{"preset": n} for n in names], ["preset"])


if __name__ == "__main__":
    cli()
