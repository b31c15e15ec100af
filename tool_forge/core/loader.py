"""Declaration loading — presets and workflow directories folded into one set."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from tool_forge.config import BUILTIN_PRESETS_DIR
from tool_forge.core.declarations import lint_declaration, parse_declaration_set
from tool_forge.core.merge import DeclarationSet, merge_declaration_sets

logger = structlog.get_logger()

YAML_SUFFIXES = (".yaml", ".yml")
WORKFLOW_DIR_NAMES = (".workflows", ".mcp-workflows")


class PresetCatalog:
    """Knows which directories hold preset declaration files."""

    def __init__(self, search_paths: list[Path] | None = None) -> None:
        self.search_paths = [Path(p) for p in (search_paths or [BUILTIN_PRESETS_DIR])]

    def _preset_files(self) -> dict[str, Path]:
        found: dict[str, Path] = {}
        for directory in self.search_paths:
            if not directory.is_dir():
                logger.warning("presets.directory_missing", path=str(directory))
                continue
            for path in sorted(directory.iterdir()):
                if path.suffix.lower() in YAML_SUFFIXES and path.stem not in found:
                    found[path.stem] = path
        return found

    def available(self) -> list[str]:
        """Names of all presets, sorted."""
        return sorted(self._preset_files())

    def path_for(self, name: str) -> Path | None:
        return self._preset_files().get(name)


class DeclarationLoader:
    """Reads declaration files and folds them with merge precedence.

    A source that cannot be read or parsed is logged and skipped; it never
    aborts the load of the remaining sources.
    """

    def __init__(self, catalog: PresetCatalog | None = None) -> None:
        self.catalog = catalog or PresetCatalog()

    def _read_yaml(self, path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning("loader.file_skipped", path=str(path), error=str(e))
            return None

    def load_file(self, path: Path | str) -> DeclarationSet:
        path = Path(path)
        raw = self._read_yaml(path)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning("loader.not_a_mapping", path=str(path))
            return {}

        for key, entry in raw.items():
            for problem in lint_declaration(str(key), entry):
                logger.warning("loader.lint_problem", path=str(path), tool=key, problem=problem)

        declarations = parse_declaration_set(raw, source=str(path))
        logger.info("loader.file_loaded", path=str(path), tools=len(declarations))
        return declarations

    def load_presets(self, names: list[str]) -> DeclarationSet:
        """Load presets in the given order; later presets take precedence."""
        merged: DeclarationSet = {}
        for name in names:
            if not name:
                logger.warning("loader.preset_empty_name")
                continue
            path = self.catalog.path_for(name)
            if path is None:
                logger.warning("loader.preset_not_found", preset=name)
                continue
            merge_declaration_sets(merged, self.load_file(path))
        return merged

    def directory_files(self, directory: Path | str) -> list[Path]:
        """YAML files of a workflow directory, in filename order."""
        directory = Path(directory).resolve()
        if not directory.is_dir():
            logger.warning("loader.directory_missing", path=str(directory))
            return []
        if directory.name not in WORKFLOW_DIR_NAMES:
            logger.warning(
                "loader.directory_name_invalid",
                path=str(directory),
                expected=list(WORKFLOW_DIR_NAMES),
            )
            return []

        files = sorted(p for p in directory.iterdir() if p.suffix.lower() in YAML_SUFFIXES)
        if not files:
            logger.warning("loader.directory_empty", path=str(directory))
        return files

    def load_directory(self, directory: Path | str) -> DeclarationSet:
        """Load every YAML file of a workflow directory; later files take precedence."""
        merged: DeclarationSet = {}
        for path in self.directory_files(directory):
            merge_declaration_sets(merged, self.load_file(path))
        return merged

    def source_files(
        self,
        presets: list[str] | None = None,
        directory: Path | str | None = None,
    ) -> list[Path]:
        """Every file ``load`` would read, in precedence order."""
        files = [p for p in (self.catalog.path_for(n) for n in presets or [] if n) if p]
        if directory:
            files.extend(self.directory_files(directory))
        return files

    def load(
        self,
        presets: list[str] | None = None,
        directory: Path | str | None = None,
    ) -> DeclarationSet:
        """Presets first, then user overrides from ``directory``."""
        merged = self.load_presets(presets or [])
        if directory:
            merge_declaration_sets(merged, self.load_directory(directory))
        return merged

    def load_raw(self, path: Path | str) -> dict[str, Any]:
        """Raw mapping of a single file, for linting."""
        raw = self._read_yaml(Path(path))
        return raw if isinstance(raw, dict) else {}
