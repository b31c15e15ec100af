"""Application configuration — reads from environment variables and .env."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings

BUILTIN_PRESETS_DIR = Path(__file__).parent / "presets"


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings with env var support."""

    presets: str = ""
    config_dir: str | None = None
    preset_paths: str = ""
    port: int = 8400
    log_level: str = "INFO"

    model_config = {"env_prefix": "TOOL_FORGE_", "env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def preset_names(self) -> list[str]:
        return _split_list(self.presets)

    @property
    def preset_search_paths(self) -> list[Path]:
        """Extra preset directories first, then the presets shipped with the package."""
        return [Path(p) for p in _split_list(self.preset_paths)] + [BUILTIN_PRESETS_DIR]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
