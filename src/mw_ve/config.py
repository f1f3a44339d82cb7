"""Project configuration loaded from pyproject.toml."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class MWVEConfig(BaseModel):
    """Configuration for mw-ve."""

    # Parsoid HTML version requested by the editor client
    parsoid_version: str = "2.4.0"

    # Edit check parameters
    main_namespace: int = 0
    minimum_characters: int = Field(default=50, ge=1)
    reference_type: str = "mwReference"


@lru_cache(maxsize=1)
def load_config() -> MWVEConfig:
    """Load configuration from pyproject.toml.

    Returns:
        MWVEConfig with settings from [tool.mw-ve] section,
        falling back to defaults if not found.
    """
    pyproject_path = _find_pyproject()
    if pyproject_path is None:
        return MWVEConfig()

    with pyproject_path.open("rb") as f:
        data = tomllib.load(f)

    tool_config: dict[str, Any] = data.get("tool", {}).get("mw-ve", {})
    return MWVEConfig(**tool_config)


def _find_pyproject() -> Path | None:
    """Find pyproject.toml by walking up from current file."""
    current = Path(__file__).resolve().parent
    for _ in range(10):  # Max 10 levels up
        candidate = current / "pyproject.toml"
        if candidate.exists():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


# Convenience accessor
config = load_config()
