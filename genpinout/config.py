"""Configuration loading from YAML + environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings

from genpinout.style import DEFAULT_DPI, DEFAULT_PAGE


class GenPinoutConfig(BaseSettings):
    log_level: str = "INFO"

    # Page defaults, overridden by PAGE / DPI rows
    default_page: str = DEFAULT_PAGE
    default_dpi: int = DEFAULT_DPI

    # Output
    output_dir: str = "svg"

    # Text measurement
    font_metrics: Literal["heuristic", "pillow"] = "heuristic"
    font_paths: dict[str, str] = Field(default_factory=dict)

    # Images and icons resolve against this directory (default: next to the input)
    resource_dir: str = ""

    model_config = {
        "env_prefix": "GENPINOUT_",
    }

    @classmethod
    def from_yaml(cls, path: str | Path = "genpinout.yaml") -> GenPinoutConfig:
        """Load config from YAML file; env vars fill in what the file leaves unset."""
        yaml_path = Path(path)
        yaml_data: dict[str, Any] = {}

        if yaml_path.exists():
            with yaml_path.open("r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
            yaml_data = _flatten_yaml(raw.get("genpinout", {}))

        return cls(**yaml_data)


def _flatten_yaml(data: dict, prefix: str = "") -> dict:
    """Flatten nested YAML into flat key-value pairs for Pydantic."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}" if not prefix else f"{prefix}_{key}"
        if isinstance(value, dict) and key not in ("font_paths",):
            flat.update(_flatten_yaml(value, full_key))
        else:
            flat[full_key] = value
    return flat
