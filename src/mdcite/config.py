"""Application configuration: settings schema and mdcite.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "mdcite.yaml"


class Settings(BaseModel):
    parser_config:        str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    scope_dir:            Optional[str] = Field(default=None, description="Folder indexed for bare-filename links")
    similarity_threshold: float = Field(default=0.3, ge=0.0, le=1.0, description="Minimum score for anchor suggestions")
    max_suggestions:      int = Field(default=5, ge=1, description="Max anchor suggestions per broken link")
    full_files:           bool = Field(default=False, description="Extract whole-file links without a marker")
    output_format:        str = Field(default="text", pattern="^(text|json)$", description="text or json")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from mdcite.yaml, then MDCITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e

    for name in Settings.model_fields:
        if val := os.getenv(f"MDCITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
