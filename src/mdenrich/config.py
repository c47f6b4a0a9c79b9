"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:               str = "mdenrich"
    max_description_length: int = Field(default=150, ge=20, description="Cap for generated and repaired descriptions")
    max_title_length:       int = Field(default=60,  ge=1,  description="Titles longer than this are flagged")
    max_tags:               int = Field(default=8,   ge=0,  description="Max analyzer-derived tags; 0 disables")
    words_per_minute:       int = Field(default=200, ge=1,  description="Reading speed used for reading_time")
    toc_max_depth:          int = Field(default=4,   ge=1, le=6, description="Deepest heading level listed in a TOC")
    toc_min_entries:        int = Field(default=2,   ge=1,  description="Fewer headings than this yields no TOC")
    repair_frontmatter:     bool = Field(default=True,  description="Repair the frontmatter block during a run")
    generate_toc:           bool = Field(default=False, description="Insert a table of contents during a run")
    validate_content:       bool = Field(default=True,  description="Run validator plugins during a run")
    default_category:       Optional[str] = Field(default=None, description="Category used when none is derived")
    max_workers:            int = Field(default=4, ge=1, description="Worker threads for batch runs")
    document_timeout:       Optional[float] = Field(default=None, gt=0, description="Per-document timeout in seconds")
    output_dir:             str = Field(default="dist",     description="Directory for enriched documents + JSON")
    parser_config:          str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    log_level:              str = Field(default="INFO", pattern="^(TRACE|DEBUG|INFO|SUCCESS|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDENRICH_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDENRICH_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
