"""Configuration models and loader for mpegflow."""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator


class DecoderConfig(BaseModel):
    quiet: bool = Field(False, description="Suppress decoder diagnostics and duplicate-frame warnings.")
    progress: bool = Field(False, description="Show a progress bar on stderr while decoding.")


class ArrangeConfig(BaseModel):
    grid_step: int = Field(16, description="Cell size in pixels: 16 (coarse) or 8 (fine).")
    occupancy: bool = Field(False, description="Append the occupancy matrix to each arranged block.")
    max_grid_size: int = Field(512, ge=1, description="Upper bound on grid rows and columns.")
    gap_fill: str = Field("none", description="PTS gap policy: 'none' or 'dummy'.")
    max_gap_frames: int = Field(16, ge=0, description="Largest PTS gap that 'dummy' gap fill will pad.")

    @field_validator("grid_step")
    @classmethod
    def validate_grid_step(cls, value: int) -> int:
        if value not in {8, 16}:
            raise ValueError("grid_step must be 8 or 16")
        return value

    @field_validator("gap_fill")
    @classmethod
    def validate_gap_fill(cls, value: str) -> str:
        value = value.lower()
        if value not in {"none", "dummy"}:
            raise ValueError("gap_fill must be 'none' or 'dummy'")
        return value


class OutputConfig(BaseModel):
    raw: bool = Field(False, description="Dump every codec vector instead of arranged grids.")


class AppConfig(BaseModel):
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)
    arrange: ArrangeConfig = Field(default_factory=ArrangeConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @property
    def raw(self) -> bool:
        return self.output.raw

    @property
    def quiet(self) -> bool:
        return self.decoder.quiet


def load_config(path: Path | str | None) -> AppConfig:
    """Load configuration from YAML, falling back to defaults when missing."""

    if path is None:
        return AppConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        return AppConfig()
    data = yaml.safe_load(cfg_path.read_text()) or {}
    return AppConfig.model_validate(data)
