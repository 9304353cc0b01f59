"""Tests for mpegflow.config."""
from __future__ import annotations

import pytest
from pydantic import ValidationError

from mpegflow.config import AppConfig, ArrangeConfig, DecoderConfig, load_config


# --- load_config ----------------------------------------------------------

class TestLoadConfig:
    def test_none_returns_defaults(self):
        cfg = load_config(None)
        assert isinstance(cfg, AppConfig)
        assert cfg.arrange.grid_step == 16

    def test_missing_file_returns_defaults(self, tmp_path):
        cfg = load_config(tmp_path / "nonexistent.yaml")
        assert cfg.arrange.occupancy is False
        assert cfg.raw is False

    def test_empty_file_returns_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        cfg = load_config(path)
        assert cfg.arrange.max_grid_size == 512

    def test_load_from_file(self, sample_yaml):
        cfg = load_config(sample_yaml)
        assert cfg.quiet is True
        assert cfg.arrange.grid_step == 8
        assert cfg.arrange.occupancy is True

    def test_defaults_preserved(self, sample_yaml):
        cfg = load_config(sample_yaml)
        assert cfg.arrange.gap_fill == "none"
        assert cfg.decoder.progress is False
        assert cfg.output.raw is False

    def test_invalid_grid_step_in_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("arrange:\n  grid_step: 12\n")
        with pytest.raises(ValidationError, match="grid_step"):
            load_config(path)


# --- Validators -----------------------------------------------------------

class TestValidators:
    def test_grid_step_valid(self):
        assert ArrangeConfig(grid_step=8).grid_step == 8
        assert ArrangeConfig(grid_step=16).grid_step == 16

    def test_grid_step_invalid(self):
        with pytest.raises(ValidationError, match="grid_step"):
            ArrangeConfig(grid_step=4)

    def test_gap_fill_normalizes(self):
        assert ArrangeConfig(gap_fill="DUMMY").gap_fill == "dummy"

    def test_gap_fill_invalid(self):
        with pytest.raises(ValidationError, match="gap_fill"):
            ArrangeConfig(gap_fill="linear")

    def test_max_grid_size_positive(self):
        with pytest.raises(ValidationError):
            ArrangeConfig(max_grid_size=0)

    def test_decoder_defaults(self):
        dc = DecoderConfig()
        assert dc.quiet is False
        assert dc.progress is False
