"""Shared fixtures for the mpegflow test suite."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, List

import numpy as np
import pytest
from loguru import logger

from mpegflow.config import AppConfig, ArrangeConfig


def vectors(*rows: tuple[int, int, int, int]) -> np.ndarray:
    """Build an ``(N, 4)`` vector array of ``(sx, sy, dx, dy)`` rows."""
    if not rows:
        return np.zeros((0, 4), dtype=np.int32)
    return np.array(rows, dtype=np.int32)


@pytest.fixture
def make_vectors() -> Callable[..., np.ndarray]:
    return vectors


@pytest.fixture
def default_config() -> AppConfig:
    """Return a default AppConfig with no file."""
    return AppConfig()


@pytest.fixture
def arrange_config() -> ArrangeConfig:
    return ArrangeConfig()


@pytest.fixture
def log_messages() -> List[str]:
    """Collect loguru messages emitted at WARNING or above during a test."""
    messages: List[str] = []
    handler_id = logger.add(lambda m: messages.append(str(m)), level="WARNING", format="{message}")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def sample_yaml(tmp_path: Path) -> Path:
    """Write a minimal config.yaml and return its path."""
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "decoder:\n"
        "  quiet: true\n"
        "arrange:\n"
        "  grid_step: 8\n"
        "  occupancy: true\n"
    )
    return cfg
