"""Dense per-frame motion grids.

A :class:`FrameGrid` quantises the sparse vectors a codec reports into
square cells of ``grid_step`` pixels.  Each cell holds one displacement
``(dx, dy)`` and an occupancy tag:

``EMPTY`` (0)
    No vector landed in the cell; its displacement reads as zero.
``DIRECT`` (1)
    The cell was written from a decoder vector.
``FILLED`` (2)
    The cell was filled by averaging two occupied neighbours.

Integer halving throughout truncates toward zero so that negative
displacements average the same way as positive ones.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TextIO, Tuple

import numpy as np

__all__ = [
    "DIRECT",
    "EMPTY",
    "FILLED",
    "MAX_GRID_SIZE",
    "FrameGrid",
    "bin_vectors",
    "fill_missing_vectors",
    "grid_shape",
    "interpolate_flow",
    "write_grid",
]

MAX_GRID_SIZE = 512

EMPTY = 0
DIRECT = 1
FILLED = 2

ORIGIN_VIDEO = "video"
ORIGIN_INTERPOLATED = "interpolated"
ORIGIN_DUMMY = "dummy"


def grid_shape(width: int, height: int, grid_step: int, max_size: int = MAX_GRID_SIZE) -> Tuple[int, int]:
    """Return ``(rows, cols)`` for a ``width`` x ``height`` frame."""

    return min(height // grid_step, max_size), min(width // grid_step, max_size)


def _halve(total: np.ndarray) -> np.ndarray:
    return np.sign(total) * (np.abs(total) // 2)


@dataclass
class FrameGrid:
    pts: int
    frame_index: int
    pict_type: str
    grid_step: int
    shape: Tuple[int, int]
    origin: str = ORIGIN_VIDEO
    empty: bool = True
    printed: bool = False
    dx: np.ndarray = field(init=False, repr=False)
    dy: np.ndarray = field(init=False, repr=False)
    occupancy: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.dx = np.zeros(self.shape, dtype=np.int32)
        self.dy = np.zeros(self.shape, dtype=np.int32)
        self.occupancy = np.zeros(self.shape, dtype=np.uint8)

    @property
    def rows(self) -> int:
        return self.shape[0]

    @property
    def cols(self) -> int:
        return self.shape[1]


def bin_vectors(grid: FrameGrid, vectors: np.ndarray) -> None:
    """Write ``(sx, sy, dx, dy)`` vectors into the cells of their destination.

    Rows and columns are clamped into the grid.  When several vectors
    share a cell the last one in input order is kept.
    """

    if len(vectors) == 0:
        return
    grid.empty = False
    if grid.rows == 0 or grid.cols == 0:
        return
    vectors = np.asarray(vectors, dtype=np.int64)
    sx, sy, dst_x, dst_y = vectors.T
    rows = np.clip(dst_y // grid.grid_step, 0, grid.rows - 1)
    cols = np.clip(dst_x // grid.grid_step, 0, grid.cols - 1)
    flat = rows * grid.cols + cols
    # first hit in reversed order == last writer
    _, first_rev = np.unique(flat[::-1], return_index=True)
    keep = len(flat) - 1 - first_rev
    grid.dx[rows[keep], cols[keep]] = dst_x[keep] - sx[keep]
    grid.dy[rows[keep], cols[keep]] = dst_y[keep] - sy[keep]
    grid.occupancy[rows[keep], cols[keep]] = DIRECT


def fill_missing_vectors(grid: FrameGrid, sweeps: int = 2) -> int:
    """Fill interior holes bracketed by occupied neighbours; return the count filled.

    Cells are visited in raster order and updated in place, so a cell
    filled earlier in a sweep already counts as a neighbour for the cells
    after it.  A left/right pair wins over a top/bottom pair.  Border cells
    are never filled.
    """

    occ, dx, dy = grid.occupancy, grid.dx, grid.dy
    filled = 0
    for _ in range(sweeps):
        holes = np.argwhere(occ[1:-1, 1:-1] == EMPTY) + 1
        for i, j in holes:
            if occ[i, j - 1] and occ[i, j + 1]:
                a, b = (i, j - 1), (i, j + 1)
            elif occ[i - 1, j] and occ[i + 1, j]:
                a, b = (i - 1, j), (i + 1, j)
            else:
                continue
            dx[i, j] = _halve(np.int64(dx[a]) + dx[b])
            dy[i, j] = _halve(np.int64(dy[a]) + dy[b])
            occ[i, j] = FILLED
            filled += 1
    return filled


def interpolate_flow(grid: FrameGrid, prev: FrameGrid, nxt: FrameGrid) -> None:
    """Replace ``grid``'s displacements with the cellwise mean of its neighbours."""

    grid.dx = _halve(prev.dx.astype(np.int64) + nxt.dx).astype(np.int32)
    grid.dy = _halve(prev.dy.astype(np.int64) + nxt.dy).astype(np.int32)
    grid.empty = False
    grid.origin = ORIGIN_INTERPOLATED


def write_grid(out: TextIO, grid: FrameGrid, pts: int, *, occupancy: bool = False) -> None:
    blocks = 3 if occupancy else 2
    out.write(
        f"# pts={pts} frame_index={grid.frame_index} pict_type={grid.pict_type} "
        f"output_type=arranged shape={blocks * grid.rows}x{grid.cols} origin={grid.origin}\n"
    )
    matrices = [grid.dx, grid.dy]
    if occupancy:
        matrices.append(grid.occupancy)
    for matrix in matrices:
        for row in matrix:
            out.write("".join(f"{int(v):4d}" for v in row) + "\n")
