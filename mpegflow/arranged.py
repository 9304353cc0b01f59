"""Arranged output: grid binning plus the three-frame interpolation window."""
from __future__ import annotations

import sys
from typing import List, Optional, Sequence, TextIO

from loguru import logger

from .config import ArrangeConfig
from .grid import (
    ORIGIN_DUMMY,
    ORIGIN_VIDEO,
    FrameGrid,
    bin_vectors,
    fill_missing_vectors,
    grid_shape,
    interpolate_flow,
    write_grid,
)


class ArrangedPipeline:
    """Buffer recent frames as dense grids and emit each one exactly once.

    A frame that arrives without vectors is held in ``prev`` until a frame
    with vectors shows up.  If exactly one such frame sits between two
    frames that carry vectors, it is emitted as their cellwise mean.
    Otherwise the buffered frames are emitted as they stand.  Emitted
    timestamps are rebased so the first emitted frame reports ``pts=0``.
    """

    def __init__(
        self,
        config: ArrangeConfig,
        width: int,
        height: int,
        out: Optional[TextIO] = None,
    ) -> None:
        self.config = config
        self.grid_step = config.grid_step
        self.shape = grid_shape(width, height, self.grid_step, config.max_grid_size)
        self.out = out if out is not None else sys.stdout
        self.prev: List[FrameGrid] = []
        self.first_pts: Optional[int] = None
        self.emitted = 0

    def emit_arranged(self, frame_index: int, pts: int, pict_type: str, vectors: Sequence) -> None:
        cur = FrameGrid(
            pts=pts,
            frame_index=frame_index,
            pict_type=pict_type,
            grid_step=self.grid_step,
            shape=self.shape,
            origin=ORIGIN_VIDEO,
        )
        bin_vectors(cur, vectors)
        if self.grid_step == 8:
            fill_missing_vectors(cur)

        if self.config.gap_fill == "dummy":
            self._pad_gap(pts)

        if len(vectors) > 0:
            if len(self.prev) == 2 and not self.prev[0].empty:
                middle = self.prev[1]
                interpolate_flow(middle, self.prev[0], cur)
                self.emit(middle)
            else:
                for grid in self.prev:
                    self.emit(grid)
            self.prev.clear()
            self.emit(cur)
        self.prev.append(cur)

    def flush(self) -> None:
        """Emit whatever is still buffered, in buffer order."""

        for grid in self.prev:
            self.emit(grid)
        self.prev.clear()

    def emit(self, grid: FrameGrid) -> None:
        if grid.printed:
            return
        if self.first_pts is None:
            self.first_pts = grid.pts
        write_grid(self.out, grid, grid.pts - self.first_pts, occupancy=self.config.occupancy)
        grid.printed = True
        self.emitted += 1

    def _pad_gap(self, pts: int) -> None:
        if not self.prev:
            return
        last_pts = self.prev[-1].pts
        missing = pts - last_pts - 1
        if missing <= 0:
            return
        if missing > self.config.max_gap_frames:
            logger.debug("Not padding gap of {} pts values after pts {}", missing, last_pts)
            return
        for dummy_pts in range(last_pts + 1, pts):
            self.prev.append(
                FrameGrid(
                    pts=dummy_pts,
                    frame_index=-1,
                    pict_type="?",
                    grid_step=self.grid_step,
                    shape=self.shape,
                    origin=ORIGIN_DUMMY,
                )
            )
