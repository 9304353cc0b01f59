"""Raw output: every non-zero codec vector, unbinned."""
from __future__ import annotations

import sys
from typing import Optional, TextIO

import numpy as np


class RawEmitter:
    def __init__(self, out: Optional[TextIO] = None) -> None:
        self.out = out if out is not None else sys.stdout
        self.emitted = 0

    def emit_raw(self, frame_index: int, pts: int, pict_type: str, vectors: np.ndarray) -> None:
        """Write one header line then ``dst_x dst_y dx dy`` rows, skipping zero displacements."""

        vectors = np.asarray(vectors, dtype=np.int64).reshape(-1, 4)
        self.out.write(
            f"# pts={pts} frame_index={frame_index} pict_type={pict_type} "
            f"output_type=raw shape={len(vectors)}x4\n"
        )
        for sx, sy, dst_x, dst_y in vectors:
            mvdx, mvdy = dst_x - sx, dst_y - sy
            if mvdx != 0 or mvdy != 0:
                self.out.write(f"{dst_x}\t{dst_y}\t{mvdx}\t{mvdy}\n")
        self.emitted += 1
