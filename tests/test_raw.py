"""Tests for mpegflow.raw."""
from __future__ import annotations

import io

from mpegflow.raw import RawEmitter


class TestEmitRaw:
    def test_zero_displacements_suppressed(self, make_vectors):
        out = io.StringIO()
        vectors = make_vectors((10, 10, 12, 9), (4, 4, 4, 4), (30, 8, 32, 8), (0, 0, 0, 0))
        RawEmitter(out).emit_raw(5, 1200, "P", vectors)
        lines = out.getvalue().splitlines()
        assert lines[0] == "# pts=1200 frame_index=5 pict_type=P output_type=raw shape=4x4"
        assert lines[1:] == ["12\t9\t2\t-1", "32\t8\t2\t0"]

    def test_pts_printed_verbatim(self, make_vectors):
        out = io.StringIO()
        RawEmitter(out).emit_raw(1, -2, "I", make_vectors())
        assert out.getvalue() == "# pts=-2 frame_index=1 pict_type=I output_type=raw shape=0x4\n"

    def test_counts_emissions(self, make_vectors):
        emitter = RawEmitter(io.StringIO())
        emitter.emit_raw(1, 0, "I", make_vectors((0, 0, 1, 0)))
        emitter.emit_raw(2, 1, "P", make_vectors())
        assert emitter.emitted == 2
