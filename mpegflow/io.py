"""Decoder front end: motion vector export built on PyAV."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Optional

import av
import av.logging
import numpy as np
from av.error import FFmpegError
from loguru import logger

# FFmpeg's av_get_picture_type_char() table, keyed by PyAV picture type name.
_PICT_TYPE_CHARS = {
    "I": "I",
    "P": "P",
    "B": "B",
    "S": "S",
    "SI": "i",
    "SP": "p",
    "BI": "b",
}

# AVPictureType values, which PyAV 14+ reports as plain ints.
_PICT_TYPE_NAMES = ("NONE", "I", "P", "B", "S", "SI", "SP", "BI")

VECTOR_FIELDS = ("src_x", "src_y", "dst_x", "dst_y")


class DecoderError(RuntimeError):
    pass


@dataclass
class DecodedFrame:
    pts: int
    pict_type: str
    vectors: np.ndarray

    @property
    def has_vectors(self) -> bool:
        return len(self.vectors) > 0


def picture_type_char(value: Any) -> str:
    """Return the single-character tag FFmpeg prints for a picture type."""

    name = getattr(value, "name", value)
    if isinstance(name, int) and not isinstance(name, bool):
        if not 0 <= name < len(_PICT_TYPE_NAMES):
            return "?"
        name = _PICT_TYPE_NAMES[name]
    if not isinstance(name, str):
        return "?"
    return _PICT_TYPE_CHARS.get(name.upper(), "?")


def empty_vectors() -> np.ndarray:
    return np.zeros((0, 4), dtype=np.int32)


def vectors_from_side_data(side_data: Any) -> np.ndarray:
    """Copy MOTION_VECTORS side data into an ``(N, 4)`` array of ``sx, sy, dx, dy``.

    The copy detaches the vectors from the decoder's buffers, which are
    recycled once the next frame is requested.
    """

    if side_data is None:
        return empty_vectors()
    table = side_data.to_ndarray()
    if table.size == 0:
        return empty_vectors()
    return np.stack([table[name].astype(np.int32) for name in VECTOR_FIELDS], axis=1)


def configure_ffmpeg_logging(quiet: bool) -> None:
    av.logging.set_level(av.logging.PANIC if quiet else av.logging.WARNING)


class MotionVectorReader:
    """Decode the first video stream of a container with motion vector export enabled.

    ``frames()`` yields one :class:`DecodedFrame` per decoded picture and
    returns normally at end of stream; any FFmpeg failure surfaces as
    :class:`DecoderError`.
    """

    def __init__(self, container: Any, stream: Any) -> None:
        self.container = container
        self.stream = stream
        codec = stream.codec_context
        self.width = int(codec.width or 0)
        self.height = int(codec.height or 0)
        self.frame_count = int(stream.frames or 0)
        self._last_pts: Optional[int] = None

    @classmethod
    def open(cls, path: Path | str, *, quiet: bool = False) -> "MotionVectorReader":
        configure_ffmpeg_logging(quiet)
        try:
            container = av.open(str(path))
        except (FFmpegError, OSError) as exc:
            raise DecoderError(f"Couldn't open file {path}: {exc}") from exc
        if not container.streams.video:
            container.close()
            raise DecoderError(f"Video stream not found in {path}")
        stream = container.streams.video[0]
        stream.codec_context.options = {"flags2": "+export_mvs"}
        reader = cls(container, stream)
        logger.debug(
            "Opened {} ({}x{}, codec={}, frames={})",
            path,
            reader.width,
            reader.height,
            stream.codec_context.name,
            reader.frame_count or "unknown",
        )
        return reader

    def __enter__(self) -> "MotionVectorReader":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self.container.close()

    def _frame_pts(self, frame: Any) -> int:
        pts = frame.pts if frame.pts is not None else frame.dts
        if pts is None:
            pts = 0 if self._last_pts is None else self._last_pts + 1
        self._last_pts = int(pts)
        return self._last_pts

    def frames(self) -> Iterator[DecodedFrame]:
        try:
            for frame in self.container.decode(self.stream):
                if not self.width or not self.height:
                    self.width, self.height = int(frame.width), int(frame.height)
                vectors = vectors_from_side_data(frame.side_data.get("MOTION_VECTORS"))
                yield DecodedFrame(
                    pts=self._frame_pts(frame),
                    pict_type=picture_type_char(frame.pict_type),
                    vectors=vectors,
                )
        except FFmpegError as exc:
            raise DecoderError(str(exc)) from exc
