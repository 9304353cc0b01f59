"""Frame dispatch: drive the decoder and route each frame to an emitter."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO, Union

from loguru import logger
from tqdm import tqdm

from .arranged import ArrangedPipeline
from .config import AppConfig
from .io import DecoderError, MotionVectorReader
from .raw import RawEmitter

Emitter = Union[RawEmitter, ArrangedPipeline]


class FrameDispatcher:
    """Number frames in decode order and drop any whose PTS does not advance."""

    def __init__(self, emitter: Emitter, *, quiet: bool = False) -> None:
        self.emitter = emitter
        self.quiet = quiet
        self.frame_index = 0
        self.prev_pts: Optional[int] = None
        self.last_pict_type = "?"
        self.dropped = 0

    @property
    def raw(self) -> bool:
        return isinstance(self.emitter, RawEmitter)

    def on_frame(self, pts: int, pict_type: str, vectors: Sequence) -> bool:
        self.frame_index += 1
        if self.prev_pts is not None and pts <= self.prev_pts:
            self.dropped += 1
            if not self.quiet:
                logger.warning(
                    "Skipping frame {} (frame with pts {} already processed).", self.frame_index, pts
                )
            return False
        if self.raw:
            self.emitter.emit_raw(self.frame_index, pts, pict_type, vectors)
        else:
            self.emitter.emit_arranged(self.frame_index, pts, pict_type, vectors)
        self.prev_pts = pts
        self.last_pict_type = pict_type
        return True

    def on_end_of_stream(self) -> None:
        if self.raw:
            return
        logger.debug("End of stream after pts {} ({})", self.prev_pts, self.last_pict_type)
        self.emitter.flush()


def build_emitter(config: AppConfig, width: int, height: int, out: TextIO) -> Emitter:
    if config.raw:
        return RawEmitter(out)
    return ArrangedPipeline(config.arrange, width, height, out)


def run_extract(config: AppConfig, video_path: Path | str, out: Optional[TextIO] = None) -> int:
    """Decode ``video_path`` and write motion vectors to ``out``; return the exit code."""

    out = out if out is not None else sys.stdout
    try:
        reader = MotionVectorReader.open(video_path, quiet=config.quiet)
    except DecoderError as exc:
        logger.error("Error occurred: {}", exc)
        return 1

    dispatcher: Optional[FrameDispatcher] = None
    with_vectors = 0
    with reader, tqdm(
        total=reader.frame_count or None,
        desc="decode",
        unit="frame",
        leave=False,
        disable=not config.decoder.progress,
    ) as bar:
        try:
            for frame in reader.frames():
                if dispatcher is None:
                    emitter = build_emitter(config, reader.width, reader.height, out)
                    dispatcher = FrameDispatcher(emitter, quiet=config.quiet)
                dispatcher.on_frame(frame.pts, frame.pict_type, frame.vectors)
                with_vectors += frame.has_vectors
                bar.update(1)
        except DecoderError as exc:
            logger.error("Error occurred: {}", exc)
            return 1

    if dispatcher is None:
        logger.warning("No frames decoded from {}", video_path)
        return 0
    dispatcher.on_end_of_stream()
    logger.debug(
        "Decoded {} frames from {} ({} with vectors), dropped {}, emitted {}",
        dispatcher.frame_index,
        video_path,
        with_vectors,
        dispatcher.dropped,
        dispatcher.emitter.emitted,
    )
    return 0
