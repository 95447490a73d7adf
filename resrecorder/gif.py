"""Splitting GIF streams into frames for playback."""

from __future__ import annotations

import itertools
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from resrecorder.gif_blocks import (
    BlockType,
    GifFormatError,
    ScreenDescriptor,
    iter_blocks,
    read_screen_descriptor,
)

_TRAILER = b"\x3b"
_WHITE = (255, 255, 255)
# Delays this short (old GIFs often use 0) are replaced by 100 ms.
_MIN_DELAY = 5
_SHORT_DELAY_SECONDS = 0.1

_SKIPPED = (BlockType.APP_EXTENSION, BlockType.COMMENT_EXTENSION)
_DRAWABLE = (BlockType.IMAGE, BlockType.PLAIN_TEXT)


@dataclass(frozen=True)
class GifFrame:
    """One frame of a GIF, kept as a standalone single-frame GIF stream."""

    data: bytes
    delay: Optional[int]
    disposal: int
    width: int
    height: int
    left: int
    top: int

    @property
    def delay_seconds(self) -> float:
        """How long the frame stays on screen."""
        if self.delay is None or self.delay < _MIN_DELAY:
            return _SHORT_DELAY_SECONDS
        return self.delay / 100.0


@dataclass
class GifImage:
    """A parsed GIF picture and the frames found in it."""

    width: int
    height: int
    background: Tuple[int, int, int]
    screen: ScreenDescriptor
    frames: List[GifFrame] = field(default_factory=list)

    def is_animated(self) -> bool:
        return len(self.frames) > 1

    def frame_count(self) -> int:
        """Number of frames of an animation; 0 for a still picture."""
        return len(self.frames) if self.is_animated() else 0

    def playback(self) -> Iterator[Tuple[GifFrame, float]]:
        """Yield ``(frame, seconds)`` pairs in display order.

        An animation repeats without end; a still picture is shown once.
        """
        frames = itertools.cycle(self.frames) if self.is_animated() else iter(self.frames)
        for frame in frames:
            yield frame, frame.delay_seconds


def _graphic_blocks(data, start: int):
    """Yield ``(control_offset, kind, offset, length)`` for each drawable block."""
    blocks = iter_blocks(data, start)
    for kind, offset, length in blocks:
        if kind in _SKIPPED:
            continue
        if kind is BlockType.TRAILER:
            return
        control = None
        if kind is BlockType.CONTROL_EXTENSION:
            control = offset
            for kind, offset, length in blocks:
                if kind in _DRAWABLE:
                    break
                if kind is BlockType.TRAILER:
                    return
            else:
                return
        yield control, kind, offset, length


def parse_gif(data) -> GifImage:
    """Parse a GIF stream into its frames.

    Raises :class:`GifFormatError` when the data is not a GIF or holds
    no frame at all.
    """
    data = bytes(data)
    screen = read_screen_descriptor(data)
    header = data[: screen.data_offset]
    frames: List[GifFrame] = []
    width = height = left = top = 0

    for control, kind, offset, length in _graphic_blocks(data, screen.data_offset):
        delay: Optional[int] = None
        disposal = 0
        if control is not None:
            packed = data[control + 3]
            disposal = (packed & 0x1C) >> 2
            (delay,) = struct.unpack_from("<H", data, control + 4)
        if kind is BlockType.IMAGE:
            left, top, width, height = struct.unpack_from("<HHHH", data, offset + 1)
        begin = control if control is not None else offset
        frames.append(
            GifFrame(
                data=header + data[begin : offset + length] + _TRAILER,
                delay=delay,
                disposal=disposal,
                width=width,
                height=height,
                left=left,
                top=top,
            )
        )

    if not frames:
        raise GifFormatError("GIF holds no frames")
    return GifImage(
        width=screen.width,
        height=screen.height,
        background=screen.background_color or _WHITE,
        screen=screen,
        frames=frames,
    )


def load_gif(path) -> GifImage:
    """Read and parse a GIF file."""
    return parse_gif(Path(path).read_bytes())