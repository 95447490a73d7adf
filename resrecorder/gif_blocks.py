"""Low-level walking of the blocks that make up a GIF data stream."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

HEADER_SIZE = 6
SCREEN_DESCRIPTOR_SIZE = 7
APP_EXTENSION_SIZE = 14
COMMENT_EXTENSION_SIZE = 2
PLAIN_TEXT_EXTENSION_SIZE = 15
CONTROL_EXTENSION_SIZE = 8
IMAGE_DESCRIPTOR_SIZE = 10

SIGNATURE = b"GIF"

_EXTENSION_INTRODUCER = 0x21
_IMAGE_SEPARATOR = 0x2C
_TRAILER = 0x3B


class GifFormatError(ValueError):
    """The data is not a GIF stream, or it is damaged or truncated."""


class BlockType(enum.Enum):
    """Kinds of block found after the logical screen descriptor."""

    UNKNOWN = "unknown"
    APP_EXTENSION = "application extension"
    COMMENT_EXTENSION = "comment extension"
    CONTROL_EXTENSION = "graphic control extension"
    PLAIN_TEXT = "plain text extension"
    IMAGE = "image"
    TRAILER = "trailer"


_EXTENSION_LABELS = {
    0x01: BlockType.PLAIN_TEXT,
    0xF9: BlockType.CONTROL_EXTENSION,
    0xFE: BlockType.COMMENT_EXTENSION,
    0xFF: BlockType.APP_EXTENSION,
}


def _color_table_bytes(size_field: int) -> int:
    return 3 * (1 << (size_field + 1))


@dataclass(frozen=True)
class ScreenDescriptor:
    """The logical screen descriptor that follows the GIF header."""

    width: int
    height: int
    packed: int
    background_index: int
    pixel_aspect: int
    background_color: Optional[Tuple[int, int, int]] = None

    @property
    def has_global_color_table(self) -> bool:
        return bool(self.packed >> 7)

    @property
    def color_resolution(self) -> int:
        return ((self.packed & 0x70) >> 4) + 1

    @property
    def sort_flag(self) -> bool:
        return bool((self.packed & 0x08) >> 3)

    @property
    def global_color_table_size(self) -> int:
        """The raw three-bit size field of the global colour table."""
        return self.packed & 0x07

    @property
    def global_color_table_bytes(self) -> int:
        """Bytes taken by the global colour table, 0 when there is none."""
        if not self.has_global_color_table:
            return 0
        return _color_table_bytes(self.global_color_table_size)

    @property
    def data_offset(self) -> int:
        """Offset of the first block after header, descriptor and table."""
        return HEADER_SIZE + SCREEN_DESCRIPTOR_SIZE + self.global_color_table_bytes


def is_gif(data) -> bool:
    """True when the data starts with the GIF signature."""
    return bytes(data[:3]) == SIGNATURE


def read_screen_descriptor(data) -> ScreenDescriptor:
    """Read the logical screen descriptor of a GIF stream."""
    if not is_gif(data):
        raise GifFormatError("missing GIF signature")
    end = HEADER_SIZE + SCREEN_DESCRIPTOR_SIZE
    if len(data) < end:
        raise GifFormatError("truncated logical screen descriptor")
    width, height, packed, bk_index, aspect = struct.unpack_from(
        "<HHBBB", bytes(data[HEADER_SIZE:end])
    )
    background = None
    if packed >> 7:
        color_at = end + 3 * bk_index
        if len(data) < color_at + 3:
            raise GifFormatError("truncated global color table")
        background = tuple(data[color_at : color_at + 3])
    return ScreenDescriptor(width, height, packed, bk_index, aspect, background)


def block_type(data, offset: int) -> BlockType:
    """Classify the block that starts at ``offset``."""
    if offset < 0 or offset >= len(data):
        return BlockType.UNKNOWN
    marker = data[offset]
    if marker == _EXTENSION_INTRODUCER:
        if offset + 1 >= len(data):
            return BlockType.UNKNOWN
        return _EXTENSION_LABELS.get(data[offset + 1], BlockType.UNKNOWN)
    if marker == _TRAILER:
        return BlockType.TRAILER
    if marker == _IMAGE_SEPARATOR:
        return BlockType.IMAGE
    return BlockType.UNKNOWN


def sub_blocks_length(data, offset: int) -> int:
    """Length of a chain of data sub-blocks, its zero terminator included."""
    total = 0
    position = offset
    while True:
        if position >= len(data):
            raise GifFormatError("data sub-blocks run past the end of the data")
        size = data[position]
        if size == 0:
            return total + 1
        total += size + 1
        position += size + 1


def block_length(data, offset: int) -> int:
    """Length in bytes of the whole block that starts at ``offset``."""
    kind = block_type(data, offset)
    if kind is BlockType.UNKNOWN:
        raise GifFormatError(f"unknown block at offset {offset}")
    if kind is BlockType.TRAILER:
        return 1
    if kind is BlockType.CONTROL_EXTENSION:
        return CONTROL_EXTENSION_SIZE
    if kind is BlockType.APP_EXTENSION:
        return APP_EXTENSION_SIZE + sub_blocks_length(data, offset + APP_EXTENSION_SIZE)
    if kind is BlockType.COMMENT_EXTENSION:
        return COMMENT_EXTENSION_SIZE + sub_blocks_length(
            data, offset + COMMENT_EXTENSION_SIZE
        )
    if kind is BlockType.PLAIN_TEXT:
        return PLAIN_TEXT_EXTENSION_SIZE + sub_blocks_length(
            data, offset + PLAIN_TEXT_EXTENSION_SIZE
        )

    if offset + IMAGE_DESCRIPTOR_SIZE > len(data):
        raise GifFormatError("truncated image descriptor")
    packed = data[offset + IMAGE_DESCRIPTOR_SIZE - 1]
    local_table = (packed >> 7) * _color_table_bytes(packed & 0x07)
    # one byte for the LZW minimum code size precedes the image data
    head = IMAGE_DESCRIPTOR_SIZE + local_table + 1
    return head + sub_blocks_length(data, offset + head)


def iter_blocks(data, start: Optional[int] = None) -> Iterator[Tuple[BlockType, int, int]]:
    """Yield ``(type, offset, length)`` for each block of a GIF stream.

    Walking begins at ``start`` or, when it is omitted, just after the global
    colour table. It ends after the trailer, at an unknown block, or at a
    block that does not fit in the data.
    """
    offset = read_screen_descriptor(data).data_offset if start is None else start
    size = len(data)
    while offset < size:
        kind = block_type(data, offset)
        if kind is BlockType.UNKNOWN:
            return
        try:
            length = block_length(data, offset)
        except GifFormatError:
            return
        if length <= 0 or offset + length > size:
            return
        yield kind, offset, length
        if kind is BlockType.TRAILER:
            return
        offset += length