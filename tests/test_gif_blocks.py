import struct

import pytest

from resrecorder.gif_blocks import (
    CONTROL_EXTENSION_SIZE,
    BlockType,
    GifFormatError,
    block_length,
    block_type,
    is_gif,
    iter_blocks,
    read_screen_descriptor,
    sub_blocks_length,
)

HEADER = b"GIF89a"
GCT = b"\x00\x00\x00\xff\xff\xff"
LSD = struct.pack("<HHBBB", 2, 2, 0x80, 1, 0)
CONTROL = b"\x21\xf9\x04\x08\x0a\x00\x00\x00"
IMAGE = b"\x2c" + struct.pack("<HHHHB", 0, 0, 2, 2, 0) + b"\x02" + b"\x02\x4c\x01" + b"\x00"
TRAILER = b"\x3b"
GIF = HEADER + LSD + GCT + CONTROL + IMAGE + TRAILER
BODY_START = len(HEADER) + len(LSD) + len(GCT)


def test_is_gif_checks_signature():
    assert is_gif(GIF) is True
    assert is_gif(b"\x89PNG\r\n\x1a\n") is False
    assert is_gif(b"") is False


def test_is_gif_accepts_bytearray():
    assert is_gif(bytearray(GIF)) is True


def test_screen_descriptor_fields():
    descriptor = read_screen_descriptor(GIF)
    assert (descriptor.width, descriptor.height) == (2, 2)
    assert descriptor.has_global_color_table is True
    assert descriptor.background_index == 1
    assert descriptor.background_color == tuple(GCT[3:6])
    assert descriptor.global_color_table_bytes == len(GCT)
    assert descriptor.data_offset == BODY_START


@pytest.mark.parametrize("resolution", [1, 4, 8])
@pytest.mark.parametrize("sort", [0, 1])
@pytest.mark.parametrize("size", [0, 3, 7])
def test_packed_field_round_trip(resolution, sort, size):
    packed = 0x80 | ((resolution - 1) << 4) | (sort << 3) | size
    table = bytes(3 * (1 << (size + 1)))
    data = HEADER + struct.pack("<HHBBB", 10, 20, packed, 0, 0) + table
    descriptor = read_screen_descriptor(data)
    assert descriptor.color_resolution == resolution
    assert descriptor.sort_flag is bool(sort)
    assert descriptor.global_color_table_size == size
    assert descriptor.global_color_table_bytes == len(table)


def test_no_global_color_table():
    data = HEADER + struct.pack("<HHBBB", 5, 6, 0x07, 3, 0) + TRAILER
    descriptor = read_screen_descriptor(data)
    assert descriptor.has_global_color_table is False
    assert descriptor.global_color_table_bytes == 0
    assert descriptor.background_color is None
    assert descriptor.data_offset == len(HEADER) + 7


def test_read_screen_descriptor_rejects_non_gif():
    with pytest.raises(GifFormatError):
        read_screen_descriptor(b"PNG89a" + LSD)


def test_read_screen_descriptor_rejects_truncated():
    with pytest.raises(GifFormatError):
        read_screen_descriptor(HEADER + LSD[:3])


def test_read_screen_descriptor_rejects_missing_color_table():
    with pytest.raises(GifFormatError):
        read_screen_descriptor(HEADER + LSD + GCT[:2])


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x21\xf9", BlockType.CONTROL_EXTENSION),
        (b"\x21\xff", BlockType.APP_EXTENSION),
        (b"\x21\xfe", BlockType.COMMENT_EXTENSION),
        (b"\x21\x01", BlockType.PLAIN_TEXT),
        (b"\x2c", BlockType.IMAGE),
        (b"\x3b", BlockType.TRAILER),
        (b"\x00", BlockType.UNKNOWN),
        (b"\x21\x02", BlockType.UNKNOWN),
        (b"\x21", BlockType.UNKNOWN),
    ],
)
def test_block_type(data, expected):
    assert block_type(data, 0) is expected


def test_block_type_past_end_is_unknown():
    assert block_type(GIF, len(GIF)) is BlockType.UNKNOWN


@pytest.mark.parametrize("chain", [b"\x00", b"\x02ab\x01c\x00", b"\x03xyz\x00"])
def test_sub_blocks_length_covers_whole_chain(chain):
    assert sub_blocks_length(chain, 0) == len(chain)


def test_sub_blocks_length_truncated():
    with pytest.raises(GifFormatError):
        sub_blocks_length(b"\x05ab", 0)


def test_control_extension_length():
    assert block_length(CONTROL, 0) == CONTROL_EXTENSION_SIZE


def test_trailer_length():
    assert block_length(TRAILER, 0) == 1


def test_image_length():
    assert block_length(IMAGE, 0) == len(IMAGE)


def test_image_with_local_color_table_length():
    block = (
        b"\x2c"
        + struct.pack("<HHHHB", 1, 1, 4, 4, 0x81)
        + bytes(3 * 4)
        + b"\x02"
        + b"\x03abc\x01d\x00"
    )
    assert block_length(block, 0) == len(block)


def test_app_extension_length():
    block = b"\x21\xff\x0b" + b"NETSCAPE2.0" + b"\x03\x01\x00\x00" + b"\x00"
    assert block_length(block, 0) == len(block)


def test_comment_extension_length():
    block = b"\x21\xfe" + b"\x03abc" + b"\x00"
    assert block_length(block, 0) == len(block)


def test_plain_text_extension_length():
    block = b"\x21\x01\x0c" + bytes(12) + b"\x02hi" + b"\x00"
    assert block_length(block, 0) == len(block)


def test_block_length_unknown_raises():
    with pytest.raises(GifFormatError):
        block_length(b"\x00\x00", 0)


def test_block_length_truncated_image_raises():
    with pytest.raises(GifFormatError):
        block_length(IMAGE[:5], 0)


def test_iter_blocks_walks_stream():
    blocks = list(iter_blocks(GIF))
    assert [kind for kind, _, _ in blocks] == [
        BlockType.CONTROL_EXTENSION,
        BlockType.IMAGE,
        BlockType.TRAILER,
    ]
    assert blocks[0][1] == BODY_START
    for (_, offset, length), (_, next_offset, _) in zip(blocks, blocks[1:]):
        assert offset + length == next_offset
    _, last_offset, last_length = blocks[-1]
    assert last_offset + last_length == len(GIF)


def test_iter_blocks_from_start():
    start = BODY_START + len(CONTROL)
    blocks = list(iter_blocks(GIF, start))
    assert [kind for kind, _, _ in blocks] == [BlockType.IMAGE, BlockType.TRAILER]
    assert blocks[0][1] == start


def test_iter_blocks_stops_at_unknown_block():
    data = HEADER + LSD + GCT + CONTROL + b"\x00\x00" + IMAGE + TRAILER
    kinds = [kind for kind, _, _ in iter_blocks(data)]
    assert kinds == [BlockType.CONTROL_EXTENSION]


def test_iter_blocks_stops_at_truncated_block():
    data = HEADER + LSD + GCT + CONTROL + IMAGE[:-2]
    kinds = [kind for kind, _, _ in iter_blocks(data)]
    assert kinds == [BlockType.CONTROL_EXTENSION]


def test_iter_blocks_rejects_non_gif():
    with pytest.raises(GifFormatError):
        list(iter_blocks(b"not a gif at all"))