import zlib
import struct
import logging

import pytest

import pngtile
from pngtile import parse_chunks, HeaderInfo


SIGNATURE = b"\x89PNG\x0d\x0a\x1a\x0a"


def make_chunk(name, data=b"", checksum=None):
    bname = name.encode("ASCII")
    if checksum is None:
        checksum = zlib.crc32(data, zlib.crc32(bname))
    return struct.pack(">I", len(data)) + bname + data + checksum.to_bytes(4, "big")


def make_ihdr(width=2, height=1, bit_depth=8, colour_type=6, compression_method=0):
    data = struct.pack(
        ">IIBBBBB", width, height, bit_depth, colour_type, compression_method, 0, 0
    )
    return make_chunk("IHDR", data)


def make_png(*chunks):
    return SIGNATURE + b"".join(chunks)


# -----


def test_basic_chunks():
    idat = zlib.compress(bytes(9))
    bb = make_png(make_ihdr(), make_chunk("IDAT", idat), make_chunk("IEND"))

    chunks = parse_chunks(bb)

    assert [chunk.name for chunk in chunks] == ["IHDR", "IDAT", "IEND"]
    assert chunks[0].info == HeaderInfo(2, 1, 8, 6, 0, 0, 0)
    assert chunks[0].info.format == "rgba"
    assert chunks[0].length == 13
    assert chunks[0].offset == 16
    assert chunks[1].data == idat
    assert chunks[1].length == len(idat)
    assert chunks[1].info is None
    assert chunks[2].data == b""
    assert chunks[2].crc == zlib.crc32(b"IEND")


def test_offsets_point_at_data():
    bb = make_png(
        make_ihdr(), make_chunk("tEXt", b"hello"), make_chunk("IDAT", b"abc")
    )
    for chunk in parse_chunks(bb):
        assert bb[chunk.offset : chunk.offset + chunk.length] == chunk.data


def test_header_fields():
    bb = make_png(make_ihdr(640, 480, 8, 2, compression_method=255))
    info = parse_chunks(bb)[0].info
    assert info.width == 640
    assert info.height == 480
    assert info.bit_depth == 8
    assert info.colour_type == 2
    assert info.format == "rgb"
    # Compression method is read as a signed byte
    assert info.compression_method == -1


def test_unknown_colour_type():
    bb = make_png(make_ihdr(colour_type=7))
    assert parse_chunks(bb)[0].info.format is None


def test_idat_order_is_preserved():
    bb = make_png(
        make_ihdr(),
        make_chunk("IDAT", b"1"),
        make_chunk("IDAT", b"2"),
        make_chunk("IDAT", b"3"),
        make_chunk("IEND"),
    )
    chunks = parse_chunks(bb)
    assert [c.data for c in chunks if c.name == "IDAT"] == [b"1", b"2", b"3"]


def test_crc_is_not_verified():
    bb = make_png(make_ihdr(), make_chunk("IEND", checksum=12345))
    chunks = parse_chunks(bb)
    assert chunks[1].crc == 12345


def test_input_types():
    bb = make_png(make_ihdr(), make_chunk("IEND"))
    assert len(parse_chunks(bytearray(bb))) == 2
    assert len(parse_chunks(memoryview(bb))) == 2
    assert parse_chunks(SIGNATURE) == []

    with pytest.raises(pngtile.InvalidInputType):
        parse_chunks("not bytes")
    with pytest.raises(pngtile.InvalidInputType):
        parse_chunks(None)


def test_truncated_stream():
    bb = make_png(make_ihdr(), make_chunk("IDAT", b"abcdef"))

    # Missing crc
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(bb[:-2])
    # Missing part of the data
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(bb[:-7])
    # Missing part of the chunk header
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(bb + b"\x00\x00")
    # Chunk length way larger than the file
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(make_png(make_ihdr()) + struct.pack(">I", 2**31) + b"IDAT")


def test_malformed_stream_is_value_error():
    with pytest.raises(ValueError):
        parse_chunks(SIGNATURE + b"\x00")


def test_invalid_chunk_name():
    bb = make_png(make_ihdr()) + struct.pack(">I", 0) + b"\xff\xfe\xfd\xfc" + bytes(4)
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(bb)


def test_zero_size():
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(make_png(make_ihdr(0, 10)))
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(make_png(make_ihdr(10, 0)))


def test_palette_length_must_be_multiple_of_3():
    for colour_type in (2, 3, 6):
        bb = make_png(make_ihdr(colour_type=colour_type), make_chunk("PLTE", bytes(4)))
        with pytest.raises(pngtile.InvalidPalette):
            parse_chunks(bb)


def test_palette_required_for_colour_type_3():
    bb = make_png(make_ihdr(colour_type=3), make_chunk("PLTE", b""))
    with pytest.raises(pngtile.MissingPalette):
        parse_chunks(bb)

    # Empty palettes are fine for other colour types
    bb = make_png(make_ihdr(colour_type=2), make_chunk("PLTE", b""))
    assert parse_chunks(bb)[1].length == 0


def test_palette_for_paletted_image():
    palette = bytes([255, 0, 0, 0, 255, 0])
    bb = make_png(make_ihdr(colour_type=3), make_chunk("PLTE", palette))
    chunks = parse_chunks(bb)
    assert chunks[1].name == "PLTE"
    assert chunks[1].data == palette


def test_palette_in_grayscale_image_warns(caplog):
    for colour_type in (0, 4):
        bb = make_png(
            make_ihdr(colour_type=colour_type),
            make_chunk("PLTE", bytes(3)),
            make_chunk("IEND"),
        )
        caplog.clear()
        with caplog.at_level(logging.WARNING, logger="pngtile"):
            chunks = parse_chunks(bb)

        assert [c.name for c in chunks] == ["IHDR", "PLTE", "IEND"]
        assert len(caplog.records) == 1
        assert f"colourtype {colour_type}" in caplog.records[0].getMessage()


def test_palette_in_rgb_image_does_not_warn(caplog):
    bb = make_png(make_ihdr(colour_type=2), make_chunk("PLTE", bytes(6)))
    with caplog.at_level(logging.WARNING, logger="pngtile"):
        parse_chunks(bb)
    assert not caplog.records


def test_palette_before_header():
    bb = make_png(make_chunk("PLTE", bytes(3)), make_ihdr())
    with pytest.raises(pngtile.MalformedStream):
        parse_chunks(bb)
