# Copyright (c) 2016-2025, Almar Klein
# This module is distributed under the terms of the MIT License.
"""
Split a png byte stream into its chunks.

The parser is a pure function over an in-memory buffer. It decodes the IHDR
header inline and checks the PLTE chunk against the colour type, but it does
not verify CRC checksums: the stored value is recorded as-is.
"""

__all__ = ["Chunk", "HeaderInfo", "parse_chunks"]

import struct
import logging
from typing import NamedTuple, Optional

from .errors import InvalidInputType, MalformedStream, InvalidPalette, MissingPalette


logger = logging.getLogger("pngtile")

PNG_SIGNATURE = b"\x89PNG\x0d\x0a\x1a\x0a"
SIGNATURE_TEXT = " ".join(str(b) for b in PNG_SIGNATURE)  # "137 80 78 71 13 10 26 10"

COLOR_TYPES = {
    # flag, pixel-size, format, bitdepths
    (0b011, 1, "p", (1, 2, 4, 8)),
    (0b000, 1, "l", (1, 2, 4, 8, 16)),
    (0b100, 2, "la", (8, 16)),
    (0b010, 3, "rgb", (8, 16)),
    (0b110, 4, "rgba", (8, 16)),
}
COLOR_FLAG_TO_FORMAT = {ct[0]: ct[2] for ct in COLOR_TYPES}

SINGLETON_CHUNKS = """ IHDR IEND PLTE acTL cHRM cICP gAMA iCCP mDCv cLLi sBIT sRGB
                       bKGD hIST tRNS eXIf pHYs tIME""".split()

# The IHDR fields are read at absolute positions in the stream: right after
# the signature (8), the chunk length (4) and the chunk name (4).
IHDR_OFFSET = 16
IHDR_STRUCT = struct.Struct(">IIBBbBB")


class HeaderInfo(NamedTuple):
    width: int
    height: int
    bit_depth: int
    colour_type: int
    compression_method: int
    filter_method: int
    interlace_method: int

    @property
    def format(self):
        """The format name ("l", "la", "rgb", "rgba", "p"), or None if unknown."""
        return COLOR_FLAG_TO_FORMAT.get(self.colour_type, None)


class Chunk(NamedTuple):
    name: str
    length: int  # only the data, excluding name and crc
    data: bytes
    crc: int
    offset: int  # position of data in the stream
    info: Optional[HeaderInfo] = None


def parse_chunks(data):
    """Split a png byte stream into a list of chunks.

    Parameters:
        data : bytes | bytearray | memoryview
            The complete png file. The first 8 bytes (the signature) are
            skipped without being checked.

    Returns:
        chunks : list of Chunk
            The chunks in stream order. The IHDR chunk has its ``info``
            attribute set to a ``HeaderInfo``.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidInputType(f"Cannot parse chunks from {type(data).__name__}.")
    data = bytes(data)

    chunks = []
    header = None
    pos = len(PNG_SIGNATURE)

    while pos < len(data):
        if pos + 8 > len(data):
            raise MalformedStream(f"Truncated chunk header at offset {pos}.")
        (nbytes,) = struct.unpack_from(">I", data, pos)
        try:
            name = data[pos + 4 : pos + 8].decode("ascii")
        except UnicodeDecodeError:
            raise MalformedStream(f"Invalid chunk name at offset {pos + 4}.") from None
        offset = pos + 8
        pos = offset + nbytes
        if pos + 4 > len(data):
            raise MalformedStream(
                f"Chunk {name} at offset {offset} declares {nbytes} bytes, "
                + "but the stream ends before its data and checksum."
            )
        (crc,) = struct.unpack_from(">I", data, pos)
        pos += 4

        info = None
        if name == "IHDR":
            info = _read_header_info(data)
            header = header or info
        elif name == "PLTE":
            _check_palette(nbytes, header)

        chunks.append(Chunk(name, nbytes, data[offset : offset + nbytes], crc, offset, info))

    return chunks


def _read_header_info(data):
    if len(data) < IHDR_OFFSET + IHDR_STRUCT.size:
        raise MalformedStream("Stream too short to hold the IHDR fields.")
    info = HeaderInfo(*IHDR_STRUCT.unpack_from(data, IHDR_OFFSET))
    if info.width == 0 or info.height == 0:
        raise MalformedStream(f"Image size must be nonzero, got {info.width}x{info.height}.")
    return info


def _check_palette(nbytes, header):
    if nbytes % 3 != 0:
        raise InvalidPalette("PLTE chunk length must be divisible by 3.")
    if header is None:
        raise MalformedStream("PLTE chunk before IHDR chunk.")
    if header.colour_type == 3 and nbytes == 0:
        raise MissingPalette("Images of colourtype 3 must include a PLTE chunk.")
    elif header.colour_type in (0, 4) and nbytes != 0:
        logger.warning(
            f"Images of colourtype {header.colour_type} shouldn't have "
            + "PLTE chunks. It will be ignored."
        )
