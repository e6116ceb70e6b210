# Copyright (c) 2016-2025, Almar Klein
# This module is distributed under the terms of the MIT License.
"""
The DEFLATE collaborator: whole-buffer compression and decompression of
image data, on top of zlib.
"""

__all__ = ["compress", "decompress"]

import zlib

from .errors import MalformedStream


def decompress(data):
    """Decompress zlib data that may consist of several separately compressed parts."""
    d = zlib.decompressobj(15)
    try:
        decompressed = d.decompress(data)
        # If a writer separately compressed its chunks, don't fail
        while d.eof and d.unused_data:
            tail = d.unused_data
            d = zlib.decompressobj(15)
            decompressed += d.decompress(tail)
        decompressed += d.flush()
    except zlib.error as err:
        raise MalformedStream(f"Could not decompress image data: {err}") from err
    if not d.eof:
        raise MalformedStream("Image data ended before the compressed stream did.")
    return decompressed


def compress(data, level=9):
    """Compress data as a single zlib stream.

    The level goes from 0 (no compression) to 9 (highest compression).
    """
    c = zlib.compressobj(int(level), 8, 15, 9)
    return c.compress(bytes(data)) + c.flush()
