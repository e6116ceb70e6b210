# Copyright (c) 2016-2025, Almar Klein
# This module is distributed under the terms of the MIT License.
"""
Reverse the per-scanline filtering of decompressed png image data.

Assumes 8 bit RGBA pixels and no interlacing.
"""

__all__ = ["defilter", "unfilter_scanline", "paeth_predictor"]

from .errors import InvalidInputType, MalformedStream, UnsupportedFilterByte


PSIZE = 4  # bytes per pixel, RGBA at 8 bits

# none, sub, up, average, paeth
FILTER_TYPES = (0, 1, 2, 3, 4)


def defilter(payload, width, height=None):
    """Reconstruct the pixel grid from decompressed image data.

    Parameters:
        payload : bytes-like | list of int
            The decompressed content of the IDAT chunks. Every scanline is
            one filter byte followed by ``width * 4`` bytes.
        width : int
            The image width in pixels.
        height : int | None
            If given, the number of scanlines must match it.

    Returns:
        grid : list
            One list per scanline. Each starts with that scanline's filter
            byte, followed by ``width`` pixels as ``[r, g, b, a]`` lists.
    """
    if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
        raise InvalidInputType(f"Width must be a positive integer, got {width!r}.")
    if not isinstance(payload, (bytes, bytearray, memoryview, list, tuple)):
        raise InvalidInputType(f"Cannot defilter {type(payload).__name__}.")
    try:
        payload = memoryview(bytes(payload))
    except (TypeError, ValueError) as err:
        raise InvalidInputType(f"Payload values must be bytes: {err}") from None

    stride = width * PSIZE + 1
    nrows, remainder = divmod(payload.nbytes, stride)
    if remainder:
        raise MalformedStream(
            f"Image data of {payload.nbytes} bytes is not a whole number "
            + f"of {stride}-byte scanlines."
        )
    if height is not None and nrows != height:
        raise MalformedStream(f"Expected {height} scanlines, got {nrows}.")

    grid = []
    prev = None
    for row in range(nrows):
        line_bytes = payload[row * stride : (row + 1) * stride]
        filter = line_bytes[0]
        if filter not in FILTER_TYPES:
            raise UnsupportedFilterByte(filter, row)
        line = unfilter_scanline(line_bytes, PSIZE, prev)
        pixels = [list(line[i : i + PSIZE]) for i in range(0, len(line), PSIZE)]
        grid.append([filter] + pixels)
        prev = line
    return grid


def paeth_predictor(a, b, c):
    """Pick whichever of left (a), up (b) or up-left (c) is closest to a + b - c.

    Ties go to a, then b.
    """
    p = a + b - c
    pa = abs(p - a)
    pb = abs(p - b)
    pc = abs(p - c)
    if pa <= pb and pa <= pc:
        return a
    elif pb <= pc:
        return b
    else:
        return c


def unfilter_scanline(line_bytes, fu=PSIZE, prev=None):
    """Unfilter a single scanline, inspired by pypng.

    ``line_bytes`` includes the leading filter byte, ``fu`` is the number of
    bytes per pixel and ``prev`` the previous unfiltered scanline (without
    filter byte), or None for the first scanline. Returns a new bytearray.
    """
    filter = line_bytes[0]
    line1 = memoryview(line_bytes)[1:]  # avoid making a copy
    line2 = bytearray(line1)  # copy for output
    if filter == 0:
        return line2  # no filter

    if prev is None:
        prev = bytearray(len(line1))  # zeros

    if filter == 1:
        # sub
        ai = 0
        for i in range(fu, len(line2)):
            x = line1[i]
            a = line2[ai]
            line2[i] = (x + a) & 0xFF
            ai += 1
    elif filter == 2:
        # up
        for i in range(len(line2)):
            x = line1[i]
            b = prev[i]
            line2[i] = (x + b) & 0xFF
    elif filter == 3:
        # average
        ai = -fu
        for i in range(len(line2)):
            x = line1[i]
            if ai < 0:
                a = 0
            else:
                a = line2[ai]
            b = prev[i]
            line2[i] = (x + ((a + b) >> 1)) & 0xFF
            ai += 1
    elif filter == 4:
        # paeth
        ai = -fu  # Also used for ci.
        for i in range(len(line2)):
            x = line1[i]
            if ai < 0:
                a = c = 0
            else:
                a = line2[ai]
                c = prev[ai]
            b = prev[i]
            line2[i] = (x + paeth_predictor(a, b, c)) & 0xFF
            ai += 1
    else:
        raise UnsupportedFilterByte(filter, None)
    return line2
