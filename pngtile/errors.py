# Copyright (c) 2016-2025, Almar Klein
# This module is distributed under the terms of the MIT License.
"""
Exceptions raised by pngtile.

Each failure mode has its own class, so callers can catch exactly the
problem they care about instead of inspecting messages.
"""

__all__ = [
    "PngTileError",
    "InvalidInputType",
    "MalformedStream",
    "InvalidPalette",
    "MissingPalette",
    "UnsupportedFilterByte",
    "UnsupportedFormat",
    "InvalidTileSize",
    "InvalidMargins",
    "InvalidGridType",
    "SubImageExtractionError",
]


class PngTileError(Exception):
    """Base class for all pngtile errors."""


class InvalidInputType(PngTileError, TypeError):
    """The input is not a png byte stream, or not something we can read."""


class MalformedStream(PngTileError, ValueError):
    """The chunk framing or the image payload is truncated or corrupt."""


class InvalidPalette(PngTileError, ValueError):
    """The PLTE chunk length is not a multiple of 3."""


class MissingPalette(PngTileError, ValueError):
    """A paletted image has an empty PLTE chunk."""


class UnsupportedFilterByte(PngTileError, ValueError):
    def __init__(self, filter_byte, row):
        where = "" if row is None else f" in scanline {row}"
        super().__init__(f"Unexpected filter byte {filter_byte!r}{where}.")
        self.filter_byte = filter_byte
        self.row = row


class UnsupportedFormat(PngTileError, ValueError):
    """Only 8 bit non-interlaced RGBA images can be defiltered."""


class InvalidTileSize(PngTileError, ValueError):
    pass


class InvalidMargins(PngTileError, ValueError):
    pass


class InvalidGridType(PngTileError, TypeError):
    pass


class SubImageExtractionError(PngTileError, IndexError):
    def __init__(self, message, row=None, column=None):
        super().__init__(message)
        self.row = row
        self.column = column
