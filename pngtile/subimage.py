# Copyright (c) 2016-2025, Almar Klein
# This module is distributed under the terms of the MIT License.
"""
Crop rectangular tiles out of a defiltered pixel grid.
"""

__all__ = ["TileSize", "Margins", "extract_sub_image"]

from collections.abc import Sequence
from typing import NamedTuple

from .errors import (
    InvalidTileSize,
    InvalidMargins,
    InvalidGridType,
    SubImageExtractionError,
)


class TileSize(NamedTuple):
    width: int
    height: int


class Margins(NamedTuple):
    x_margin: int = 0
    y_margin: int = 0


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def extract_sub_image(grid, tile_size, margins=(0, 0)):
    """Extract a tile from a pixel grid as produced by ``defilter()``.

    Parameters:
        grid : list
            Rows that each start with a filter byte, followed by the pixels.
        tile_size : TileSize | (width, height)
            The size of the tile in pixels.
        margins : Margins | (x_margin, y_margin)
            The offset of the tile from the top-left corner. Default (0, 0).

    Returns:
        sub_image : list
            The scalar ``0`` in place of a filter byte, followed by one list of
            pixels per tile row. Note that the rows of the tile do not start
            with a filter byte, unlike the rows of the source grid.
    """
    try:
        width, height = tile_size
    except (TypeError, ValueError):
        raise InvalidTileSize(f"Invalid tile_size: {tile_size!r}.") from None
    if not (_is_int(width) and _is_int(height) and width > 0 and height > 0):
        raise InvalidTileSize(f"Invalid tile_size: {tile_size!r}.")

    try:
        x_margin, y_margin = margins
    except (TypeError, ValueError):
        raise InvalidMargins(f"Invalid margins: {margins!r}.") from None
    if not (_is_int(x_margin) and _is_int(y_margin)):
        raise InvalidMargins(f"Invalid margins: {margins!r}.")

    if not isinstance(grid, Sequence) or isinstance(grid, (str, bytes, bytearray)):
        raise InvalidGridType(f"Incorrect type for grid: {type(grid).__name__}.")

    # Add zero as first element to represent the filter byte.
    sub_image = [0]
    for i in range(y_margin, y_margin + height):
        try:
            row = _get_row(grid, i)
            pixels = _get_pixels(row, x_margin, width)
        except (IndexError, TypeError) as err:
            raise SubImageExtractionError(
                f"Error trying to get sub-image at row {i}, "
                + f"columns {x_margin}-{x_margin + width - 1}: {err}",
                row=i,
                column=x_margin,
            ) from err
        sub_image.append([list(pixel) for pixel in pixels])
    return sub_image


def _get_row(grid, i):
    if not 0 <= i < len(grid):
        raise IndexError(f"row {i} out of range for a grid of {len(grid)} rows")
    return grid[i]


def _get_pixels(row, x_margin, width):
    # Skip the filter byte
    start, stop = x_margin + 1, x_margin + 1 + width
    if x_margin < 0 or stop > len(row):
        raise IndexError(
            f"columns {x_margin}-{x_margin + width - 1} out of range "
            + f"for a row of {len(row) - 1} pixels"
        )
    return row[start:stop]
