# Copyright (c) 2016-2025, Almar Klein
# This module is distributed under the terms of the MIT License.
"""
Pure python module to decode png chunks and pixels, and crop tiles from them.

Supports:
- Splitting a png file into chunks, including the IHDR header.
- Reversing the scanline filters (none, sub, up, average, paeth).
- Extracting sub-images.

Does not support:
- CRC verification.
- bit depths other than 8, and formats other than RGBA.
- interlacing.

"""

from .errors import *
from .chunks import *
from .chunks import PNG_SIGNATURE
from .scanlines import *
from .subimage import *
from .pngimage import *

from . import errors, chunks, scanlines, subimage, pngimage


__version__ = "1.0.0"
version_info = tuple(int(i) if i.isnumeric() else i for i in __version__.split("."))

__all__ = (
    ["PNG_SIGNATURE"]
    + errors.__all__
    + chunks.__all__
    + scanlines.__all__
    + subimage.__all__
    + pngimage.__all__
)
