# Copyright (c) 2016-2025, Almar Klein
# This module is distributed under the terms of the MIT License.
"""
The png image as a sequence of chunks, and the decoding pipeline on top of it:

    bytes -> chunks -> concatenated IDAT data -> decompress -> defilter -> tile

Everything is synchronous, except ``decode_pixels_async()``, which awaits the
decompression in a worker thread.
"""

__all__ = ["PngImage", "read_png_image", "decode_pixels_async"]

import asyncio
import pathlib

from . import codec
from .chunks import parse_chunks, logger, PNG_SIGNATURE, SINGLETON_CHUNKS
from .errors import InvalidInputType, MalformedStream, UnsupportedFormat
from .scanlines import defilter
from .subimage import extract_sub_image


def read_png_image(file):
    """Read a png file into a PngImage.

    Parameters:
        file : str | pathlib.Path | bytes | file-like
            The file to read from. Can be a filename, the raw bytes, or
            anything that has a ``read()`` method.

    Returns:
        image : PngImage
    """
    if isinstance(file, (str, pathlib.Path)):
        with open(file, "rb") as fh:
            data = fh.read()
    elif isinstance(file, (bytes, bytearray, memoryview)):
        data = bytes(file)
    elif hasattr(file, "read"):
        data = file.read()
    else:
        raise InvalidInputType(f"Cannot read from {file!r}")
    return PngImage.from_bytes(data)


async def decode_pixels_async(image):
    """Decode the pixel grid of a PngImage, decompressing in a worker thread."""
    _check_format(image.header)
    payload = await asyncio.to_thread(codec.decompress, image.idat_data())
    return defilter(payload, image.width, image.height)


class PngImage:
    """An immutable png image: the signature and the chunks, in stream order.

    Usually created with ``read_png_image()`` or ``PngImage.from_bytes()``.
    """

    signature = PNG_SIGNATURE

    def __init__(self, chunks):
        self._chunks = tuple(chunks)
        if not self._chunks or self._chunks[0].name != "IHDR":
            raise MalformedStream("First chunk must be IHDR.")
        for error in _check_chunk_order(self._chunks):
            logger.warning("PNG read error: " + error)

    @classmethod
    def from_bytes(cls, data):
        """Create a PngImage from the bytes of a png file."""
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidInputType(f"Cannot read png from {type(data).__name__}.")
        if bytes(data[: len(PNG_SIGNATURE)]) != PNG_SIGNATURE:
            raise InvalidInputType("PNG signature invalid")
        return cls(parse_chunks(data))

    def __repr__(self):
        return f"<PngImage {self.width}x{self.height} with {len(self._chunks)} chunks>"

    @property
    def chunks(self):
        """The tuple of chunks."""
        return self._chunks

    @property
    def header(self):
        """The HeaderInfo of the IHDR chunk."""
        return self._chunks[0].info

    @property
    def width(self):
        return self.header.width

    @property
    def height(self):
        return self.header.height

    def get_chunks(self, name):
        """Get a list of all chunks with the given name."""
        return [chunk for chunk in self._chunks if chunk.name == name]

    def idat_data(self):
        """Get the data of all IDAT chunks, concatenated in stream order."""
        return b"".join(chunk.data for chunk in self.get_chunks("IDAT"))

    def decompress_idat_data(self):
        """Get the decompressed (but still filtered) image data."""
        return codec.decompress(self.idat_data())

    def compress_idat_data(self, level=9):
        """Compress the concatenated IDAT data with the given zlib level."""
        return codec.compress(self.idat_data(), level)

    def pixels(self):
        """Get the unfiltered pixel grid (see ``defilter()``)."""
        _check_format(self.header)
        return defilter(self.decompress_idat_data(), self.width, self.height)

    def sub_image(self, tile_size, margins=(0, 0)):
        """Extract a tile from the image (see ``extract_sub_image()``)."""
        return extract_sub_image(self.pixels(), tile_size, margins)


def _check_format(header):
    if header.bit_depth != 8 or header.format != "rgba":
        raise UnsupportedFormat(
            f"Only 8 bit RGBA images are supported, got {header.bit_depth} "
            + f"bit {header.format or header.colour_type}."
        )
    if header.interlace_method != 0:
        raise UnsupportedFormat("Interlaced images are not supported.")


def _check_chunk_order(chunks):
    """Collect (non-fatal) problems with the presence and order of chunks."""
    errors = []
    chunk_counts = {}
    for chunk in chunks:
        name = chunk.name
        chunk_counts[name] = chunk_counts.get(name, 0) + 1
        # Many chunks are only allowed once
        if name in SINGLETON_CHUNKS and chunk_counts[name] == 2:
            errors.append(f"{name} chunk is present more than once.")
        if name != "IEND" and "IEND" in chunk_counts:
            errors.append(f"Chunk {name} after IEND chunk.")
    for name in ("IDAT", "IEND"):
        if name not in chunk_counts:
            errors.append(f"Chunk {name} not present.")
    return errors
