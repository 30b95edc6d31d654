import io
import logging
import struct
from typing import Optional

from .errors import InvalidDimensions, InvalidHeader
from .meta import QOI_HEADER_SIZE, QOI_MAGIC, QOI_PIXELS_MAX, Colorspace, ImageMeta
from .op import Color, Index, Luma, Rgb, Rgba, Run, read_op
from .pixel import ColorDiff, LumaDiff, Pixel, from_diff
from .state import State
from .stream import flush, read_exact, write_all

log = logging.getLogger(__name__)


def decode_header(reader) -> ImageMeta:
    """Read and validate the 14 byte header."""
    header = read_exact(reader, QOI_HEADER_SIZE)

    # magic(4), width(4), height(4), channels(1), colorspace(1), Big Endian
    magic, width, height, channels, colorspace = struct.unpack(">4sIIBB", header)

    if magic != QOI_MAGIC:
        raise InvalidHeader()

    return ImageMeta(width, height, channels, Colorspace.from_byte(colorspace))


def decode_pixel(state: State, reader) -> Pixel:
    """
    Produce the next pixel, reading an op from ``reader`` unless a run is
    still in progress.

    Updating the cache and ``state.prev_pixel`` is left to the caller.
    """
    # Run continuation, no bytes are read
    if state.run_count > 0:
        state.run_count -= 1
        return state.prev_pixel

    op = read_op(reader)

    if isinstance(op, Index):
        return state.cache[op.index]

    if isinstance(op, Color):
        return from_diff(ColorDiff(*op), state.prev_pixel)

    if isinstance(op, Luma):
        return from_diff(LumaDiff(*op), state.prev_pixel)

    if isinstance(op, Rgb):
        return Pixel(op.r, op.g, op.b, state.prev_pixel.a)

    if isinstance(op, Rgba):
        return Pixel(*op)

    # Run: this pixel is the first of the run
    state.run_count = op.count - 1
    return state.prev_pixel


def decode_image(
    reader,
    writer,
    output_channels: Optional[int] = None,
    max_pixels: int = QOI_PIXELS_MAX,
) -> ImageMeta:
    """
    Decode a QOI image.

    :param reader: Object with ``read(size)`` yielding the encoded image.
    :param writer: Object with ``write(data)`` receiving the decoded pixel
                   bytes, interleaved and row-major.
    :param output_channels: Number of channels to write per pixel (3 or 4).
                            If None, uses the channels defined in the header.
    :param max_pixels: Refuse images with more pixels than this.
    :return: The image's metadata as read from the header.
    """
    meta = decode_header(reader)

    if output_channels is None:
        output_channels = meta.channels

    if output_channels not in (3, 4):
        raise ValueError(
            f"Invalid number of output channels {output_channels}, must be 3 or 4"
        )

    if meta.num_pixels > max_pixels:
        raise InvalidDimensions(
            f"Image of {meta.width}x{meta.height} exceeds the limit of {max_pixels} pixels"
        )

    log.debug(
        "decoding %dx%d image, %d channels, colorspace %s",
        meta.width,
        meta.height,
        meta.channels,
        meta.colorspace.name,
    )

    state = State()

    # Written one row at a time
    for _ in range(meta.height):
        row = bytearray()

        for _ in range(meta.width):
            pixel = decode_pixel(state, reader)

            if pixel != state.prev_pixel:
                state.cache_insert(pixel)
                state.prev_pixel = pixel

            row.extend(pixel[:output_channels])

        write_all(writer, bytes(row))

    flush(writer)

    log.debug("decoded %d pixels", meta.num_pixels)

    return meta


class QOIDecoder:
    """
    A class to decode QOI (Quite OK Image) files into raw pixel data.
    """

    @staticmethod
    def decode(
        file_data: bytes,
        byte_offset: int = 0,
        byte_length: Optional[int] = None,
        output_channels: Optional[int] = None,
    ) -> dict:
        """
        Decode a QOI file given as a bytes/bytearray object.

        :param file_data: Bytes containing the QOI file.
        :param byte_offset: Offset to the start of the QOI file in file_data.
        :param byte_length: Length of the QOI file in bytes.
        :param output_channels: Number of channels to include in the decoded array (3 or 4).
                                If None, uses the channels defined in the file header.
        :return: Dictionary containing width, height, colorspace, channels, and data (bytes).
        """
        if byte_length is None:
            byte_length = len(file_data) - byte_offset

        view = memoryview(file_data)[byte_offset : byte_offset + byte_length]

        result = io.BytesIO()
        meta = decode_image(io.BytesIO(view), result, output_channels=output_channels)

        description = meta.to_description()
        description["channels"] = output_channels or meta.channels
        description["data"] = result.getvalue()
        return description
