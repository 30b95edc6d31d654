import io
import logging
import struct
from typing import Union

from .errors import InvalidDimensions
from .meta import QOI_END_MARKER, QOI_MAGIC, QOI_MAX_RUN, ImageMeta
from .op import Color, Index, Luma, Rgb, Rgba, Run, write_op
from .pixel import ColorDiff, Pixel, diff
from .state import State
from .stream import flush, read_exact, write_all

log = logging.getLogger(__name__)


def encode_header(meta: ImageMeta, writer) -> None:
    # magic(4), width(4), height(4), channels(1), colorspace(1), Big Endian
    write_all(writer, QOI_MAGIC)
    write_all(
        writer,
        struct.pack(">IIBB", meta.width, meta.height, meta.channels, meta.colorspace),
    )


def encode_pixel(state: State, pixel: Pixel, writer) -> None:
    """
    Encode one pixel against ``state`` and write any resulting op.

    The caller is responsible for setting ``state.prev_pixel`` afterwards.
    """
    # Check for run
    if pixel == state.prev_pixel:
        state.run_count += 1

        if state.run_count == QOI_MAX_RUN:
            write_op(Run(QOI_MAX_RUN), writer)
            state.run_count = 0
        return

    # If we were in a run, end it before processing the new pixel
    if state.run_count > 0:
        write_op(Run(state.run_count), writer)
        state.run_count = 0

    # Check Index
    index = state.cache_match_or_replace(pixel)
    if index is not None:
        write_op(Index(index), writer)
        return

    pixel_diff = diff(pixel, state.prev_pixel)
    if isinstance(pixel_diff, ColorDiff):
        write_op(Color(*pixel_diff), writer)
    elif pixel_diff is not None:
        write_op(Luma(*pixel_diff), writer)
    elif pixel.a == state.prev_pixel.a:
        write_op(Rgb(pixel.r, pixel.g, pixel.b), writer)
    else:
        write_op(Rgba(*pixel), writer)


def encode_image(reader, writer, meta: ImageMeta) -> None:
    """
    Encode raw pixel data into a QOI image.

    :param reader: Object with ``read(size)`` yielding interleaved pixel bytes,
                   ``meta.channels`` bytes per pixel, row-major.
    :param writer: Object with ``write(data)`` receiving the encoded image.
    :param meta: The image's metadata.
    """
    log.debug(
        "encoding %dx%d image, %d channels, colorspace %s",
        meta.width,
        meta.height,
        meta.channels,
        meta.colorspace.name,
    )

    encode_header(meta, writer)

    state = State()
    channels = meta.channels

    for _ in range(meta.num_pixels):
        px = read_exact(reader, channels)

        # 3 channel sources keep the previous pixel's alpha
        a = px[3] if channels == 4 else state.prev_pixel.a
        pixel = Pixel(px[0], px[1], px[2], a)

        encode_pixel(state, pixel, writer)
        state.prev_pixel = pixel

    if state.run_count > 0:
        write_op(Run(state.run_count), writer)

    # --- End Marker ---
    write_all(writer, QOI_END_MARKER)
    flush(writer)

    log.debug("encoded %d pixels", meta.num_pixels)


class QOIEncoder:
    @staticmethod
    def encode(color_data, description: Union[ImageMeta, dict]) -> bytes:
        """
        Encode a QOI file in memory.

        :param color_data: Bytes-like object (bytes, bytearray, list of ints) containing pixel data.
        :param description: ImageMeta, or dictionary containing 'width', 'height', 'channels', 'colorspace'.
        :return: bytes object containing the QOI file content.
        """
        if isinstance(description, ImageMeta):
            meta = description
        else:
            meta = ImageMeta.from_description(description)

        data = bytes(color_data)
        pixel_length = meta.num_pixels * meta.channels
        if len(data) != pixel_length:
            raise InvalidDimensions(
                f"The length of color_data is incorrect, expected {pixel_length} bytes"
                f" but got {len(data)}"
            )

        result = io.BytesIO()
        encode_image(io.BytesIO(data), result, meta)
        return result.getvalue()
