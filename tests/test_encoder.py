import io

import pytest

from qoicodec import Colorspace, ImageMeta, InvalidColorspace, InvalidDimensions, InvalidHeader, QOIEncoder
from qoicodec.encoder import encode_image, encode_pixel
from qoicodec.errors import QOIIOError, UnexpectedEof
from qoicodec.meta import QOI_END_MARKER, QOI_HEADER_SIZE
from qoicodec.pixel import Pixel
from qoicodec.state import State


def _encode_pixel(state, pixel):
    out = io.BytesIO()
    encode_pixel(state, pixel, out)
    state.prev_pixel = pixel
    return out.getvalue()


def _body(encoded: bytes) -> bytes:
    assert encoded.endswith(QOI_END_MARKER)
    return encoded[QOI_HEADER_SIZE : -len(QOI_END_MARKER)]


def test_encoding_rgb_op():
    assert _encode_pixel(State(), Pixel(101, 102, 103, 255)) == bytes([0xFE, 101, 102, 103])


def test_encoding_rgba_op():
    assert _encode_pixel(State(), Pixel(101, 102, 103, 104)) == bytes(
        [0xFF, 101, 102, 103, 104]
    )


def test_encoding_run_op():
    state = State()
    pixel = Pixel(101, 102, 103, 104)
    state.prev_pixel = pixel

    assert _encode_pixel(state, pixel) == b""
    assert state.run_count == 1

    # the run is flushed before the next op
    assert _encode_pixel(state, pixel._replace(a=0))[:1] == bytes([0xC0])
    assert state.run_count == 0


def test_encoding_max_run_ops():
    state = State()
    pixel = Pixel(101, 102, 103, 104)
    state.prev_pixel = pixel
    state.run_count = 61

    assert _encode_pixel(state, pixel) == bytes([0xC0 | 61])
    assert state.run_count == 0

    assert _encode_pixel(state, pixel) == b""
    assert state.run_count == 1


def test_encoding_index_op():
    state = State()
    pixel = Pixel(101, 102, 103, 104)
    state.cache_insert(pixel)

    assert _encode_pixel(state, pixel) == bytes([54])


def test_encoding_color_op():
    state = State()
    state.prev_pixel = Pixel(100, 100, 100, 255)

    # Color wins over Luma and Rgb
    assert _encode_pixel(state, Pixel(101, 101, 101, 255)) == bytes([0x40 | 3 << 4 | 3 << 2 | 3])
    assert _encode_pixel(state, Pixel(99, 99, 99, 255)) == bytes([0x40])


def test_encoding_luma_op():
    state = State()
    state.prev_pixel = Pixel(100, 100, 100, 255)

    assert _encode_pixel(state, Pixel(100, 108, 100, 255)) == bytes([0x80 | 40, 0])
    assert _encode_pixel(state, Pixel(99, 100, 99, 255)) == bytes([0x80 | 24, 15 << 4 | 15])


def test_encoding_blank_image():
    encoded = QOIEncoder.encode(b"", {"width": 0, "height": 0, "channels": 4, "colorspace": 0})
    assert len(encoded) == 22
    assert encoded == b"qoif" + bytes(8) + b"\x04\x00" + QOI_END_MARKER


def test_encoding_header():
    encoded = QOIEncoder.encode(
        bytes(3 * 2), ImageMeta(2, 1, channels=3, colorspace=Colorspace.LINEAR)
    )
    assert encoded[:QOI_HEADER_SIZE] == b"qoif\x00\x00\x00\x02\x00\x00\x00\x01\x03\x01"


def test_encoding_trailing_run_op():
    meta = ImageMeta(2, 1, channels=3, colorspace=Colorspace.SRGB)
    encoded = QOIEncoder.encode([101, 102, 103, 101, 102, 103], meta)
    # Op::Rgb(101, 102, 103), Op::Run(1)
    assert _body(encoded) == bytes([0xFE, 101, 102, 103, 0xC0])


def test_encoding_run_ceiling():
    # (0, 0, 0, 255) is the initial previous pixel, so every pixel continues the run
    pixel = bytes([0, 0, 0, 255])

    encoded = QOIEncoder.encode(pixel * 62, ImageMeta(62, 1))
    assert _body(encoded) == bytes([0xC0 | 61])

    encoded = QOIEncoder.encode(pixel * 63, ImageMeta(63, 1))
    assert _body(encoded) == bytes([0xC0 | 61, 0xC0])

    encoded = QOIEncoder.encode(pixel * 125, ImageMeta(125, 1))
    assert _body(encoded) == bytes([0xC0 | 61, 0xC0 | 61, 0xC0])


def test_encoding_rgb_source_keeps_alpha():
    # 3 channel pixels never produce Rgba ops
    data = bytes([10, 20, 30, 200, 100, 50, 10, 20, 30])
    body = _body(QOIEncoder.encode(data, ImageMeta(3, 1, channels=3)))
    assert body == bytes([0xFE, 10, 20, 30, 0xFE, 200, 100, 50, (10 * 3 + 20 * 5 + 30 * 7 + 255 * 11) % 64])


def test_encoding_image_with_bad_dimensions():
    with pytest.raises(InvalidDimensions):
        QOIEncoder.encode([101, 102, 103], ImageMeta(999, 1))

    with pytest.raises(InvalidDimensions):
        ImageMeta(-1, 1)

    with pytest.raises(InvalidDimensions):
        ImageMeta(1, 2**32)


def test_encoding_invalid_description():
    with pytest.raises(InvalidHeader):
        QOIEncoder.encode(b"", {"width": 0, "height": 0, "channels": 2, "colorspace": 0})

    with pytest.raises(InvalidColorspace):
        QOIEncoder.encode(b"", {"width": 0, "height": 0, "channels": 3, "colorspace": 2})

    # still a ValueError for callers of the dict API
    with pytest.raises(ValueError):
        QOIEncoder.encode(b"", {"width": None, "height": 0, "channels": 3})


def test_encoding_short_stream():
    with pytest.raises(UnexpectedEof):
        encode_image(io.BytesIO(bytes(7)), io.BytesIO(), ImageMeta(2, 1))


class _BrokenWriter:
    def write(self, data):
        raise OSError("disk full")


def test_encoding_io_error():
    with pytest.raises(QOIIOError) as excinfo:
        encode_image(io.BytesIO(bytes(4)), _BrokenWriter(), ImageMeta(1, 1))

    assert isinstance(excinfo.value.__cause__, OSError)


def test_meta_accepts_numpy_integers():
    np = pytest.importorskip("numpy")

    meta = ImageMeta.from_description(
        {"width": np.int64(2), "height": np.uint32(1), "channels": np.uint8(3), "colorspace": np.int64(1)}
    )
    assert meta == ImageMeta(2, 1, 3, Colorspace.LINEAR)
    assert type(meta.width) is int

    encoded = QOIEncoder.encode(bytes(6), meta)
    assert encoded[4:14] == b"\x00\x00\x00\x02\x00\x00\x00\x01\x03\x01"

    with pytest.raises(InvalidDimensions):
        ImageMeta(1.5, 1)
