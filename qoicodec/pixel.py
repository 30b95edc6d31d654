from typing import NamedTuple, Optional, Union


class Pixel(NamedTuple):
    """A single RGBA pixel. Each channel is an unsigned byte (0-255)."""

    r: int
    g: int
    b: int
    a: int = 255


class ColorDiff(NamedTuple):
    """Small per-channel difference (QOI_OP_DIFF), each value biased by +2."""

    dr: int
    dg: int
    db: int


class LumaDiff(NamedTuple):
    """Green-relative difference (QOI_OP_LUMA).

    ``dg`` is biased by +32, ``drg`` and ``dbg`` (red/blue minus green) by +8.
    """

    dg: int
    drg: int
    dbg: int


PixelDiff = Union[ColorDiff, LumaDiff]


def qoi_hash(pixel: Pixel) -> int:
    """Calculates the index position for the color array."""
    r, g, b, a = pixel
    return (r * 3 + g * 5 + b * 7 + a * 11) % 64


def diff(pixel: Pixel, other: Pixel) -> Optional[PixelDiff]:
    """
    Try to express ``pixel`` as a small difference from ``other``.

    :param pixel: The pixel being encoded.
    :param other: The reference (previous) pixel.
    :return: A ColorDiff if every channel moved by -2..1, otherwise a LumaDiff
             if the green-relative differences fit, otherwise None.
    """
    # Alpha changes can't be expressed as a diff
    if pixel.a != other.a:
        return None

    # Byte-wrapped differences (0-255)
    diff_r = (pixel.r - other.r) & 0xFF
    diff_g = (pixel.g - other.g) & 0xFF
    diff_b = (pixel.b - other.b) & 0xFF

    color_r = (diff_r + 2) & 0xFF
    color_g = (diff_g + 2) & 0xFF
    color_b = (diff_b + 2) & 0xFF

    if color_r <= 3 and color_g <= 3 and color_b <= 3:
        return ColorDiff(color_r, color_g, color_b)

    luma_g = (diff_g + 32) & 0xFF
    if luma_g > 63:
        return None

    luma_rg = (diff_r - diff_g + 8) & 0xFF
    luma_bg = (diff_b - diff_g + 8) & 0xFF

    if luma_rg <= 15 and luma_bg <= 15:
        return LumaDiff(luma_g, luma_rg, luma_bg)

    return None


def from_diff(pixel_diff: PixelDiff, other: Pixel) -> Pixel:
    """Rebuild a pixel from a diff against ``other``. Alpha is copied."""
    if isinstance(pixel_diff, ColorDiff):
        return Pixel(
            (other.r + pixel_diff.dr - 2) & 0xFF,
            (other.g + pixel_diff.dg - 2) & 0xFF,
            (other.b + pixel_diff.db - 2) & 0xFF,
            other.a,
        )

    dg = pixel_diff.dg - 32
    dr = pixel_diff.drg - 8 + dg
    db = pixel_diff.dbg - 8 + dg

    return Pixel(
        (other.r + dr) & 0xFF,
        (other.g + dg) & 0xFF,
        (other.b + db) & 0xFF,
        other.a,
    )
