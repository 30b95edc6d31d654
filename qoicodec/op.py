from typing import NamedTuple, Union

from .errors import InvalidIndex, UnknownTag
from .meta import QOI_MAX_RUN
from .stream import read_byte, read_exact, write_all

# Tags
QOI_OP_INDEX = 0x00  # 00xxxxxx
QOI_OP_DIFF = 0x40  # 01xxxxxx
QOI_OP_LUMA = 0x80  # 10xxxxxx
QOI_OP_RUN = 0xC0  # 11xxxxxx
QOI_OP_RGB = 0xFE  # 11111110
QOI_OP_RGBA = 0xFF  # 11111111

QOI_MASK_2 = 0xC0


class Color(NamedTuple):
    """
    QOI_OP_DIFF, red/green/blue difference from the previous pixel, bias +2.

    | 7 6 | 5 4 | 3 2 | 1 0 |
    | 0 1 |  dr |  dg |  db |
    """

    dr: int
    dg: int
    db: int


class Index(NamedTuple):
    """
    QOI_OP_INDEX, position in the 64 entry pixel cache.

    | 7 6 | 5 4 3 2 1 0 |
    | 0 0 |    index    |
    """

    index: int


class Luma(NamedTuple):
    """
    QOI_OP_LUMA, green difference (bias +32) followed by the red-green and
    blue-green differences (bias +8).

    | 7 6 | 5 4 3 2 1 0 | 7 6 5 4 | 3 2 1 0 |
    | 1 0 |     dg      | dr - dg | db - dg |
    """

    dg: int
    drg: int
    dbg: int


class Rgb(NamedTuple):
    """QOI_OP_RGB, 0xFE followed by the red, green and blue bytes."""

    r: int
    g: int
    b: int


class Rgba(NamedTuple):
    """QOI_OP_RGBA, 0xFF followed by the red, green, blue and alpha bytes."""

    r: int
    g: int
    b: int
    a: int


class Run(NamedTuple):
    """
    QOI_OP_RUN, repeat the previous pixel ``count`` times (1..62).

    | 7 6 | 5 4 3 2 1 0 |
    | 1 1 |  count - 1  |
    """

    count: int


Op = Union[Color, Index, Luma, Rgb, Rgba, Run]


def op_to_bytes(op: Op) -> bytes:
    """Pack a single op into its on-disk representation."""
    if isinstance(op, Color):
        if not all(0 <= v <= 3 for v in op):
            raise ValueError(f"Invalid color diff {tuple(op)}, each must be 0..3")
        return bytes((QOI_OP_DIFF | (op.dr << 4) | (op.dg << 2) | op.db,))

    if isinstance(op, Index):
        if not (0 <= op.index <= 63):
            raise InvalidIndex(op.index)
        return bytes((QOI_OP_INDEX | op.index,))

    if isinstance(op, Luma):
        if not (0 <= op.dg <= 63 and 0 <= op.drg <= 15 and 0 <= op.dbg <= 15):
            raise ValueError(f"Invalid luma diff {tuple(op)}")
        return bytes((QOI_OP_LUMA | op.dg, (op.drg << 4) | op.dbg))

    if isinstance(op, Rgb):
        return bytes((QOI_OP_RGB, op.r, op.g, op.b))

    if isinstance(op, Rgba):
        return bytes((QOI_OP_RGBA, op.r, op.g, op.b, op.a))

    if isinstance(op, Run):
        if not (1 <= op.count <= QOI_MAX_RUN):
            raise ValueError(f"Invalid run length {op.count}, must be 1..{QOI_MAX_RUN}")
        return bytes((QOI_OP_RUN | (op.count - 1),))

    raise TypeError(f"Not a QOI op: {op!r}")


def write_op(op: Op, writer) -> None:
    write_all(writer, op_to_bytes(op))


def read_op(reader) -> Op:
    """
    Read the next op from ``reader``.

    The 8-bit RGB/RGBA tags must be checked before the 2-bit tags, since
    0xFE and 0xFF would otherwise be read as runs.
    """
    b1 = read_byte(reader)

    if b1 == QOI_OP_RGB:
        r, g, b = read_exact(reader, 3)
        return Rgb(r, g, b)

    if b1 == QOI_OP_RGBA:
        r, g, b, a = read_exact(reader, 4)
        return Rgba(r, g, b, a)

    tag = b1 & QOI_MASK_2

    if tag == QOI_OP_INDEX:
        if b1 > 63:
            raise InvalidIndex(b1)
        return Index(b1)

    if tag == QOI_OP_DIFF:
        return Color((b1 >> 4) & 0x03, (b1 >> 2) & 0x03, b1 & 0x03)

    if tag == QOI_OP_LUMA:
        b2 = read_byte(reader)
        return Luma(b1 & 0x3F, (b2 >> 4) & 0x0F, b2 & 0x0F)

    if tag == QOI_OP_RUN:
        return Run((b1 & 0x3F) + 1)

    raise UnknownTag(b1)
