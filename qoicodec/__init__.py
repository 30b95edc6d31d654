from .decoder import QOIDecoder, decode_image
from .encoder import QOIEncoder, encode_image
from .errors import (
    InvalidColorspace,
    InvalidDimensions,
    InvalidHeader,
    InvalidIndex,
    QOIError,
    QOIIOError,
    UnexpectedEof,
    UnknownTag,
)
from .meta import Colorspace, ImageMeta
from .pixel import Pixel

__all__ = [
    "QOIEncoder",
    "QOIDecoder",
    "encode_image",
    "decode_image",
    "Colorspace",
    "ImageMeta",
    "Pixel",
    "QOIError",
    "InvalidColorspace",
    "InvalidDimensions",
    "InvalidHeader",
    "InvalidIndex",
    "QOIIOError",
    "UnexpectedEof",
    "UnknownTag",
]
