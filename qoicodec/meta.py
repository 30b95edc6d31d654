import operator
from dataclasses import dataclass
from enum import IntEnum

from .errors import InvalidColorspace, InvalidDimensions, InvalidHeader

# QOI Constants
QOI_MAGIC = b"qoif"
QOI_HEADER_SIZE = 14
QOI_END_MARKER = b"\x00\x00\x00\x00\x00\x00\x00\x01"
QOI_MAX_RUN = 62
QOI_PIXELS_MAX = 400000000  # Safety limit (400MP)
QOI_U32_MAX = 4294967295


class Colorspace(IntEnum):
    """Colorspace byte stored in the header. The values are fixed by the format."""

    SRGB = 0
    LINEAR = 1

    @classmethod
    def from_byte(cls, byte: int) -> "Colorspace":
        try:
            return cls(byte)
        except ValueError:
            raise InvalidColorspace(byte) from None


@dataclass(frozen=True)
class ImageMeta:
    """
    Metadata describing an image.

    :param width: Image width in pixels (u32).
    :param height: Image height in pixels (u32).
    :param channels: 3 (RGB) or 4 (RGBA). Color channels are un-premultiplied.
    :param colorspace: Colorspace.SRGB (0) or Colorspace.LINEAR (1).
    """

    width: int
    height: int
    channels: int = 4
    colorspace: Colorspace = Colorspace.SRGB

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            try:
                # numpy integers are accepted, floats and None are not
                value = operator.index(value)
            except TypeError:
                raise InvalidDimensions(f"Invalid {name} {value!r}") from None

            if not (0 <= value <= QOI_U32_MAX):
                raise InvalidDimensions(f"Invalid {name} {value}")
            object.__setattr__(self, name, value)

        if self.channels not in (3, 4):
            raise InvalidHeader(
                f"Invalid number of channels {self.channels}, must be 3 or 4"
            )
        object.__setattr__(self, "channels", int(self.channels))

        # Accept plain ints (0/1) and normalise to the enum
        object.__setattr__(self, "colorspace", Colorspace.from_byte(self.colorspace))

    @property
    def num_pixels(self) -> int:
        """Total number of pixels that make up the image."""
        return self.width * self.height

    @classmethod
    def from_description(cls, description: dict) -> "ImageMeta":
        """Build from a dict with 'width', 'height', 'channels', 'colorspace' keys."""
        return cls(
            width=description.get("width"),
            height=description.get("height"),
            channels=description.get("channels"),
            colorspace=description.get("colorspace", Colorspace.SRGB),
        )

    def to_description(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "channels": self.channels,
            "colorspace": int(self.colorspace),
        }
