import numpy as np
from PIL import Image

from .meta import Colorspace, ImageMeta

RAW_EXTENSIONS = ("dng", "cr2", "nef", "arw", "raw")


def load_image(filepath: str, colorspace: Colorspace = Colorspace.SRGB) -> tuple[np.ndarray, ImageMeta]:
    """Load an image and return pixel data as numpy array + metadata."""

    ext = str(filepath).lower().split(".")[-1]

    if ext in RAW_EXTENSIONS:
        # RAW formats - requires rawpy
        import rawpy

        with rawpy.imread(str(filepath)) as raw:
            rgb = raw.postprocess()
        img = Image.fromarray(rgb)
    else:
        # Standard formats (PNG, JPEG, etc.)
        img = Image.open(filepath)

    # Convert to RGB or RGBA
    if img.mode == "RGBA":
        channels = 4
    elif img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        img = img.convert("RGBA")
        channels = 4
    else:
        img = img.convert("RGB")
        channels = 3

    return np.asarray(img, dtype=np.uint8), ImageMeta(
        width=img.size[0],
        height=img.size[1],
        channels=channels,
        colorspace=colorspace,
    )


def pixels_to_array(data: bytes, meta: ImageMeta) -> np.ndarray:
    """View decoded pixel bytes as a (height, width, channels) uint8 array."""
    return np.frombuffer(data, dtype=np.uint8).reshape(meta.height, meta.width, meta.channels)


def save_image(filepath: str, pixels: np.ndarray) -> None:
    """Save a (height, width, 3|4) uint8 array with Pillow; format follows the extension."""
    Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(filepath)
