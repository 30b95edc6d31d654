import argparse
import io
import logging
import sys
from pathlib import Path

from .decoder import decode_image
from .encoder import encode_image
from .errors import QOIError
from .meta import Colorspace
from .utils import load_image, pixels_to_array, save_image

log = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    log_fmt = "[%(asctime)s] %(levelname)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format=log_fmt,
        datefmt=datefmt,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def png_to_qoi(png_path, qoi_path, colorspace: Colorspace = Colorspace.SRGB) -> int:
    """Convert any image Pillow can read (or a camera RAW file) to QOI. Returns the encoded size."""
    pixel_data, meta = load_image(png_path, colorspace)
    log.info(
        "Loaded image %s: %dx%d Channels: %d",
        png_path,
        meta.width,
        meta.height,
        meta.channels,
    )

    with open(qoi_path, "wb") as f:
        encode_image(io.BytesIO(pixel_data.tobytes()), f, meta)
        size = f.tell()

    log.info("Converted %s to %s (%d bytes)", png_path, qoi_path, size)
    return size


def qoi_to_png(qoi_path, png_path) -> None:
    decoded = io.BytesIO()

    with open(qoi_path, "rb") as f:
        meta = decode_image(f, decoded)

    save_image(png_path, pixels_to_array(decoded.getvalue(), meta))
    log.info("Converted %s to %s", qoi_path, png_path)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qoicodec", description="Convert images to and from QOI."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="PNG/JPEG/RAW -> QOI")
    enc.add_argument("input", type=Path)
    enc.add_argument("output", type=Path, nargs="?")
    enc.add_argument(
        "--colorspace",
        choices=[c.name.lower() for c in Colorspace],
        default="srgb",
        help="colorspace byte written to the header",
    )

    dec = sub.add_parser("decode", help="QOI -> PNG (or any format Pillow can write)")
    dec.add_argument("input", type=Path)
    dec.add_argument("output", type=Path, nargs="?")

    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "encode":
            output = args.output or args.input.with_suffix(".qoi")
            png_to_qoi(args.input, output, Colorspace[args.colorspace.upper()])
        else:
            output = args.output or args.input.with_suffix(".png")
            qoi_to_png(args.input, output)
    except (QOIError, OSError) as e:
        log.error("Failed to convert %s: %s", args.input, e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
